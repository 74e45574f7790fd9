#!/usr/bin/env python3
"""Generate JWT tokens for exercising the faculty API by hand."""
import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.core.auth import Role, create_access_token


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("user_id", nargs="?", default="faculty-test")
    parser.add_argument(
        "--role", choices=[role.value for role in Role], default=Role.FACULTY.value
    )
    parser.add_argument("--email", default=None)
    args = parser.parse_args()

    token = create_access_token(args.user_id, role=args.role, email=args.email)
    print(f"{args.role.title()} token for {args.user_id}:\n{token}")


if __name__ == "__main__":
    main()
