"""Issue a bearer token accepted by the demo app's write gates.

Usage:
    FILES_JWT_SECRET_KEY=... python -m scripts.issue_token --subject alice --role admin
"""

import argparse

from filecrud.core.config import settings
from filecrud.core.security import create_access_token


def main() -> None:
    parser = argparse.ArgumentParser(description="Issue a file storage access token")
    parser.add_argument("--subject", required=True, help="Token subject (user id)")
    parser.add_argument("--role", default="user", help="Role claim")
    parser.add_argument(
        "--minutes", type=int, default=30, help="Minutes until the token expires"
    )
    args = parser.parse_args()

    if not settings.auth.enabled:
        parser.error("FILES_JWT_SECRET_KEY is not set")

    print(
        create_access_token(
            settings.auth.secret_key,
            subject=args.subject,
            role=args.role,
            algorithm=settings.auth.algorithm,
            expires_minutes=args.minutes,
        )
    )


if __name__ == "__main__":
    main()
