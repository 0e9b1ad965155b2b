"""Create an admin account, or promote an existing account to admin.

Usage:
    python -m app.scripts.seed_admin --email=admin@clinic.example --password=SecurePass123!

NEVER hardcode credentials in this file. Always pass via CLI arguments.
"""

import argparse
import asyncio
import sys

from app.core.database import async_session
from app.core.seed import create_or_promote_admin


async def run(email: str, password: str) -> None:
    async with async_session() as db:
        user = await create_or_promote_admin(db, email, password)
    print(f"Admin ready: {user.email} (id {user.id}, role {user.role})")


def main(argv=None):
    """Parse CLI arguments and run the seed."""
    parser = argparse.ArgumentParser(description="Create or promote an admin account for the clinic API")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--password", required=True, help="Admin password (hashed before storing)")
    args = parser.parse_args(argv)

    if "@" not in args.email or "." not in args.email:
        print("Error: Invalid email format.", file=sys.stderr)
        sys.exit(1)

    if len(args.password) < 8:
        print("Error: Password must be at least 8 characters.", file=sys.stderr)
        sys.exit(1)

    asyncio.run(run(args.email, args.password))


if __name__ == "__main__":
    main()
