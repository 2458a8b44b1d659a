#!/usr/bin/env python3
"""Create (or update) a user and print an access token for it.

Usage:
    python scripts/issue_token.py admin-1 --email ops@example.com --role admin
"""
from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from application.services.token_service import TokenService  # noqa: E402
from application.services.user_service import UserApplicationService  # noqa: E402
from domain.user.entity import UserRole  # noqa: E402
from infrastructure.database import create_tables  # noqa: E402
from infrastructure.unit_of_work import SQLAlchemyUnitOfWork  # noqa: E402


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("user_id")
    parser.add_argument("--email")
    parser.add_argument("--first-name")
    parser.add_argument("--last-name")
    parser.add_argument("--role", choices=[r.value for r in UserRole], default=None)
    parser.add_argument("--expires-minutes", type=int, default=None)
    parser.add_argument("--create-tables", action="store_true", help="create tables before writing")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> str:
    if args.create_tables:
        await create_tables()
    service = UserApplicationService(uow_factory=SQLAlchemyUnitOfWork)
    user = await service.upsert_user(
        args.user_id,
        email=args.email,
        first_name=args.first_name,
        last_name=args.last_name,
        role=UserRole(args.role) if args.role else None,
    )
    return TokenService().create_access_token(user, expires_minutes=args.expires_minutes)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    print(asyncio.run(run(args)))
    return 0


if __name__ == "__main__":
    sys.exit(main())
