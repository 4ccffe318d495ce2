#!/usr/bin/env python3
"""Seed the session chair.

Registration only ever creates ordinary members. This script creates the
chair account, or promotes an existing member to chair, directly in the
store configured by DATABASE_URL.

Usage:
    python scripts/seed_chair.py USERNAME PASSWORD [options]

Options:
    --affiliation LABEL   Affiliation for the chair (default: EXEMPT_AFFILIATION)
    --strength N          Electoral strength for the chair (default: 0)
"""

import argparse
import asyncio
import os
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

from src.application.ports.document_store import MEMBERS
from src.bootstrap.database import close_database_engine
from src.bootstrap.session import (
    get_document_store,
    get_member_service,
    get_session_config,
    initialize_session_store,
)
from src.domain.errors import MemberNotFoundError
from src.domain.exceptions import ParliamentError
from src.domain.models.member import MemberRole
from src.infrastructure.observability import configure_structlog

load_dotenv()


async def seed_chair(
    username: str, password: str, affiliation: str | None, strength: int
) -> int:
    await initialize_session_store()
    members = get_member_service()
    config = get_session_config()

    try:
        member = await members.get_member_by_username(username)
        print(f"Promoting existing member '{username}' to chair")
    except MemberNotFoundError:
        member = await members.register(username, password)
        print(f"Registered '{username}'")

    await get_document_store().update_one(
        MEMBERS,
        {"id": member.id},
        {
            "role": MemberRole.CHAIR.value,
            "partyAffiliation": affiliation or config.exempt_affiliation,
            "electoralStrength": strength,
        },
    )
    print(f"Chair id: {member.id}")
    return 0


async def main_async(args: argparse.Namespace) -> int:
    try:
        return await seed_chair(
            args.username, args.password, args.affiliation, args.strength
        )
    except ParliamentError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        await close_database_engine()


def main() -> int:
    parser = argparse.ArgumentParser(description="Create or promote the session chair")
    parser.add_argument("username", help="Chair username")
    parser.add_argument("password", help="Password, used only when creating")
    parser.add_argument(
        "--affiliation",
        default=None,
        help="Affiliation label (default: EXEMPT_AFFILIATION)",
    )
    parser.add_argument(
        "--strength", type=int, default=0, help="Electoral strength (default: 0)"
    )
    args = parser.parse_args()

    if args.strength < 0:
        parser.error("--strength must be non-negative")
    if not os.environ.get("DATABASE_URL"):
        print(
            "Error: DATABASE_URL is not set; the in-memory store would be discarded",
            file=sys.stderr,
        )
        return 1

    configure_structlog(os.environ.get("ENVIRONMENT", "development"))
    return asyncio.run(main_async(args))


if __name__ == "__main__":
    sys.exit(main())
