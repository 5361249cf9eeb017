"""Schema and permission provisioning commands."""

from __future__ import annotations

from argparse import ArgumentParser, Namespace, _SubParsersAction

import structlog

from ...config import Settings
from ...db import Database, init_engine
from ...services import RoleService

__all__ = ["register", "init_db", "seed_permissions"]

logger = structlog.get_logger(__name__)


def _database(settings: Settings) -> Database:
    return Database(engine=init_engine(settings))


def init_db(args: Namespace, settings: Settings) -> None:
    """테이블 생성 (옵션: 기존 테이블 삭제)."""
    database = _database(settings)
    if args.drop:
        database.drop_all()
        logger.warning("database.dropped")
    database.create_all()
    logger.info("database.initialized")
    print("✓ Database tables created")


def seed_permissions(args: Namespace, settings: Settings) -> None:
    database = _database(settings)
    database.create_all()
    with database.session() as session:
        created = RoleService(session, settings).initialize_system_permissions()
    print(f"✓ Seeded {created} permission(s)")


def register(subparsers: _SubParsersAction, common: ArgumentParser) -> None:
    parser = subparsers.add_parser("init-db", parents=[common], help="Create database tables")
    parser.add_argument(
        "--drop",
        action="store_true",
        help="Drop existing tables first (destroys data)",
    )
    parser.set_defaults(handler=init_db)

    parser = subparsers.add_parser(
        "seed-permissions",
        parents=[common],
        help="Insert the system permission catalogue",
    )
    parser.set_defaults(handler=seed_permissions)
