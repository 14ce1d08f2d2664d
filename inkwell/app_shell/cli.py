import argparse
import logging
import sys
from datetime import timedelta
from uuid import UUID

from inkwell.adapters.clock import SystemClock
from inkwell.adapters.sqlite.migrator import SQLiteMigrator
from inkwell.adapters.sqlite.repos import SQLiteUnitOfWork
from inkwell.api.auth_utils import create_access_token
from inkwell.api.deps import Settings
from inkwell.components.scheduler import ProcessDueInput, run_publish_due

logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    print(f"Applied {len(applied)} migrations.")


def handle_publish_due(settings: Settings, args: argparse.Namespace) -> None:
    """One sweeper pass. Meant to run from cron every minute."""
    result = run_publish_due(
        ProcessDueInput(max_articles=args.limit),
        uow=SQLiteUnitOfWork(settings.db_path),
        time=SystemClock(),
    )
    if not result.success:
        for err in result.errors:
            logger.error("%s: %s", err.code, err.message)
        sys.exit(1)

    print(f"Published {result.published_count} articles.")
    if result.failed_count:
        print(f"Failed to publish {result.failed_count} articles.", file=sys.stderr)
        sys.exit(1)


def handle_token(settings: Settings, args: argparse.Namespace) -> None:
    try:
        owner_id = UUID(args.owner_id)
    except ValueError:
        logger.error("Owner id %r is not a UUID.", args.owner_id)
        sys.exit(2)

    claims: dict[str, str] = {"sub": str(owner_id)}
    if args.name:
        claims["name"] = args.name
    token = create_access_token(
        claims, expires_delta=timedelta(hours=args.hours), secret_key=settings.secret_key
    )
    print(token)


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="Inkwell CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # migrate
    subparsers.add_parser("migrate", help="Apply pending database migrations")

    # publish-due
    publish_parser = subparsers.add_parser(
        "publish-due", help="Publish scheduled articles that are due"
    )
    publish_parser.add_argument("--limit", type=int, default=None, help="Max articles per run")

    # token
    token_parser = subparsers.add_parser("token", help="Mint a bearer token for an author")
    token_parser.add_argument("owner_id", help="Author UUID (token subject)")
    token_parser.add_argument("--name", default=None, help="Display name claim")
    token_parser.add_argument("--hours", type=int, default=24, help="Token lifetime in hours")

    args = parser.parse_args(argv)
    settings = Settings()

    if args.command == "migrate":
        handle_migrate(settings, args)
    elif args.command == "publish-due":
        handle_publish_due(settings, args)
    elif args.command == "token":
        handle_token(settings, args)


if __name__ == "__main__":
    main()
