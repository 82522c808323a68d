import argparse
import getpass
import logging
import sys

from firmsite.adapters.auth.tokens import get_password_hash
from firmsite.adapters.sqlite.migrator import SQLiteMigrator
from firmsite.adapters.sqlite.repos import SQLiteGalleryRepo
from firmsite.api.deps import Settings
from firmsite.domain.errors import CMSError

logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    applied = SQLiteMigrator(settings.db_path).run_migrations()
    if applied:
        print(f"Applied {len(applied)} migration(s): {', '.join(applied)}")
    else:
        print("Database is up to date.")


def handle_hash_password(settings: Settings, args: argparse.Namespace) -> None:
    password = args.password or getpass.getpass("Admin password: ")
    if not password:
        logger.error("Password must not be empty.")
        sys.exit(1)
    print(get_password_hash(password))
    print("Set ADMIN_PASSWORD_HASH to the value above.", file=sys.stderr)


def handle_gallery_status(settings: Settings, args: argparse.Namespace) -> None:
    repo = SQLiteGalleryRepo(settings.db_path)
    images, total = repo.list(visible=None, limit=args.limit)
    print(f"Gallery images in database: {total}")
    if not images:
        print("No gallery images yet.")
        return

    print(f"First {len(images)} in display order:")
    for image in images:
        source = "external" if image.is_external else image.media_id or "url"
        hidden = "" if image.is_visible else " [hidden]"
        print(f"  - {image.title} ({image.category}, {source}){hidden}")
        print(f"    {image.image_url}")


def handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("firmsite.api.main:app", host=args.host, port=args.port, reload=args.reload)


COMMANDS = {
    "migrate": handle_migrate,
    "hash-password": handle_hash_password,
    "gallery-status": handle_gallery_status,
    "serve": handle_serve,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="firmsite", description="Firm site CMS backend")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending database migrations")

    hash_parser = subparsers.add_parser("hash-password", help="Print an admin password hash")
    hash_parser.add_argument("--password", help="Password to hash (prompted if omitted)")

    status_parser = subparsers.add_parser("gallery-status", help="Summarise gallery contents")
    status_parser.add_argument("--limit", type=int, default=5, help="How many images to list")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=5000)
    serve_parser.add_argument("--reload", action="store_true")

    return parser


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    settings = Settings()

    try:
        COMMANDS[args.command](settings, args)
    except CMSError as e:
        logger.error("%s failed: %s", args.command, e.message)
        sys.exit(1)


if __name__ == "__main__":
    main()
