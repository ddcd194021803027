"""Command-line interface for the people service."""

from __future__ import annotations
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Sequence

try:
    import httpx
except ImportError as exc:  # pragma: no cover - exercised in environments missing deps
    raise SystemExit(
        "The 'httpx' package is required. Run `pip install -e .` to install dependencies."
    ) from exc

from peopleapi.config import ServiceSettings, load_settings, resolve_config_path
from peopleapi.database import Database, DatabaseError

logger = logging.getLogger("peopleapi.main")

_DEFAULT_SERVICE_URL = "http://localhost:5000"


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="People service utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    storage_options = argparse.ArgumentParser(add_help=False)
    storage_options.add_argument(
        "--config",
        dest="config_path",
        default=None,
        help="Path to the YAML configuration (defaults to PEOPLE_CONFIG_PATH or config/people.yaml)",
    )
    storage_options.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the SQLite database (overrides the configuration and PEOPLE_DB_PATH)",
    )

    subparsers.add_parser(
        "init-db",
        parents=[storage_options],
        help="Create the people table",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        parents=[storage_options],
        help="Start the HTTP service",
    )
    serve_parser.add_argument("--host", default=None, help="Bind address (default: 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=None, help="Listen port (default: 5000)")

    list_parser = subparsers.add_parser("list", help="List people stored by a running service")
    list_parser.add_argument(
        "--service-url",
        default=_DEFAULT_SERVICE_URL,
        help=f"Base URL of a running people service (default: {_DEFAULT_SERVICE_URL})",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    if not args_list or args_list[0] not in {"serve", "init-db", "list", "-h", "--help"}:
        args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _load_settings(args: argparse.Namespace) -> ServiceSettings:
    config_path = resolve_config_path(args.config_path or os.getenv("PEOPLE_CONFIG_PATH"))
    try:
        return load_settings(config_path)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration in {config_path}: {exc}") from exc


def _open_database(settings: ServiceSettings, db_path: str | None = None) -> Database:
    path = Path(db_path).expanduser().resolve(strict=False) if db_path else settings.database.path
    database = Database(path, timeout=settings.database.timeout)
    try:
        database.connect()
        database.initialize()
    except DatabaseError as exc:
        database.close()
        raise SystemExit(f"Database unavailable: {exc}") from exc
    logger.info("Database ready at %s", path)
    return database


def _serve(*, database: Database, host: str, port: int) -> None:
    from peopleapi.api import create_app
    import uvicorn

    logger.info("Starting people service on http://%s:%s", host, port)

    app = create_app(database=database)
    try:
        uvicorn.run(app, host=host, port=port, log_level="info")
    finally:
        database.close()


def _list_people(service_url: str) -> int:
    endpoint = service_url.rstrip("/") + "/people"

    try:
        response = httpx.get(endpoint, timeout=10.0)
    except httpx.HTTPError as exc:
        print(f"Failed to contact people service: {exc}")
        return 1

    if response.status_code != 200:
        print(f"Service responded with {response.status_code}: {response.text.strip()}")
        return 1

    try:
        people = response.json()
    except ValueError:
        print("Service returned an unexpected response format.")
        return 1

    if not people:
        print("No people are currently stored.")
        return 0

    print(f"{len(people)} person(s) found:")
    print(f"{'ID':>6}  {'Name':<24}  Email")
    print("-" * 64)
    for person in people:
        print(f"{person.get('id', '?'):>6}  {person.get('name', ''):<24}  {person.get('email', '')}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)

    if args.command == "list":
        return _list_people(args.service_url)

    settings = _load_settings(args)
    database = _open_database(settings, args.db_path)

    if args.command == "serve":
        _serve(
            database=database,
            host=args.host or settings.server.host,
            port=args.port or settings.server.port,
        )
    elif args.command == "init-db":
        database.close()
        print("Database initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
