from __future__ import annotations

import argparse
import os
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import ConfigError, ImportConfig, default_config, load_config
from ..db.camera_store import CameraStore, InMemoryCameraStore, PostgresCameraStore
from ..db.connection import db_cursor
from ..errors import CameraImportError, StoreError
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, setup_logging
from ..models.camera_record import Submitter
from ..models.import_outcome import Imported, InfrastructureError, ValidationFailed
from ..parsing.template import write_template
from ..services.importer import BulkImporter
from ..services.report import parse_report, render_report, serialize_report
from ..services.search import find_nearby, list_user_cameras
from ..services.summary import render_summary_line

"""Command line host for the camera import pipeline.

Subcommands:
    import FILE     validate + import a csv / xls / xlsx file
    template OUT    write an upload template (.csv / .xlsx)
    nearby          cameras within a radius of a point
    mine            cameras registered by a user
    init-db         create the cameras / users tables

Exit codes: 0 success, 2 validation failed, 1 infrastructure / config error.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_VALIDATION_FAILED = 2

DEFAULT_CONFIG_PATH = Path("config/import.yml")


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env (values override the process environment so DB settings win)."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="cctv-import", description="CCTV camera bulk importer")
    p.add_argument("--config", type=Path, default=None, help="Config file (default: config/import.yml)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--dry-run", action="store_true", help="Use an in-memory store instead of the database")
    sub = p.add_subparsers(dest="command", required=True)

    imp = sub.add_parser("import", help="Validate and import a camera spreadsheet")
    imp.add_argument("file", type=Path)
    imp.add_argument("--username", default=None, help="Submitting user")
    imp.add_argument("--police-id", default=None, help="Submitter police id (looked up when omitted)")
    imp.add_argument("--report-json", action="store_true", help="Print the validation report as a JSON array")

    tpl = sub.add_parser("template", help="Write an upload template")
    tpl.add_argument("out", type=Path)
    tpl.add_argument("--example", action="store_true", help="Include an example row")

    near = sub.add_parser("nearby", help="List cameras within a radius (km)")
    near.add_argument("--lat", type=float, required=True)
    near.add_argument("--lon", type=float, required=True)
    near.add_argument("--radius", type=float, required=True)

    mine = sub.add_parser("mine", help="List cameras registered by a user")
    mine.add_argument("--username", required=True)
    mine.add_argument("--city")
    mine.add_argument("--organization")
    mine.add_argument("--working-condition", dest="workingCondition", choices=["Working", "Not Working"])
    mine.add_argument("--device-type", dest="deviceType")
    mine.add_argument("--date-checked", dest="dateChecked")

    sub.add_parser("init-db", help="Create the cameras / users tables")
    return p.parse_args(argv)


def _load_config(path: Path | None) -> ImportConfig:
    if path is None:
        if not DEFAULT_CONFIG_PATH.exists():
            return default_config()
        path = DEFAULT_CONFIG_PATH
    return load_config(path)


@contextmanager
def _open_store(cfg: ImportConfig, dry_run: bool) -> Iterator[CameraStore]:
    # DISABLE_DB_CONNECT=1 でも DB 接続を無効化 (テスト用)
    if dry_run or os.getenv("DISABLE_DB_CONNECT") == "1":
        yield InMemoryCameraStore()
        return
    with db_cursor(cfg.database) as cur:
        yield PostgresCameraStore(cur, cameras_table=cfg.cameras_table, users_table=cfg.users_table)


def _resolve_submitter(store: CameraStore, username: str | None, police_id: str | None) -> Submitter | None:
    if username is None:
        return None
    if police_id is None:
        logger = setup_logging()
        try:
            police_id = store.get_user_police_id(username)
        except StoreError as e:
            logger.warning(f"could not look up police id for user={username}: {e}")
        if police_id is None:
            logger.info(f"no police id on record for user={username}")
    return Submitter(username=username, police_id=police_id)


def _cmd_import(args: argparse.Namespace, cfg: ImportConfig, store: CameraStore) -> int:
    logger = setup_logging()
    submitter = _resolve_submitter(store, args.username, args.police_id)
    error_log = ErrorLogBuffer(source=args.file.name)
    importer = BulkImporter(store, config=cfg, submitter=submitter, error_log=error_log)

    start = time.monotonic()
    outcome = importer.import_path(args.file)
    elapsed = time.monotonic() - start

    exit_code = EXIT_SUCCESS
    if isinstance(outcome, Imported):
        logger.info(f"{outcome.count} camera(s) imported from {args.file.name}")
    elif isinstance(outcome, ValidationFailed):
        payload = serialize_report(outcome.errors)
        if args.report_json:
            print(payload)
        else:
            print(render_report(parse_report(payload)))
        exit_code = EXIT_VALIDATION_FAILED
    elif isinstance(outcome, InfrastructureError):
        logger.error(f"import aborted: {outcome.reason}")
        exit_code = EXIT_FATAL

    # log_summary が "SUMMARY " を付与するため先頭を除く
    log_summary(render_summary_line(args.file.name, outcome, elapsed)[len("SUMMARY "):])
    return exit_code


def _cmd_nearby(args: argparse.Namespace, store: CameraStore) -> int:
    cams = find_nearby(store, args.lat, args.lon, args.radius)
    for c in cams:
        print(f"{c.distance_km:.2f} km\t{c.deviceName}\t{c.address}\t{c.ownerName}\t({c.latitude}, {c.longitude})")
    setup_logging().info(f"{len(cams)} camera(s) within {args.radius} km")
    return EXIT_SUCCESS


def _cmd_mine(args: argparse.Namespace, store: CameraStore) -> int:
    docs = list_user_cameras(
        store,
        args.username,
        city=args.city,
        organization=args.organization,
        workingCondition=args.workingCondition,
        deviceType=args.deviceType,
        dateChecked=args.dateChecked,
    )
    for d in docs:
        print(
            f"{d.get('id')}\t{d.get('deviceName')}\t{d.get('workingCondition')}\t"
            f"{d.get('city')}\t{d.get('dateChecked')}"
        )
    setup_logging().info(f"{len(docs)} camera(s) for user={args.username}")
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    # 空リスト [] はそのまま使う (None のときのみ sys.argv を読む)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    _load_env_file(Path(".env"), override=True)

    try:
        cfg = _load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.command == "template":
        try:
            out = write_template(args.out, example_row=args.example)
        except (CameraImportError, ValueError, OSError) as e:
            logger.error(f"template: {e}")
            return EXIT_FATAL
        logger.info(f"template written: {out}")
        return EXIT_SUCCESS

    if args.command == "import" and not args.file.exists():
        logger.error(f"file not found: {args.file}")
        return EXIT_FATAL

    try:
        with _open_store(cfg, args.dry_run) as store:
            if args.dry_run:
                logger.info("dry run: using in-memory store, nothing is persisted")
            if args.command == "import":
                return _cmd_import(args, cfg, store)
            if args.command == "nearby":
                return _cmd_nearby(args, store)
            if args.command == "mine":
                return _cmd_mine(args, store)
            if args.command == "init-db":
                if not isinstance(store, PostgresCameraStore):
                    logger.error("init-db requires a database connection")
                    return EXIT_FATAL
                store.ensure_schema()
                logger.info(f"tables ready: {cfg.cameras_table}, {cfg.users_table}")
                return EXIT_SUCCESS
    except StoreError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL
    except ValueError as e:
        logger.error(str(e))
        return EXIT_FATAL
    return EXIT_FATAL  # pragma: no cover (argparse enforces a subcommand)
