import argparse
import asyncio
from collections.abc import Sequence
from pathlib import Path

import psycopg

from media_pipeline.config.settings import Settings
from media_pipeline.database.connection import close_pool, init_pool
from media_pipeline.identity.exceptions import AuthError
from media_pipeline.identity.factory import IdentityFactory
from media_pipeline.lifecycle.exceptions import RecordNotFoundError, SaveAbortedError
from media_pipeline.lifecycle.manager import build_lifecycle_manager
from media_pipeline.logging.logger import Log
from media_pipeline.media.models import RawFile
from media_pipeline.pipeline.ledger import Snapshot
from media_pipeline.pipeline.models import FileFailure
from media_pipeline.pipeline.orchestrator import build_orchestrator
from media_pipeline.storage.factory import StorageFactory


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="media-pipeline",
        description="Compress, upload and attach media files to practice sessions.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    attach = sub.add_parser("attach", help="upload files and add them to a session")
    attach.add_argument("record_id")
    attach.add_argument("files", nargs="+", type=Path)
    attach.add_argument(
        "--abort-on-failure",
        action="store_true",
        help="do not save the session if any file failed",
    )

    delete = sub.add_parser("delete", help="delete a session and its stored media")
    delete.add_argument("record_id")
    return parser.parse_args(argv)


def _log_progress(snapshot: Snapshot) -> None:
    for entry in snapshot:
        line = f"[{entry.index}] {entry.display_name}: {entry.stage.value} {entry.percent}%"
        if entry.size_summary:
            line += f" {entry.size_summary}"
        if entry.error:
            line += f" ({entry.error})"
        Log.debug(line)


async def _attach(settings: Settings, args: argparse.Namespace) -> int:
    def decide(failed: Sequence[FileFailure]) -> bool:
        return not args.abort_on_failure

    storage = StorageFactory.create(settings)
    identity = IdentityFactory.create(settings)
    try:
        orchestrator = build_orchestrator(settings, storage=storage, identity=identity)
        lifecycle = build_lifecycle_manager(settings, storage, on_failures=decide)
        record = await lifecycle.load(args.record_id)
        files = [RawFile.from_path(path) for path in args.files]
        result = await orchestrator.process(files, on_progress=_log_progress)
        for failure in result.failed:
            Log.error(f"{failure.display_name}: {failure.reason}")
        Log.info(result.summary)
        await lifecycle.save(record, result)
        return 0 if result.all_succeeded else 1
    finally:
        await identity.aclose()
        await storage.aclose()


async def _delete(settings: Settings, args: argparse.Namespace) -> int:
    storage = StorageFactory.create(settings)
    try:
        lifecycle = build_lifecycle_manager(settings, storage)
        report = await lifecycle.delete_by_id(args.record_id)
        for failure in report.failures:
            Log.warning(f"Left behind {list(failure.paths)}: {failure.reason}")
        return 0
    finally:
        await storage.aclose()


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: parse args -> initialize pool -> run command."""
    args = _parse_args(argv)
    settings = Settings()
    Log.configure(settings.log_level)

    try:
        init_pool(settings)
        command = _attach if args.command == "attach" else _delete
        return asyncio.run(command(settings, args))
    except AuthError as exc:
        Log.error(str(exc))
        return 2
    except (RecordNotFoundError, SaveAbortedError, OSError) as exc:
        Log.error(str(exc))
        return 1
    except psycopg.OperationalError as exc:
        Log.error(f"Database unavailable: {exc}")
        return 1
    finally:
        close_pool()


if __name__ == "__main__":
    raise SystemExit(main())
