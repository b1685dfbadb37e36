"""Run the drop pipeline headlessly over paths given on the command line."""

from __future__ import annotations

import argparse
from pathlib import Path
import sys
import time

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config_manager import ConfigManager
from controllers.pipeline import TaskPipeline
from models.work_item import DropModifiers
from services.codec_backend import BackendError, load_backend
from services.file_operations import FileOperations


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pack, extract, compress or disassemble game archives")
    parser.add_argument("paths", nargs="+", help="Files or folders to process, as if dropped on the window")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--compress",
        action="store_true",
        help="Force LZ10 compression of every file (same as holding cmd / ctrl)",
    )
    mode.add_argument(
        "--decompress",
        action="store_true",
        help="Force LZ10 decompression of every file (same as holding shift)",
    )
    parser.add_argument("--workers", type=int, default=None, help="Maximum concurrent tasks (defaults to config)")
    parser.add_argument("--config", default=None, help="Path to an app_settings.json file")
    parser.add_argument("--backend", default=None, help="Codec backend as 'package.module:ClassName'")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config = ConfigManager(Path(args.config) if args.config else None).load()
    try:
        backend = load_backend(args.backend or config.backend)
    except BackendError as exc:  # pragma: no cover - CLI feedback path
        parser.error(str(exc))
    operations = FileOperations(backend, byte_order=config.byte_order, text_encoding=config.text_encoding)
    workers = args.workers if args.workers is not None else config.max_workers
    if workers < 1:
        parser.error("--workers must be a positive integer")
    pipeline = TaskPipeline(operations.run_work_item, max_workers=workers)

    modifiers = DropModifiers(command=args.compress, shift=args.decompress)
    for raw_path in args.paths:
        pipeline.enqueue(Path(raw_path), modifiers)

    had_error = False
    interval = config.poll_interval_ms / 1000.0
    while True:
        for message in pipeline.poll_and_advance():
            if message.is_error:
                had_error = True
                print(message.text, file=sys.stderr)
            else:
                print(message.text)
        if not pipeline.pending_count:
            break
        time.sleep(interval)
    return 1 if had_error else 0


if __name__ == "__main__":
    sys.exit(main())
