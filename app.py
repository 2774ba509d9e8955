"""Command line entry point for inspecting the slice cache file."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import List, Optional

from slicecache import CacheSettings, Record, SliceCache
from slicecache.config import default_log_dir

LOGGER = logging.getLogger(__name__)


def configure_logging(verbose: bool = False, log_dir: Optional[Path] = None) -> None:
    """Log to stderr and to ``slicecache.log`` in ``log_dir`` (default: beside the cache file)."""
    log_dir = log_dir if log_dir is not None else default_log_dir()
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.insert(0, logging.FileHandler(log_dir / "slicecache.log", encoding="utf-8"))
    except OSError as exc:
        print(f"Cannot open log directory {log_dir}: {exc}", file=sys.stderr)
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )


def format_record(key: str, record: Record) -> str:
    slice_text = "-" if record.slice is None else "x".join(
        str(v) for v in record.slice.as_tuple()
    )
    width = "-" if record.image_width is None else str(record.image_width)
    resolution = "-" if record.resolution is None else f"{record.resolution:g}"
    return f"{key}\tslice={slice_text}\twidth={width}\tresolution={resolution}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="slicecache", description=__doc__)
    parser.add_argument("--file", type=Path, help="cache file (default: $SLICECACHE_FILE or user data dir)")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("path", help="print the cache file location")
    sub.add_parser("list", help="list every cached document")
    show = sub.add_parser("show", help="show the cached record of one document")
    show.add_argument("key")
    forget = sub.add_parser("forget", help="drop the cached record of one document")
    forget.add_argument("key")
    return parser


def run(args: argparse.Namespace) -> int:
    settings = CacheSettings.from_env()
    if args.file is not None:
        settings.store_file = args.file
    cache = SliceCache.from_settings(settings)

    if args.command == "path":
        print(cache.path)
        return 0
    if args.command == "list":
        for key in cache:
            print(format_record(key, cache.get(key)))
        return 0
    if args.command == "show":
        record = cache.get(args.key)
        if record is None:
            LOGGER.error("No cached slice for %s", args.key)
            return 1
        print(format_record(args.key, record))
        return 0
    if args.command == "forget":
        if not cache.forget(args.key):
            LOGGER.error("No cached slice for %s", args.key)
            return 1
        return 0 if cache.flush_all() else 1
    return 2


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
