"""Crawl every metadata source once and print the snapshot as JSON."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from loguru import logger

from metadata_snapshot.app.composition import create_snapshot_dependencies
from metadata_snapshot.app.config.settings import Settings


async def collect_once(settings: Settings) -> dict[str, Any]:
    dependencies = create_snapshot_dependencies(settings)
    await dependencies.connect()
    try:
        snapshot = await dependencies.snapshot_service.collect()
    finally:
        await dependencies.close()
    return snapshot.to_dict()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="metadata-snapshot", description=__doc__)
    parser.add_argument("--compact", action="store_true", help="print on a single line")
    parser.add_argument("--sequential", action="store_true", help="crawl branches one at a time")
    parser.add_argument("--verbose", action="store_true", help="log crawl events to stderr")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    logger.remove()
    if args.verbose:
        logger.add(sys.stderr, level="DEBUG")

    settings = Settings()
    if args.sequential:
        settings = settings.model_copy(update={"parallel_branches": False})

    snapshot = asyncio.run(collect_once(settings))
    if args.compact:
        print(json.dumps(snapshot, sort_keys=True))
    else:
        print(json.dumps(snapshot, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
