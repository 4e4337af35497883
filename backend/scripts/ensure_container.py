#!/usr/bin/env python3
"""Provision the Cosmos DB container for employee records.

Run from the backend/ directory:

    python3 scripts/ensure_container.py [--dry-run] [--verbose]

Creates the database and the employees container (partition key /kind,
unique key on /email) if they are missing. Existing containers are left
untouched.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from app.core.config import settings  # noqa: E402
from app.core.container import CONTAINER_SPEC, ensure_container  # noqa: E402

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create the Cosmos DB database and employees container if missing",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the container definition without connecting to Cosmos DB",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    return parser.parse_args(argv)


async def provision(args: argparse.Namespace) -> bool:
    level = logging.DEBUG if args.verbose or settings.DEBUG else logging.INFO
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(message)s")

    logger.info(
        "Target container: %s/%s",
        settings.COSMOS_DB_DATABASE,
        settings.COSMOS_DB_EMPLOYEES_CONTAINER,
    )

    if args.dry_run:
        logger.info("[DRY RUN] Container definition:\n%s", json.dumps(CONTAINER_SPEC, indent=2))
        return True

    return await ensure_container(settings)


def main() -> None:
    args = parse_args()
    ok = asyncio.run(provision(args))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
