"""One-shot usage snapshot.

Runs a single aggregation against the configured credential store and prints
the snapshot as JSON. No HTTP server is started.

Usage:
    usage-monitor-snapshot
    python cli.py
"""

import asyncio
import json
import logging
import sys

from config import Config, create_infra_adapters, create_usage_fetcher
from domain.errors import NoCredentialsError
from models import snapshot_to_response
from use_cases.aggregate_usage import AggregateUsageUseCase

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("cli")


async def run_snapshot(cfg: Config, adapters: dict = None, fetcher=None) -> dict:
    """Aggregate once and return the JSON-ready response body."""
    adapters = adapters or create_infra_adapters(cfg)
    fetcher = fetcher or create_usage_fetcher(cfg)
    use_case = AggregateUsageUseCase(
        fetcher=fetcher,
        balance_sink=adapters["balance_sink"],
        credential_store=adapters["credential_store"],
        max_concurrency=cfg.max_concurrency,
    )
    try:
        snapshot = await use_case.execute()
    finally:
        await fetcher.aclose()
    return snapshot_to_response(snapshot, cfg.display_utc_offset_hours).model_dump(mode="json")


def main() -> int:
    cfg = Config()
    try:
        result = asyncio.run(run_snapshot(cfg))
    except NoCredentialsError as e:
        logger.error(f"Snapshot failed: {e}")
        print(json.dumps({"error": str(e)}, indent=2))
        return 1
    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
