#!/usr/bin/env python3
"""Poll the health of every component in one landscape.

Usage:
    python scripts/poll_landscape.py eu10
    python scripts/poll_landscape.py eu10 --registry config/registry.yml --json
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from src.config import Settings  # noqa: E402
from src.health.setup import build_health_services  # noqa: E402
from src.registry.registry import YamlComponentRegistry  # noqa: E402

# Logs go to stderr so --json output stays clean
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)


async def poll_landscape(landscape_id: str, settings: Settings, as_json: bool) -> int:
    """Poll once and print the results.

    Returns:
        Process exit code: 0 if every result is UP, 1 otherwise, 2 on usage error
    """
    registry = YamlComponentRegistry(settings.registry_path)
    landscape = registry.get_landscape(landscape_id)
    if landscape is None:
        logger.error("Unknown landscape: %s", landscape_id)
        return 2

    services = build_health_services(settings, registry)
    try:
        view = await services.sessions.create().poll(registry.components(), landscape)
    finally:
        await services.transport.aclose()

    summary = view.summary
    if as_json:
        payload = {
            "landscape": landscape.name,
            "summary": {
                "total": summary.total,
                "up": summary.up,
                "down": summary.down,
                "unknown": summary.unknown,
                "error": summary.error,
                "avg_response_time_ms": summary.avg_response_time_ms,
            },
            "results": [
                {
                    "component": r.component_name,
                    "status": r.status.value,
                    "response_time_ms": r.response_time_ms,
                    "error": r.error,
                }
                for r in view.results
            ],
        }
        print(json.dumps(payload, indent=2))
    else:
        print(
            f"{landscape.name}: {summary.up}/{summary.total} up, {summary.down} down, "
            f"{summary.error} error, {summary.unknown} unknown, "
            f"avg {summary.avg_response_time_ms}ms"
        )
        for r in sorted(view.results, key=lambda r: r.component_name.lower()):
            latency = f"{r.response_time_ms}ms" if r.response_time_ms is not None else "-"
            suffix = f"  ({r.error})" if r.error else ""
            print(f"  {r.status.value:<15} {latency:>8}  {r.component_name}{suffix}")

    return 0 if summary.up == summary.total else 1


def main() -> None:
    parser = argparse.ArgumentParser(description="Poll component health in a landscape")
    parser.add_argument("landscape_id", help="Landscape id from the registry")
    parser.add_argument("--registry", help="Registry YAML path")
    parser.add_argument("--base-url", help="Portal API base URL")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    args = parser.parse_args()

    overrides = {}
    if args.registry:
        overrides["registry_path"] = args.registry
    if args.base_url:
        overrides["health_api_base_url"] = args.base_url
    settings = Settings(**overrides)

    sys.exit(asyncio.run(poll_landscape(args.landscape_id, settings, args.json)))


if __name__ == "__main__":
    main()
