"""Run the tool server on stdio.

    python -m tool_server [--mode mock|live] [--strictness strict|moderate|permissive]

Settings come from the environment (.env supported); flags override them.
"""

import argparse
import asyncio
import sys

from core.config import load_settings, validate_settings
from core.observability.logging import configure_from_settings, get_logger
from tool_server.server import ToolServer
from tool_server.stdio import run_stdio


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="ERP bridge JSON-RPC tool server (stdio)")
    parser.add_argument("--mode", choices=["mock", "live"], help="Override ERP_MODE")
    parser.add_argument(
        "--strictness",
        choices=["strict", "moderate", "permissive"],
        help="Override SAFETY_STRICTNESS",
    )
    args = parser.parse_args(argv)

    overrides = {}
    if args.mode:
        overrides["ERP_MODE"] = args.mode
    if args.strictness:
        overrides["SAFETY_STRICTNESS"] = args.strictness
    settings = load_settings(overrides)

    configure_from_settings(settings)
    logger = get_logger("tool_server")

    valid, errors = validate_settings(settings)
    if not valid:
        for error in errors:
            logger.error(f"Configuration error: {error}")
        return 1

    if settings.is_live:
        logger.warning("Live mode without a gateway: SAP core tools answer from mock data")

    server = ToolServer.from_settings(settings)
    asyncio.run(run_stdio(server))
    return 0


if __name__ == "__main__":
    sys.exit(main())
