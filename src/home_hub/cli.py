"""home-hub command line entry point."""

import argparse
import logging
import os
import signal
import sys
import threading
from typing import List, Optional

from home_hub import __version__
from home_hub.app import Application
from home_hub.config import load_config
from home_hub.core.errors import ConfigurationError
from home_hub.core.statefile import StateFile

logger = logging.getLogger("home_hub")

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="home-hub", description="Home automation hub")
    parser.add_argument(
        "command",
        nargs="?",
        choices=("run", "check"),
        default="run",
        help="run the hub (default) or only validate the configuration",
    )
    parser.add_argument("--config", default=os.environ.get("HOME_HUB_CONFIG", "config.yaml"))
    parser.add_argument("--state-file", default=os.environ.get("HOME_HUB_STATE_FILE"))
    parser.add_argument(
        "--log-level",
        type=str.lower,
        choices=LOG_LEVELS,
        default=os.environ.get("HOME_HUB_LOG_LEVEL", "info"),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.log_level not in LOG_LEVELS:
        parser.error(f"invalid log level: {args.log_level} (choose from {', '.join(LOG_LEVELS)})")

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
    )

    try:
        config = load_config(args.config)
        state_file = StateFile(args.state_file or config.state_file)
        app = Application(config, state_file=state_file)
    except ConfigurationError as e:
        logger.error(f"configuration error: {e}")
        return 1

    if args.command == "check":
        print(
            f"{args.config}: {len(app.adapters.all_adapters())} adapters, "
            f"{len(app.devices)} devices, {len(app.engine.subscriptions())} subscriptions, "
            f"booleans: {', '.join(app.booleans.names())}"
        )
        return 0

    shutdown = threading.Event()

    def request_shutdown(signum, frame) -> None:
        logger.info(f"Received signal {signum}, stopping")
        shutdown.set()

    signal.signal(signal.SIGINT, request_shutdown)
    signal.signal(signal.SIGTERM, request_shutdown)

    logger.info(f"home-hub {__version__} starting")
    app.start()
    while not shutdown.wait(1.0):
        if not app.running:
            logger.error("Router thread exited unexpectedly")
            break
    app.stop(timeout=30)
    return 0


if __name__ == "__main__":
    sys.exit(main())
