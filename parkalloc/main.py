# File: parkalloc/main.py
"""
Main application entry point for the Parking Allocator
Wires configuration, logging, the service and the console session
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from pydantic import ValidationError

from .config import AppConfig, LotSettings
from .application.parking_service import ParkingServiceFactory
from .presentation.cli import SessionShell


def setup_logging(level: str = AppConfig.DEFAULT_LOG_LEVEL, log_dir: str = AppConfig.LOG_DIR):
    """Setup application logging configuration; stdout belongs to the session"""
    if not os.path.exists(log_dir):
        os.makedirs(log_dir)

    logging.basicConfig(
        level=getattr(logging, level),
        format=AppConfig.LOG_FORMAT,
        handlers=[
            logging.FileHandler(os.path.join(log_dir, AppConfig.LOG_FILE)),
        ]
    )
    return logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parkalloc",
        description=f"{AppConfig.APP_NAME} - interactive multi-floor parking lot"
    )
    parser.add_argument("--lot-name", help="Name printed on tickets")
    parser.add_argument("--floors", type=int, help="Number of floors")
    parser.add_argument("--slots", type=int, dest="slots_per_floor", help="Slots on every floor")
    parser.add_argument("--database-url", help="SQLAlchemy URL for the receipt ledger")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--version", action="version", version=f"%(prog)s {AppConfig.VERSION}")
    return parser


class ParkingApplication:
    """Main application controller that sets up all components"""

    def __init__(self, settings: LotSettings, stdin=None, stdout=None):
        self.settings = settings
        self.logger = logging.getLogger(self.__class__.__name__)
        self.logger.info(
            f"Starting {AppConfig.APP_NAME} for lot {settings.lot_name} "
            f"({settings.floors} floors x {settings.slots_per_floor} slots)"
        )
        self.service = ParkingServiceFactory.create(settings)
        self.shell = SessionShell(self.service, stdin=stdin, stdout=stdout)

    def run(self) -> int:
        try:
            return self.shell.run()
        finally:
            self.logger.info("Application shutting down...")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the application"""
    args = build_parser().parse_args(argv)

    try:
        settings = LotSettings.from_env(
            lot_name=args.lot_name,
            floors=args.floors,
            slots_per_floor=args.slots_per_floor,
            database_url=args.database_url,
            log_level=args.log_level
        )
    except ValidationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    setup_logging(settings.log_level)

    try:
        return ParkingApplication(settings).run()
    except KeyboardInterrupt:
        print("\nGoodbye!")
        return 0


if __name__ == "__main__":
    sys.exit(main())
