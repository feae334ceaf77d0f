"""Entry point for the Interactive Double Pendulum application.

Usage:
    python main.py [--fps 60] [--dt 0.1] [--log-level INFO]
"""

import argparse
import logging
import sys

from PyQt6.QtWidgets import QApplication

from app_window import AppWindow
from playground.session import SessionConfig


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Simulate and drag a double pendulum in real time.",
    )
    parser.add_argument(
        "--fps",
        type=int,
        default=60,
        help="Frames (simulation ticks) per second (default: 60)",
    )
    parser.add_argument(
        "--dt",
        type=float,
        default=SessionConfig.fixed_dt,
        help="Simulation time per frame at 1x speed (default: %(default)s)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s: %(message)s",
    )

    app = QApplication(sys.argv[:1])
    window = AppWindow(config=SessionConfig(fixed_dt=args.dt), fps=args.fps)
    window.show()

    sys.exit(app.exec())


if __name__ == "__main__":
    main()
