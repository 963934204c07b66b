#!/usr/bin/env python3
"""
Run a command inside a throwaway simulator container.

Usage:
    simulator [--base-dir DIR] [--dev] [--image IMAGE] -- COMMAND [ARGS...]

Settings not given on the command line come from SIMULATOR_* environment
variables (see simulator.config).
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from simulator.config import Config
from simulator.errors import SimulatorError
from simulator.runner import ContainerRunner

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="simulator",
        description="Run a command in the simulator container",
    )
    parser.add_argument("--base-dir", type=Path, help="Workspace base directory")
    parser.add_argument(
        "--dev",
        action="store_true",
        default=None,
        help="Mount scenarios, packer and terraform from the workspace",
    )
    parser.add_argument("--image", help="Simulator container image")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("command", nargs=argparse.REMAINDER, help="Command to run")

    args = parser.parse_args(argv)
    if args.command and args.command[0] == "--":
        args.command = args.command[1:]
    return args


def main(argv=None) -> int:
    args = parse_args(argv)

    # stdout carries the container output, so logs go to stderr
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        stream=sys.stderr,
    )

    config = Config.from_env().override(
        base_dir=args.base_dir,
        dev=args.dev,
        image=args.image,
    )
    runner = ContainerRunner(config)

    try:
        asyncio.run(runner.run(args.command))
    except SimulatorError as e:
        logger.error(f"{e}: {e.__cause__}" if e.__cause__ else str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
