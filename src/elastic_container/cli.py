#!/usr/bin/env python3
"""
elastic-container CLI entry point.

Start a throw-away Elasticsearch node, a connected Kibana instance and an
Elastic Agent running as Fleet Server, then enable the Detection Engine and
its prebuilt rules. No data is retained.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional

from . import console, stack
from .cli_utils import get_cli_version
from .config import load_config
from .docker import check_docker_available
from .errors import ElasticContainerError

logger = logging.getLogger(__name__)

USAGE = """\
usage: elastic-container [-v] (stage|start|stop|restart|status|help)

actions:
  stage     downloads all necessary images to local storage
  start     creates network and configures containers to run
  stop      stops the containers created and removes the network
  restart   simply restarts all the stack containers
  status    check the status of the stack containers
  help      print this message

flags:
  -v        enable verbose output
  -c PATH   read settings from a TOML file (default: ./elastic-container.toml)
"""


def print_usage() -> None:
    print(USAGE, end="", flush=True)


def parse_arguments(argv: Optional[list] = None) -> argparse.Namespace:
    """
    Parse command-line arguments for elastic-container.

    Supports arguments:
    1. action - stage|start|stop|restart|status|help (default: help)
    2. -v, --verbose - Show docker output and debug logging
    3. -c, --config <path> - TOML settings file
    """
    parser = argparse.ArgumentParser(
        prog='elastic-container',
        description='Local Elasticsearch, Kibana and Fleet Server with the Detection Engine enabled',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=USAGE,
    )

    parser.add_argument(
        'action',
        nargs='*',
        metavar='ACTION',
        help='stage|start|stop|restart|status|help (default: help)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '-c', '--config',
        type=Path,
        default=None,
        metavar='PATH',
        help='TOML settings file (default: ./elastic-container.toml when present)'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {get_cli_version()}'
    )

    args = parser.parse_args(argv)
    args.action = ' '.join(args.action) or 'help'
    return args


def main(argv: Optional[list] = None) -> int:
    args = parse_arguments(argv)
    console.configure_logging(args.verbose)

    if args.action == 'help':
        print_usage()
        return 0

    action = stack.ACTIONS.get(args.action)
    if action is None:
        print("Proper syntax not used. See the usage\n", flush=True)
        print_usage()
        return 1

    try:
        config = load_config(args.config)
        check_docker_available()
        action(config, verbose=args.verbose)
    except ElasticContainerError as e:
        logger.debug(f"{type(e).__name__}: {e}")
        console.error(e.message)
        return e.exit_code
    except KeyboardInterrupt:
        print(f"\n{console.YELLOW}[INTERRUPTED]{console.RESET} Interrupted by user", flush=True)
        return 130

    return 0


if __name__ == '__main__':
    raise SystemExit(main())
