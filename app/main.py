"""
Finance Monitor Backend Launcher

Starts the service bridge on stdin/stdout. The UI process spawns this and
exchanges one JSON request/response per line:

    python app/main.py --data-dir ~/finance-data

Log output goes to stderr. Invalid settings stop the launcher before the data
directory is touched.
"""

import argparse
import asyncio
import sys
from pathlib import Path

from finance_monitor.bridge import serve
from finance_monitor.config import first_settings_error
from finance_monitor.orchestrator import create_app_components


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Finance Monitor service bridge (stdio)")
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory holding the collection files (default: configured data dir)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)

    error = first_settings_error()
    if error:
        sys.exit(error)

    bridge, _, _ = create_app_components(data_dir=args.data_dir)
    asyncio.run(serve(bridge))


if __name__ == "__main__":
    main()
