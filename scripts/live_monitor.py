#!/usr/bin/env python3
"""Console stand-in for the fall-detection dashboard.

Polls the service once per second and prints the registered device count,
the running fall counter and each new notification as it arrives.

Configuration comes from the environment (``FALLMON_BASE_URL``,
``FALLMON_API_KEY``, ...) with command-line overrides.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyfallmon import (  # noqa: E402
    DeviceStats,
    FallMonClient,
    FallMonConfig,
    FallMonError,
    Notification,
    SubmissionFailed,
)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__, formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--base-url", help="Service root URL (default: FALLMON_BASE_URL)")
    parser.add_argument("--api-key", help="API key for test reports (default: FALLMON_API_KEY)")
    parser.add_argument("--interval", type=float, help="Polling period in seconds")
    parser.add_argument("--trigger-test", action="store_true", help="Submit one test fall report on start")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable DEBUG logging")
    return parser.parse_args()


def _build_config(args: argparse.Namespace) -> FallMonConfig:
    overrides: dict[str, Any] = {}
    if args.base_url:
        overrides["base_url"] = args.base_url
    if args.api_key:
        overrides["api_key"] = args.api_key
    if args.interval:
        overrides["poll_interval"] = args.interval
        overrides["request_timeout"] = args.interval
    return FallMonConfig.from_env(**overrides)


def _print_notification(notification: Notification) -> None:
    print(f"[{notification.id:>4}] {notification.message}", flush=True)


def _print_stats(stats: DeviceStats) -> None:
    print(f"Number of registered devices: {stats.total_count}", end="\r", flush=True)


async def _main(args: argparse.Namespace) -> int:
    config = _build_config(args)
    async with FallMonClient(
        config,
        on_notification=_print_notification,
        on_device_stats=_print_stats,
    ) as client:
        if args.trigger_test:
            try:
                result = await client.submit_fall_report()
            except SubmissionFailed as exc:
                print(f"Test report failed: {exc.__cause__ or exc}", file=sys.stderr)
            else:
                print(f"Test report sent for {config.test_device_id}:")
                print(json.dumps(result, indent=2, ensure_ascii=False))

        print(f"Monitoring {config.root_url} (Ctrl+C to stop)")
        try:
            await client.run_forever()
        finally:
            print(f"\nTimeStamp: {client.now_text}  Fall Detected: {client.fall_count}")
    return 0


def main() -> int:
    args = _parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(_main(args))
    except KeyboardInterrupt:
        return 0
    except FallMonError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
