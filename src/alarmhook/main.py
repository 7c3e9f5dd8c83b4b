from __future__ import annotations

import argparse
import json
import logging
import os
import sys

from .callbacks import CALLBACK_TYPES
from .configuration import load_config
from .errors import ConfigurationError
from .http_utils import UrllibTransport
from .models import build_test_event
from .runner import CallbackRunner, build_runner


EXIT_OK = 0
EXIT_DELIVERY_FAILED = 1
EXIT_CONFIG_ERROR = 2


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="alarmhook", description="HTTP alarm callback (POST alerts to a URL)")
    p.add_argument("--config", help="Path to JSON config file (required for --check/--test)")
    p.add_argument(
        "--log-level",
        default=None,
        help="Log level (DEBUG/INFO/WARNING/ERROR). Defaults to env ALARMHOOK_LOG_LEVEL or INFO",
    )

    mode = p.add_mutually_exclusive_group(required=False)
    mode.add_argument("--check", action="store_true", help="Validate every configured callback and exit (default)")
    mode.add_argument("--describe", action="store_true", help="Print the configuration fields of each callback type")
    mode.add_argument("--test", action="store_true", help="Send a synthetic test alert through every callback")
    return p


def _resolve_log_level(value: str | None) -> int:
    v = (value or "").strip().upper()
    if not v:
        return logging.INFO
    level = logging.getLevelNamesMapping().get(v)
    if isinstance(level, int):
        return level
    return logging.INFO


def _callbacks_summary(runner: CallbackRunner) -> str:
    parts = [f"{a.callback.name()}({a.title})" for a in runner.callbacks]
    return "; ".join(parts) if parts else "<none>"


def _describe() -> int:
    described = {}
    for type_name, cls in sorted(CALLBACK_TYPES.items()):
        callback = cls(transport=UrllibTransport())
        described[type_name] = {
            "name": callback.name(),
            "requested_configuration": callback.describe_required_configuration().to_json_dict(),
        }
    sys.stdout.write(json.dumps(described, ensure_ascii=False, indent=2) + "\n")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    env_log_level = os.environ.get("ALARMHOOK_LOG_LEVEL")
    logging.basicConfig(
        level=_resolve_log_level(args.log_level or env_log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger = logging.getLogger("alarmhook")

    if args.describe:
        return _describe()

    if not args.config:
        parser.error("--config is required for --check and --test")

    try:
        config = load_config(args.config)
        runner = build_runner(config)
    except (ConfigurationError, ValueError, OSError) as e:
        logger.error("invalid configuration: config=%s error=%s", args.config, e)
        return EXIT_CONFIG_ERROR

    mode = "test" if args.test else "check"
    logger.info("alarmhook start: mode=%s config=%s", mode, args.config)
    logger.info("callbacks: %s", _callbacks_summary(runner))
    if not runner.callbacks:
        logger.warning("no callbacks configured; alerts will not be delivered")

    if not args.test:
        logger.info("configuration ok: callbacks=%d", len(runner.callbacks))
        return EXIT_OK

    report = runner.dispatch(build_test_event())
    logger.info(
        "test done: duration_ms=%d attempts=%d successes=%d failures=%d",
        report.duration_ms,
        report.attempts,
        report.successes,
        report.failures,
    )
    return EXIT_DELIVERY_FAILED if report.failures else EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
