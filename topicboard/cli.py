"""
Command-line interface for topicboard.

Provides subcommands for listing recent topics, showing one topic with its
viewpoints grouped by stance, and checking configuration.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from .config.settings import ConfigError, check_settings, load_settings
from .ingest.record_store import RecordStoreError
from .logging_config import configure_logging
from .pipeline.assembler import TopicPipeline


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {value!r}") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _config_path(args: argparse.Namespace) -> Optional[Path]:
    return Path(args.config) if args.config else None


def cmd_topics(args: argparse.Namespace) -> int:
    """Print recent topics."""
    try:
        settings = load_settings(config_path=_config_path(args))
        pipeline = TopicPipeline.from_settings(settings)
        try:
            summaries = pipeline.recent_topics(args.limit)
        finally:
            pipeline.close()
    except (ConfigError, RecordStoreError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(json.dumps([s.to_dict() for s in summaries], indent=2))
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Print one topic view model."""
    try:
        settings = load_settings(config_path=_config_path(args))
        pipeline = TopicPipeline.from_settings(settings)
        try:
            view = pipeline.topic_view(args.topic_id)
        finally:
            pipeline.close()
    except (ConfigError, RecordStoreError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if view is None:
        print(f"Topic not found: {args.topic_id}", file=sys.stderr)
        return 2

    if args.verbose:
        for group in view.buckets:
            print(f"{group.stance.value}: {len(group)} viewpoint(s)", file=sys.stderr)
        if view.unrecognized:
            print(f"Unrecognized stance: {len(view.unrecognized)} viewpoint(s)", file=sys.stderr)

    print(json.dumps(view.to_dict(), indent=2))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Report which required settings are configured."""
    try:
        status = check_settings(config_path=_config_path(args))
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    all_ok = True
    for name, state in status.items():
        print(f"{name}: {state}")
        if state == "MISSING":
            all_ok = False

    if not all_ok:
        print("\nTo configure:")
        print("  1. Copy .env.example to .env")
        print("  2. Fill in the record store settings")
        return 1

    print("\nAll settings configured.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="topicboard",
        description="Debate topics and viewpoints from the record store",
    )
    parser.add_argument("--config", help="Path to YAML settings file")
    parser.add_argument("--log-level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                        type=str.upper, help="Logging level (default: WARNING)")
    parser.add_argument("--log-file", default=None, help="Also append log records to this file")

    subparsers = parser.add_subparsers(dest="command", required=True)

    p_topics = subparsers.add_parser("topics", help="List recent topics")
    p_topics.add_argument("--limit", type=_positive_int, default=None, help="Maximum topics to list")
    p_topics.set_defaults(func=cmd_topics)

    p_show = subparsers.add_parser("show", help="Show a topic with grouped viewpoints")
    p_show.add_argument("topic_id", help="Topic record id")
    p_show.add_argument("-v", "--verbose", action="store_true", help="Print bucket counts to stderr")
    p_show.set_defaults(func=cmd_show)

    p_check = subparsers.add_parser("check", help="Check required settings")
    p_check.set_defaults(func=cmd_check)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
