"""Command-line entry point: ``gemfreely login | logout | sync``.

Reports go to stdout, logs and errors to stderr.

Exit codes:
    0    Success (every entry synced, skipped or previewed)
    1    Could not start: configuration, feed, authentication or index error
    2    The run completed but at least one entry failed
    130  Interrupted
"""

import argparse
import asyncio
import getpass
import json
import logging
import os
import sys
from typing import Any

from dotenv import load_dotenv

from . import __version__
from .config import Config, load_config
from .config_loader import load_hierarchical_config
from .config_schema import SyncProfileConfig, UnifiedConfig, build_config
from .core.client import WriteFreelyClient
from .errors import GemfreelyError
from .feed import FeedFetcher
from .logger import setup_logging
from .sync import (
    SyncEngine,
    format_dry_run_preview,
    format_sync_report,
    report_to_json,
)

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_PARTIAL = 2
EXIT_INTERRUPTED = 130

# sync options that override the selected profile when given
_PROFILE_OPTIONS = (
    "feed_url",
    "strip_before_marker",
    "strip_after_marker",
    "dialect",
    "freshness",
    "date_format",
)

# options whose value is free text and may start with "-"
_MARKER_OPTIONS = ("--strip-before-marker", "--strip-after-marker")


def _join_marker_values(argv: list[str]) -> list[str]:
    """Rewrite ``--strip-*-marker VALUE`` as ``--strip-*-marker=VALUE``.

    argparse refuses a separate value that looks like an option, so a
    marker such as ``---`` would otherwise need the ``=`` form.
    """
    joined: list[str] = []
    args = iter(argv)
    for arg in args:
        if arg in _MARKER_OPTIONS:
            value = next(args, None)
            if value is not None:
                arg = f"{arg}={value}"
        joined.append(arg)
    return joined


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse *argv* (default ``sys.argv[1:]``) with marker values kept verbatim."""
    if argv is None:
        argv = sys.argv[1:]
    return build_parser().parse_args(_join_marker_values(list(argv)))


def _stderr_print(msg: str) -> None:
    print(msg, file=sys.stderr)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for all subcommands."""
    connection = argparse.ArgumentParser(add_help=False)
    connection.add_argument(
        "--wf-url",
        metavar="URL",
        help="WriteFreely instance URL (overrides WRITEFREELY_URL and config files)",
    )
    connection.add_argument(
        "-a",
        "--alias",
        help="Blog collection alias (overrides WRITEFREELY_ALIAS)",
    )
    connection.add_argument(
        "-t",
        "--token",
        help="Access token from 'gemfreely login' (overrides WRITEFREELY_TOKEN)",
    )
    connection.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (use only for development)",
    )
    connection.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    connection.add_argument("--log-file", help="Also append logs to this file")

    parser = argparse.ArgumentParser(
        prog="gemfreely",
        description="Sync a Gemini gemlog to a WriteFreely blog",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Get an access token
  gemfreely login --wf-url https://blog.example.com --username me

  # Preview what a sync would do
  gemfreely sync -a myblog --feed-url gemini://example.org/gemlog/ --dry-run

  # Sync using a profile from .gemfreely/config.yml
  gemfreely sync --profile gemlog
        """,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"gemfreely version {__version__}",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    login = subparsers.add_parser(
        "login", parents=[connection], help="Log in and print an access token"
    )
    login.add_argument("-u", "--username", help="WriteFreely username")
    login.add_argument(
        "-p",
        "--password",
        help="WriteFreely password (visible in process list -- prefer "
        "WRITEFREELY_PASSWORD or the prompt)",
    )

    subparsers.add_parser(
        "logout", parents=[connection], help="Revoke the access token"
    )

    sync = subparsers.add_parser(
        "sync", parents=[connection], help="Sync the gemlog to the blog"
    )
    sync.add_argument("--profile", help="Sync profile name from the config file")
    sync.add_argument("--feed-url", metavar="URL", help="Gemlog feed URL")
    sync.add_argument(
        "--strip-before-marker",
        metavar="TEXT",
        help="Drop post text up to and including this marker "
        "(a value starting with '-' is taken verbatim, e.g. ---)",
    )
    sync.add_argument(
        "--strip-after-marker",
        metavar="TEXT",
        help="Drop post text from this marker onward",
    )
    sync.add_argument(
        "--dialect",
        choices=["auto", "atom", "gemfeed"],
        help="Feed dialect (default: auto)",
    )
    sync.add_argument(
        "--freshness",
        choices=["content-hash", "timestamp", "always-update"],
        help="How to decide a published post is current (default: content-hash)",
    )
    sync.add_argument(
        "--date-format",
        metavar="FMT",
        help="strftime format for Atom dates feedparser cannot read",
    )
    sync.add_argument(
        "--max-parallel",
        type=int,
        metavar="N",
        help="Entries processed concurrently (1-32)",
    )
    sync.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be published without changing the blog",
    )
    sync.add_argument(
        "--json", action="store_true", help="Print the report as JSON"
    )
    return parser


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


def _load_unified_config() -> UnifiedConfig:
    """Load .env and any YAML config files into a ``UnifiedConfig``."""
    load_dotenv()
    return build_config(load_hierarchical_config())


def _connection_config(
    args: argparse.Namespace,
    unified: UnifiedConfig,
    require_alias: bool = False,
    require_token: bool = False,
) -> Config:
    yaml_fallbacks: dict[str, Any] = {
        k: v for k, v in unified.writefreely.model_dump().items() if v is not None
    }
    return load_config(
        url=args.wf_url,
        alias=args.alias,
        token=args.token,
        insecure=args.insecure,
        debug=args.debug,
        max_parallel_requests=getattr(args, "max_parallel", None),
        yaml_fallbacks=yaml_fallbacks,
        require_alias=require_alias,
        require_token=require_token,
    )


def resolve_profile(
    args: argparse.Namespace, unified: UnifiedConfig
) -> SyncProfileConfig:
    """Merge the selected config profile with sync options from the CLI.

    Raises:
        ValueError: If the profile is unknown or no feed URL is configured.
    """
    values: dict[str, Any] = {}
    if args.profile:
        values = unified.profile(args.profile).model_dump(exclude_none=True)

    for option in _PROFILE_OPTIONS:
        value = getattr(args, option, None)
        if value is not None:
            values[option] = value

    if not values.get("feed_url"):
        raise ValueError(
            "Feed URL not found. Pass --feed-url or select a profile with a "
            "'feed_url' using --profile."
        )
    return SyncProfileConfig(**values)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def cmd_login(args: argparse.Namespace, unified: UnifiedConfig) -> int:
    config = _connection_config(args, unified)

    username = args.username or os.getenv("WRITEFREELY_USERNAME")
    if not username:
        raise ValueError(
            "WriteFreely username required. Pass --username or set WRITEFREELY_USERNAME."
        )
    password = args.password or os.getenv("WRITEFREELY_PASSWORD")
    if not password:
        password = getpass.getpass(f"Password for {username}: ")

    client = WriteFreelyClient(config)
    token = client.login(username, password)
    logger.info("Logged in to %s as %s", config.wf_url, username)
    print(token)
    return EXIT_OK


def cmd_logout(args: argparse.Namespace, unified: UnifiedConfig) -> int:
    config = _connection_config(args, unified, require_token=True)
    client = WriteFreelyClient(config)
    client.logout()
    _stderr_print("Logged out; the access token has been revoked.")
    return EXIT_OK


def cmd_sync(args: argparse.Namespace, unified: UnifiedConfig) -> int:
    profile = resolve_profile(args, unified)
    config = _connection_config(
        args,
        unified,
        require_alias=not profile.collection,
        require_token=True,
    )
    collection = profile.collection or config.alias

    client = WriteFreelyClient(config)
    fetcher = FeedFetcher(timeout=config.timeout, insecure=config.insecure)
    engine = SyncEngine(
        client,
        fetcher,
        profile,
        collection,
        max_parallel=config.max_parallel_requests,
    )

    logger.info(
        "Syncing %s to %s/%s%s",
        profile.feed_url,
        config.wf_url,
        collection,
        " (dry run)" if args.dry_run else "",
    )
    if config.max_parallel_requests > 1:
        report = asyncio.run(engine.run_async(dry_run=args.dry_run))
    else:
        report = engine.run(dry_run=args.dry_run)

    if args.json:
        print(json.dumps(report_to_json(report), indent=2))
    elif report.dry_run:
        print(format_dry_run_preview(report))
    else:
        print(format_sync_report(report))

    return EXIT_OK if report.succeeded else EXIT_PARTIAL


_COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "sync": cmd_sync,
}


def main(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the selected command and return the exit code."""
    args = parse_args(argv)

    try:
        unified = _load_unified_config()
        setup_logging(
            debug=args.debug or unified.writefreely.debug,
            log_file=args.log_file or unified.logging.file,
            log_format=unified.logging.format,
            level=unified.logging.level,
        )
        return _COMMANDS[args.command](args, unified)
    except ValueError as e:
        logger.debug("Configuration error", exc_info=True)
        _stderr_print(f"ERROR: Configuration error: {e}")
        return EXIT_ERROR
    except GemfreelyError as e:
        logger.debug("Fatal %s error", e.kind.value, exc_info=True)
        _stderr_print(f"ERROR: {e}")
        return EXIT_ERROR
    except KeyboardInterrupt:
        _stderr_print("\nInterrupted.")
        return EXIT_INTERRUPTED


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()
