"""CLI entry point for dmchecker.

Analyzes the direct messages of one Nostr public key and prints a report
to stdout. Logs go to stderr.

Examples:
    ```bash
    python -m dmchecker npub180cvv07tjdrrgpa0j7j7tmnyl2yr6yr7l8j4s3evf6u64th6gkwsyjh6w6
    python -m dmchecker <hex-pubkey> --relay wss://nos.lol --window 20 --json
    python -m dmchecker <npub> --config config/analyzer.yaml --log-level DEBUG
    ```

Exit codes: ``0`` success, ``1`` analysis or configuration error, ``2``
invalid identity, ``130`` interrupted.
"""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from dmchecker.core.exceptions import ConfigurationError, DmCheckerError, IdentityError
from dmchecker.core.logger import Logger, StructuredFormatter
from dmchecker.core.yaml import load_yaml
from dmchecker.models import AnalysisReport, ServiceName, get_protocol_info
from dmchecker.services.analyzer import Analyzer
from dmchecker.utils.keys import encode_npub


CONFIG_BASE = Path("config")
DEFAULT_CONFIG = CONFIG_BASE / "analyzer.yaml"

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_IDENTITY = 2
EXIT_INTERRUPTED = 130

logger = Logger(ServiceName.CLI)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments for the analyzer."""
    parser = argparse.ArgumentParser(
        prog="dmchecker",
        description="Nostr DM client and encryption protocol analyzer",
    )

    parser.add_argument(
        "identity",
        help="Public key to analyze (npub1... address or 64-character hex)",
    )

    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help=f"Analyzer config path (default: {DEFAULT_CONFIG})",
    )

    parser.add_argument(
        "--relay",
        action="append",
        dest="relays",
        metavar="URL",
        help="Relay to query; repeat to add more (replaces the configured list)",
    )

    parser.add_argument(
        "--window",
        type=float,
        help="Collection window in seconds (overrides timeouts.window)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Log level (default: WARNING)",
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the report as JSON",
    )

    return parser.parse_args(argv)


def setup_logging(level: str) -> None:
    """Configure the root logger with structured formatting.

    Installs a ``StructuredFormatter`` on a stderr handler so output from
    both ``Logger`` and plain ``logging.getLogger()`` calls in nips/utils
    is unified as ``time level name message key=value ...``.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level))


def _load_yaml_dict(path: Path) -> dict[str, Any]:
    """Load a YAML file as a dict, returning ``{}`` if the file does not exist."""
    if not path.exists():
        logger.warning("config_not_found", path=str(path))
        return {}
    return load_yaml(path)


def build_config_dict(args: argparse.Namespace) -> dict[str, Any]:
    """Merge command-line overrides into the YAML configuration."""
    config = _load_yaml_dict(args.config)
    if args.relays:
        config["relays"] = args.relays
    if args.window is not None:
        config.setdefault("timeouts", {})["window"] = args.window
    return config


def _display_identity(pubkey: str) -> str:
    # hex keys off the secp256k1 curve have no npub form
    try:
        return encode_npub(pubkey)
    except IdentityError:
        return pubkey


def format_report(report: AnalysisReport) -> str:
    """Render a report as plain text."""
    result = report.result
    lines = [
        f"DM analysis for {_display_identity(report.identity)}",
        f"  pubkey: {report.identity}",
        f"  relays: {report.relays_connected} connected, {report.relays_failed} failed",
        "",
        f"Total DMs:    {result.total_dms}",
        f"Secure DMs:   {result.secure_dms} ({result.secure_percentage}%)",
        f"Insecure DMs: {result.insecure_dms} ({result.insecure_percentage}%)",
    ]

    if result.total_dms == 0:
        lines.append("")
        lines.append("No direct messages found for this key.")

    if result.clients:
        lines.append("")
        lines.append("Clients:")
        for stats in result.sorted_clients():
            status = "secure" if stats.secure else "insecure"
            lines.append(
                f"  {stats.name}: {stats.count} DMs "
                f"({result.client_share(stats.name)}%), {status}"
            )
            for label, count in stats.sorted_protocols():
                info = get_protocol_info(label)
                lines.append(f"    - {label} x{count}: {info.description}")

    lines.append("")
    lines.append("Recommendations:")
    lines.extend(f"  {i}. {text}" for i, text in enumerate(report.recommendations, start=1))
    return "\n".join(lines)


async def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point: parse args, load config, run one analysis."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        analyzer = Analyzer.from_dict(build_config_dict(args))
    except (ConfigurationError, FileNotFoundError) as e:
        logger.error("config_invalid", error=str(e))
        return EXIT_ERROR

    try:
        async with analyzer:
            report = await analyzer.analyze(args.identity)
    except IdentityError as e:
        logger.error("identity_invalid", error=str(e))
        print(f"Invalid public key: {e}", file=sys.stderr)
        return EXIT_INVALID_IDENTITY
    except DmCheckerError as e:
        logger.error("analysis_failed", error=str(e))
        print(f"Analysis failed: {e}", file=sys.stderr)
        return EXIT_ERROR

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        print(format_report(report))
    return EXIT_OK


def cli() -> None:
    """Synchronous entry point for console_scripts."""
    try:
        code = asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("interrupted")
        code = EXIT_INTERRUPTED
    sys.exit(code)


if __name__ == "__main__":
    cli()
