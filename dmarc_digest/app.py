import argparse
import json
import sys
from typing import Any, Callable, Dict, List, Optional, Sequence

import structlog

from dmarc_digest.aggregation import DeduplicationStrategy, aggregate
from dmarc_digest.errors import ConfigurationError, MailStructureError, MboxReadError
from dmarc_digest.export import reports_to_json
from dmarc_digest.loader import load_reports
from dmarc_digest.logging import configure_logging
from dmarc_digest.model.dmarc_aggregate_report import Feedback
from dmarc_digest.rendering import render_aggregate, render_feedback

logger = structlog.get_logger()


def render_listing(reports: List[Feedback], configuration: Dict[str, Any]) -> str:
    return "\n".join(
        render_feedback(report, colors=configuration["colors"]) for report in reports
    )


def render_aggregate_table(
    reports: List[Feedback], configuration: Dict[str, Any]
) -> str:
    return render_aggregate(
        aggregate(reports, configuration["deduplication"]),
        colors=configuration["colors"],
    )


def render_json(reports: List[Feedback], configuration: Dict[str, Any]) -> str:
    return reports_to_json(aggregate(reports, configuration["deduplication"]).reports)


modes: Dict[str, Callable[[List[Feedback], Dict[str, Any]], str]] = {
    "list": render_listing,
    "aggregate": render_aggregate_table,
    "json": render_json,
}


def load_configuration(config_file: Optional[Any]) -> Dict[str, Any]:
    configuration: Dict[str, Any] = {}
    if config_file is not None:
        try:
            configuration = json.load(config_file)
        except json.JSONDecodeError as err:
            raise ConfigurationError(f"Invalid configuration file: {err}") from err
        finally:
            config_file.close()
        if not isinstance(configuration, dict):
            raise ConfigurationError("Configuration must be a JSON object.")

    try:
        deduplication = DeduplicationStrategy(
            configuration.get("deduplication", DeduplicationStrategy.ADJACENT.value)
        )
    except ValueError as err:
        raise ConfigurationError(f"Invalid deduplication strategy: {err}") from err

    logging_overrides = configuration.get("logging", {})
    if not isinstance(logging_overrides, dict) or not isinstance(
        logging_overrides.get("root", {}), dict
    ):
        raise ConfigurationError(
            f"Logging configuration must be a JSON object: {logging_overrides!r}"
        )

    return {
        "logging": logging_overrides,
        "deduplication": deduplication,
        "colors": bool(configuration.get("colors", sys.stdout.isatty())),
    }


def main(argv: Sequence[str]) -> int:
    parser = argparse.ArgumentParser(
        description="Summarize the DMARC aggregate reports attached to the "
        "emails of an mbox file."
    )
    parser.add_argument("mbox", nargs="?", help="Path of the mbox file")
    parser.add_argument(
        "mode",
        nargs="?",
        default="list",
        help="Output mode: 'list' (default) prints every report, 'aggregate' "
        "prints one table over all reports, 'json' exports the reports",
    )
    parser.add_argument(
        "--configuration",
        type=argparse.FileType("r"),
        default=None,
        help="Configuration file",
    )
    parser.add_argument(
        "--debug",
        default=False,
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args(argv)

    if args.mbox is None:
        parser.print_usage()
        return 0

    configure_logging({}, debug=args.debug)
    try:
        configuration = load_configuration(args.configuration)
        configure_logging(configuration["logging"], debug=args.debug)
    except (ConfigurationError, ValueError, TypeError) as err:
        configure_logging({}, debug=args.debug)
        logger.error(f"Invalid configuration: {err}", exc_info=err)
        return 1

    try:
        result = load_reports(args.mbox)
    except (MboxReadError, MailStructureError) as err:
        logger.error(str(err), exc_info=err)
        return 1

    for diagnostic in result.diagnostics:
        logger.warning(
            str(diagnostic), subject=diagnostic.subject, error=str(diagnostic.error)
        )

    if args.mode not in modes:
        logger.error(
            f"Unknown mode '{args.mode}'.", available_modes=", ".join(modes)
        )
        return 1

    print(modes[args.mode](result.reports, configuration))
    return 0


def run():
    sys.exit(main(sys.argv[1:]))
