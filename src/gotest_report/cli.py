"""
Command-line interface for gotest-report.
"""

import json
import logging
import sys
from typing import Optional, TextIO

import click

from . import __version__
from .aggregator import aggregate
from .config import VALID_LOG_LEVELS, ConfigurationError, load_config, validate_config
from .exceptions import MalformedEventError, StreamReadError
from .models import ResultSet

logger = logging.getLogger(__name__)


def _format_summary(result_set: ResultSet) -> str:
    """One plain line with the root-level counters."""
    return (
        f"{result_set.total_tests} tests: "
        f"{result_set.passed_tests} passed, "
        f"{result_set.failed_tests} failed, "
        f"{result_set.skipped_tests} skipped, "
        f"{result_set.unknown_tests} unknown "
        f"({result_set.total_duration:.2f}s)"
    )


@click.command()
@click.option(
    "--input",
    "input_file",
    type=click.File("r", encoding="utf-8"),
    default="-",
    help="File containing go test -json output (default: stdin)",
)
@click.option(
    "--config",
    type=click.Path(exists=True),
    help="Path to configuration file (YAML)",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print the aggregated result set as JSON",
)
@click.option(
    "--log-level",
    type=click.Choice(VALID_LOG_LEVELS),
    help="Logging level (overrides config)",
)
@click.version_option(version=__version__, prog_name="gotest-report")
def main(
    input_file: TextIO,
    config: Optional[str],
    as_json: bool,
    log_level: Optional[str],
) -> None:
    """
    gotest-report - Aggregate go test -json output into test results.

    Examples:

      # Summarize a saved run
      gotest-report --input test-output.json

      # Pipe straight from go test
      go test -json ./... | gotest-report --json
    """
    logging.basicConfig(
        level=getattr(logging, log_level or "INFO"),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    try:
        aggregator_config = load_config(config)

        errors = validate_config(aggregator_config)
        if errors:
            click.echo("Configuration errors:", err=True)
            for error in errors:
                click.echo(f"  - {error}", err=True)
            sys.exit(1)

        logging.getLogger().setLevel(getattr(logging, log_level or aggregator_config.log_level))

        logger.info("Reading test events from %s", getattr(input_file, "name", "<stream>"))
        result_set = aggregate(input_file, aggregator_config)

        if as_json:
            click.echo(json.dumps(result_set.to_dict(), indent=2))
        else:
            click.echo(_format_summary(result_set))

        sys.exit(0 if result_set.success else 1)

    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)
    except MalformedEventError as e:
        logger.error("Malformed event: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except StreamReadError as e:
        logger.error("Read error: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except FileNotFoundError as e:
        logger.error("File not found: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        logger.exception("Unexpected error: %s", e)
        click.echo(f"Unexpected error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
