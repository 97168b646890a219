"""
Command-line interface for mapping FHIR dosage values to a flat openEHR composition.

Runs every request of a request document through the FHIR to openEHR
converter and writes the resulting flat composition.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import NoReturn

from pydantic import ValidationError

from dosage_mapping.config import MappingSettings
from dosage_mapping.core.exceptions import RequestLoadError, SourceValueError
from dosage_mapping.core.result import MappingResult
from dosage_mapping.io.file_loader import FileLoader, MappingRequest
from dosage_mapping.models.flat_composition import FlatComposition
from dosage_mapping.plugins.fhir_to_openehr import FhirToOpenEhrConverter, MappingCode

EXIT_OK = 0
EXIT_INVALID_INPUT = 1
EXIT_UNMAPPED = 3
EXIT_FILE_SYSTEM = 8
EXIT_UNEXPECTED = 9


def configure_logging(
    debug: bool = False, verbose: bool = False, default_level: str = "WARNING"
) -> None:
    """Configure application logging.

    Logs go to stderr so that stdout only carries the composition.

    Args:
        debug: Enable debug-level logging if True.
        verbose: Enable info-level logging from the mapping functions if True.
        default_level: Level used when neither flag is set.
    """
    if debug:
        level = logging.DEBUG
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif verbose:
        level = logging.INFO
        format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    else:
        level = logging.getLevelName(default_level)
        format_str = "%(levelname)s: %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        stream=sys.stderr,
        force=True,  # Override existing configuration
    )


def show_available_mappings() -> NoReturn:
    """Print the supported mapping codes and exit."""
    print("Available mapping functions:")
    for code in MappingCode:
        print(f"  {code.value}")
    sys.exit(EXIT_OK)


def execute_requests(
    converter: FhirToOpenEhrConverter,
    requests: list[MappingRequest],
    composition: FlatComposition,
) -> list[MappingResult]:
    """
    Run every request against one shared composition.

    All source values are validated before the first mapping runs, so an
    invalid request document leaves the composition untouched.

    Raises:
        SourceValueError: If a request value is not valid FHIR
    """
    values = [(request, request.source_value()) for request in requests]

    return [
        converter.map_value(
            request.code, request.path, value, request.openehr_type, composition
        )
        for request, value in values
    ]


def parse_arguments(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed command line arguments.
    """
    parser = argparse.ArgumentParser(
        description="Map FHIR medication dosage values to a flat openEHR composition",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Map a request document and print FLAT JSON
  python -m dosage_mapping.main requests.json

  # Continue an existing composition and save it as YAML
  python -m dosage_mapping.main requests.yaml --composition flat.json -o out.yaml

Request documents:
  {"mappings": [{"code": "timingToDaily_NonDaily",
                 "path": "medication/dosierung",
                 "valueType": "Timing",
                 "value": {"repeat": {"frequency": 2, "periodUnit": "d"}}}]}
        """,
    )

    parser.add_argument(
        "request_file",
        nargs="?",  # Optional for --list-mappings
        type=Path,
        help="JSON or YAML document with the mapping requests",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        dest="output_file",
        help="Save the composition here (.json, .yaml or .yml) instead of stdout",
    )
    parser.add_argument(
        "--format",
        choices=("json", "yaml"),
        default="json",
        help="Format used when printing to stdout (default: json)",
    )
    parser.add_argument(
        "--composition",
        type=Path,
        dest="composition_file",
        help="Existing flat composition to write into",
    )
    parser.add_argument(
        "--partial-writes",
        action="store_true",
        help="Keep writes of a mapping call even if the call fails",
    )
    parser.add_argument(
        "--list-mappings",
        action="store_true",
        help="List available mapping functions and exit",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging for detailed output"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging from the mapping functions",
    )

    args = parser.parse_args(argv)

    if args.list_mappings:
        show_available_mappings()

    if not args.request_file:
        parser.error("Must specify a request file or use --list-mappings")

    return args


def run_mapping(
    request_file: Path,
    output_file: Path | None = None,
    output_format: str = "json",
    composition_file: Path | None = None,
    partial_writes: bool = False,
    debug: bool = False,
    verbose: bool = False,
) -> NoReturn:
    """Execute the mapping requests and write the composition.

    Raises:
        SystemExit: Always exits with appropriate code (0 when every request
            was mapped, >0 otherwise).
    """
    try:
        settings = MappingSettings.from_env()
    except ValidationError as e:
        configure_logging(debug, verbose)
        logging.getLogger(__name__).error(f"Invalid configuration: {e}")
        sys.exit(EXIT_INVALID_INPUT)
    if partial_writes:
        settings = settings.model_copy(update={"atomic_writes": False})

    configure_logging(debug, verbose, settings.log_level)
    logger = logging.getLogger(__name__)

    try:
        requests = FileLoader.load(request_file)
        existing = (
            FileLoader.load_composition(composition_file) if composition_file else {}
        )
        composition = FlatComposition(existing)
        converter = FhirToOpenEhrConverter(settings)

        logger.info(f"Processing {len(requests)} mapping request(s)")
        results = execute_requests(converter, requests, composition)

        if output_file:
            composition.save(output_file)
        elif output_format == "yaml":
            print(composition.to_yaml(), end="")
        else:
            print(composition.to_json())

        unmapped = [result for result in results if not result.ok]
        for result in unmapped:
            logger.warning(
                f"Not mapped: {result.code} at {result.path} ({result.status.value})"
            )
        sys.exit(EXIT_UNMAPPED if unmapped else EXIT_OK)

    except (RequestLoadError, SourceValueError) as e:
        logger.error(f"Input validation failed: {e}")
        sys.exit(EXIT_INVALID_INPUT)
    except ValueError as e:
        logger.error(f"Invalid output: {e}")
        sys.exit(EXIT_INVALID_INPUT)
    except (PermissionError, FileNotFoundError, OSError) as e:
        logger.error(f"File system error: {e}")
        sys.exit(EXIT_FILE_SYSTEM)
    except Exception as e:
        logger.error(f"Unexpected error: {e}")
        if debug:
            logger.exception("Full traceback:")
        sys.exit(EXIT_UNEXPECTED)


def main(argv: list[str] | None = None) -> NoReturn:
    args = parse_arguments(argv)
    run_mapping(
        args.request_file,
        args.output_file,
        args.format,
        args.composition_file,
        args.partial_writes,
        args.debug,
        args.verbose,
    )


if __name__ == "__main__":
    main()
