import argparse
import logging
import sys
from typing import List, Optional

from laravel_crud_generator.config import load_config
from laravel_crud_generator.exceptions import ConfigurationError
from laravel_crud_generator.generator import CrudGenerator
from laravel_crud_generator.colored_logging import (
    setup_colored_logging,
    log_success,
    log_progress,
    log_section,
)
from laravel_crud_generator.domain.models import GenerationReport, StepStatus


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="laravel-crud",
        description="Generate Model, Migration, Controller, Service, DTOs, Resource and route for a Laravel entity.",
    )
    parser.add_argument("name", help="Entity name, e.g. 'product' or 'order_item'.")
    parser.add_argument(
        "--schema",
        dest="schema_path",
        help="YAML or JSON file mapping model names to 'field: rule' mappings.",
    )
    parser.add_argument(
        "--api-route",
        dest="api_route",
        help="Route file to register the resource route in (default: routes/api.php).",
    )
    parser.add_argument(
        "--controller-route",
        dest="controller_route",
        help="Controller sub-namespace, e.g. 'Api/V1'.",
    )
    parser.add_argument(
        "--project-root",
        dest="project_root",
        help="Root of the Laravel project (default: current directory).",
    )
    parser.add_argument(
        "-c",
        "--config",
        dest="config",
        help="Path to a YAML configuration file.",
    )
    parser.add_argument(
        "--force",
        action="store_const",
        const=True,
        default=None,
        help="Overwrite existing controller, service, DTO and resource files.",
    )
    parser.add_argument(
        "--no-stubs",
        dest="create_stubs",
        action="store_const",
        const=False,
        default=None,
        help="Fail instead of creating a missing model or migration.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose DEBUG logging.",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output (useful for CI/CD environments).",
    )
    return parser


def log_report(report: GenerationReport) -> None:
    """Log a one-line-per-step summary of a generation run."""
    log_section(logger, f"{report.model_name} summary")
    for step in report.steps:
        line = f"{step.status.value.upper():<8} {step.step:<36} {step.path or ''}"
        if step.status is StepStatus.FAILED:
            logger.error(line)
        else:
            logger.info(line)
    counts = report.counts()
    logger.info(", ".join(f"{count} {status}" for status, count in counts.items()))


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # --- Logging Setup ---
    log_level = logging.DEBUG if args.verbose else logging.INFO
    setup_colored_logging(level=log_level, use_colors=not args.no_color)
    if args.verbose:
        logger.debug("Verbose mode enabled. DEBUG level logging activated.")

    config_path = args.config
    cli_args = argparse.Namespace(
        name=args.name,
        schema_path=args.schema_path,
        api_route=args.api_route,
        controller_route=args.controller_route,
        project_root=args.project_root,
        force=args.force,
        create_stubs=args.create_stubs,
    )

    try:
        log_progress(logger, "Loading configuration...")
        config = load_config(config_path, cli_args)

        log_section(logger, f"CRUD package for {config.name}")
        report = CrudGenerator(config).generate()
    except ConfigurationError as e:
        logger.error(f"Configuration Error: {e}", exc_info=args.verbose)
        return 1
    except Exception as e:
        logger.error(f"An unexpected error occurred during generation: {e}", exc_info=True)
        return 1

    log_report(report)
    if not report.succeeded:
        failed = report.failed_step
        logger.error(f"Generation halted at step '{failed.step}': {failed.error}")
        return 1

    log_success(logger, f"CRUD Package for {report.model_name} created successfully!")
    return 0


# --- Script Entry Point ---
if __name__ == "__main__":
    sys.exit(main())
