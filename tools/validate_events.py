#!/usr/bin/env python3
"""
Event Validator Tool
Validates JSONL event logs against a tracking taxonomy.

Exit codes: 0 when every file is valid, 1 when any file is invalid,
2 when the taxonomy or the input path cannot be loaded.
"""
import sys
import asyncio
import argparse
from pathlib import Path
from typing import Dict, List, Optional

# Add parent dir to path to import modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from config import load_settings
from storage.result_writer import ResultWriter, StorageError
from taxonomy import SchemaError, load_schema
from utils.logging import setup_logger
from validation import (
    DirectoryReadError,
    EventLogValidator,
    ValidationResult,
    format_batch_summary,
    format_validation_result,
)

EXIT_OK = 0
EXIT_INVALID = 1
EXIT_LOAD_ERROR = 2

# Package loggers configured next to "validation"
OTHER_LOGGERS = ("taxonomy", "storage")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate JSONL event logs against a tracking taxonomy."
    )
    parser.add_argument("path", help="Log file or directory of log files")
    parser.add_argument("--schema", "-s", required=True, help="Path to taxonomy JSON file")
    parser.add_argument("--output", "-o", help="Write results as JSONL to this path")
    parser.add_argument(
        "--ingestion-order",
        action="store_true",
        help="Also check timestamps in the order records were logged",
    )
    parser.add_argument(
        "--reject-cycles",
        action="store_true",
        help="Refuse taxonomies whose dependencies form a cycle",
    )
    parser.add_argument("--workers", type=int, help="Validate directory files on N threads")
    parser.add_argument("--log-level", help="Logging level (default from LOG_LEVEL)")
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    log_level = args.log_level or settings.logging.level
    logger = setup_logger("validation", log_level)
    for name in OTHER_LOGGERS:
        setup_logger(name, log_level)

    validator_settings = settings.validator.model_copy(update={
        "check_ingestion_order": args.ingestion_order or settings.validator.check_ingestion_order,
        "reject_cyclic_schema": args.reject_cycles or settings.validator.reject_cyclic_schema,
    })

    try:
        schema = load_schema(args.schema, reject_cycles=validator_settings.reject_cyclic_schema)
    except SchemaError as e:
        logger.error(str(e))
        return EXIT_LOAD_ERROR

    logger.info(
        f"Loaded {len(schema.events)} events, {len(schema.properties)} properties, "
        f"{len(schema.funnels)} funnels"
    )
    validator = EventLogValidator(schema, validator_settings)

    target = Path(args.path)
    results: Dict[str, ValidationResult]
    try:
        if target.is_dir():
            if args.workers:
                results = asyncio.run(validator.validate_directory_async(target, args.workers))
            else:
                results = validator.validate_directory(target)
        elif target.is_file():
            results = {target.name: validator.validate_file(target)}
        else:
            logger.error(f"Path not found: {target}")
            return EXIT_LOAD_ERROR
    except DirectoryReadError as e:
        logger.error(str(e))
        return EXIT_LOAD_ERROR

    for file_name, result in results.items():
        print(f"\nFile: {file_name}")
        print(format_validation_result(
            result,
            top_events=settings.report.top_events,
            max_warnings=settings.report.max_warnings,
        ))

    print()
    print(format_batch_summary(results))

    if args.output:
        try:
            ResultWriter(args.output).write_results(results)
        except StorageError as e:
            logger.error(str(e))
            return EXIT_LOAD_ERROR

    if all(r.is_valid for r in results.values()):
        return EXIT_OK
    return EXIT_INVALID


def main() -> None:
    sys.exit(run())


if __name__ == "__main__":
    main()
