#!/usr/bin/env python3
"""
Event Log Validator
===================
Validates newline-delimited JSON event logs against a taxonomy.

A file run is single-threaded: parse every line, check each record, build
per-user timelines, analyze each timeline, then aggregate. Directory runs
validate files independently, optionally on a thread pool.
"""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from config import ValidatorSettings
from taxonomy import Schema
from validation.aggregate import StatisticsAccumulator
from validation.checks import check_properties, check_structure
from validation.models import (
    IssueType,
    Severity,
    Statistics,
    ValidationError,
    ValidationResult,
    ValidationWarning,
)
from validation.records import ParseFailure, RawRecord, iter_records
from validation.sequence import SequenceAnalyzer
from validation.timeline import build_timelines

logger = logging.getLogger("validation.validator")

PathLike = Union[str, Path]


class DirectoryReadError(Exception):
    """Exception raised when a log directory cannot be listed."""
    pass


class EventLogValidator:
    """
    Validates event logs against one taxonomy.

    The schema is never modified; a validator can be shared across files and
    threads.
    """

    def __init__(self, schema: Schema, settings: Optional[ValidatorSettings] = None):
        self.schema = schema
        self.settings = settings or ValidatorSettings()
        self.analyzer = SequenceAnalyzer(
            schema,
            check_ingestion_order=self.settings.check_ingestion_order,
        )

        unknown = schema.unknown_dependencies()
        if unknown:
            logger.warning(f"Taxonomy references undefined prerequisite events: {', '.join(unknown)}")
        for cycle in schema.find_dependency_cycles():
            logger.warning(f"Taxonomy dependency cycle: {' -> '.join(cycle)}")

    def validate_lines(self, lines: Iterable[str]) -> ValidationResult:
        """Validate already-loaded log lines."""
        errors: List[ValidationError] = []
        warnings: List[ValidationWarning] = []
        stats = StatisticsAccumulator()
        records: List[RawRecord] = []

        for parsed in iter_records(lines):
            if isinstance(parsed, ParseFailure):
                errors.append(_parse_failure_error(parsed))
                continue

            records.append(parsed)
            stats.add_record(parsed)

            record_issues = check_structure(parsed) + check_properties(parsed, self.schema)
            stats.add_issues(record_issues)
            errors.extend(record_issues)

        timelines = build_timelines(records)
        for timeline in timelines.values():
            user_errors, user_warnings = self.analyzer.analyze(timeline)
            stats.add_issues(user_errors)
            errors.extend(user_errors)
            warnings.extend(user_warnings)

        return ValidationResult.build(errors, warnings, stats.finalize(timelines))

    def validate_file(self, path: PathLike) -> ValidationResult:
        """
        Validate one log file.

        A file that cannot be read yields a result with a single DATA_TYPE
        error instead of raising.
        """
        file_path = Path(path)
        logger.info(f"Validating file: {file_path.name}")

        try:
            content = file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {file_path}: {e}")
            return ValidationResult.build(
                [ValidationError(
                    type=IssueType.DATA_TYPE,
                    severity=Severity.ERROR,
                    message=f"Failed to read file: {e}",
                    details={"path": str(file_path)},
                )],
                [],
                Statistics(),
            )

        result = self.validate_lines(content.split("\n"))
        logger.info(
            f"{file_path.name}: {result.statistics.total_events} events, "
            f"{result.error_count} errors, {len(result.warnings)} warnings"
        )
        return result

    def list_log_files(self, directory: PathLike) -> List[Path]:
        """
        Log files directly inside the directory, sorted by name.

        Raises:
            DirectoryReadError: If the directory is missing or cannot be listed
        """
        dir_path = Path(directory)
        if not dir_path.is_dir():
            raise DirectoryReadError(f"Not a readable directory: {dir_path}")

        try:
            return sorted(
                p for p in dir_path.iterdir()
                if p.is_file() and p.name.endswith(self.settings.log_extension)
            )
        except OSError as e:
            raise DirectoryReadError(f"Cannot list directory {dir_path}: {e}") from e

    def validate_directory(self, directory: PathLike) -> Dict[str, ValidationResult]:
        """Validate every log file in a directory; keys are file names."""
        files = self.list_log_files(directory)
        logger.info(f"Found {len(files)} log files in {directory}")
        return {p.name: self.validate_file(p) for p in files}

    async def validate_directory_async(
        self,
        directory: PathLike,
        max_workers: Optional[int] = None,
    ) -> Dict[str, ValidationResult]:
        """
        Validate a directory with one thread-pool task per file.

        Files share no state, so results are collected without locking.
        Cancellation takes effect between files, never inside one.
        """
        files = self.list_log_files(directory)
        logger.info(f"Found {len(files)} log files in {directory}")
        if not files:
            return {}

        workers = max_workers or self.settings.max_workers
        loop = asyncio.get_running_loop()
        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = await asyncio.gather(*(
                loop.run_in_executor(pool, self.validate_file, p) for p in files
            ))
        return {p.name: result for p, result in zip(files, results)}


def _parse_failure_error(failure: ParseFailure) -> ValidationError:
    return ValidationError(
        type=IssueType.DATA_TYPE,
        severity=Severity.ERROR,
        message=f"JSON parse failed: {failure.reason}",
        details={"line": failure.text, "line_index": failure.line_index},
    )
