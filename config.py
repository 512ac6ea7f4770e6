#!/usr/bin/env python3
"""
Configuration Module
====================
Loads and validates configuration settings for the event log validator.
"""

import os

from pydantic import BaseModel, Field
from dotenv import load_dotenv


# Load .env file if present
load_dotenv()


_TRUE_VALUES = ("1", "true", "yes", "on")


class ValidatorSettings(BaseModel):
    """Event log validation settings."""
    log_extension: str = Field(default=".jsonl")
    check_ingestion_order: bool = Field(default=False)
    reject_cyclic_schema: bool = Field(default=False)
    max_workers: int = Field(default=4, ge=1)


class ReportSettings(BaseModel):
    """Text report settings."""
    top_events: int = Field(default=10, ge=1)
    max_warnings: int = Field(default=10, ge=0)


class LoggingSettings(BaseModel):
    """Logging settings."""
    level: str = Field(default="INFO")


class Settings(BaseModel):
    """Complete application settings."""
    validator: ValidatorSettings = Field(default_factory=ValidatorSettings)
    report: ReportSettings = Field(default_factory=ReportSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUE_VALUES


def load_settings() -> Settings:
    """
    Load settings from environment variables and defaults.

    Environment variables:
        EVENTLOG_EXTENSION: File extension of event log files in a directory
        EVENTLOG_CHECK_INGESTION_ORDER: Also check timestamps in logged order
        EVENTLOG_REJECT_CYCLES: Refuse taxonomies with dependency cycles
        EVENTLOG_MAX_WORKERS: Thread pool size for directory validation
        REPORT_TOP_EVENTS: Number of event types listed in the report
        REPORT_MAX_WARNINGS: Number of warnings listed in the report
        LOG_LEVEL: Logging level name

    Returns:
        Settings object with all configuration
    """
    validator = ValidatorSettings(
        log_extension=os.getenv("EVENTLOG_EXTENSION", ".jsonl"),
        check_ingestion_order=_env_flag("EVENTLOG_CHECK_INGESTION_ORDER"),
        reject_cyclic_schema=_env_flag("EVENTLOG_REJECT_CYCLES"),
        max_workers=int(os.getenv("EVENTLOG_MAX_WORKERS", "4")),
    )

    report = ReportSettings(
        top_events=int(os.getenv("REPORT_TOP_EVENTS", "10")),
        max_warnings=int(os.getenv("REPORT_MAX_WARNINGS", "10")),
    )

    logging_settings = LoggingSettings(
        level=os.getenv("LOG_LEVEL", "INFO"),
    )

    return Settings(
        validator=validator,
        report=report,
        logging=logging_settings,
    )
