"""
Structured logging for the draft & publication core

structlog on top of the standard library root logger. Events carry whatever
is bound through ``structlog.contextvars`` (the coordinator binds the
operation and draft id for the length of a publish, the form session binds
its draft and employer on submit). Two named loggers record workflow
timings and whole-form validation results.
"""

import sys
import logging
from typing import Dict, Any, List, Optional
from datetime import datetime, timezone

import structlog
from structlog.typing import FilteringBoundLogger, Processor

from config.settings import get_settings

SERVICE_NAME = "job-draft-core"


def add_service_info(
    logger: FilteringBoundLogger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """Stamp the service name, version and a UTC timestamp"""
    event_dict.setdefault("service", SERVICE_NAME)
    event_dict.setdefault("version", get_settings().version)
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _renderer(environment: str, structured: bool) -> List[Processor]:
    if environment == "development" and structured:
        return [structlog.dev.set_exc_info, structlog.dev.ConsoleRenderer()]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def setup_logging(
    level: str = "INFO",
    environment: str = "development",
    log_file: Optional[str] = None,
    structured: bool = True
) -> FilteringBoundLogger:
    """
    Configure structlog and the standard library root logger.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        environment: development renders for the console, anything else as JSON
        log_file: Optional file that receives the same output as stdout
        structured: Use the console renderer in development

    Returns:
        A configured structlog logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_service_info,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            *_renderer(environment, structured),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(format="%(message)s", level=log_level, handlers=handlers)

    return structlog.get_logger()


def get_logger(name: str = __name__) -> FilteringBoundLogger:
    """Return a named structlog logger"""
    return structlog.get_logger(name)


workflow_logger = get_logger("workflows")
validation_logger = get_logger("validation")


def log_performance(
    operation: str,
    start_time: datetime,
    end_time: Optional[datetime] = None,
    **additional_data
) -> None:
    """Log how long ``operation`` took (``end_time`` defaults to now)"""
    if end_time is None:
        end_time = datetime.now()

    workflow_logger.debug(
        "operation timing",
        operation=operation,
        duration_seconds=(end_time - start_time).total_seconds(),
        **additional_data
    )


def log_validation_result(
    scope: str,
    is_valid: bool,
    errors: Dict[str, str],
    **additional_data
) -> None:
    """
    Log the result of a whole-form validation.

    Args:
        scope: What was validated (a draft id)
        is_valid: Whether validation passed
        errors: field -> message map of failures
        **additional_data: Extra fields for the event
    """
    validation_logger.info(
        "validation result",
        scope=scope,
        is_valid=is_valid,
        error_count=len(errors),
        errors=errors,
        **additional_data
    )


def configure_logging_from_env() -> FilteringBoundLogger:
    """
    Configure logging from the LOG_* settings.

    Environment Variables:
        LOG_LEVEL: Log level (default: INFO)
        LOG_ENVIRONMENT: development / staging / production
        LOG_FILE_PATH: Log file path (optional)
        LOG_STRUCTURED: Console renderer in development (default: true)
    """
    log_settings = get_settings().logging

    return setup_logging(
        level=log_settings.level,
        environment=log_settings.environment,
        log_file=log_settings.file_path,
        structured=log_settings.structured
    )


logger = configure_logging_from_env()
