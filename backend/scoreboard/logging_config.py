"""
Board Logging System
====================
Structured logging for the scoreboard build.

This module provides:
- Structured JSON logging for machine-parseable outputs
- Named loggers for pipeline stages and scaling decisions
- Optional JSONL log files organized by run name

Usage:
    from scoreboard.logging_config import get_board_logger, log_rater_scaled

    logger = get_board_logger("pipeline")
    logger.info("Loaded catalog", extra={"post_count": 42})

    # Convenience functions
    log_rater_scaled(owner, score_count, parameters)
    log_scaling_failure(owner, dimension, error, policy)
"""

import sys
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Dict, Any, Union

from .config import get_config


# Attributes every LogRecord carries; anything else came in through extra={}
_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName', 'levelname',
    'levelno', 'lineno', 'module', 'msecs', 'pathname', 'process',
    'processName', 'relativeCreated', 'stack_info', 'exc_info', 'exc_text',
    'thread', 'threadName', 'taskName', 'message', 'context',
))


# =============================================================================
# CUSTOM FORMATTERS
# =============================================================================

class StructuredFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.

    Outputs log records as JSON objects with consistent structure:
    {
        "timestamp": "2024-01-15T10:30:00.123456",
        "level": "INFO",
        "logger": "board.scaling",
        "message": "Scaled rater alice",
        "context": {...}
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, 'context') and record.context:
            log_data['context'] = record.context

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable formatter for console output.

    Format: [LEVEL] logger: message (key=value, ...)
    """

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__()
        self.use_colors = use_colors and sys.stdout.isatty()

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        if self.use_colors and level in self.COLORS:
            level = f"{self.COLORS[level]}{level}{self.RESET}"

        msg = f"[{level}] {record.name}: {record.getMessage()}"

        extras = []
        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS:
                continue
            if isinstance(value, (str, int, float, bool)):
                extras.append(f"{key}={value}")
            elif isinstance(value, dict) and len(value) < 4:
                extras.append(f"{key}={value}")

        if extras:
            msg += f" ({', '.join(extras)})"

        if record.exc_info:
            msg += "\n" + self.formatException(record.exc_info)

        return msg


# =============================================================================
# LOGGER FACTORY
# =============================================================================

_loggers: Dict[str, logging.Logger] = {}
_initialized: bool = False


def _setup_root_logger():
    """Configure the root logger with console handler."""
    global _initialized
    if _initialized:
        return

    config = get_config()
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.logging.log_level, logging.INFO))

    root_logger.handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ConsoleFormatter())
    root_logger.addHandler(console_handler)

    _initialized = True


def get_board_logger(
    name: str,
    log_to_file: Optional[bool] = None,
    experiment_name: Optional[str] = None
) -> logging.Logger:
    """
    Get or create a board logger.

    Args:
        name: Logger name (e.g., "pipeline", "scaling", "api", "cli")
        log_to_file: Whether to write JSONL logs; defaults to config.logging.log_to_file
        experiment_name: Optional run name for file organization

    Returns:
        Configured logger instance
    """
    _setup_root_logger()

    full_name = f"board.{name}"

    if full_name in _loggers:
        return _loggers[full_name]

    config = get_config()
    logger = logging.getLogger(full_name)
    logger.setLevel(getattr(logging, config.logging.log_level, logging.INFO))
    logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(ConsoleFormatter())
    logger.addHandler(console_handler)

    if log_to_file is None:
        log_to_file = config.logging.log_to_file

    if log_to_file:
        log_file = get_log_path(experiment_name or config.logging.experiment_name, name)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
        file_handler.setFormatter(StructuredFormatter())
        logger.addHandler(file_handler)

    _loggers[full_name] = logger
    return logger


def get_pipeline_logger(run_id: Optional[str] = None) -> Union[logging.Logger, logging.LoggerAdapter]:
    """Get a logger for pipeline execution."""
    logger = get_board_logger("pipeline")
    if run_id:
        logger = logging.LoggerAdapter(logger, {'run_id': run_id})
    return logger


def get_scaling_logger() -> logging.Logger:
    """Get a logger for per-rater scaling decisions."""
    return get_board_logger("scaling")


# =============================================================================
# CONVENIENCE LOGGING FUNCTIONS
# =============================================================================

def log_rater_scaled(
    owner: str,
    score_count: int,
    parameters: Dict[str, Any],
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log a successful normalization of one rater.

    Args:
        owner: Rater name
        score_count: Number of scores the rater submitted
        parameters: Per-dimension search parameter (None when degenerate)
        logger: Optional logger override
    """
    config = get_config()
    if not config.logging.log_scaling:
        return

    log = logger or get_scaling_logger()
    log.info(
        f"Scaled rater {owner} ({score_count} scores)",
        extra={
            'owner': owner,
            'score_count': score_count,
            'parameters': parameters,
        }
    )


def log_scaling_failure(
    owner: str,
    dimension: Optional[str],
    error: float,
    policy: str,
    logger: Optional[logging.Logger] = None
) -> None:
    """
    Log a rater whose scores could not be normalized.

    Args:
        owner: Rater name
        dimension: Dimension whose search failed
        error: Final deviation from the target moment
        policy: Failure policy applied (abort, drop, raw)
        logger: Optional logger override
    """
    log = logger or get_scaling_logger()
    log.warning(
        f"Scaling failed for rater {owner} on {dimension}: error {error:.6f}, policy={policy}",
        extra={
            'owner': owner,
            'dimension': dimension,
            'scaling_error': error,
            'policy': policy,
            'event': 'scaling_failure',
        }
    )


def log_stage_start(
    stage_name: str,
    run_id: str,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log the start of a pipeline stage."""
    log = logger or get_pipeline_logger(run_id)
    log.info(
        f"Starting stage: {stage_name}",
        extra={
            'stage_name': stage_name,
            'event': 'stage_start',
        }
    )


def log_stage_complete(
    stage_name: str,
    run_id: str,
    duration_seconds: float,
    summary: Optional[str] = None,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log the completion of a pipeline stage."""
    log = logger or get_pipeline_logger(run_id)
    log.info(
        f"Completed stage: {stage_name} ({duration_seconds:.3f}s): {summary or 'OK'}",
        extra={
            'stage_name': stage_name,
            'event': 'stage_complete',
            'duration_seconds': duration_seconds,
        }
    )


def log_stage_error(
    stage_name: str,
    run_id: str,
    error: str,
    duration_seconds: float,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log a pipeline stage error."""
    log = logger or get_pipeline_logger(run_id)
    log.error(
        f"Stage failed: {stage_name}: {error}",
        extra={
            'stage_name': stage_name,
            'event': 'stage_error',
            'error': error,
            'duration_seconds': duration_seconds,
        }
    )


# =============================================================================
# LOG FILE UTILITIES
# =============================================================================

def get_log_path(experiment_name: str, log_type: str = "pipeline") -> Path:
    """Get the JSONL log file path for a run."""
    config = get_config()
    timestamp = datetime.now().strftime("%Y%m%d")
    return config.paths.logs / log_type / f"{experiment_name}_{timestamp}.jsonl"


def read_log_file(log_path: Union[str, Path]) -> list:
    """
    Read a JSONL log file and return list of log entries.

    Lines that are not valid JSON are skipped.
    """
    entries = []
    with open(log_path, 'r', encoding='utf-8') as f:
        for line in f:
            line = line.strip()
            if line:
                try:
                    entries.append(json.loads(line))
                except json.JSONDecodeError:
                    continue
    return entries
