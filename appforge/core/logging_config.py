"""
AppForge - Centralized Logging Configuration
Plain text in development, one JSON object per line in production.
Every record carries the run id and project name of the generation it belongs to.
"""

import logging
import sys
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from logging.handlers import RotatingFileHandler
from contextvars import ContextVar

from appforge.core.config import settings


run_id_var: ContextVar[str] = ContextVar('run_id', default='')
project_name_var: ContextVar[str] = ContextVar('project_name', default='')

# Record attributes already emitted as fixed JSON keys or meaningless there
_STANDARD_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {'message', 'asctime'}


def set_run_id(run_id: str) -> None:
    run_id_var.set(run_id)


def set_project_name(project_name: str) -> None:
    project_name_var.set(project_name)


def generate_run_id() -> str:
    """Short unique id for a generation run"""
    return uuid.uuid4().hex[:12]


class RunContextFilter(logging.Filter):
    """Stamps run_id / project_name from the current context onto each record"""

    def filter(self, record: logging.LogRecord) -> bool:
        record.run_id = run_id_var.get() or '-'
        record.project_name = project_name_var.get() or '-'
        return True


class JSONFormatter(logging.Formatter):
    """Structured output for log aggregation in production"""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # run context and anything passed through extra=
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and value != '-':
                log_data[key] = value

        return json.dumps(log_data, default=str)


class AppForgeLogger(logging.Logger):
    """Logger with the structured events AppForge emits"""

    def log_request(self, method: str, path: str, status_code: int, duration_ms: float) -> None:
        self.info(
            f"HTTP {method} {path} - {status_code} ({duration_ms:.2f}ms)",
            extra={"event_type": "http_request", "http_status": status_code, "duration_ms": duration_ms},
        )

    def log_agent_event(self, agent_name: str, event: str, tokens_used: int = 0, **kwargs) -> None:
        """AI gateway calls and orchestrator milestones"""
        self.info(
            f"Agent {agent_name}: {event}" + (f" (tokens: {tokens_used})" if tokens_used else ""),
            extra={"event_type": "agent", "agent_name": agent_name, "tokens_used": tokens_used, **kwargs},
        )

    def log_error_with_context(self, error: BaseException, context: str) -> None:
        self.error(
            f"Error in {context}: {type(error).__name__}: {error}",
            exc_info=error,
            extra={"event_type": "error", "error_type": type(error).__name__},
        )

    def log_performance(self, operation: str, duration_ms: float, threshold_ms: float = 1000, **kwargs) -> None:
        """Debug below the threshold, warning above it"""
        slow = duration_ms > threshold_ms
        self.log(
            logging.WARNING if slow else logging.DEBUG,
            f"Performance: {operation} took {duration_ms:.2f}ms" + (f" (threshold: {threshold_ms}ms)" if slow else ""),
            extra={"event_type": "performance", "duration_ms": duration_ms, **kwargs},
        )


def setup_logging() -> AppForgeLogger:
    """Configure the "appforge" logger for the current environment"""
    logging.setLoggerClass(AppForgeLogger)

    logger = logging.getLogger("appforge")
    logger.__class__ = AppForgeLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
    logger.propagate = False
    logger.handlers.clear()
    logger.filters.clear()
    logger.addFilter(RunContextFilter())

    is_production = settings.ENVIRONMENT == "production"

    console_handler = logging.StreamHandler(sys.stderr)
    if is_production:
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(JSONFormatter())
        file_formatter: logging.Formatter = JSONFormatter()
    else:
        console_handler.setLevel(logging.DEBUG if settings.DEBUG else logging.WARNING)
        console_handler.setFormatter(logging.Formatter("%(levelname)-8s | %(message)s"))
        file_formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | [%(run_id)s] [%(project_name)s] | "
            "%(funcName)s:%(lineno)d | %(message)s"
        )
    logger.addHandler(console_handler)

    if settings.LOG_FILE:
        log_file = Path(settings.LOG_FILE)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(log_file, maxBytes=10485760, backupCount=5)  # 10MB
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    # Suppress noisy loggers
    for name in ("httpx", "httpcore", "anthropic", "uvicorn.access"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return logger


logger: AppForgeLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'set_run_id',
    'set_project_name',
    'generate_run_id',
    'AppForgeLogger',
    'JSONFormatter',
    'RunContextFilter',
]
