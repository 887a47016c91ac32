"""Logger configuration."""

import logging
import sys
from collections.abc import Callable, Mapping
from typing import Any, TextIO

from loguru import logger
from loki_logger_handler.formatters.loguru_formatter import LoguruFormatter
from loki_logger_handler.loki_logger_handler import LokiLoggerHandler

from .config import settings

__all__ = ["config_logger"]

# Standard-library loggers of the HTTP stack routed into loguru
_HTTP_LOGGERS = ("httpx", "httpcore")

_TIME_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def config_logger() -> None:
    """Configure loguru sinks for the current environment.

    Development and testing log colored lines to stdout and everything down
    to DEBUG into a rotating file. Production logs plain lines to stderr and,
    if a Loki URL is configured, ships structured records to Loki.
    """
    is_production = settings.app_env == "production"

    _intercept_http_logging(settings.log_level if is_production else "WARNING")
    logger.remove()

    if is_production:
        _add_console_sink(sys.stderr, _production_format, colorize=False)
        if settings.loki_url:
            _add_loki_sink(settings.loki_url)
        return

    logger.add(
        settings.log_path,
        rotation=settings.rotation,
        format=_development_format,
        enqueue=True,
        backtrace=False,
        diagnose=False,
        compression="zip",
        colorize=False,
        level=logging.DEBUG,
    )
    _add_console_sink(sys.stdout, _development_format, colorize=True)


def _add_console_sink(
    stream: TextIO, fmt: Callable[[Mapping[str, Any]], str], *, colorize: bool
) -> None:
    logger.add(
        stream,
        format=fmt,
        level=settings.log_level,
        colorize=colorize,
        enqueue=True,
        backtrace=colorize,
        diagnose=colorize,
        catch=colorize,
    )


def _add_loki_sink(url: str) -> None:
    logger.add(
        LokiLoggerHandler(
            url=url,
            labels={
                "application": "datasession",
                "environment": settings.app_env,
                "version": settings.version,
            },
            timeout=5,
            enable_structured_loki_metadata=True,
            default_formatter=LoguruFormatter(),  # type: ignore[arg-type]
        ),
        serialize=True,
        enqueue=True,
        level=settings.log_level,
    )


def _intercept_http_logging(level: str) -> None:
    """Send request logs of the HTTP client through loguru."""
    handler = InterceptHandler()
    for name in _HTTP_LOGGERS:
        std_logger = logging.getLogger(name)
        std_logger.handlers = [handler]
        std_logger.setLevel(level)
        std_logger.propagate = False


class InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        """Intercepts standard logging and sends it to Loguru."""
        if not self.filter(record):
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_back and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _split_session(extra: Mapping[str, Any]) -> tuple[str | None, dict[str, str]]:
    """Pull the session ID out of the extras, it leads every line."""
    rest = {key: _escape(value) for key, value in extra.items()}
    session_id = rest.pop("sessionId", None)
    return session_id, rest


def _escape(value: object) -> str:
    # The returned line is a format template with color markup for loguru
    text = str(value).replace("{", "{{").replace("}", "}}")
    return text.replace("<", r"\<")


def _production_format(record: Mapping[str, Any]) -> str:
    """Single plain line, session first, extras as key=value pairs."""
    session_id, extra = _split_session(record["extra"])
    line = (
        f"{record['time'].strftime(_TIME_FORMAT)[:-3]} | "
        f"{record['level']:<8} | "
        f"{session_id or '-'} | "
        f"{record['name']}:{record['line']} - "
        "{message}"
    )
    if extra:
        line += " | " + " ".join(f"{k}={v}" for k, v in extra.items())
    return line + "\n{exception}"


def _development_format(record: Mapping[str, Any]) -> str:
    """Colored line with function name and highlighted extras."""
    session_id, extra = _split_session(record["extra"])
    line = (
        f"<green>{record['time'].strftime(_TIME_FORMAT)[:-3]}</green> | "
        f"<level>{record['level']:<8}</level> | "
    )
    if session_id:
        line += f"<magenta>{session_id}</magenta> | "
    line += (
        f"<cyan>{record['name']}:{record['function']}:{record['line']}</cyan> - "
        "{message}"
    )
    if extra:
        line += " | " + " ".join(
            f"<yellow>{k}</yellow>=<cyan>{v}</cyan>" for k, v in extra.items()
        )
    return line + "\n{exception}"
