"""
Logging setup for the allocation engine.

Module loggers attach run context through ``extra=``; the Datadog handler
forwards those fields as tags.
"""

import json
import logging
import os
import sys
from typing import Iterable, List, Optional

import requests

from .settings import Settings, get_settings

# US1 site (https://app.datadoghq.com)
DATADOG_LOG_URL = "https://http-intake.logs.datadoghq.com/v1/input"

# Extra fields forwarded as tags
TAGGED_FIELDS = ("run_id", "project_id", "role_id", "agent_id", "path_id", "user_id")

# ONLY exclude very noisy internals
EXCLUDED_LOGGERS = {
    "urllib3",
    "asyncio",
}


class DatadogLogHandler(logging.Handler):
    def __init__(
        self,
        api_key: str,
        service: str,
        env: str = "development",
        include_loggers: Optional[Iterable[str]] = None,
        url: str = DATADOG_LOG_URL,
    ):
        super().__init__()
        self.api_key = api_key
        self.service = service
        self.env = env
        self.url = url
        self.include_loggers: Optional[List[str]] = (
            [prefix.strip() for prefix in include_loggers if prefix.strip()]
            if include_loggers
            else None
        )
        self.setFormatter(logging.Formatter("%(message)s"))

    def should_log(self, record: logging.LogRecord) -> bool:
        """
        Decide whether to send this log to Datadog.
        """
        logger_name = record.name

        # Allowlist mode (if configured)
        if self.include_loggers:
            return any(logger_name.startswith(prefix) for prefix in self.include_loggers)

        return not any(logger_name.startswith(excluded) for excluded in EXCLUDED_LOGGERS)

    def build_payload(self, record: logging.LogRecord) -> dict:
        payload = {
            "message": record.getMessage(),
            "ddsource": "python",
            "service": self.service,
            "hostname": os.getenv("HOSTNAME"),
            "status": record.levelname.lower(),
            "logger": record.name,
        }

        tags = [f"env:{self.env}", f"service:{self.service}"]
        for name in TAGGED_FIELDS:
            value = getattr(record, name, None)
            if value is not None:
                payload[name] = value
                tags.append(f"{name}:{value}")
        payload["ddtags"] = ",".join(tags)

        if record.exc_info:
            payload["error.kind"] = record.exc_info[0].__name__
            payload["error.message"] = str(record.exc_info[1])
        return payload

    def emit(self, record: logging.LogRecord):
        try:
            if not self.should_log(record):
                return

            requests.post(
                self.url,
                headers={
                    "Content-Type": "application/json",
                    "DD-API-KEY": self.api_key,
                },
                data=json.dumps(self.build_payload(record), default=str),
                timeout=2,
            )
        except Exception:
            # Never break a run because of logging
            pass


def setup_logging(settings: Optional[Settings] = None, verbose: bool = False) -> None:
    """
    Configure the root logger from settings.

    Args:
        settings: Settings to use (defaults to the cached settings)
        verbose: Force DEBUG level
    """
    settings = settings or get_settings()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if settings.datadog_api_key:
        handlers.append(
            DatadogLogHandler(
                api_key=settings.datadog_api_key,
                service=settings.datadog_service,
                env=settings.environment,
            )
        )

    logging.basicConfig(
        level=level,
        format=settings.log_format,
        handlers=handlers,
        force=True,
    )
