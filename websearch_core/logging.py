# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


import logging
import uuid
from typing import Any

from websearch_core.config import settings


def get_logger(logger_name: str) -> logging.Logger:
    logger = logging.getLogger(logger_name)
    logger.setLevel(settings.log_level)
    return logger


def get_logger_with_prefix(logger_name: str, component: str, session_id: str | None = None) -> logging.LoggerAdapter:
    """Logger whose messages are prefixed with `[component:session]` so concurrent searches can be told apart."""
    logger = logging.getLogger(logger_name)
    logger.setLevel(settings.log_level)
    return LogContextAdapter(logger, {"component": component, "session_id": session_id or new_session_id()})


def new_session_id() -> str:
    return uuid.uuid4().hex[:8]


class LogContextAdapter(logging.LoggerAdapter):
    def process(self, msg: Any, kwargs: Any) -> tuple[str, Any]:
        return (f"[{self.extra['component']}:{self.extra['session_id']}] {msg}", kwargs)  # type: ignore
