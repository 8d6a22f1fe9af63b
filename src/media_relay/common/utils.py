import logging
import os
from typing import Any, Dict, Optional

import yaml
from aiogram.exceptions import TelegramBadRequest, TelegramNetworkError
from aiogram.types import User
from aiohttp import ClientError
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

SEND_ATTEMPTS = 4

# Transient failures worth another attempt
RETRYABLE_ERRORS = (
    TelegramNetworkError,
    ClientError,
    ConnectionError,
    TimeoutError,
)

# Telegram rejected the request itself (bad file id, chat not found, ...)
PERMANENT_ERRORS = (TelegramBadRequest,)


def _log_retry(retry_state) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.info(
        f"Retryable error on attempt {retry_state.attempt_number}/{SEND_ATTEMPTS}: "
        f"{error or 'Unknown error'}. Retrying..."
    )


retry_on_network_error = retry(
    stop=stop_after_attempt(SEND_ATTEMPTS),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=10),
    retry=retry_if_exception_type(RETRYABLE_ERRORS),
    reraise=True,
    before_sleep=_log_retry,
)


def get_config_path() -> str:
    return os.getenv("CONFIG_PATH", "config.yaml")


def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """Load the YAML configuration file (``CONFIG_PATH`` or ``config.yaml``)."""
    with open(path or get_config_path(), "r", encoding="utf-8") as f:
        config = yaml.safe_load(f) or {}
    logger.debug("Configuration loaded successfully")
    return config


def remove_lines_to_fit_len(text: str, max_len: int) -> str:
    """Drop lines from the middle of ``text`` until it fits into ``max_len``."""
    lines = text.split("\n")

    while len(text) > max_len - len("...\n") and len(lines) > 2:
        half = len(lines) // 2
        text = "\n".join(lines[:half] + ["..."] + lines[half + 1 :])
        lines = lines[:half] + lines[half + 1 :]

    if len(text) > max_len:
        text = text[: max_len - len("...")] + "..."

    return text


def format_user_display(user: Optional[User]) -> str:
    """Render a sender as ``@username First Last`` for log lines."""
    if user is None:
        return "unknown user"

    parts = []
    if user.username:
        parts.append(f"@{user.username}")
    name = " ".join(part for part in (user.first_name, user.last_name) if part)
    if name:
        parts.append(name)
    return " ".join(parts) or str(user.id)
