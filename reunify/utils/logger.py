"""
Centralized Logging and Payload Redaction
=========================================

This module provides the logging infrastructure for the Reunify application.
It centralizes all diagnostic output while making sure credentials and bulky
media payloads never reach the log files.

Key Features:
-------------
- Credential Masking: Redaction of Gemini API keys, bearer tokens and other
  secrets using regex and recursive dictionary filtering.
- Payload Collapsing: Base64 data URLs (photos, generated images, voice
  recordings) are reduced to ``data:<mime>;base64,<N chars>``.
- API Instrumentation: A decorator that logs calls to the Gemini client with
  timing and status.

Dependencies:
-------------
- logging: Standard library for output routing.
- re: Used for pattern-based masking of sensitive strings.
"""

import json
import logging
import re
import sys
import time
from functools import wraps
from pathlib import Path
from typing import Any, Callable, Dict, Optional


# Project root is 3 levels up from this file: utils -> reunify -> project root
PROJECT_ROOT = Path(__file__).parent.parent.parent
LOG_DIR = PROJECT_ROOT / "logs"
LOG_FILE_NAME = "reunify.log"

# Dictionary keys whose values are always masked
SENSITIVE_FIELDS = {
    'password', 'secret', 'token', 'api_key', 'apikey',
    'auth', 'authorization', 'credentials', 'x-goog-api-key'
}

# Base64 data URLs are collapsed before any other pattern runs
DATA_URL_PATTERN = re.compile(r'data:([\w/+.-]+);base64,([A-Za-z0-9+/=_-]+)')

SENSITIVE_PATTERNS = [
    (re.compile(r'(AIza[0-9A-Za-z\-_]{30,})'), lambda m: f"***{m.group(1)[-4:]}"),  # Google API keys
    (re.compile(r'(Bearer\s+[a-zA-Z0-9\-._~+/]+=*)'), 'Bearer ***'),
    (re.compile(r'(?<![A-Za-z0-9])([a-zA-Z0-9]{40,})(?![A-Za-z0-9])'), lambda m: f"***{m.group(1)[-4:]}"),
]


def _collapse_data_url(match: re.Match) -> str:
    return f"data:{match.group(1)};base64,<{len(match.group(2))} chars>"


def mask_string(text: str) -> str:
    """Collapse data URLs and mask credentials inside a free-form string."""
    text = DATA_URL_PATTERN.sub(_collapse_data_url, text)
    for pattern, replacement in SENSITIVE_PATTERNS:
        text = pattern.sub(replacement, text)
    return text


class SensitiveDataFilter(logging.Filter):
    """
    Filtering hook attached to every handler.

    Scans log records for API keys and base64 payloads and replaces them
    before the record is persisted or displayed.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = mask_string(record.msg)

        if record.args:
            if isinstance(record.args, dict):
                record.args = mask_sensitive_data(record.args)
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    mask_sensitive_data(arg) if isinstance(arg, (dict, list, str)) else arg
                    for arg in record.args
                )

        return True


def mask_sensitive_data(data: Any, mask_value: str = "***") -> Any:
    """
    Recursively redact sensitive fields from nested structures.

    Keys matching ``SENSITIVE_FIELDS`` are masked (keys and tokens keep their
    last 4 characters); every string value is passed through ``mask_string``
    so inline image and audio payloads are collapsed.

    Args:
        data: The input data structure (dict, list, str, etc.) to be scrubbed.
        mask_value: The string used to replace sensitive content.

    Returns:
        A copy of the input data with sensitive values masked.
    """
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            key_lower = str(key).lower()
            if any(sensitive in key_lower for sensitive in SENSITIVE_FIELDS):
                if ('key' in key_lower or 'token' in key_lower) and isinstance(value, str) and len(value) > 4:
                    masked[key] = f"{mask_value}{value[-4:]}"
                else:
                    masked[key] = mask_value
            elif key_lower == "data" and isinstance(value, str):
                # inline_data payloads carry raw base64 without a data: prefix
                masked[key] = f"<{len(value)} chars>"
            else:
                masked[key] = mask_sensitive_data(value, mask_value)
        return masked

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask_value) for item in data)

    if isinstance(data, str):
        return mask_string(data)

    return data


def setup_logging(
    log_level: int = logging.DEBUG,
    console_level: int = logging.INFO,
    log_format: Optional[str] = None
) -> Path:
    """
    Initialize application-wide logging.

    - Root Logger: Set to DEBUG to capture all events.
    - File Handler: Persists DEBUG logs to 'logs/reunify.log' (overwritten each run).
    - Console Handler: Displays INFO logs on stdout.

    Args:
        log_level: Granularity for the persistent log file.
        console_level: Granularity for the terminal output.
        log_format: Optional custom formatting string.

    Returns:
        Path: The absolute path to the log file.
    """
    LOG_DIR.mkdir(parents=True, exist_ok=True)
    log_file = LOG_DIR / LOG_FILE_NAME

    if log_format is None:
        log_format = (
            '%(asctime)s - %(name)s - %(levelname)s - '
            '[%(filename)s:%(lineno)d] - %(message)s'
        )
    formatter = logging.Formatter(log_format, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    file_handler = logging.FileHandler(log_file, mode='w', encoding='utf-8')
    file_handler.setLevel(log_level)
    file_handler.setFormatter(formatter)
    file_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(file_handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(console_handler)

    # urllib3 connection chatter is noise at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.INFO)

    logging.info("=" * 80)
    logging.info(f"Reunify Started - Log file: {log_file}")
    logging.info("=" * 80)

    return log_file


def shutdown_logging():
    """Flush and close all handlers. Call before application exit."""
    logging.info("Shutting down logging system...")
    for handler in list(logging.root.handlers):
        try:
            handler.flush()
            handler.close()
        except Exception:
            pass
    logging.root.handlers.clear()


def log_config(config_name: str, config_data: Dict[str, Any], logger: Optional[logging.Logger] = None):
    """
    Log configuration settings with automatic sensitive data masking.

    Args:
        config_name: Name of the configuration being logged
        config_data: Dictionary of configuration settings
        logger: Optional logger instance
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    masked_config = mask_sensitive_data(config_data)
    logger.info(f"Configuration: {config_name}")
    logger.debug(f"{config_name} details: {json.dumps(masked_config, indent=2, default=str)}")


def log_api_call(func: Optional[Callable] = None, *, api_name: str = "API"):
    """
    Decorator for instrumenting outbound API methods.

    Logs the call, its masked keyword arguments, success or failure and the
    elapsed time. Exceptions are logged and re-raised unchanged.

    Args:
        func: The API function to be instrumented.
        api_name: Context label for the log entry (e.g., 'Gemini').
    """
    def decorator(f: Callable) -> Callable:
        @wraps(f)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(f.__module__)
            func_name = f.__name__

            logger.info(f"{api_name} call: {func_name}")
            logger.debug(f"{api_name} {func_name} - kwargs: {mask_sensitive_data(kwargs)}")

            start_time = time.time()
            error_occurred = False
            try:
                return f(*args, **kwargs)
            except Exception as e:
                error_occurred = True
                logger.error(f"{api_name} {func_name} failed: {type(e).__name__}: {e}")
                raise
            finally:
                elapsed = time.time() - start_time
                status = "FAILED" if error_occurred else "SUCCESS"
                logger.info(
                    f"{api_name} {func_name} completed - Status: {status}, "
                    f"Duration: {elapsed:.3f}s"
                )

        return wrapper

    if func is None:
        return decorator
    return decorator(func)
