"""
Centralized Logging Configuration

One root logger shared by the API, the services and uvicorn:
- Level from config.LOG_LEVEL
- Daily file rotation under logs/, kept for config.LOG_RETENTION_DAYS days
- Console output for container logs
- Masking of discount codes, credentials and customer contact data
"""

import logging
import logging.handlers
import re
from pathlib import Path
from typing import Pattern

import config

LOG_FORMAT = '%(asctime)s | %(name)-28s | %(levelname)-8s | %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Third-party loggers that would otherwise drown the pricing logs
QUIET_LOGGERS = ['aiosqlite', 'sqlalchemy.engine', 'sqlalchemy.pool', 'uvicorn.access']


class SecretMaskingFilter(logging.Filter):
    """
    Logging filter that masks sensitive data in log records.

    Promo and referral codes are bearer credentials for a discount (and for an
    influencer's commission), so raw Cookie headers must never reach the logs.
    Codes logged on purpose by the services ("Applied code SAVE10") are kept.
    """

    PATTERNS: list[tuple[Pattern, str]] = [
        # Cookie header dumps
        (re.compile(rf'({re.escape(config.PROMO_COOKIE)}|{re.escape(config.REF_COOKIE)})=([^;\s]+)'), r'\1=[REDACTED_CODE]'),

        # Credentials in connection strings and key/value dumps
        (re.compile(r'(://[^:/\s]+:)([^@\s]+)(@)'), r'\1[REDACTED_PASSWORD]\3'),
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE), r'\1[REDACTED_PASSWORD]\3'),
        (re.compile(r'((?:api[_-]?key|secret|token)["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-:.]{12,})(["\']?)', re.IGNORECASE), r'\1[REDACTED_SECRET]\3'),
        (re.compile(r'(Bearer\s+)([A-Za-z0-9_\-\.]+)', re.IGNORECASE), r'\1[REDACTED_BEARER_TOKEN]'),

        # Customer contact data (PII)
        (re.compile(r'\b([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})\b'), '[REDACTED_EMAIL]'),
        (re.compile(r'\b(\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\b'), '[REDACTED_PHONE]'),
    ]

    @classmethod
    def mask(cls, text: str) -> str:
        for pattern, replacement in cls.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        """Mask the message and string arguments in place; never drops a record."""
        if record.msg:
            record.msg = self.mask(str(record.msg))

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(self.mask(arg) if isinstance(arg, str) else arg for arg in record.args)

        return True


def _build_handler(handler: logging.Handler, level: int, mask_secrets: bool) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    handler.setLevel(level)
    if mask_secrets:
        handler.addFilter(SecretMaskingFilter())
    return handler


def setup_logging(log_dir: str | Path = "logs") -> None:
    """
    Initialize centralized logging configuration.

    Call once at startup (run.py) before the app is imported, so that
    configuration and engine setup messages are captured too. Calling it again
    replaces the handlers instead of duplicating them.

    Args:
        log_dir: Directory for storefront.log and its rotated copies
    """
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    level_name = config.LOG_LEVEL.upper()
    level = getattr(logging, level_name, logging.INFO)

    file_handler = _build_handler(
        logging.handlers.TimedRotatingFileHandler(
            filename=log_dir / "storefront.log",
            when="midnight",
            interval=1,
            backupCount=config.LOG_RETENTION_DAYS,
            encoding="utf-8"
        ),
        level,
        config.LOG_MASK_SECRETS
    )
    console_handler = _build_handler(logging.StreamHandler(), level, config.LOG_MASK_SECRETS)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    for logger_name in QUIET_LOGGERS:
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.info(
        f"[Logging] Level={level_name}, Retention={config.LOG_RETENTION_DAYS} days, "
        f"Masking={'ENABLED' if config.LOG_MASK_SECRETS else 'DISABLED'}"
    )
