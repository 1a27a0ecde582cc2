"""Shared dependencies: StorageClient and structured logger."""

import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from blocknotes.config import get_settings

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RECORD_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


class JsonFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "message": record.getMessage(),
            "module": record.module,
        }
        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS:
                data[key] = value
        if record.exc_info:
            data["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(data, default=str)


def setup_logging() -> logging.Logger:
    """Configure and return the application logger."""
    settings = get_settings()
    logger = logging.getLogger("blocknotes")
    logger.setLevel(getattr(logging, settings.log_level.upper()))
    logger.handlers.clear()
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    logger.addHandler(handler)
    return logger


logger = setup_logging()


class StorageError(Exception):
    """Base exception for storage operations."""

    pass


class StorageNotFoundError(StorageError):
    """Raised when a key has no stored value."""

    pass


class StorageSecurityError(StorageError):
    """Raised when a key would resolve outside the storage root."""

    pass


@dataclass
class StorageClient:
    """Durable key-value store backed by one JSON file per key."""

    root: Path

    def _validate_key(self, key: str) -> Path:
        """Validate a key and resolve it to a file inside the storage root.

        Args:
            key: Storage key (letters, digits, ``_``, ``.`` and ``-`` only)

        Returns:
            Resolved absolute path of the backing file

        Raises:
            StorageSecurityError: If the key is malformed or escapes the root
        """
        if not _KEY_RE.match(key) or key in {".", ".."}:
            raise StorageSecurityError(f"Invalid storage key: {key!r}")
        full_path = (self.root / f"{key}.json").resolve()
        if not full_path.is_relative_to(self.root.resolve()):
            raise StorageSecurityError(f"Path traversal detected: {key}")
        return full_path

    def read(self, key: str) -> str:
        """Read the value stored under a key.

        Raises:
            StorageNotFoundError: If nothing is stored under the key
            StorageError: If the stored bytes are not valid UTF-8
        """
        full_path = self._validate_key(key)
        if not full_path.exists():
            raise StorageNotFoundError(f"Key not found: {key}")
        try:
            return full_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StorageError(f"Value under {key} is not valid UTF-8: {e}") from e

    def write(self, key: str, data: str) -> None:
        """Store a value under a key, replacing any previous value atomically."""
        full_path = self._validate_key(key)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=full_path.parent, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(data)
            os.replace(tmp_name, full_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        """Remove a key.

        Raises:
            StorageNotFoundError: If nothing is stored under the key
        """
        full_path = self._validate_key(key)
        if not full_path.exists():
            raise StorageNotFoundError(f"Key not found: {key}")
        full_path.unlink()

    def exists(self, key: str) -> bool:
        """Check whether a value is stored under a key."""
        try:
            return self._validate_key(key).exists()
        except StorageSecurityError:
            return False
