"""Key/value JSON document storage on the local filesystem.

Each key is kept as its own document, `<directory>/<key>.json`.
"""

import json
import os
import shutil
import tempfile
from collections.abc import Sequence
from datetime import datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any

import structlog

logger = structlog.get_logger(__name__)


def _encode(value: Any) -> Any:
    """JSON fallback encoder for datetimes, Decimals and enums."""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, Enum):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _parse_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str):
        raise ValueError(f"Expected a timestamp string, got {type(value).__name__}")
    return datetime.fromisoformat(value)


def revive_dates(value: Any, date_fields: Sequence[str]) -> Any:
    """Parse the named fields of each record in a list back into datetimes.

    Values that are not lists of dicts are returned unchanged. Missing or
    empty fields are left as they are.

    Raises:
        ValueError: If a present field is not a valid ISO 8601 timestamp.
    """
    if not date_fields or not isinstance(value, list):
        return value

    revived = []
    for item in value:
        if isinstance(item, dict):
            item = dict(item)
            for field in date_fields:
                if item.get(field):
                    item[field] = _parse_date(item[field])
        revived.append(item)
    return revived


class JsonStorage:
    """Named JSON documents in a directory."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def exists(self, key: str) -> bool:
        return self.path_for(key).exists()

    def load(self, key: str, default: Any, date_fields: Sequence[str] = ()) -> Any:
        """Load a stored document.

        Args:
            key: Document name.
            default: Value returned when the document is absent or unreadable.
            date_fields: Record fields to parse back into datetimes when the
                document is a list of records.

        Returns:
            The decoded document, or `default`. Never raises.
        """
        path = self.path_for(key)
        if not path.exists():
            return default

        try:
            text = path.read_text(encoding="utf-8")
            if not text.strip():
                return default
            parsed = json.loads(text, parse_float=Decimal)
            return revive_dates(parsed, date_fields)
        except (OSError, ValueError, TypeError) as e:
            logger.warning("storage_load_failed", key=key, path=str(path), error=str(e))
            return default

    def save(self, key: str, value: Any) -> None:
        """Serialize `value` and store it under `key`.

        The document is replaced atomically.

        Raises:
            OSError: If the document cannot be written. Not retried.
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(value, default=_encode, ensure_ascii=False, indent=2)

        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.path_for(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug("storage_saved", key=key, bytes=len(payload))

    def backup(self, key: str) -> Path | None:
        """Copy a stored document aside as `<key>.<timestamp>.bak`.

        A copy identical to an earlier backup of the same key is not made
        again; the earlier one is returned instead.

        Returns:
            Path of the backup, or None if the document is absent or the copy
            failed. Never raises.
        """
        path = self.path_for(key)
        if not path.exists():
            return None

        try:
            content = path.read_bytes()
            for existing in sorted(self.directory.glob(f"{key}.*.bak")):
                if existing.read_bytes() == content:
                    return existing

            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            target = self.directory / f"{key}.{timestamp}.bak"
            shutil.copy2(path, target)
        except OSError as e:
            logger.error("storage_backup_failed", key=key, path=str(path), error=str(e))
            return None

        logger.warning("storage_backed_up", key=key, path=str(target))
        return target

    def remove(self, key: str) -> None:
        """Delete a stored document. Absent documents are ignored."""
        self.path_for(key).unlink(missing_ok=True)
        logger.debug("storage_removed", key=key)
