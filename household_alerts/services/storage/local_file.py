"""
Local File Storage Implementation

Persists the notification collection as a JSON document on the device,
under a fixed namespace:

    {storage_dir}/{namespace}.json
    {"notifications": [{"id": ..., "createdAt": ..., ...}, ...]}

Keys are camelCase, the same shape the host application keeps in its local
key-value store, so collections can move between the two.

TRADEOFFS:
- Whole-file rewrite on every save (collections are small)
- Atomic replace via a temporary file, so a crash never leaves half a file
"""

import json
import os
from pathlib import Path
from typing import Optional

from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from household_alerts.config import get_settings
from household_alerts.models.notification import Notification
from household_alerts.services.storage.interface import (
    CorruptDataError,
    NotificationStorageInterface,
    StorageError,
)


_io_retry = retry(
    retry=retry_if_exception_type(OSError),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.1, min=0.1, max=1),
    reraise=True,
)


class LocalFileNotificationStorage(NotificationStorageInterface):
    """
    JSON file backend.

    Transient OS errors (locked file, busy disk) are retried; anything left
    after the last attempt surfaces as StorageError.
    """

    def __init__(
        self,
        path: Optional[Path] = None,
        namespace: Optional[str] = None,
        storage_dir: Optional[str] = None,
    ):
        if path is None:
            settings = get_settings().engine
            directory = Path(storage_dir or settings.storage_dir)
            path = directory / f"{namespace or settings.storage_namespace}.json"
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    @_io_retry
    def _read_text(self) -> str:
        return self._path.read_text(encoding="utf-8")

    @_io_retry
    def _write_text(self, text: str) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(text, encoding="utf-8")
        os.replace(tmp_path, self._path)

    def load(self) -> list[Notification]:
        if not self._path.exists():
            return []

        try:
            raw = self._read_text()
        except OSError as e:
            raise StorageError(f"Could not read {self._path}: {e}") from e

        if not raw.strip():
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptDataError(f"Invalid JSON in {self._path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("notifications"), list):
            raise CorruptDataError(
                f"{self._path} does not contain a 'notifications' list"
            )

        try:
            return [Notification.model_validate(item) for item in data["notifications"]]
        except ValidationError as e:
            raise CorruptDataError(f"Invalid notification in {self._path}: {e}") from e

    def save(self, notifications: list[Notification]) -> None:
        payload = {
            "notifications": [n.to_storage_dict() for n in notifications],
        }
        text = json.dumps(payload, ensure_ascii=False, indent=2)
        try:
            self._write_text(text)
        except OSError as e:
            raise StorageError(f"Could not write {self._path}: {e}") from e
