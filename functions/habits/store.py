# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

"""
Document store access for habit records, backed by Firestore or process memory.

Layout:
    users/{userId}                        -> {settings, updatedAt}
    users/{userId}/months/{year}-{month}  -> {habitState, habits, stats, ...}
    users/{userId}/backups/{backupId}     -> {data, timestamp, backupId}
    shared_progress/{shareId}             -> {user, month, summary, details, sharedAt}
"""

from __future__ import annotations

import copy
import threading
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from google.api_core import exceptions
from google.cloud.firestore_v1 import SERVER_TIMESTAMP, Query

from shared.firebase_constants import (
    BACKUPS_COLLECTION,
    MONTHS_COLLECTION,
    SHARED_PROGRESS_COLLECTION,
    USERS_COLLECTION,
)

MONTH_ORDER_FIELDS = ("habitState.year", "habitState.month")


def month_key(year: int, month: int) -> str:
    """Document id of a month record. Not zero-padded."""
    return f"{year}-{month}"


class HabitStore(Protocol):
    """Interface for the document reads and writes the service performs."""

    def get_month(self, user_id: str, key: str) -> Optional[dict]:
        ...

    def merge_month(self, user_id: str, key: str, fields: dict) -> None:
        ...

    def replace_month(self, user_id: str, key: str, fields: dict) -> None:
        ...

    def list_months(self, user_id: str, limit: int) -> List[Tuple[str, dict]]:
        ...

    def create_backup(self, user_id: str, backup_id: str, fields: dict) -> None:
        ...

    def get_backup(self, user_id: str, backup_id: str) -> Optional[dict]:
        ...

    def create_share(self, share_id: str, fields: dict) -> None:
        ...

    def get_share(self, share_id: str) -> Optional[dict]:
        ...

    def merge_user_settings(self, user_id: str, fields: dict) -> None:
        ...

    def get_user(self, user_id: str) -> Optional[dict]:
        ...


class FirestoreHabitStore:
    """HabitStore over a google.cloud.firestore client."""

    def __init__(self, db):
        self.db = db

    def _user_ref(self, user_id: str):
        return self.db.collection(USERS_COLLECTION).document(user_id)

    def _month_ref(self, user_id: str, key: str):
        return self._user_ref(user_id).collection(MONTHS_COLLECTION).document(key)

    def _backup_ref(self, user_id: str, backup_id: str):
        return (
            self._user_ref(user_id).collection(BACKUPS_COLLECTION).document(backup_id)
        )

    @staticmethod
    def _read(doc_ref) -> Optional[dict]:
        snapshot = doc_ref.get()
        if not snapshot.exists:
            return None
        return snapshot.to_dict() or {}

    def get_month(self, user_id: str, key: str) -> Optional[dict]:
        return self._read(self._month_ref(user_id, key))

    def merge_month(self, user_id: str, key: str, fields: dict) -> None:
        self._month_ref(user_id, key).set(fields, merge=True)

    def replace_month(self, user_id: str, key: str, fields: dict) -> None:
        self._month_ref(user_id, key).set(fields)

    def list_months(self, user_id: str, limit: int) -> List[Tuple[str, dict]]:
        query = self._user_ref(user_id).collection(MONTHS_COLLECTION)
        for field_path in MONTH_ORDER_FIELDS:
            query = query.order_by(field_path, direction=Query.DESCENDING)
        query = query.limit(limit)
        return [(doc.id, doc.to_dict() or {}) for doc in query.stream()]

    def create_backup(self, user_id: str, backup_id: str, fields: dict) -> None:
        # create() fails if the document exists, keeping backups immutable.
        self._backup_ref(user_id, backup_id).create(fields)

    def get_backup(self, user_id: str, backup_id: str) -> Optional[dict]:
        return self._read(self._backup_ref(user_id, backup_id))

    def create_share(self, share_id: str, fields: dict) -> None:
        self.db.collection(SHARED_PROGRESS_COLLECTION).document(share_id).create(
            fields
        )

    def get_share(self, share_id: str) -> Optional[dict]:
        doc_ref = self.db.collection(SHARED_PROGRESS_COLLECTION).document(share_id)
        return self._read(doc_ref)

    def merge_user_settings(self, user_id: str, fields: dict) -> None:
        self._user_ref(user_id).set(fields, merge=True)

    def get_user(self, user_id: str) -> Optional[dict]:
        return self._read(self._user_ref(user_id))


def _deep_merge(target: dict, updates: dict) -> dict:
    """Merges nested maps the way Firestore's set(merge=True) does."""
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value)
        else:
            target[key] = value
    return target


class InMemoryHabitStore:
    """Simple in-memory document store for development and tests."""

    def __init__(self, now: Callable[[], datetime] | None = None):
        self.documents: Dict[str, dict] = {}
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._lock = threading.Lock()

    def reset(self) -> None:
        """Clear all stored documents (useful in tests)."""
        with self._lock:
            self.documents.clear()

    def _resolve(self, value):
        """Copies a value, replacing SERVER_TIMESTAMP with the current time."""
        if value is SERVER_TIMESTAMP:
            return self._now()
        if isinstance(value, dict):
            return {key: self._resolve(item) for key, item in value.items()}
        if isinstance(value, list):
            return [self._resolve(item) for item in value]
        return copy.deepcopy(value)

    def _get(self, path: str) -> Optional[dict]:
        with self._lock:
            doc = self.documents.get(path)
            return copy.deepcopy(doc) if doc is not None else None

    def _set(self, path: str, fields: dict, merge: bool = False) -> None:
        resolved = self._resolve(fields)
        with self._lock:
            if merge and path in self.documents:
                _deep_merge(self.documents[path], resolved)
            else:
                self.documents[path] = resolved

    def _create(self, path: str, fields: dict) -> None:
        resolved = self._resolve(fields)
        with self._lock:
            if path in self.documents:
                raise exceptions.AlreadyExists(f"Document already exists: {path}")
            self.documents[path] = resolved

    @staticmethod
    def _user_path(user_id: str) -> str:
        return f"{USERS_COLLECTION}/{user_id}"

    def _month_path(self, user_id: str, key: str) -> str:
        return f"{self._user_path(user_id)}/{MONTHS_COLLECTION}/{key}"

    def _backup_path(self, user_id: str, backup_id: str) -> str:
        return f"{self._user_path(user_id)}/{BACKUPS_COLLECTION}/{backup_id}"

    def get_month(self, user_id: str, key: str) -> Optional[dict]:
        return self._get(self._month_path(user_id, key))

    def merge_month(self, user_id: str, key: str, fields: dict) -> None:
        self._set(self._month_path(user_id, key), fields, merge=True)

    def replace_month(self, user_id: str, key: str, fields: dict) -> None:
        self._set(self._month_path(user_id, key), fields)

    def list_months(self, user_id: str, limit: int) -> List[Tuple[str, dict]]:
        prefix = f"{self._user_path(user_id)}/{MONTHS_COLLECTION}/"
        with self._lock:
            months = [
                (path[len(prefix):], copy.deepcopy(doc))
                for path, doc in self.documents.items()
                if path.startswith(prefix) and "/" not in path[len(prefix):]
            ]

        # Firestore leaves out documents missing an order_by field.
        def order_values(doc: dict):
            habit_state = doc.get("habitState")
            if not isinstance(habit_state, dict):
                return None
            year, month = habit_state.get("year"), habit_state.get("month")
            if year is None or month is None:
                return None
            return (year, month)

        ordered = [(key, doc) for key, doc in months if order_values(doc) is not None]
        ordered.sort(key=lambda item: order_values(item[1]), reverse=True)
        return ordered[:limit]

    def create_backup(self, user_id: str, backup_id: str, fields: dict) -> None:
        self._create(self._backup_path(user_id, backup_id), fields)

    def get_backup(self, user_id: str, backup_id: str) -> Optional[dict]:
        return self._get(self._backup_path(user_id, backup_id))

    def create_share(self, share_id: str, fields: dict) -> None:
        self._create(f"{SHARED_PROGRESS_COLLECTION}/{share_id}", fields)

    def get_share(self, share_id: str) -> Optional[dict]:
        return self._get(f"{SHARED_PROGRESS_COLLECTION}/{share_id}")

    def merge_user_settings(self, user_id: str, fields: dict) -> None:
        self._set(self._user_path(user_id), fields, merge=True)

    def get_user(self, user_id: str) -> Optional[dict]:
        return self._get(self._user_path(user_id))
