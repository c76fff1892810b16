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
Habit sync operations.

Each operation takes the verified caller, the raw callable payload and a
HabitStore, validates the payload, performs its one or two document
reads/writes and returns a JSON-serializable dict. Validation and missing
documents raise https_fn.HttpsError; store failures propagate unchanged for
the callable layer to translate.
"""

from dataclasses import asdict
from typing import Any, Optional, Type, TypeVar

from dacite import DaciteError, from_dict
from firebase_functions import https_fn, logger

from habits import analytics as habit_analytics
from habits.store import HabitStore, month_key
from habits.timestamps import (
    InvalidTimestampError,
    ServerClock,
    parse_caller_timestamp,
)
from shared.api import (
    BackupDataRequest,
    CallerIdentity,
    HistoricalDataRequest,
    MonthRequest,
    RestoreDataRequest,
    ShareProgressRequest,
    StatusResult,
    SyncHabitDataRequest,
    UpdateSettingsRequest,
    UserSettingsRequest,
)
from shared.config import get_settings
from shared.constants import BACKUP_ID_PREFIX, SHARE_ID_PREFIX
from shared.json_utils import convert_keys, to_json_safe
from shared.types import Habit, Stats
from shared.utils import get_unique_id

T = TypeVar("T")

_server_clock = ServerClock()


def _invalid_argument(message: str) -> https_fn.HttpsError:
    return https_fn.HttpsError(https_fn.FunctionsErrorCode.INVALID_ARGUMENT, message)


def _parse_request(data_class: Type[T], data: Any) -> T:
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise _invalid_argument("Request data must be an object.")
    try:
        return from_dict(
            data_class=data_class,
            data=convert_keys(data, "camel_to_snake", deep=False),
        )
    except DaciteError as e:
        raise _invalid_argument(f"Invalid request: {e}")


def _check_document_id(value: Any, name: str) -> str:
    if not isinstance(value, str) or not value or "/" in value:
        raise _invalid_argument(f"{name} must be a non-empty string without '/'.")
    return value


def _resolve_user_id(caller: CallerIdentity, user_id: Optional[str]) -> str:
    """
    Returns the user whose documents the call addresses.

    Defaults to the caller. A different userId is refused unless identity
    enforcement is turned off in settings.
    """
    if user_id is None:
        return caller.uid
    _check_document_id(user_id, "userId")
    if user_id != caller.uid and get_settings().enforce_caller_identity:
        logger.warn(f"Caller {caller.uid} attempted to access data of {user_id}")
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.PERMISSION_DENIED,
            "userId does not match the authenticated user.",
        )
    return user_id


def _coerce_int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise _invalid_argument(f"{name} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    raise _invalid_argument(f"{name} must be an integer.")


def _caller_timestamp(value: Any):
    try:
        return parse_caller_timestamp(value)
    except InvalidTimestampError as e:
        raise _invalid_argument(str(e))


def _check_month_contents(habits: list, stats: dict) -> None:
    """
    Rejects habits and stats whose known fields have the wrong type, so a
    stored month can always be read back by analytics. Unknown keys pass.
    """
    for index, habit in enumerate(habits):
        if not isinstance(habit, dict):
            raise _invalid_argument(f"habits[{index}] must be an object.")
        try:
            from_dict(
                data_class=Habit,
                data=convert_keys(habit, "camel_to_snake", deep=False),
            )
        except DaciteError as e:
            raise _invalid_argument(f"Invalid habits[{index}]: {e}")
    try:
        from_dict(
            data_class=Stats, data=convert_keys(stats, "camel_to_snake", deep=False)
        )
    except DaciteError as e:
        raise _invalid_argument(f"Invalid stats: {e}")


def _month_not_found() -> https_fn.HttpsError:
    return https_fn.HttpsError(
        https_fn.FunctionsErrorCode.NOT_FOUND, "No data found for specified month"
    )


def sync_habit_data(
    caller: CallerIdentity,
    data: Any,
    store: HabitStore,
    clock: ServerClock = _server_clock,
) -> dict:
    """Merge-writes the month record addressed by habitState.year/month."""
    request = _parse_request(SyncHabitDataRequest, data)
    user_id = _resolve_user_id(caller, request.user_id)
    if "year" not in request.habit_state or "month" not in request.habit_state:
        raise _invalid_argument("habitState must include year and month.")
    year = _coerce_int(request.habit_state["year"], "habitState.year")
    month = _coerce_int(request.habit_state["month"], "habitState.month")
    _check_month_contents(request.habits, request.stats)
    last_updated = _caller_timestamp(request.timestamp)

    # Stored year/month are the coerced ints that history queries order by.
    key = month_key(year, month)
    store.merge_month(
        user_id,
        key,
        {
            "habitState": {**request.habit_state, "year": year, "month": month},
            "habits": request.habits,
            "stats": request.stats,
            "lastUpdated": last_updated,
        },
    )
    logger.info(f"Synced month {key} for user {user_id}")
    return asdict(StatusResult(success=True, message="Data synced successfully"))


def load_habit_data(
    caller: CallerIdentity,
    data: Any,
    store: HabitStore,
    clock: ServerClock = _server_clock,
) -> dict:
    request = _parse_request(MonthRequest, data)
    user_id = _resolve_user_id(caller, request.user_id)
    key = month_key(
        _coerce_int(request.year, "year"), _coerce_int(request.month, "month")
    )

    doc = store.get_month(user_id, key)
    if doc is None:
        return {"exists": False}
    return {"exists": True, "data": to_json_safe(doc)}


def get_historical_data(
    caller: CallerIdentity,
    data: Any,
    store: HabitStore,
    clock: ServerClock = _server_clock,
) -> dict:
    """Lists the most recent month records, newest first."""
    request = _parse_request(HistoricalDataRequest, data)
    user_id = _resolve_user_id(caller, request.user_id)
    settings = get_settings()

    limit = request.limit_months
    if limit is None:
        limit = settings.default_history_months
    if isinstance(limit, bool) or limit < 1:
        raise _invalid_argument("limitMonths must be a positive integer.")
    limit = min(limit, settings.max_history_months)

    historical_data = [
        {"id": doc_id, **to_json_safe(doc)}
        for doc_id, doc in store.list_months(user_id, limit)
    ]
    return {"historicalData": historical_data}


def generate_analytics(
    caller: CallerIdentity,
    data: Any,
    store: HabitStore,
    clock: ServerClock = _server_clock,
) -> dict:
    request = _parse_request(MonthRequest, data)
    user_id = _resolve_user_id(caller, request.user_id)
    key = month_key(
        _coerce_int(request.year, "year"), _coerce_int(request.month, "month")
    )

    doc = store.get_month(user_id, key)
    if doc is None:
        raise _month_not_found()

    record = habit_analytics.parse_month_record(doc)
    result = habit_analytics.build_analytics(record, generated_at=clock.now())
    return {"analytics": to_json_safe(convert_keys(asdict(result), "snake_to_camel"))}


def backup_data(
    caller: CallerIdentity,
    data: Any,
    store: HabitStore,
    clock: ServerClock = _server_clock,
) -> dict:
    """Writes an immutable snapshot under a new backup id."""
    request = _parse_request(BackupDataRequest, data)
    user_id = _resolve_user_id(caller, request.user_id)
    timestamp = _caller_timestamp(request.timestamp)

    backup_id = get_unique_id(BACKUP_ID_PREFIX)
    store.create_backup(
        user_id,
        backup_id,
        {"data": request.data, "timestamp": timestamp, "backupId": backup_id},
    )
    logger.info(f"Created backup {backup_id} for user {user_id}")
    return {"backupId": backup_id, "message": "Backup created successfully"}


def restore_data(
    caller: CallerIdentity,
    data: Any,
    store: HabitStore,
    clock: ServerClock = _server_clock,
) -> dict:
    """
    Copies a backup over the month record it was taken from.

    This replaces the whole month document: fields not in the backup
    (such as lastUpdated) are dropped and restoredAt is stamped by the store.
    """
    request = _parse_request(RestoreDataRequest, data)
    user_id = _resolve_user_id(caller, request.user_id)
    backup_id = _check_document_id(request.backup_id, "backupId")

    backup = store.get_backup(user_id, backup_id)
    if backup is None:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.NOT_FOUND, "Backup not found"
        )

    # A malformed stored backup is an internal failure, not a caller error.
    snapshot = backup.get("data")
    if not isinstance(snapshot, dict) or not isinstance(
        snapshot.get("habitState"), dict
    ):
        raise ValueError(f"Backup {backup_id} has no habitState")
    year = int(snapshot["habitState"]["year"])
    month = int(snapshot["habitState"]["month"])
    habit_state = {**snapshot["habitState"], "year": year, "month": month}
    key = month_key(year, month)

    store.replace_month(
        user_id,
        key,
        {
            "habitState": habit_state,
            "habits": snapshot.get("habits"),
            "stats": snapshot.get("stats"),
            "restoredAt": clock.timestamp(),
        },
    )
    logger.info(f"Restored backup {backup_id} into month {key} for user {user_id}")
    return {"message": "Data restored successfully"}


def share_progress(
    caller: CallerIdentity,
    data: Any,
    store: HabitStore,
    clock: ServerClock = _server_clock,
) -> dict:
    """Publishes a summary of one month under a new global share id."""
    request = _parse_request(ShareProgressRequest, data)
    user_id = _resolve_user_id(caller, request.user_id)
    year = _coerce_int(request.year, "year")
    month = _coerce_int(request.month, "month")
    if request.timestamp is None:
        shared_at = clock.now()
    else:
        shared_at = _caller_timestamp(request.timestamp)

    doc = store.get_month(user_id, month_key(year, month))
    if doc is None:
        raise _month_not_found()

    record = habit_analytics.parse_month_record(doc)
    shareable = habit_analytics.build_shareable_data(
        record,
        user=caller.uid,
        year=year,
        month=month,
        include_details=bool(request.include_details),
    )
    shareable_data = convert_keys(asdict(shareable), "snake_to_camel")
    shareable_data["sharedAt"] = shared_at

    share_id = get_unique_id(SHARE_ID_PREFIX)
    store.create_share(share_id, shareable_data)
    logger.info(f"Shared progress {share_id} for user {user_id}")
    return {"shareId": share_id, "shareableData": to_json_safe(shareable_data)}


def update_settings(
    caller: CallerIdentity,
    data: Any,
    store: HabitStore,
    clock: ServerClock = _server_clock,
) -> dict:
    """Merges settings into the user document; keys not sent are kept."""
    request = _parse_request(UpdateSettingsRequest, data)
    user_id = _resolve_user_id(caller, request.user_id)

    store.merge_user_settings(
        user_id, {"settings": request.settings, "updatedAt": clock.timestamp()}
    )
    logger.info(f"Updated settings for user {user_id}")
    return asdict(StatusResult(success=True, message="Settings updated successfully"))


def get_user_settings(
    caller: CallerIdentity,
    data: Any,
    store: HabitStore,
    clock: ServerClock = _server_clock,
) -> dict:
    request = _parse_request(UserSettingsRequest, data)
    user_id = _resolve_user_id(caller, request.user_id)

    user = store.get_user(user_id)
    settings = (user or {}).get("settings") or {}
    return {"settings": to_json_safe(settings)}
