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

# Cloud functions for the habit tracker backend - habit data sync, analytics,
# backups, sharing and user settings.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
from typing import Callable

# Third-party library imports
from firebase_admin import initialize_app
from firebase_functions import https_fn, logger, options
from google.api_core import exceptions

# Local application imports
from habits import service
from habits.dependencies import get_habit_store
from shared.api import CallerIdentity

initialize_app()

Operation = Callable[..., dict]


def _caller_identity(req: https_fn.CallableRequest) -> CallerIdentity:
    """Returns the caller verified by the callable runtime, or raises."""
    if req.auth is None or not req.auth.uid:
        raise https_fn.HttpsError(
            https_fn.FunctionsErrorCode.UNAUTHENTICATED,
            "The function must be called while authenticated.",
        )
    return CallerIdentity(uid=req.auth.uid, token=dict(req.auth.token or {}))


def _run_operation(
    req: https_fn.CallableRequest, operation: Operation, error_message: str
) -> dict:
    """
    Authenticates the caller, then runs the operation against the store.

    Errors raised as https_fn.HttpsError reach the caller unchanged. Anything
    else is logged in full and reported to the caller only as INTERNAL with
    error_message.
    """
    caller = _caller_identity(req)
    try:
        return operation(caller, req.data, get_habit_store())
    except https_fn.HttpsError:
        raise
    except exceptions.GoogleAPICallError as e:
        logger.error(
            f"{error_message}: Firestore request failed",
            code=e.code,
            grpc_status=str(e.grpc_status_code),
            reason=e.message,
        )
        raise https_fn.HttpsError(https_fn.FunctionsErrorCode.INTERNAL, error_message)
    except Exception as e:
        logger.error(f"{error_message}: {e!r}")
        raise https_fn.HttpsError(https_fn.FunctionsErrorCode.INTERNAL, error_message)


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def sync_habit_data(req: https_fn.CallableRequest) -> dict:
    """
    Merge-writes one month of habit data.

    Args:
        req (https_fn.CallableRequest): The request, containing habitState
            (with year and month), habits, stats and timestamp.

    Returns:
        {"success": True, "message": ...}
    """
    return _run_operation(req, service.sync_habit_data, "Error syncing data to cloud")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def load_habit_data(req: https_fn.CallableRequest) -> dict:
    """
    Loads one month of habit data.

    Returns:
        {"exists": False} when there is no record, else {"exists": True, "data": ...}.
    """
    return _run_operation(
        req, service.load_habit_data, "Error loading data from cloud"
    )


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def get_historical_data(req: https_fn.CallableRequest) -> dict:
    """Returns up to limitMonths month records, newest first."""
    return _run_operation(
        req, service.get_historical_data, "Error retrieving historical data"
    )


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def generate_analytics(req: https_fn.CallableRequest) -> dict:
    """
    Generates an analytics report for one month.

    Returns:
        {"analytics": {"summary", "habitPerformance", "dailyPerformance", "generatedAt"}}
    """
    return _run_operation(
        req, service.generate_analytics, "Error generating analytics report"
    )


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def backup_data(req: https_fn.CallableRequest) -> dict:
    return _run_operation(req, service.backup_data, "Error creating backup")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def restore_data(req: https_fn.CallableRequest) -> dict:
    return _run_operation(req, service.restore_data, "Error restoring data")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def share_progress(req: https_fn.CallableRequest) -> dict:
    """
    Publishes a month summary to the shared_progress collection.

    Returns:
        {"shareId": ..., "shareableData": ...}
    """
    return _run_operation(req, service.share_progress, "Error sharing progress")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def update_settings(req: https_fn.CallableRequest) -> dict:
    return _run_operation(req, service.update_settings, "Error updating settings")


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def get_user_settings(req: https_fn.CallableRequest) -> dict:
    return _run_operation(
        req, service.get_user_settings, "Error retrieving user settings"
    )
