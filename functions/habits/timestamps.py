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

"""Timestamp sources: values supplied by the caller and the server's own clock."""

from datetime import datetime, timezone
from typing import Any

from google.cloud.firestore_v1 import SERVER_TIMESTAMP


class InvalidTimestampError(ValueError):
    """Raised when a caller-supplied timestamp cannot be parsed."""


def parse_caller_timestamp(value: Any) -> datetime:
    """
    Parses a timestamp sent by the client into an aware UTC-based datetime.

    Accepts what the web client serializes dates as: an ISO 8601 string
    (naive values are taken as UTC) or milliseconds since the Unix epoch.
    The Firestore client stores the result as a native Timestamp.

    Raises:
        InvalidTimestampError: If the value is missing or not parseable.
    """
    # bool is an int subclass; reject it before the epoch branch.
    if isinstance(value, bool) or value is None:
        raise InvalidTimestampError(f"Invalid timestamp: {value!r}")

    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise InvalidTimestampError(f"Timestamp out of range: {value!r}") from e

    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError as e:
            raise InvalidTimestampError(f"Invalid timestamp: {value!r}") from e
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    raise InvalidTimestampError(f"Invalid timestamp: {value!r}")


class ServerClock:
    """The server-side time source, kept apart from caller-supplied values."""

    def now(self) -> datetime:
        """Current time, for values returned to the caller."""
        return datetime.now(timezone.utc)

    def timestamp(self) -> Any:
        """Sentinel resolved by the store to its own commit time."""
        return SERVER_TIMESTAMP
