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

"""Sample payloads and documents shared by the tests."""

from datetime import datetime, timezone

from habits.timestamps import ServerClock

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)


class FixedClock(ServerClock):
    """Server clock pinned to a known instant."""

    def __init__(self, now: datetime = FIXED_NOW):
        self._fixed_now = now

    def now(self) -> datetime:
        return self._fixed_now


def create_mock_habit_state(year: int = 2025, month: int = 3) -> dict:
    return {"year": year, "month": month, "selectedDay": 14, "theme": "dark"}


def create_mock_habits() -> list:
    return [
        {"name": "Run", "totalCompletions": 10},
        {"name": "Read", "totalCompletions": 6, "targetGoal": 12},
        {"name": "", "totalCompletions": 0},
    ]


def create_mock_stats() -> dict:
    return {
        "monthlyProgress": 42.5,
        "successRate": 61.0,
        "currentStreak": 4,
        "dailyTotals": [2, 1, 0],
        "dailyEfficiency": [100.0, 50.0, 0.0],
    }


def create_mock_sync_payload(year: int = 2025, month: int = 3) -> dict:
    return {
        "userId": "user-1",
        "habitState": create_mock_habit_state(year, month),
        "habits": create_mock_habits(),
        "stats": create_mock_stats(),
        "timestamp": "2025-03-14T08:30:00Z",
    }


def create_mock_month_doc(year: int = 2025, month: int = 3) -> dict:
    return {
        "habitState": create_mock_habit_state(year, month),
        "habits": create_mock_habits(),
        "stats": create_mock_stats(),
        "lastUpdated": datetime(2025, 3, 14, 8, 30, tzinfo=timezone.utc),
    }
