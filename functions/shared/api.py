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

from dataclasses import dataclass, field
from typing import Any, List, Optional, Union

Timestamp = Union[str, int, float]
YearOrMonth = Union[int, str]


@dataclass
class CallerIdentity:
    """The caller verified by the callable runtime (req.auth)."""

    uid: str
    token: dict = field(default_factory=dict)


# Request payloads. Keys arrive camelCase and are converted at the top level
# only, so habitState, habits, stats, data and settings keep their keys.


@dataclass
class SyncHabitDataRequest:
    habit_state: dict
    habits: list
    stats: dict
    timestamp: Timestamp
    user_id: Optional[str] = None


@dataclass
class MonthRequest:
    """Addresses one month record; used by load and analytics."""

    year: YearOrMonth
    month: YearOrMonth
    user_id: Optional[str] = None


@dataclass
class HistoricalDataRequest:
    limit_months: Optional[int] = None
    user_id: Optional[str] = None


@dataclass
class BackupDataRequest:
    data: dict
    timestamp: Timestamp
    user_id: Optional[str] = None


@dataclass
class RestoreDataRequest:
    backup_id: str
    user_id: Optional[str] = None


@dataclass
class ShareProgressRequest:
    year: YearOrMonth
    month: YearOrMonth
    include_details: Any = False
    timestamp: Optional[Timestamp] = None
    user_id: Optional[str] = None


@dataclass
class UpdateSettingsRequest:
    settings: dict
    user_id: Optional[str] = None


@dataclass
class UserSettingsRequest:
    user_id: Optional[str] = None


# Results.


@dataclass
class StatusResult:
    success: bool
    message: str


@dataclass
class AnalyticsSummary:
    total_habits: int
    active_habits: int
    monthly_progress: float
    success_rate: float
    current_streak: int


@dataclass
class HabitPerformance:
    name: Optional[str]
    progress: float
    completions: float
    goal: Union[float, str]


@dataclass
class DailyPerformance:
    day: int
    completions: float
    efficiency: Optional[float]


@dataclass
class Analytics:
    summary: AnalyticsSummary
    habit_performance: List[HabitPerformance]
    daily_performance: List[DailyPerformance]
    generated_at: Any


@dataclass
class ShareSummary:
    monthly_progress: float
    success_rate: float
    current_streak: int
    active_habits: int


@dataclass
class SharedHabit:
    name: Optional[str]
    # Percentage of the goal, 0-100+.
    progress: float
    goal: Union[float, str]


@dataclass
class ShareDetails:
    habits: List[SharedHabit]
    daily_stats: List[float]


@dataclass
class ShareableData:
    """Public share record, minus sharedAt which is stamped on write."""

    user: str
    month: str
    summary: ShareSummary
    details: Optional[ShareDetails] = None
