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

from dataclasses import dataclass
from typing import List, Optional, Union

Number = Union[int, float]


@dataclass
class Habit:
    """A habit slot in a month record. A slot without a name is inactive."""

    name: Optional[str] = None
    total_completions: Optional[Number] = None
    # Absent (or 0) means the habit is tracked daily.
    target_goal: Optional[Number] = None


@dataclass
class Stats:
    monthly_progress: Optional[Number] = None
    success_rate: Optional[Number] = None
    current_streak: Optional[Number] = None
    # Index is day-of-month - 1.
    daily_totals: Optional[List[Number]] = None
    daily_efficiency: Optional[List[Optional[Number]]] = None


@dataclass
class MonthRecord:
    """
    Read view of a /users/{userId}/months/{year}-{month} document.

    Only the fields needed to derive analytics are modeled; the stored
    habitState, habits and stats are otherwise opaque to the service.
    """

    habits: Optional[List[Habit]] = None
    stats: Optional[Stats] = None
