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

"""Derives analytics and shareable summaries from a stored month record."""

from datetime import datetime
from typing import List, Optional

from dacite import Config, from_dict

from shared.api import (
    Analytics,
    AnalyticsSummary,
    DailyPerformance,
    HabitPerformance,
    ShareableData,
    ShareDetails,
    SharedHabit,
    ShareSummary,
)
from shared.constants import DAILY_GOAL_LABEL, DEFAULT_TARGET_GOAL
from shared.json_utils import convert_keys
from shared.types import Habit, MonthRecord, Stats


def parse_month_record(doc: dict) -> MonthRecord:
    """Reads the analytics view of a month document; absent fields stay None."""
    return from_dict(
        data_class=MonthRecord,
        data=convert_keys(doc, "camel_to_snake"),
        config=Config(check_types=False),
    )


def habit_progress(habit: Habit) -> float:
    """Completions as a fraction of the target goal (31 when there is none)."""
    return (habit.total_completions or 0) / (habit.target_goal or DEFAULT_TARGET_GOAL)


def habit_goal(habit: Habit):
    return habit.target_goal or DAILY_GOAL_LABEL


def count_active_habits(habits: List[Habit]) -> int:
    return sum(1 for habit in habits if habit.name)


def build_daily_performance(stats: Stats) -> List[DailyPerformance]:
    """
    Pairs each daily total with the efficiency of the same day.

    One entry per dailyTotals element. Days past the end of dailyEfficiency
    get efficiency None; surplus efficiency entries are ignored.
    """
    totals = stats.daily_totals or []
    efficiency = stats.daily_efficiency or []
    return [
        DailyPerformance(
            day=index + 1,
            completions=total,
            efficiency=efficiency[index] if index < len(efficiency) else None,
        )
        for index, total in enumerate(totals)
    ]


def build_analytics(record: MonthRecord, generated_at: datetime) -> Analytics:
    habits = record.habits or []
    stats = record.stats or Stats()

    summary = AnalyticsSummary(
        total_habits=len(habits),
        active_habits=count_active_habits(habits),
        monthly_progress=stats.monthly_progress or 0,
        success_rate=stats.success_rate or 0,
        current_streak=stats.current_streak or 0,
    )
    habit_performance = [
        HabitPerformance(
            name=habit.name,
            progress=habit_progress(habit),
            completions=habit.total_completions or 0,
            goal=habit_goal(habit),
        )
        for habit in habits
    ]
    return Analytics(
        summary=summary,
        habit_performance=habit_performance,
        daily_performance=build_daily_performance(stats),
        generated_at=generated_at,
    )


def _build_share_details(habits: List[Habit], stats: Stats) -> ShareDetails:
    return ShareDetails(
        habits=[
            SharedHabit(
                name=habit.name,
                progress=habit_progress(habit) * 100,
                goal=habit_goal(habit),
            )
            for habit in habits
        ],
        daily_stats=list(stats.daily_totals or []),
    )


def build_shareable_data(
    record: MonthRecord,
    user: str,
    year: int,
    month: int,
    include_details: Optional[bool] = False,
) -> ShareableData:
    """
    Builds the public summary of a month. Per-habit progress (as a
    percentage) and daily totals are only included when include_details is
    truthy; otherwise details is None.
    """
    habits = record.habits or []
    stats = record.stats or Stats()

    return ShareableData(
        user=user,
        month=f"{month} {year}",
        summary=ShareSummary(
            monthly_progress=stats.monthly_progress or 0,
            success_rate=stats.success_rate or 0,
            current_streak=stats.current_streak or 0,
            active_habits=count_active_habits(habits),
        ),
        details=_build_share_details(habits, stats) if include_details else None,
    )
