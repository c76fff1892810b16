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

import unittest

import main_testing_utils
from habits import analytics
from shared.types import Habit, MonthRecord, Stats


class ParseMonthRecordTest(unittest.TestCase):
    def test_reads_habits_and_stats(self):
        record = analytics.parse_month_record(main_testing_utils.create_mock_month_doc())

        self.assertEqual(len(record.habits), 3)
        self.assertEqual(record.habits[1], Habit("Read", 6, 12))
        self.assertEqual(record.stats.daily_totals, [2, 1, 0])

    def test_missing_fields_are_none(self):
        record = analytics.parse_month_record({"habitState": {"year": 2025}})

        self.assertIsNone(record.habits)
        self.assertIsNone(record.stats)


class HabitProgressTest(unittest.TestCase):
    def test_without_goal_uses_31_days(self):
        habit = Habit(name="Run", total_completions=10)

        self.assertEqual(analytics.habit_progress(habit), 10 / 31)
        self.assertEqual(analytics.habit_goal(habit), "Daily")

    def test_with_goal(self):
        habit = Habit(name="Read", total_completions=6, target_goal=12)

        self.assertEqual(analytics.habit_progress(habit), 0.5)
        self.assertEqual(analytics.habit_goal(habit), 12)

    def test_zero_goal_is_treated_as_daily(self):
        habit = Habit(name="Stretch", total_completions=31, target_goal=0)

        self.assertEqual(analytics.habit_progress(habit), 1.0)
        self.assertEqual(analytics.habit_goal(habit), "Daily")

    def test_missing_completions_count_as_zero(self):
        self.assertEqual(analytics.habit_progress(Habit(name="Run")), 0)


class BuildAnalyticsTest(unittest.TestCase):
    def test_build_analytics(self):
        record = analytics.parse_month_record(main_testing_utils.create_mock_month_doc())

        result = analytics.build_analytics(record, main_testing_utils.FIXED_NOW)

        self.assertEqual(result.summary.total_habits, 3)
        self.assertEqual(result.summary.active_habits, 2)
        self.assertEqual(result.summary.monthly_progress, 42.5)
        self.assertEqual(result.summary.success_rate, 61.0)
        self.assertEqual(result.summary.current_streak, 4)
        self.assertEqual(
            [p.progress for p in result.habit_performance], [10 / 31, 0.5, 0.0]
        )
        self.assertEqual(
            [p.goal for p in result.habit_performance], ["Daily", 12, "Daily"]
        )
        self.assertEqual(result.daily_performance[1].day, 2)
        self.assertEqual(result.daily_performance[1].completions, 1)
        self.assertEqual(result.daily_performance[1].efficiency, 50.0)
        self.assertEqual(result.generated_at, main_testing_utils.FIXED_NOW)

    def test_empty_record_defaults_to_zero(self):
        result = analytics.build_analytics(MonthRecord(), main_testing_utils.FIXED_NOW)

        self.assertEqual(result.summary.total_habits, 0)
        self.assertEqual(result.summary.active_habits, 0)
        self.assertEqual(result.summary.monthly_progress, 0)
        self.assertEqual(result.summary.success_rate, 0)
        self.assertEqual(result.summary.current_streak, 0)
        self.assertEqual(result.habit_performance, [])
        self.assertEqual(result.daily_performance, [])


class DailyPerformanceTest(unittest.TestCase):
    def test_short_efficiency_pads_with_none(self):
        stats = Stats(daily_totals=[3, 2, 1], daily_efficiency=[75.0])

        days = analytics.build_daily_performance(stats)

        self.assertEqual([d.day for d in days], [1, 2, 3])
        self.assertEqual([d.efficiency for d in days], [75.0, None, None])

    def test_long_efficiency_is_truncated(self):
        stats = Stats(daily_totals=[3], daily_efficiency=[75.0, 10.0])

        days = analytics.build_daily_performance(stats)

        self.assertEqual(len(days), 1)
        self.assertEqual(days[0].efficiency, 75.0)

    def test_missing_efficiency(self):
        days = analytics.build_daily_performance(Stats(daily_totals=[1, 2]))

        self.assertEqual([d.efficiency for d in days], [None, None])


class BuildShareableDataTest(unittest.TestCase):
    def setUp(self):
        self.record = analytics.parse_month_record(
            main_testing_utils.create_mock_month_doc()
        )

    def test_without_details(self):
        shareable = analytics.build_shareable_data(
            self.record, user="user-1", year=2025, month=3, include_details=False
        )

        self.assertEqual(shareable.user, "user-1")
        self.assertEqual(shareable.month, "3 2025")
        self.assertEqual(shareable.summary.active_habits, 2)
        self.assertEqual(shareable.summary.monthly_progress, 42.5)
        self.assertIsNone(shareable.details)

    def test_with_details(self):
        shareable = analytics.build_shareable_data(
            self.record, user="user-1", year=2025, month=3, include_details=True
        )

        self.assertEqual(shareable.details.habits[0].progress, (10 / 31) * 100)
        self.assertEqual(shareable.details.habits[1].progress, 50.0)
        self.assertEqual(shareable.details.habits[0].goal, "Daily")
        self.assertEqual(shareable.details.daily_stats, [2, 1, 0])


if __name__ == "__main__":
    unittest.main()
