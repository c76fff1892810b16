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
Dependency wiring for the habit sync functions.
"""

from __future__ import annotations

from firebase_admin import firestore

from habits.store import FirestoreHabitStore, HabitStore, InMemoryHabitStore
from shared.config import get_settings

_habit_store: HabitStore | None = None


def get_habit_store() -> HabitStore:
    """
    Return a singleton store so every call reuses one Firestore client.
    """
    global _habit_store
    if _habit_store:
        return _habit_store

    if get_settings().use_in_memory_store:
        _habit_store = InMemoryHabitStore()
    else:
        _habit_store = FirestoreHabitStore(firestore.client())
    return _habit_store
