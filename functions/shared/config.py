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
Configuration and settings for the habit sync functions.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.constants import DEFAULT_HISTORY_LIMIT_MONTHS


class Settings(BaseSettings):
    """Environment-backed settings, read from HABIT_SYNC_* variables."""

    model_config = SettingsConfigDict(
        env_prefix="HABIT_SYNC_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Development toggle: keep documents in process memory instead of Firestore.
    use_in_memory_store: bool = Field(default=False)

    # Reject payloads whose userId differs from the authenticated caller.
    enforce_caller_identity: bool = Field(default=True)

    default_history_months: int = Field(default=DEFAULT_HISTORY_LIMIT_MONTHS, ge=1)
    max_history_months: int = Field(default=120, ge=1)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
