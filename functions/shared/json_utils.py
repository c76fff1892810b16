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

import re
from datetime import date, datetime
from typing import Any, Literal

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")

Direction = Literal["camel_to_snake", "snake_to_camel"]


def camel_to_snake(name: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def snake_to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def convert_keys(data: Any, direction: Direction, deep: bool = True) -> Any:
    """
    Converts dictionary keys between camelCase and snake_case.

    Args:
        data: A dict, list, or scalar value.
        direction: "camel_to_snake" or "snake_to_camel".
        deep: If False, only the top-level keys of a dict are converted and
            nested values are left untouched.

    Returns:
        A new structure with converted keys.
    """
    convert = camel_to_snake if direction == "camel_to_snake" else snake_to_camel

    if isinstance(data, dict):
        return {
            (convert(key) if isinstance(key, str) else key): (
                convert_keys(value, direction) if deep else value
            )
            for key, value in data.items()
        }
    if isinstance(data, list) and deep:
        return [convert_keys(item, direction) for item in data]
    return data


def to_json_safe(value: Any) -> Any:
    """
    Recursively converts Firestore values into JSON-serializable ones.

    Timestamps (datetime, including Firestore's DatetimeWithNanoseconds) become
    ISO 8601 strings; dicts, lists and tuples are walked.
    """
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(item) for item in value]
    return value
