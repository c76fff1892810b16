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
# Standard library imports
import os
import unittest
from unittest.mock import patch, MagicMock

# Third-party library imports
from functions_framework import create_app
from firebase_functions import https_fn
from google.api_core import exceptions

# Local application imports
# This patch must be applied before importing 'main'
with patch("firebase_admin.initialize_app"):
    import main
import main_testing_utils
from habits import service
from habits.store import InMemoryHabitStore

MAIN_SOURCE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "main.py")

CALLABLE_NAMES = [
    "sync_habit_data",
    "load_habit_data",
    "get_historical_data",
    "generate_analytics",
    "backup_data",
    "restore_data",
    "share_progress",
    "update_settings",
    "get_user_settings",
]


def _callable_request(data, uid="user-1"):
    """A stand-in for https_fn.CallableRequest after token verification."""
    req = MagicMock()
    req.data = data
    req.auth = None if uid is None else MagicMock(uid=uid, token={"email": "a@b.c"})
    return req


class TestMainUnauthenticated(unittest.TestCase):

    @patch("firebase_admin.initialize_app")
    def _client(self, name, initialize_app_mock):
        # Create a test client for the function using functions-framework.
        # Each call loads a fresh 'main' module.
        return create_app(name, MAIN_SOURCE).test_client()

    def test_every_callable_requires_auth(self):
        payload = main_testing_utils.create_mock_sync_payload()

        for name in CALLABLE_NAMES:
            with self.subTest(callable=name):
                client = self._client(name)

                # Act: No Authorization header, so the runtime sets no auth.
                with patch("main.get_habit_store") as mock_get_store:
                    response = client.post("/", json={"data": payload})

                # Assert
                self.assertEqual(response.status_code, 401)
                response_data = response.get_json()
                self.assertIn("error", response_data)
                self.assertEqual(response_data["error"]["status"], "UNAUTHENTICATED")
                self.assertIn(
                    "must be called while authenticated",
                    response_data["error"]["message"],
                )
                # Assert: The store was never touched.
                mock_get_store.assert_not_called()


class TestMainRunOperation(unittest.TestCase):

    def setUp(self):
        self.store = InMemoryHabitStore()
        store_patcher = patch.object(main, "get_habit_store", return_value=self.store)
        self.mock_get_store = store_patcher.start()
        self.addCleanup(store_patcher.stop)

    def test_unauthenticated_request_never_reaches_store(self):
        operation = MagicMock()

        with self.assertRaises(https_fn.HttpsError) as context:
            main._run_operation(
                _callable_request({}, uid=None), operation, "Error syncing data to cloud"
            )

        self.assertEqual(
            context.exception.code, https_fn.FunctionsErrorCode.UNAUTHENTICATED
        )
        operation.assert_not_called()
        self.mock_get_store.assert_not_called()

    def test_caller_identity_is_passed_to_operation(self):
        operation = MagicMock(return_value={"ok": True})
        req = _callable_request({"year": 2025})

        result = main._run_operation(req, operation, "Error loading data from cloud")

        self.assertEqual(result, {"ok": True})
        caller, data, store = operation.call_args.args
        self.assertEqual(caller.uid, "user-1")
        self.assertEqual(caller.token, {"email": "a@b.c"})
        self.assertEqual(data, {"year": 2025})
        self.assertIs(store, self.store)

    def test_sync_then_load(self):
        payload = main_testing_utils.create_mock_sync_payload()

        main._run_operation(
            _callable_request(payload),
            service.sync_habit_data,
            "Error syncing data to cloud",
        )
        result = main._run_operation(
            _callable_request({"userId": "user-1", "year": 2025, "month": 3}),
            service.load_habit_data,
            "Error loading data from cloud",
        )

        self.assertTrue(result["exists"])
        self.assertEqual(result["data"]["habits"], payload["habits"])

    def test_not_found_passes_through(self):
        with self.assertRaises(https_fn.HttpsError) as context:
            main._run_operation(
                _callable_request({"year": 2025, "month": 3}),
                service.generate_analytics,
                "Error generating analytics report",
            )

        self.assertEqual(context.exception.code, https_fn.FunctionsErrorCode.NOT_FOUND)

    @patch.object(main, "logger")
    def test_store_failure_becomes_internal(self, mock_logger):
        operation = MagicMock(side_effect=exceptions.ServiceUnavailable("backend down"))

        with self.assertRaises(https_fn.HttpsError) as context:
            main._run_operation(
                _callable_request({}), operation, "Error updating settings"
            )

        self.assertEqual(context.exception.code, https_fn.FunctionsErrorCode.INTERNAL)
        self.assertEqual(context.exception.message, "Error updating settings")
        self.assertNotIn("backend down", context.exception.message)
        mock_logger.error.assert_called_once()
        self.assertIn("Firestore request failed", mock_logger.error.call_args.args[0])
        self.assertEqual(mock_logger.error.call_args.kwargs["code"], 503)
        self.assertEqual(mock_logger.error.call_args.kwargs["reason"], "backend down")

    @patch.object(main, "logger")
    def test_unexpected_error_becomes_internal(self, mock_logger):
        self.store.create_backup("user-1", "backup_bad", {"data": "corrupt"})

        with self.assertRaises(https_fn.HttpsError) as context:
            main._run_operation(
                _callable_request({"backupId": "backup_bad"}),
                service.restore_data,
                "Error restoring data",
            )

        self.assertEqual(context.exception.code, https_fn.FunctionsErrorCode.INTERNAL)
        self.assertEqual(context.exception.message, "Error restoring data")
        mock_logger.error.assert_called_once()

    @patch.object(main, "get_habit_store")
    def test_store_init_failure_becomes_internal(self, mock_get_store):
        mock_get_store.side_effect = RuntimeError("no credentials")

        with self.assertRaises(https_fn.HttpsError) as context:
            main._run_operation(
                _callable_request({}),
                service.get_user_settings,
                "Error retrieving user settings",
            )

        self.assertEqual(context.exception.code, https_fn.FunctionsErrorCode.INTERNAL)


if __name__ == "__main__":
    unittest.main()
