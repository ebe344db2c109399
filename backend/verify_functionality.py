#!/usr/bin/env python3
"""
Smoke check against a running TaskManager server.

Drives the API through the client library (UserApi, TaskApi and the task
form flow) the same way a UI would. Start the server first:

    uvicorn taskmanager.main:app
"""

import sys
import time
from datetime import date, timedelta

from taskmanager.client import (
    ApiClient,
    Conflict,
    TaskApi,
    TaskSubmissionFlow,
    TokenStore,
    Unauthorized,
    UserApi,
)

BASE_URL = "http://localhost:8000"


def run_checks(base_url: str = BASE_URL) -> int:
    """Run every check in order; returns a process exit code."""

    print("=" * 70)
    print("TaskManager Functionality Verification")
    print("=" * 70)

    passed = 0
    failed = 0

    def step(name, func):
        nonlocal passed, failed
        print(f"\n[TEST] {name}...")
        try:
            func()
            print(f"[PASS] ✓ {name}")
            passed += 1
            return True
        except AssertionError as e:
            print(f"[FAIL] ✗ {name}: {e}")
            failed += 1
            return False
        except Exception as e:
            print(f"[ERROR] ✗ {name}: {e}")
            failed += 1
            return False

    api = ApiClient(base_url, TokenStore())
    users = UserApi(api)
    tasks = TaskApi(api)

    email = f"test_{int(time.time())}@example.com"
    password = "SecurePassword123"

    def check_health():
        data = api.get("/health").data
        assert data["status"] == "healthy", f"Unexpected health: {data}"

    step("Health endpoint", check_health)

    def check_register():
        user = users.register("Smoke Test", email, password)
        assert user["email"] == email, "Unexpected registration response"

    step("User registration", check_register)

    def check_duplicate_registration():
        try:
            users.register("Smoke Test", email, password)
        except Conflict:
            return
        raise AssertionError("Duplicate registration should fail with 409")

    step("Duplicate registration prevention", check_duplicate_registration)

    def check_invalid_login():
        try:
            users.login(email, "WrongPassword")
        except Unauthorized:
            return
        raise AssertionError("Invalid login should fail with 401")

    step("Invalid login rejection", check_invalid_login)

    def check_unauthorized():
        try:
            tasks.list()
        except Unauthorized:
            return
        raise AssertionError("Unauthenticated request should fail")

    step("Unauthorized access prevention", check_unauthorized)

    def check_login():
        token = users.login(email, password)
        assert token and api.token_store.get_token() == token, "Token not stored"
        assert users.me()["email"] == email, "Profile mismatch"

    step("User login", check_login)

    saved = []
    flow = TaskSubmissionFlow(api, on_save=saved.append, on_close=lambda: None)

    def check_past_due_rejected():
        flow.open()
        flow.set("title", "Too late")
        flow.set("due_date", date.today() - timedelta(days=1))
        assert flow.submit() is None
        assert flow.error == "Due date cannot be in the past", f"Unexpected error: {flow.error}"

    step("Past due date rejected client-side", check_past_due_rejected)

    def check_create_task():
        flow.open()
        flow.set("title", "Write report")
        flow.set("priority", "Medium")
        flow.set("due_date", date.today())
        task = flow.submit()
        assert task is not None, f"Create failed: {flow.error}"
        assert task["title"] == "Write report", "Task title mismatch"
        assert task["completed"] is False, "Task should be open by default"

    step("Create task through the form", check_create_task)

    def check_update_task():
        flow.open(tasks.get(saved[-1]["id"]))
        flow.set("completed", "Yes")
        task = flow.submit()
        assert task is not None, f"Update failed: {flow.error}"
        assert task["completed"] is True, "Task should be completed"
        assert len(tasks.list()) == 1, "Update must not create a second task"

    step("Update task through the form", check_update_task)

    def check_isolation():
        other = ApiClient(base_url, TokenStore())
        other_email = f"other_{int(time.time())}@example.com"
        UserApi(other).register("Other", other_email, password)
        UserApi(other).login(other_email, password)
        assert TaskApi(other).list() == [], "Other user shouldn't see these tasks"

    step("Authorization enforcement", check_isolation)

    def check_delete_task():
        tasks.delete(saved[-1]["id"])
        assert tasks.list() == [], "Task still listed after delete"

    step("Delete task", check_delete_task)

    print("\n" + "=" * 70)
    print("Test Summary")
    print("=" * 70)
    print(f"✓ Passed: {passed}")
    print(f"✗ Failed: {failed}")
    print(f"Total:   {passed + failed}")
    print("=" * 70)

    return 0 if failed == 0 else 1


if __name__ == "__main__":
    sys.exit(run_checks(sys.argv[1] if len(sys.argv) > 1 else BASE_URL))
