"""API test suite: accounts, auth guard, tasks, monitoring."""

from datetime import date, timedelta

import pytest

from taskmanager.models import Task
from taskmanager.security import create_access_token


def _tomorrow() -> str:
    return (date.today() + timedelta(days=1)).isoformat()


def _login(client, email, password):
    return client.post("/login", json={"email": email, "password": password})


class TestAuthentication:
    """Test register and login."""

    def test_register_new_user(self, client):
        """Test registering a new user."""
        response = client.post("/register", json={
            "name": "New User",
            "email": "newuser@example.com",
            "password": "securepassword",
        })
        assert response.status_code == 201
        data = response.json()
        assert data["success"] is True
        assert data["user"]["email"] == "newuser@example.com"
        assert data["user"]["name"] == "New User"
        assert "password" not in data["user"]
        assert "password_hash" not in data["user"]

    def test_register_duplicate_email(self, client, test_user):
        """Test registering with an already registered email."""
        response = client.post("/register", json={
            "name": "Someone Else",
            "email": test_user["email"],
            "password": "anotherpassword",
        })
        assert response.status_code == 409
        assert response.json() == {"success": False, "message": "User already exists"}

    def test_register_duplicate_email_is_case_insensitive(self, client, test_user):
        """Test that duplicate detection ignores email case."""
        response = client.post("/register", json={
            "name": "Shouty",
            "email": test_user["email"].upper(),
            "password": "anotherpassword",
        })
        assert response.status_code == 409

    def test_register_invalid_email(self, client):
        """Test registering with a malformed email."""
        response = client.post("/register", json={
            "name": "Bad Email",
            "email": "not-an-email",
            "password": "securepassword",
        })
        assert response.status_code == 422
        assert response.json()["success"] is False
        assert "email" in response.json()["message"].lower()

    def test_register_short_password(self, client):
        """Test registering with a password below the minimum length."""
        response = client.post("/register", json={
            "name": "Short",
            "email": "short@example.com",
            "password": "abc",
        })
        assert response.status_code == 422
        assert response.json()["message"] == "Password must be at least 8 characters"

    def test_register_blank_name(self, client):
        """Test registering with a blank name."""
        response = client.post("/register", json={
            "name": "   ",
            "email": "blank@example.com",
            "password": "securepassword",
        })
        assert response.status_code == 422
        assert response.json()["message"] == "Name is required"

    def test_login_success(self, client):
        """Test successful login."""
        client.post("/register", json={
            "name": "Login Test",
            "email": "logintest@example.com",
            "password": "password123",
        })

        response = _login(client, "logintest@example.com", "password123")
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["token"]
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "logintest@example.com"

    def test_login_invalid_credentials(self, client, test_user):
        """Test login with invalid credentials."""
        response = _login(client, test_user["email"], "wrongpassword")
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_login_nonexistent_user(self, client):
        """Test login with nonexistent user."""
        response = _login(client, "nonexistent@example.com", "password")
        assert response.status_code == 401


class TestAuthGuard:
    """Test bearer token handling on private routes."""

    def test_me_with_valid_token(self, client, test_user):
        """Test reading the current user with a valid token."""
        response = client.get("/me", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json()["user"]["email"] == test_user["email"]

    def test_missing_token(self, client):
        """Test a private route without an Authorization header."""
        response = client.get("/me")
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_malformed_header(self, client, test_user):
        """Test an Authorization header without the Bearer scheme."""
        response = client.get("/me", headers={"Authorization": f"Token {test_user['token']}"})
        assert response.status_code == 401

    def test_invalid_token(self, client):
        """Test a token with a bad signature."""
        response = client.get("/me", headers={"Authorization": "Bearer invalid_token_here"})
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token"

    def test_expired_token(self, client, test_user):
        """Test a token past its expiry."""
        me = client.get("/me", headers=test_user["headers"]).json()["user"]
        token = create_access_token(subject=str(me["id"]), expires_minutes=-1)
        response = client.get("/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_token_for_unknown_user(self, client):
        """Test a valid token whose user no longer exists."""
        token = create_access_token(subject="9999")
        response = client.get("/tasks", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["message"] == "User not found"

    def test_public_routes_ignore_auth(self, client):
        """Test that public routes accept a bad Authorization header."""
        response = client.post(
            "/login",
            json={"email": "nobody@example.com", "password": "whatever1"},
            headers={"Authorization": "Bearer garbage"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_guard_lives_in_deps(self):
        """Test that the auth guard is exported by deps and not re-exported by main."""
        from taskmanager import deps, main

        assert "get_current_user" not in main.__all__
        assert set(main.__all__) == {"app", "get_session"}
        assert callable(deps.get_current_user)


class TestProfile:
    """Test profile and password updates."""

    def test_update_name(self, client, test_user):
        """Test renaming the current user."""
        response = client.put("/profile", json={"name": "Renamed"}, headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json()["user"]["name"] == "Renamed"
        assert response.json()["user"]["email"] == test_user["email"]

    def test_update_email(self, client, test_user):
        """Test changing the current user's email."""
        response = client.put("/profile", json={"email": "moved@example.com"}, headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "moved@example.com"
        # token stays valid: it identifies the user by id, not email
        assert client.get("/me", headers=test_user["headers"]).status_code == 200

    def test_update_email_taken(self, client, test_user):
        """Test changing email to one another user holds."""
        client.post("/register", json={
            "name": "Other",
            "email": "other@example.com",
            "password": "otherpassword",
        })
        response = client.put("/profile", json={"email": "other@example.com"}, headers=test_user["headers"])
        assert response.status_code == 409

    def test_update_blank_name(self, client, test_user):
        """Test renaming to a blank name."""
        response = client.put("/profile", json={"name": ""}, headers=test_user["headers"])
        assert response.status_code == 422

    def test_update_profile_requires_auth(self, client):
        """Test updating the profile without authentication."""
        response = client.put("/profile", json={"name": "Nobody"})
        assert response.status_code == 401

    def test_update_password(self, client, test_user):
        """Test changing the password and logging in with the new one."""
        response = client.put("/password", json={
            "currentPassword": test_user["password"],
            "newPassword": "brandnewpassword",
        }, headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json()["success"] is True

        assert _login(client, test_user["email"], test_user["password"]).status_code == 401
        assert _login(client, test_user["email"], "brandnewpassword").status_code == 200

    def test_update_password_wrong_current(self, client, test_user):
        """Test changing the password with a wrong current password."""
        response = client.put("/password", json={
            "currentPassword": "notmypassword",
            "newPassword": "brandnewpassword",
        }, headers=test_user["headers"])
        assert response.status_code == 401
        assert _login(client, test_user["email"], test_user["password"]).status_code == 200

    def test_update_password_too_short(self, client, test_user):
        """Test changing to a password below the minimum length."""
        response = client.put("/password", json={
            "currentPassword": test_user["password"],
            "newPassword": "short",
        }, headers=test_user["headers"])
        assert response.status_code == 422


class TestTasks:
    """Test task CRUD operations."""

    @pytest.fixture(name="task_id")
    def task_id_fixture(self, client, test_user):
        response = client.post("/tasks", json={
            "title": "Existing task",
            "description": "Already saved",
            "priority": "High",
            "dueDate": _tomorrow(),
            "completed": "No",
        }, headers=test_user["headers"])
        return response.json()["task"]["id"]

    def test_create_task(self, client, test_user):
        """Test creating a task."""
        due = _tomorrow()
        response = client.post("/tasks", json={
            "title": "Write report",
            "description": "Quarterly numbers",
            "priority": "Medium",
            "dueDate": due,
            "completed": "No",
        }, headers=test_user["headers"])

        assert response.status_code == 201
        task = response.json()["task"]
        assert task["title"] == "Write report"
        assert task["description"] == "Quarterly numbers"
        assert task["priority"] == "Medium"
        assert task["dueDate"] == due
        assert task["completed"] is False
        assert "id" in task
        assert "createdAt" in task

    def test_create_task_due_today(self, client, test_user):
        """Test creating a task due today."""
        response = client.post("/tasks", json={
            "title": "Today",
            "dueDate": date.today().isoformat(),
        }, headers=test_user["headers"])
        assert response.status_code == 201
        assert response.json()["task"]["priority"] == "Low"
        assert response.json()["task"]["description"] == ""

    def test_create_task_accepts_boolean_completed(self, client, test_user):
        """Test creating a task with a boolean completed flag."""
        response = client.post("/tasks", json={
            "title": "Done already",
            "dueDate": _tomorrow(),
            "completed": True,
        }, headers=test_user["headers"])
        assert response.json()["task"]["completed"] is True

    def test_create_task_past_due_date(self, client, test_user):
        """Test creating a task with a past due date."""
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        response = client.post("/tasks", json={
            "title": "Too late",
            "dueDate": yesterday,
        }, headers=test_user["headers"])
        assert response.status_code == 422
        assert response.json()["message"] == "Due date cannot be in the past"

    def test_create_task_blank_title(self, client, test_user):
        """Test creating a task with a blank title."""
        response = client.post("/tasks", json={
            "title": "  ",
            "dueDate": _tomorrow(),
        }, headers=test_user["headers"])
        assert response.status_code == 422
        assert response.json()["message"] == "Title is required"

    def test_create_task_missing_due_date(self, client, test_user):
        """Test creating a task without a due date."""
        response = client.post("/tasks", json={"title": "Whenever"}, headers=test_user["headers"])
        assert response.status_code == 422

    def test_create_task_invalid_priority(self, client, test_user):
        """Test creating a task with an unknown priority."""
        response = client.post("/tasks", json={
            "title": "Urgent",
            "priority": "Critical",
            "dueDate": _tomorrow(),
        }, headers=test_user["headers"])
        assert response.status_code == 422

    def test_create_task_without_auth(self, client):
        """Test creating a task without authentication."""
        response = client.post("/tasks", json={"title": "Nope", "dueDate": _tomorrow()})
        assert response.status_code == 401

    def test_list_tasks(self, client, test_user):
        """Test listing tasks after creating some."""
        for title in ("Task 1", "Task 2"):
            client.post("/tasks", json={"title": title, "dueDate": _tomorrow()}, headers=test_user["headers"])

        response = client.get("/tasks", headers=test_user["headers"])
        assert response.status_code == 200
        assert {t["title"] for t in response.json()["tasks"]} == {"Task 1", "Task 2"}

    def test_get_task(self, client, test_user, task_id):
        """Test fetching a single task."""
        response = client.get(f"/tasks/{task_id}", headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json()["task"]["title"] == "Existing task"

    def test_update_task(self, client, test_user, task_id):
        """Test updating a task."""
        response = client.put(f"/tasks/{task_id}", json={
            "title": "Renamed task",
            "completed": "Yes",
        }, headers=test_user["headers"])
        assert response.status_code == 200
        task = response.json()["task"]
        assert task["id"] == task_id
        assert task["title"] == "Renamed task"
        assert task["completed"] is True
        assert task["priority"] == "High"

    def test_update_task_past_due_date(self, client, test_user, task_id):
        """Test moving a task's due date into the past."""
        yesterday = (date.today() - timedelta(days=1)).isoformat()
        response = client.put(f"/tasks/{task_id}", json={"dueDate": yesterday}, headers=test_user["headers"])
        assert response.status_code == 422
        assert response.json()["message"] == "Due date cannot be in the past"

    def test_update_keeps_unchanged_past_due_date(self, client, test_user, session, task_id):
        """Test that an overdue task can be edited while its due date is untouched."""
        past = date.today() - timedelta(days=3)
        task = session.get(Task, task_id)
        task.due_date = past
        session.add(task)
        session.commit()

        response = client.put(f"/tasks/{task_id}", json={
            "title": "Overdue but edited",
            "dueDate": past.isoformat(),
        }, headers=test_user["headers"])
        assert response.status_code == 200
        assert response.json()["task"]["dueDate"] == past.isoformat()

    def test_update_missing_task(self, client, test_user):
        """Test updating a task that does not exist."""
        response = client.put("/tasks/999", json={"title": "Ghost"}, headers=test_user["headers"])
        assert response.status_code == 404
        assert response.json()["message"] == "Task not found"

    def test_delete_task(self, client, test_user, task_id):
        """Test deleting a task."""
        response = client.delete(f"/tasks/{task_id}", headers=test_user["headers"])
        assert response.status_code == 200
        assert client.get(f"/tasks/{task_id}", headers=test_user["headers"]).status_code == 404

    def test_task_access_control(self, client, task_id):
        """Test that users can't see or touch other users' tasks."""
        client.post("/register", json={
            "name": "Other",
            "email": "other@example.com",
            "password": "otherpassword",
        })
        token = _login(client, "other@example.com", "otherpassword").json()["token"]
        headers = {"Authorization": f"Bearer {token}"}

        assert client.get("/tasks", headers=headers).json()["tasks"] == []
        assert client.get(f"/tasks/{task_id}", headers=headers).status_code == 404
        assert client.put(f"/tasks/{task_id}", json={"title": "Mine now"}, headers=headers).status_code == 404
        assert client.delete(f"/tasks/{task_id}", headers=headers).status_code == 404


class TestMonitoring:
    """Test health, metrics and request ids."""

    def test_health(self, client):
        """Test the health check."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] == "healthy"

    def test_metrics(self, client, test_user):
        """Test the metrics counters."""
        headers = test_user["headers"]
        client.post("/tasks", json={"title": "Open", "dueDate": _tomorrow()}, headers=headers)
        client.post("/tasks", json={"title": "Done", "dueDate": _tomorrow(), "completed": "Yes"}, headers=headers)

        data = client.get("/metrics").json()
        assert data["users_total"] == 1
        assert data["tasks_total"] == 2
        assert data["tasks_open"] == 1
        assert data["tasks_completed"] == 1
        assert data["tasks_overdue"] == 0

    def test_request_id_header(self, client):
        """Test that the request id is echoed back."""
        response = client.get("/health", headers={"X-Request-ID": "abc123"})
        assert response.headers["X-Request-ID"] == "abc123"


class TestSecurityValidation:
    """Test security helpers."""

    def test_password_hashing(self):
        """Test that passwords are properly hashed."""
        from taskmanager.security import hash_password, verify_password

        hashed = hash_password("mysecretpassword")
        assert hashed != "mysecretpassword"
        assert verify_password("mysecretpassword", hashed)
        assert not verify_password("wrongpassword", hashed)
