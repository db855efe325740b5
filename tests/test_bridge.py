"""
Tests for the service bridge

Channels are invoked through the `call` fixture, which runs bridge.invoke on
a fresh event loop and returns the envelope.
"""

import asyncio
import json

import pytest

from finance_monitor.bridge import (
    BridgeError,
    RECORD_CHANNELS,
    ServiceBridge,
    describe_error,
    failure_envelope,
    success_envelope,
)
from finance_monitor.bridge.requests import EmptyRequest, UserRequest


@pytest.fixture
def user(call):
    response = call("register-user", {
        "username": "ravi", "email": "ravi@example.com", "password": "s3cret", "fullName": "Ravi",
    })
    assert response["success"] is True
    return response["user"]


class TestEnvelopes:

    def test_success_envelope(self):
        assert success_envelope(tasks=[]) == {"success": True, "tasks": []}

    def test_failure_envelope(self):
        assert failure_envelope("boom") == {"success": False, "error": "boom"}

    def test_describe_plain_error(self):
        assert describe_error(ValueError("bad value")) == "bad value"
        assert describe_error(KeyError()) == "KeyError"

    def test_unknown_channel(self, call):
        response = call("drop-database", {})
        assert response == {"success": False, "error": "Unknown channel: drop-database"}

    def test_validation_failure(self, call):
        response = call("add-task", {"userId": "u1"})

        assert response["success"] is False
        assert response["error"].startswith("Invalid request: ")
        assert "task" in response["error"]

    def test_handler_exception_becomes_failure(self):
        bridge = ServiceBridge()

        @bridge.handle("explode")
        async def explode(request, correlation_id):
            raise RuntimeError("kaboom")

        response = asyncio.run(bridge.invoke("explode"))
        assert response == {"success": False, "error": "kaboom"}

    def test_duplicate_channel_rejected(self):
        bridge = ServiceBridge()

        @bridge.handle("ping")
        async def ping(request, correlation_id):
            return {}

        with pytest.raises(BridgeError):
            bridge.handle("ping")(ping)

    def test_scalar_payload_binds_first_field(self):
        bridge = ServiceBridge()

        @bridge.handle("echo", UserRequest)
        async def echo(request, correlation_id):
            return {"userId": request.user_id}

        assert asyncio.run(bridge.invoke("echo", "u42")) == {"success": True, "userId": "u42"}

    def test_scalar_payload_without_fields(self):
        bridge = ServiceBridge()

        @bridge.handle("ping", EmptyRequest)
        async def ping(request, correlation_id):
            return {}

        assert asyncio.run(bridge.invoke("ping", "extra"))["success"] is False
        assert asyncio.run(bridge.invoke("ping")) == {"success": True}


class TestChannelSurface:

    def test_every_channel_registered(self, bridge):
        expected = {
            "register-user", "login-user", "update-profile", "change-password",
            "get-categories", "get-monthly-totals", "get-expenses-by-category",
            "complete-task", "mark-bill-paid", "mark-goal-achieved", "complete-milestone",
            "get-upcoming-bills", "get-upcoming-events", "search-notes",
            "get-settings", "save-settings", "get-goal-milestones",
        }
        for channels in RECORD_CHANNELS:
            for verb in ("add", "update", "delete"):
                expected.add(f"{verb}-{channels.singular}")
            if channels.list_channel is None:
                expected.add(f"get-{channels.collection}")

        assert set(bridge.channels) == expected


class TestUserChannels:

    def test_register_and_login(self, call, user):
        response = call("login-user", {"username": "ravi@example.com", "password": "s3cret"})

        assert response["success"] is True
        assert response["user"]["userId"] == user["userId"]
        assert "passwordHash" not in response["user"]

    def test_duplicate_registration(self, call, user):
        response = call("register-user", {"username": "ravi", "email": "x@example.com", "password": "pw"})
        assert response == {"success": False, "error": "Username already exists"}

    def test_bad_login(self, call, user):
        response = call("login-user", {"username": "ravi", "password": "wrong"})
        assert response == {"success": False, "error": "Invalid credentials"}

    def test_change_password(self, call, user):
        response = call("change-password", {
            "userId": user["userId"], "oldPassword": "s3cret", "newPassword": "n3w",
        })
        assert response == {"success": True}
        assert call("login-user", {"username": "ravi", "password": "n3w"})["success"] is True

    def test_change_password_wrong_current(self, call, user):
        response = call("change-password", {
            "userId": user["userId"], "oldPassword": "guess", "newPassword": "n3w",
        })
        assert response == {"success": False, "error": "Current password is incorrect"}

    def test_update_profile(self, call, storage, user):
        response = call("update-profile", {"userId": user["userId"], "data": {"fullName": "Ravi K"}})

        assert response == {"success": True}
        assert storage.get_user(user["userId"])["fullName"] == "Ravi K"

    def test_update_profile_missing_user(self, call):
        response = call("update-profile", {"userId": "ghost", "data": {"fullName": "x"}})
        assert response == {"success": False, "error": "User not found"}

    def test_update_profile_taken_email(self, call, user):
        call("register-user", {"username": "meera", "email": "meera@example.com", "password": "pw"})

        response = call("update-profile", {"userId": user["userId"], "data": {"email": "meera@example.com"}})

        assert response == {"success": False, "error": "Email already exists"}


class TestRecordChannels:

    def test_add_and_list_transactions(self, call, user):
        added = call("add-transaction", {
            "userId": user["userId"],
            "transaction": {
                "type": "EXPENSE", "amount": 42.5, "categoryName": "Shopping",
                "description": "Shoes", "transactionDate": "2024-03-10",
            },
        })
        assert added["success"] is True
        assert added["transaction"]["userId"] == user["userId"]
        assert added["transaction"]["amount"] == 42.5

        listed = call("get-transactions", user["userId"])
        assert listed["success"] is True
        assert [t["transactionId"] for t in listed["transactions"]] == [added["transaction"]["transactionId"]]

    def test_amount_keeps_its_number_type(self, call, storage, user):
        sent = {"type": "EXPENSE", "amount": 12.5, "transactionDate": "2024-03-10T10:00:00"}
        call("add-transaction", {"userId": user["userId"], "transaction": sent})

        listed = call("get-transactions", user["userId"])["transactions"][0]
        with storage.client.path_for("transactions").open(encoding="utf-8") as f:
            on_disk = json.load(f)[0]

        assert listed["amount"] == 12.5
        assert isinstance(listed["amount"], float)
        assert on_disk["amount"] == 12.5

    def test_update_task(self, call, user):
        task = call("add-task", {"userId": user["userId"], "task": {"title": "Pay rent"}})["task"]

        response = call("update-task", {"taskId": task["taskId"], "task": {"priority": "High"}})

        assert response == {"success": True}
        listed = call("get-tasks", {"userId": user["userId"]})["tasks"]
        assert listed[0]["priority"] == "High"
        assert listed[0]["taskTitle"] == "Pay rent"

    def test_update_missing_record(self, call):
        response = call("update-bill", {"billId": "missing", "bill": {"amount": 5}})
        assert response == {"success": False, "error": "Bill not found"}

    def test_update_other_users_record(self, call, user):
        note = call("add-note", {"userId": user["userId"], "note": {"title": "mine"}})["note"]

        response = call("update-note", {"noteId": note["noteId"], "note": {"title": "x"}, "userId": "intruder"})

        assert response["success"] is False
        assert call("get-notes", user["userId"])["notes"][0]["title"] == "mine"

    def test_invalid_field_value(self, call, user):
        bill = call("add-bill", {
            "userId": user["userId"], "bill": {"billName": "Power", "amount": 80, "dueDate": "2024-03-20"},
        })["bill"]

        response = call("update-bill", {"billId": bill["billId"], "bill": {"amount": -1}})

        assert response["success"] is False
        assert response["error"].startswith("Invalid request: ")

    def test_delete_is_idempotent(self, call, user):
        event = call("add-event", {
            "userId": user["userId"], "eventData": {"title": "Dentist", "eventDate": "2024-03-18"},
        })["event"]

        assert call("delete-event", event["eventId"]) == {"success": True}
        assert call("delete-event", event["eventId"]) == {"success": True}
        assert call("get-events", user["userId"])["events"] == []

    def test_goal_delete_cascades(self, call, user):
        goal = call("add-goal", {
            "userId": user["userId"], "goal": {"title": "Car", "targetAmount": 5000},
        })["goal"]
        call("add-milestone", {"goalId": goal["goalId"], "milestone": {"description": "First 1000"}})

        assert len(call("get-goal-milestones", goal["goalId"])["milestones"]) == 1
        assert call("delete-goal", goal["goalId"]) == {"success": True}
        assert call("get-goal-milestones", goal["goalId"])["milestones"] == []


class TestStatusChannels:

    def test_complete_task(self, call, user):
        task = call("add-task", {"userId": user["userId"], "task": {"title": "File taxes"}})["task"]

        assert call("complete-task", task["taskId"]) == {"success": True}

        done = call("get-tasks", user["userId"])["tasks"][0]
        assert done["isCompleted"] is True
        assert "completedAt" in done

    def test_mark_bill_paid_missing(self, call):
        assert call("mark-bill-paid", "missing") == {"success": False, "error": "Bill not found"}

    def test_mark_goal_achieved(self, call, user):
        goal = call("add-goal", {"userId": user["userId"], "goal": {"title": "Fund", "targetAmount": 100}})["goal"]

        assert call("mark-goal-achieved", {"goalId": goal["goalId"], "userId": user["userId"]})["success"] is True
        assert call("get-goals", user["userId"])["goals"][0]["isAchieved"] is True

    def test_complete_milestone(self, call, user):
        goal = call("add-goal", {"userId": user["userId"], "goal": {"title": "Fund", "targetAmount": 100}})["goal"]
        milestone = call("add-milestone", {
            "goalId": goal["goalId"], "milestone": {"description": "Halfway"},
        })["milestone"]

        assert call("complete-milestone", milestone["milestoneId"]) == {"success": True}
        assert call("get-goal-milestones", goal["goalId"])["milestones"][0]["isCompleted"] is True


class TestQueryChannels:

    def test_monthly_totals(self, call, user):
        for kind, amount in (("INCOME", "1000"), ("EXPENSE", "400")):
            call("add-transaction", {
                "userId": user["userId"],
                "transaction": {"type": kind, "amount": amount, "transactionDate": "2024-03-10T10:00:00"},
            })

        response = call("get-monthly-totals", {"userId": user["userId"], "month": 3, "year": 2024})

        assert response == {
            "success": True,
            "totals": {"income": "1000.00", "expenses": "400.00", "netSavings": "600.00"},
        }

    def test_expenses_by_category(self, call, user):
        call("add-transaction", {
            "userId": user["userId"],
            "transaction": {"type": "EXPENSE", "amount": "12", "transactionDate": "2024-03-10T10:00:00"},
        })

        response = call("get-expenses-by-category", {"userId": user["userId"], "month": 3, "year": 2024})

        assert response["expenses"] == [{"category": "Uncategorized", "amount": "12.00"}]

    def test_month_out_of_range(self, call, user):
        response = call("get-monthly-totals", {"userId": user["userId"], "month": 0, "year": 2024})
        assert response["success"] is False

    def test_categories(self, call):
        response = call("get-categories")
        assert len(response["categories"]) == 12

    def test_upcoming_bills_default_window(self, call, user):
        call("add-bill", {
            "userId": user["userId"],
            "bill": {"billName": "Power", "amount": 80, "dueDate": "2024-03-18T12:00:00+00:00"},
        })
        call("add-bill", {
            "userId": user["userId"],
            "bill": {"billName": "Rent", "amount": 900, "dueDate": "2024-04-01T12:00:00+00:00"},
        })

        default = call("get-upcoming-bills", {"userId": user["userId"]})
        wide = call("get-upcoming-bills", {"userId": user["userId"], "days": 30})

        assert [b["billName"] for b in default["bills"]] == ["Power"]
        assert [b["billName"] for b in wide["bills"]] == ["Power", "Rent"]

    def test_upcoming_events(self, call, user):
        call("add-event", {
            "userId": user["userId"],
            "eventData": {"title": "Audit", "eventDate": "2024-03-16T09:00:00+00:00"},
        })

        response = call("get-upcoming-events", {"userId": user["userId"], "days": 7})

        assert [e["eventTitle"] for e in response["events"]] == ["Audit"]

    def test_search_notes(self, call, user):
        call("add-note", {"userId": user["userId"], "note": {"title": "2024 Budget Plan"}})
        call("add-note", {"userId": user["userId"], "note": {"title": "Misc", "content": "no match"}})

        response = call("search-notes", {"userId": user["userId"], "keyword": "budget"})

        assert [n["title"] for n in response["notes"]] == ["2024 Budget Plan"]


class TestSettingsChannels:

    def test_settings_round_trip(self, call, user):
        assert call("get-settings", user["userId"]) == {"success": True, "settings": None}

        saved = call("save-settings", {
            "userId": user["userId"], "settings": {"dashboardWidgets": ["bills", "tasks"]},
        })
        assert saved["success"] is True
        assert saved["settings"]["dashboardWidgets"] == ["bills", "tasks"]

        loaded = call("get-settings", {"userId": user["userId"]})
        assert loaded["settings"]["dashboardWidgets"] == ["bills", "tasks"]
