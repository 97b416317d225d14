"""
Tests for quick-add parsing.
"""

from datetime import date

from mona.aggregation import deliverables_by_bucket
from mona.quick_add import QuickTask, add_quick_task, parse_due_phrase, parse_quick_task

# A Wednesday
TODAY = date(2026, 10, 21)


class TestParseDuePhrase:
    def test_today_and_tomorrow(self):
        assert parse_due_phrase("do it today", TODAY) == "10/21"
        assert parse_due_phrase("do it tomorrow", TODAY) == "10/22"

    def test_weekday_on_or_after_today(self):
        assert parse_due_phrase("by friday", TODAY) == "10/23"
        assert parse_due_phrase("by Wednesday", TODAY) == "10/21"
        assert parse_due_phrase("monday", TODAY) == "10/26"

    def test_next_weekday_is_in_next_week(self):
        assert parse_due_phrase("next monday", TODAY) == "10/26"
        assert parse_due_phrase("next friday", TODAY) == "10/30"

    def test_explicit_date(self):
        assert parse_due_phrase("due 3/5", TODAY) == "03/05"
        assert parse_due_phrase("due 13/40", TODAY) == ""

    def test_nothing(self):
        assert parse_due_phrase("whenever", TODAY) == ""


class TestParseQuickTask:
    def test_full_phrase(self, acme):
        parsed = parse_quick_task("Acme send deck to Pat tomorrow", {"acme": acme}, TODAY)
        assert parsed == QuickTask("acme", "Acme", "send deck", ["Pat"], "10/22")

    def test_client_match_is_case_insensitive(self, acme):
        parsed = parse_quick_task("call acme", {"acme": acme}, TODAY)
        assert parsed.client_id == "acme"
        assert parsed.task == "call"
        assert parsed.assignees == []
        assert parsed.due == ""

    def test_lowercase_name_is_not_an_assignee(self, acme):
        parsed = parse_quick_task("Acme write to everyone", {"acme": acme}, TODAY)
        assert parsed.assignees == []

    def test_no_client(self, acme):
        assert parse_quick_task("buy milk", {"acme": acme}, TODAY) is None

    def test_only_client_name(self, acme):
        assert parse_quick_task("Acme", {"acme": acme}, TODAY).task == "Untitled Task"


class TestAddQuickTask:
    def test_creates_deliverable_in_adhoc_meeting(self, acme):
        parsed = QuickTask("acme", "Acme", "send deck", ["Pat"], "10/22")
        updated = add_quick_task(acme, parsed)
        adhoc = updated["meetings"][0]
        assert adhoc["isAdHoc"] is True
        assert len(adhoc["deliverables"]) == 1
        deliverable = adhoc["deliverables"][0]
        assert deliverable["bucket"] == "Unassigned"
        assert deliverable["isDeliverableComplete"] is False
        task = adhoc["deliverables"][0]["tasks"][0]
        assert (task["name"], task["assignees"], task["due"], task["complete"]) == (
            "send deck",
            ["Pat"],
            "10/22",
            False,
        )
        assert acme["meetings"][0]["deliverables"] == []

    def test_created_deliverable_lands_on_unassigned_column(self, acme):
        updated = add_quick_task(acme, QuickTask("acme", "Acme", "send deck", [], "10/22"))
        column = deliverables_by_bucket({"acme": updated})["Unassigned"]
        assert [r["clientId"] for r in column] == ["acme"]
        assert [t["name"] for t in column[0]["tasks"]] == ["send deck"]

    def test_reuses_first_deliverable(self, acme):
        acme["meetings"][0]["deliverables"] = [{"id": "d0", "name": "Inbox", "tasks": []}]
        updated = add_quick_task(acme, QuickTask("acme", "Acme", "a"))
        updated = add_quick_task(updated, QuickTask("acme", "Acme", "b"))
        assert [t["name"] for t in updated["meetings"][0]["deliverables"][0]["tasks"]] == ["a", "b"]

    def test_repairs_missing_adhoc(self, globex):
        updated = add_quick_task(globex, QuickTask("globex", "Globex Corp", "x"))
        assert updated["meetings"][0]["id"] == "adhoc"
