"""
Tests for global task search.
"""

from mona.search import normalize, search_tasks


class TestSearch:
    def test_normalize(self):
        assert normalize("Q3 Plan!") == "q3plan"
        assert normalize(None) == ""

    def test_matches_task_name_and_assignee(self, acme):
        results = search_tasks({"acme": acme}, "draft")
        assert [r["id"] for r in results] == ["acme::m1::d1::t1"]
        assert search_tasks({"acme": acme}, "PAT")[0]["id"] == "acme::m1::d1::t1"

    def test_client_or_deliverable_match_returns_all_their_tasks(self, acme):
        assert len(search_tasks({"acme": acme}, "acme")) == 2
        assert len(search_tasks({"acme": acme}, "spec")) == 2

    def test_ignores_punctuation_and_spaces(self, globex):
        assert len(search_tasks({"globex": globex}, "globex-corp")) == 2

    def test_label(self, acme):
        label = search_tasks({"acme": acme}, "draft")[0]["label"]
        assert label == "Acme – Spec – Draft – Pat – 03/15"
        review = search_tasks({"acme": acme}, "review")[0]["label"]
        assert review.endswith("No date")

    def test_completed_only(self, acme):
        assert search_tasks({"acme": acme}, "acme", completed_only=True) == []
        acme["meetings"][1]["deliverables"][0]["tasks"][0]["complete"] = True
        assert len(search_tasks({"acme": acme}, "acme", completed_only=True)) == 1

    def test_limit(self, acme):
        tasks = acme["meetings"][1]["deliverables"][0]["tasks"]
        tasks.extend({"id": f"x{i}", "name": f"Extra {i}"} for i in range(20))
        assert len(search_tasks({"acme": acme}, "acme")) == 10
        assert len(search_tasks({"acme": acme}, "acme", limit=3)) == 3

    def test_blank_query(self, acme):
        assert search_tasks({"acme": acme}, "  !! ") == []
