"""
Tests for ids and composite paths.
"""

import re

import pytest

from mona import ids
from mona.ids import DeliverablePath, TaskPath


class TestGeneratedIds:
    def test_timestamp_ids_strictly_increase(self):
        generated = [int(ids.timestamp_id()) for _ in range(500)]
        assert generated == sorted(set(generated))

    def test_client_id_shape(self):
        assert re.fullmatch(r"client-[0-9a-z]{8}", ids.new_client_id())


class TestCompositePaths:
    def test_task_path_round_trip(self):
        path = TaskPath.parse("acme::m1::d1::t1")
        assert path == TaskPath("acme", "m1", "d1", "t1")
        assert path.composite == "acme::m1::d1::t1"
        assert path.deliverable == DeliverablePath("acme", "m1", "d1")

    def test_deliverable_path(self):
        assert DeliverablePath.parse("acme::m1::d1").composite == "acme::m1::d1"

    @pytest.mark.parametrize("value", ["acme::m1::d1", "acme::m1::d1::t1::x", "acme::::d1::t1", ""])
    def test_bad_task_paths(self, value):
        with pytest.raises(ValueError):
            TaskPath.parse(value)

    def test_paths_are_hashable(self):
        assert len({TaskPath.parse("a::b::c::d"), TaskPath("a", "b", "c", "d")}) == 1
