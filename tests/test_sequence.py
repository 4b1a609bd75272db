"""Tests for ObservableSequence."""

import pytest

from laces import ObservableMap, ObservableSequence


@pytest.fixture
def seq():
    return ObservableSequence([1, 2, 3])


def _capture(target, *names):
    log = []
    for name in names:
        target.bind(name, lambda e: log.append(e.as_dict()))
    return log


class TestReads:
    def test_list_protocol(self, seq):
        assert len(seq) == 3
        assert seq[0] == 1
        assert seq[-1] == 3
        assert seq[1:] == [2, 3]
        assert list(seq) == [1, 2, 3]
        assert 2 in seq
        assert seq.index(3) == 2
        assert seq.count(1) == 1
        assert seq == [1, 2, 3]
        assert seq == (1, 2, 3)
        assert repr(seq) == "ObservableSequence([1, 2, 3])"

    def test_get(self, seq):
        assert seq.get(1) == 2
        assert seq.get(10) is None
        assert seq.get(10, "nope") == "nope"

    def test_empty(self):
        assert bool(ObservableSequence()) is False
        assert ObservableSequence() == []


class TestPushPop:
    def test_push_fires_add(self, seq):
        events = _capture(seq, "add")
        assert seq.push(4) == 4
        assert seq == [1, 2, 3, 4]
        assert events == [{"name": "add", "index": 3, "elements": [4]}]

    def test_push_then_pop_round_trip(self, seq):
        log = []
        seq.bind("add", lambda e: log.append((e.name, e.elements)))
        seq.bind("remove", lambda e: log.append((e.name, e.elements)))
        seq.push("x")
        assert seq.pop() == "x"
        assert seq == [1, 2, 3]
        assert log == [("add", ["x"]), ("remove", ["x"])]

    def test_push_many(self, seq):
        events = _capture(seq, "add", "change")
        seq.push(4, 5)
        assert seq == [1, 2, 3, 4, 5]
        assert events == [
            {"name": "add", "index": 3, "elements": [4, 5]},
            {"name": "change", "index": 3, "elements": [4, 5]},
        ]

    def test_unshift(self, seq):
        events = _capture(seq, "add")
        assert seq.unshift(-1, 0) == 5
        assert seq == [-1, 0, 1, 2, 3]
        assert events == [{"name": "add", "index": 0, "elements": [-1, 0]}]

    def test_shift(self, seq):
        events = _capture(seq, "remove", "change")
        assert seq.shift() == 1
        assert seq == [2, 3]
        assert events == [
            {"name": "remove", "index": 0, "elements": [1]},
            {"name": "change", "index": 0, "elements": [1]},
        ]

    def test_pop_and_shift_on_empty(self):
        seq = ObservableSequence()
        events = _capture(seq, "remove", "change")
        assert seq.pop() is None
        assert seq.shift() is None
        assert events == []


class TestRemoveAndSplice:
    def test_remove_by_index(self, seq):
        events = _capture(seq, "remove", "change")
        assert seq.remove(2) is True
        assert seq == [1, 2]
        assert events == [
            {"name": "remove", "index": 2, "elements": [3]},
            {"name": "change", "index": 2, "elements": [3]},
        ]

    def test_remove_out_of_range(self, seq):
        events = _capture(seq, "remove", "change")
        assert seq.remove(7) is False
        assert seq == [1, 2, 3]
        assert events == []

    def test_splice_remove_and_insert(self, seq):
        events = _capture(seq, "remove", "add", "change")
        assert seq.splice(1, 1, "a", "b") == [2]
        assert seq == [1, "a", "b", 3]
        assert events == [
            {"name": "remove", "index": 1, "elements": [2]},
            {"name": "change", "index": 1, "elements": [2]},
            {"name": "add", "index": 1, "elements": ["a", "b"]},
            {"name": "change", "index": 1, "elements": ["a", "b"]},
        ]

    def test_splice_insert_only(self, seq):
        events = _capture(seq, "remove", "add")
        assert seq.splice(0, 0, 0) == []
        assert seq == [0, 1, 2, 3]
        assert [e["name"] for e in events] == ["add"]

    def test_splice_to_end(self, seq):
        assert seq.splice(1) == [2, 3]
        assert seq == [1]

    def test_splice_negative_index(self, seq):
        assert seq.splice(-1, 1) == [3]
        assert seq == [1, 2]

    def test_splice_nothing_fires_nothing(self, seq):
        events = _capture(seq, "remove", "add", "change")
        assert seq.splice(1, 0) == []
        assert events == []


class TestSetAndReorder:
    def test_set_fires_change(self, seq):
        events = _capture(seq, "change")
        seq.set(0, 10)
        assert seq == [10, 2, 3]
        assert events == [{"name": "change", "index": 0, "value": 10, "old_value": 1, "elements": [10]}]

    def test_set_at_length_appends(self, seq):
        events = _capture(seq, "add")
        seq.set(3, 4)
        assert seq == [1, 2, 3, 4]
        assert len(events) == 1

    def test_set_out_of_range(self, seq):
        with pytest.raises(IndexError):
            seq.set(10, 0)

    def test_item_assignment_and_deletion(self, seq):
        seq[0] = 9
        del seq[1]
        assert seq == [9, 3]
        with pytest.raises(IndexError):
            del seq[5]

    def test_slice_assignment_and_deletion(self, seq):
        seq[0:2] = ["a"]
        assert seq == ["a", 3]
        del seq[:]
        assert seq == []

    def test_sort_and_reverse_fire_change_with_no_elements(self):
        seq = ObservableSequence([3, 1, 2])
        events = _capture(seq, "change")
        seq.sort()
        assert seq == [1, 2, 3]
        seq.reverse()
        assert seq == [3, 2, 1]
        seq.sort(key=lambda v: -v, reverse=True)
        assert seq == [1, 2, 3]
        assert events == [{"name": "change", "elements": []}] * 3

    def test_sort_maps_without_key(self):
        seq = ObservableSequence([{"id": 2}, {"id": 1}])
        events = _capture(seq, "change")
        seq.sort()
        assert [room.id for room in seq] == [1, 2]
        assert events == [{"name": "change", "elements": []}]

    def test_sort_mixed_types_by_string_form(self):
        seq = ObservableSequence([3, "a", 1])
        seq.sort()
        assert seq == [1, 3, "a"]
        seq.sort(reverse=True)
        assert seq == ["a", 3, 1]

    def test_sort_keeps_forwarding(self):
        seq = ObservableSequence([{"id": 2}, {"id": 1}])
        seq.sort(key=lambda room: room.id)
        events = _capture(seq, "change:0")
        seq[0].id = 5
        assert len(events) == 1

    def test_list_aliases(self):
        seq = ObservableSequence()
        seq.append(1)
        seq.extend([2, 3])
        seq.insert(0, 0)
        assert seq == [0, 1, 2, 3]
        seq.clear()
        assert seq == []


class TestNestedElements:
    def test_elements_are_wrapped(self):
        seq = ObservableSequence([{"id": 1}, [1, 2]])
        assert isinstance(seq[0], ObservableMap)
        assert isinstance(seq[1], ObservableSequence)

    def test_push_map_element(self, seq):
        events = _capture(seq, "add")
        seq.push(ObservableMap({"a": 1, "b": 2}))
        assert seq == [1, 2, 3, {"a": 1, "b": 2}]
        assert events == [{"name": "add", "index": 3, "elements": [{"a": 1, "b": 2}]}]

    def test_element_change_is_forwarded_with_current_index(self):
        seq = ObservableSequence([{"id": 1}, {"id": 3}])
        room = seq[1]
        events = []
        seq.bind("change", events.append)
        seq.shift()
        events.clear()
        room.id = 4
        assert len(events) == 1
        assert events[0].index == 0
        assert events[0].elements == [room]

    def test_removed_element_stops_forwarding(self):
        seq = ObservableSequence([{"id": 1}])
        room = seq.pop()
        events = []
        seq.bind("change", events.append)
        room.id = 2
        assert events == []

    def test_replaced_element_stops_forwarding(self):
        seq = ObservableSequence([{"id": 1}])
        old = seq[0]
        seq[0] = {"id": 2}
        events = []
        seq.bind("change", events.append)
        old.id = 5
        assert events == []
        seq[0].id = 6
        assert len(events) == 1

    def test_same_element_twice_keeps_one_binding_after_removal(self):
        shared = ObservableMap({"a": 1})
        seq = ObservableSequence([shared, shared])
        seq.pop()
        events = []
        seq.bind("change", events.append)
        shared.a = 2
        assert len(events) == 1

    def test_reordering_keeps_forwarding(self):
        seq = ObservableSequence([{"n": 2}, {"n": 1}])
        seq.sort(key=lambda m: m.n)
        events = []
        seq.bind("change:1", events.append)
        seq[1].n = 5
        assert len(events) == 1
