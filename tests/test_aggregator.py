"""
Multi-case aggregation tests.

Run with: python -m pytest tests/test_aggregator.py -v
"""

import pytest

from services.case_export import ExportRequestError, InputNotFound, MultiCaseAggregator


STORE = {
    3: {'id': 3, 'first_name': 'Three'},
    7: {'id': 7, 'first_name': 'Seven'},
    9: {'id': 9, 'first_name': 'Nine'},
}


def fetch(case_id):
    return STORE.get(case_id)


def fetch_or_raise(case_id):
    if case_id not in STORE:
        raise InputNotFound(f"Case {case_id} not found", case_id=case_id)
    return STORE[case_id]


class TestCollect:

    def test_preserves_caller_order(self):
        batch = MultiCaseAggregator(fetch).collect(ids=[7, 3, 9])
        assert [r['id'] for r in batch.records] == [7, 3, 9]

    def test_missing_ids_dropped(self):
        batch = MultiCaseAggregator(fetch).collect(ids=[7, 404, 9])
        assert [r['id'] for r in batch.records] == [7, 9]

    def test_missing_ids_dropped_when_fetch_raises(self):
        batch = MultiCaseAggregator(fetch_or_raise).collect(ids=[7, 404, 9])
        assert [r['id'] for r in batch.records] == [7, 9]

    def test_ids_take_precedence_over_cases(self):
        batch = MultiCaseAggregator(fetch).collect(ids=[3], cases=[{'id': 100}])
        assert [r['id'] for r in batch.records] == [3]

    def test_payload_cases(self):
        batch = MultiCaseAggregator(fetch).collect(cases=[{'id': 1}, 'junk', {'id': 2}])
        assert [r['id'] for r in batch.records] == [1, 2]
        assert len(batch) == 2

    def test_empty_ids_fall_through_to_cases(self):
        batch = MultiCaseAggregator(fetch).collect(ids=[], cases=[{'first_name': 'A'}, {'first_name': 'B'}])
        assert [r['first_name'] for r in batch.records] == ['A', 'B']

    def test_empty_ids_and_cases(self):
        with pytest.raises(ExportRequestError):
            MultiCaseAggregator(fetch).collect(ids=[], cases=[])

    @pytest.mark.parametrize('ids', ['71', 7, {'id': 7}])
    def test_ids_must_be_a_list(self, ids):
        """A string id is not iterated character by character."""
        with pytest.raises(ExportRequestError) as exc_info:
            MultiCaseAggregator(fetch).collect(ids=ids)
        assert exc_info.value.status_code == 400

    def test_cases_must_be_a_list(self):
        with pytest.raises(ExportRequestError):
            MultiCaseAggregator(fetch).collect(cases={'id': 1})

    def test_list_only_carried(self):
        assert MultiCaseAggregator(fetch).collect(ids=[7], list_only=True).list_only is True

    def test_neither_ids_nor_cases(self):
        with pytest.raises(ExportRequestError):
            MultiCaseAggregator(fetch).collect()
