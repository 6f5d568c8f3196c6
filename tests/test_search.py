from types import SimpleNamespace
from delivery_admin.utils.search import filter_records, resolve_path


RECORDS = [
    {'id': 1, 'status': 'new', 'client': {'full_name': 'Sara Ahmed'}, 'driver': None},
    {'id': 2, 'status': 'completed', 'client': {'full_name': 'Khalid Omar'}, 'driver': {'full_name': 'Sami'}},
]
FIELDS = ('id', 'status', 'client.full_name', 'driver.full_name')


def test_empty_query_returns_everything():
    assert filter_records(RECORDS, '', FIELDS) == RECORDS
    assert filter_records(RECORDS, None, FIELDS) == RECORDS
    assert filter_records(RECORDS, '   ', FIELDS) == RECORDS


def test_case_insensitive_nested_match():
    assert filter_records(RECORDS, 'SARA', FIELDS) == [RECORDS[0]]


def test_missing_nested_value_is_skipped():
    assert filter_records(RECORDS, 'sami', FIELDS) == [RECORDS[1]]


def test_numbers_are_matched_as_text():
    assert filter_records(RECORDS, '2', FIELDS) == [RECORDS[1]]


def test_no_match():
    assert filter_records(RECORDS, 'zzz', FIELDS) == []


def test_resolve_path_on_objects():
    record = SimpleNamespace(client=SimpleNamespace(full_name='Nora'))
    assert resolve_path(record, 'client.full_name') == 'Nora'
    assert resolve_path(record, 'driver.full_name') is None
