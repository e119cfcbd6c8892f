from datetime import datetime, timedelta, timezone

import pytest

from loghorizon.model import Level, SearchCriteria, SearchResult, TimeRange
from loghorizon.service import (
    Business,
    InvalidLevelError,
    InvalidTimeRangeError,
    MlogError,
    RegisterLogError,
)


class RecordingLogger:
    def __init__(self):
        self.infos = []
        self.errors = []

    def info(self, msg, **kwargs):
        self.infos.append((msg, kwargs))

    def error(self, msg, **kwargs):
        self.errors.append((msg, kwargs))


class FakeStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.written = []
        self.criteria = []

    def _check(self):
        if self.fail:
            raise RuntimeError("store down")

    def write(self, log):
        self._check()
        self.written.append(log)

    def search(self, criteria):
        self._check()
        self.criteria.append(criteria)
        return SearchResult(logs=list(self.written), total=len(self.written))

    def count(self, criteria):
        self._check()
        self.criteria.append(criteria)
        return len(self.written)

    def export_to_file(self, criteria):
        self._check()
        self.criteria.append(criteria)
        return "logs_export.txt", 42


NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def business(logger, store):
    return Business(logger, store)


def test_register_stores_log(business, store):
    log = business.register("hello", "info", {"service": "api"})
    assert store.written == [log]
    assert log.level is Level.INFO
    assert log.message == "hello"
    assert log.metadata == {"service": "api"}
    assert len(log.id) == 26
    assert log.timestamp.tzinfo is not None


def test_register_invalid_level(business, store, logger):
    with pytest.raises(InvalidLevelError) as info:
        business.register("hello", "fatal", {})
    assert str(info.value) == "register: unrecognized level"
    assert store.written == []
    assert logger.errors[0][0] == "unrecognized level: fatal"


def test_register_empty_level_is_invalid(business):
    with pytest.raises(InvalidLevelError):
        business.register("hello", "", None)


def test_register_store_failure(logger):
    business = Business(logger, FakeStore(fail=True))
    with pytest.raises(RegisterLogError) as info:
        business.register("hello", Level.ERROR, None)
    assert str(info.value) == "register: failed on save log in writer"
    assert isinstance(info.value.__cause__, RuntimeError)
    assert logger.errors[0][0] == "failed to register log"


def test_register_ids_unique(business):
    ids = {business.register("m", "debug", None).id for _ in range(50)}
    assert len(ids) == 50


def test_query_builds_criteria(business, store):
    business.register("a", "warn", None)
    start, end = NOW - timedelta(hours=1), NOW
    result = business.query(start, end, "warn", 2, 10)
    assert result.total == 1
    assert store.criteria == [
        SearchCriteria(TimeRange(start, end), Level.WARN, page_size=10, page=2)
    ]


def test_query_without_level_or_times(business, store):
    business.query(None, None, "", 0, 0)
    assert store.criteria[0] == SearchCriteria()


def test_query_invalid_time_range(business, store):
    with pytest.raises(InvalidTimeRangeError) as info:
        business.query(NOW, NOW - timedelta(seconds=1), None, 0, 10)
    assert str(info.value) == "query: invalid time range"
    assert store.criteria == []


def test_query_equal_times_allowed(business, store):
    business.query(NOW, NOW, None, 0, 10)
    assert store.criteria[0].time_range == TimeRange(NOW, NOW)


def test_query_invalid_level(business):
    with pytest.raises(InvalidLevelError) as info:
        business.query(None, None, "trace", 0, 10)
    assert str(info.value) == "query: unrecognized level"


def test_query_store_failure_wrapped(logger):
    business = Business(logger, FakeStore(fail=True))
    with pytest.raises(MlogError) as info:
        business.query(None, None, None, 0, 10)
    assert str(info.value) == "query: store down"
    assert not isinstance(info.value, (InvalidLevelError, InvalidTimeRangeError))


def test_export_to_file(business, store):
    assert business.export_to_file(None, NOW, "error") == ("logs_export.txt", 42)
    assert store.criteria == [SearchCriteria(TimeRange(None, NOW), Level.ERROR)]


def test_export_invalid_time_range(business):
    with pytest.raises(InvalidTimeRangeError) as info:
        business.export_to_file(NOW, NOW - timedelta(days=1), None)
    assert str(info.value) == "export: invalid time range"


def test_export_invalid_level(business):
    with pytest.raises(InvalidLevelError) as info:
        business.export_to_file(None, None, "bogus")
    assert str(info.value) == "export: unrecognized level"


def test_count(business, store):
    business.register("a", "info", None)
    business.register("b", "info", None)
    assert business.count(None, None, "info") == 2
    assert store.criteria[-1].level is Level.INFO


def test_count_errors(business, logger):
    with pytest.raises(InvalidTimeRangeError) as info:
        business.count(NOW, NOW - timedelta(minutes=1), None)
    assert str(info.value) == "count: invalid time range"
    assert logger.errors[-1][0] == "end time before start time"


def test_count_store_failure(logger):
    business = Business(logger, FakeStore(fail=True))
    with pytest.raises(MlogError) as info:
        business.count(None, None, None)
    assert str(info.value) == "count: store down"
    assert logger.errors[-1][0] == "failed to count logs"


def test_new_with_tx_returns_same_service(business):
    class Tx:
        def commit(self):
            pass

        def rollback(self):
            pass

    assert business.new_with_tx(Tx()) is business