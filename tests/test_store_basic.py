"""Tests for SampleStore append/read behaviour in producer mode.

These tests use temporary SQLite files - no sensors required.
Tests verify:
- Store-assigned ids and timestamps
- Latest and last-N reads, ordering and bounds
- Reopen persistence and handle lifecycle
"""

import math
import re
import sqlite3

import pytest

from sensor_store import SampleStore, StoreMode, close_store, open_store
from sensor_store.errors import EmptyStore, StoreClosed
from sensor_store.models import Sample, SensorReadings
from sensor_store.schemas import SCHEMA, TABLE_NAME


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "sensors.db"


@pytest.fixture
def producer(db_path):
    store = SampleStore.open(db_path, StoreMode.PRODUCER)
    yield store
    store.close()


def _readings(i: int) -> SensorReadings:
    return SensorReadings(20.0 + i, 1000.0 + i, 21.0 + i, 40.0 + i)


# =============================================================================
# Open and Schema Tests
# =============================================================================


def test_producer_open_creates_file_and_table(db_path):
    """Producer open materializes the SensorData table."""
    assert not db_path.exists()

    with SampleStore.open(db_path, StoreMode.PRODUCER) as store:
        assert store.mode == StoreMode.PRODUCER
        assert store.count() == 0

    assert db_path.exists()

    conn = sqlite3.connect(str(db_path))
    try:
        columns = [row[1] for row in conn.execute(f"PRAGMA table_info({TABLE_NAME})")]
    finally:
        conn.close()

    assert columns == list(SCHEMA.keys())


def test_mode_accepts_strings(db_path):
    """Mode can be given by name."""
    with open_store(db_path, "producer") as store:
        assert store.mode is StoreMode.PRODUCER

    with open_store(db_path, "CONSUMER") as store:
        assert store.mode is StoreMode.CONSUMER


def test_unknown_mode_rejected(db_path):
    with pytest.raises(ValueError, match="mode must be"):
        SampleStore.open(db_path, "writer")


def test_non_positive_retention_is_unbounded(db_path):
    """retention_limit <= 0 means unbounded."""
    with SampleStore.open(db_path, StoreMode.PRODUCER, retention_limit=-5) as store:
        assert store.retention_limit == 0
        for i in range(20):
            store.append(*_readings(i))
        assert store.count() == 20


# =============================================================================
# Append and Read Tests
# =============================================================================


def test_single_append_read_latest(producer):
    """One append, read back with id 1 and exact field values."""
    sample_id = producer.append(25.5, 1013.2, 25.0, 40.0)

    assert sample_id == 1

    latest = producer.read_latest()
    assert latest.id == 1
    assert latest.bmp280_temperature == 25.5
    assert latest.bmp280_pressure == 1013.2
    assert latest.htu21d_temperature == 25.0
    assert latest.htu21d_humidity == 40.0


def test_timestamp_assigned_by_store(producer):
    """Timestamp comes from the column default (CURRENT_TIMESTAMP)."""
    producer.append(1.0, 2.0, 3.0, 4.0)

    latest = producer.read_latest()

    assert re.fullmatch(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}", latest.timestamp)


def test_ids_strictly_increasing(producer):
    ids = [producer.append(*_readings(i)) for i in range(10)]

    assert ids == list(range(1, 11))


def test_read_last_n_returns_reverse_append_order(producer):
    """N appends, ReadLastN(N) returns ids N..1 with matching fields."""
    n = 12
    for i in range(n):
        producer.append(*_readings(i))

    samples = producer.read_last_n(n)

    assert [s.id for s in samples] == list(range(n, 0, -1))
    for sample in samples:
        assert sample.readings == _readings(sample.id - 1)


def test_read_last_n_fewer_rows_than_requested(producer):
    for i in range(3):
        producer.append(*_readings(i))

    samples = producer.read_last_n(10)

    assert [s.id for s in samples] == [3, 2, 1]


def test_read_last_n_bounded_by_request(producer):
    for i in range(10):
        producer.append(*_readings(i))

    samples = producer.read_last_n(4)

    assert [s.id for s in samples] == [10, 9, 8, 7]


def test_read_last_n_beyond_integer_range(producer):
    """A request larger than SQLite can bind returns every stored row."""
    for i in range(3):
        producer.append(*_readings(i))

    samples = producer.read_last_n(2**63)

    assert [s.id for s in samples] == [3, 2, 1]


def test_read_last_n_zero(producer):
    producer.append(*_readings(0))

    assert producer.read_last_n(0) == []


def test_read_last_n_negative_rejected(producer):
    with pytest.raises(ValueError, match="max_samples must be >= 0"):
        producer.read_last_n(-1)


def test_latest_matches_last_append(producer):
    for i in range(7):
        producer.append(*_readings(i))

    latest = producer.read_latest()

    assert latest.id == 7
    assert latest.readings == _readings(6)


def test_append_readings_tuple(producer):
    sample_id = producer.append_readings(SensorReadings(1.5, 2.5, 3.5, 4.5))

    assert sample_id == 1
    assert producer.read_latest().readings == (1.5, 2.5, 3.5, 4.5)


def test_nan_and_inf_pass_through(producer):
    """No validation: NaN and infinities are stored and read back."""
    producer.append(math.nan, math.inf, -math.inf, 50.0)

    latest = producer.read_latest()

    assert math.isnan(latest.bmp280_temperature)
    assert latest.bmp280_pressure == math.inf
    assert latest.htu21d_temperature == -math.inf
    assert latest.htu21d_humidity == 50.0


# =============================================================================
# Empty Store Tests
# =============================================================================


def test_empty_store_read_latest_not_found(producer):
    with pytest.raises(EmptyStore):
        producer.read_latest()


def test_empty_store_read_last_n_empty(producer):
    assert producer.read_last_n(5) == []


# =============================================================================
# Persistence and Lifecycle Tests
# =============================================================================


def test_reopen_preserves_data_and_continues_ids(db_path):
    """Data survives reopen and ids continue from the previous maximum."""
    with SampleStore.open(db_path, StoreMode.PRODUCER) as store:
        store.append(*_readings(0))
        store.append(*_readings(1))

    with SampleStore.open(db_path, StoreMode.PRODUCER) as store:
        assert store.count() == 2
        assert store.append(*_readings(2)) == 3
        assert [s.id for s in store.read_last_n(10)] == [3, 2, 1]


def test_close_is_idempotent(db_path):
    store = SampleStore.open(db_path, StoreMode.PRODUCER)

    store.close()
    store.close()

    assert store.closed


def test_close_store_accepts_none():
    close_store(None)


def test_use_after_close_raises(db_path):
    store = SampleStore.open(db_path, StoreMode.PRODUCER)
    store.close()

    with pytest.raises(StoreClosed):
        store.append(*_readings(0))
    with pytest.raises(StoreClosed):
        store.read_latest()
    with pytest.raises(StoreClosed):
        store.read_last_n(1)
    with pytest.raises(StoreClosed):
        store.count()


def test_context_manager_closes(db_path):
    with SampleStore.open(db_path, StoreMode.PRODUCER) as store:
        assert not store.closed

    assert store.closed
    assert "closed" in repr(store)


def test_sample_to_dict_column_order():
    sample = Sample(
        id=3,
        timestamp="2025-01-15 12:30:45",
        bmp280_temperature=1.0,
        bmp280_pressure=2.0,
        htu21d_temperature=3.0,
        htu21d_humidity=4.0,
    )

    row = sample.to_dict()

    assert list(row.keys()) == list(SCHEMA.keys())
    assert row["id"] == 3
    assert row["htu21d_humidity"] == 4.0
