"""
sensor_store - Bounded SQLite time-series store for BMP280/HTU21D sensor samples.

One producer process appends and enforces retention; any number of consumer
processes read the latest sample or the last N samples.
"""

from sensor_store.errors import (
    AppendError,
    EmptyStore,
    NotFound,
    OpenError,
    OpenFailed,
    ReadError,
    ReadFailed,
    ReadOnlyViolation,
    SampleStoreError,
    StoreClosed,
    StoreNotFound,
    WriteFailed,
)
from sensor_store.models import Sample, SensorReadings, StoreMode
from sensor_store.store import SampleStore, close_store, open_store

__version__ = "0.1.0"

__all__ = [
    "SampleStore",
    "open_store",
    "close_store",
    "Sample",
    "SensorReadings",
    "StoreMode",
    "SampleStoreError",
    "NotFound",
    "OpenError",
    "OpenFailed",
    "StoreNotFound",
    "AppendError",
    "ReadOnlyViolation",
    "WriteFailed",
    "ReadError",
    "ReadFailed",
    "EmptyStore",
    "StoreClosed",
]
