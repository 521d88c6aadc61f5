"""SQLite-backed sample store with producer/consumer roles and count-based retention.

This module provides:
- SampleStore: handle over one SensorData table, opened as producer or consumer
- open_store / close_store: thin functional wrappers around the handle

Design notes:
- Exactly one producer process writes to a given file; any number of consumer
  processes may read it at the same time. Each statement commits atomically,
  so consumers never observe a half-written row.
- A handle is not thread-safe. It may be handed to one worker thread (the
  connection is opened with check_same_thread=False), but callers sharing a
  handle must serialize access themselves.
- Retention runs synchronously after every producer append. A failed trim is
  logged and kept in last_trim_error; the append itself still succeeds.
"""

import logging
import os
import sqlite3
from pathlib import Path
from typing import List, Optional, Union

from sensor_store.errors import (
    EmptyStore,
    OpenFailed,
    ReadFailed,
    ReadOnlyViolation,
    StoreClosed,
    StoreNotFound,
    WriteFailed,
)
from sensor_store.models import Sample, SensorReadings, StoreMode
from sensor_store.schemas import (
    COUNT_SQL,
    CREATE_TABLE_SQL,
    INSERT_SQL,
    PROBE_SQL,
    SELECT_LAST_N_SQL,
    SELECT_LATEST_SQL,
    SQLITE_MAX_INTEGER,
    TRIM_SQL,
    row_to_sample,
)

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]


class SampleStore:
    """Handle over a SensorData table in a single SQLite file.

    Use SampleStore.open() to obtain a handle. The handle exclusively owns its
    connection and releases it in close(); it can also be used as a context
    manager.
    """

    def __init__(
        self,
        connection: sqlite3.Connection,
        path: Path,
        mode: StoreMode,
        retention_limit: int = 0,
    ) -> None:
        """Wrap an already-opened connection. Prefer SampleStore.open().

        Args:
            connection: Open SQLite connection, owned by this handle from now on
            path: Backing file path
            mode: Role the connection was opened for
            retention_limit: Max rows kept after each append (<= 0 means unbounded)
        """
        self._conn: Optional[sqlite3.Connection] = connection
        self._path = path
        self._mode = mode
        self._retention_limit = 0
        if retention_limit > 0:
            self._retention_limit = min(retention_limit, SQLITE_MAX_INTEGER)
        self._last_trim_error: Optional[Exception] = None

    @classmethod
    def open(
        cls,
        path: PathLike,
        mode: Union[StoreMode, str] = StoreMode.CONSUMER,
        retention_limit: int = 0,
    ) -> "SampleStore":
        """Open the store at path in the given role.

        Consumer: the file must already exist and is opened read-only at the
        engine level, so nothing on disk is created or modified.
        Producer: the file and SensorData table are created if absent; an
        existing table is used as-is.

        Args:
            path: Backing SQLite file
            mode: StoreMode.PRODUCER or StoreMode.CONSUMER (or their names)
            retention_limit: Max rows kept by a producer (<= 0 means unbounded)

        Returns:
            Open SampleStore handle

        Raises:
            StoreNotFound: Consumer open and no file exists at path
            OpenFailed: Engine, filesystem, or schema error
            ValueError: Unknown mode
        """
        mode = StoreMode.parse(mode)
        db_path = Path(path)

        if mode.may_create:
            conn = cls._connect_producer(db_path)
        else:
            conn = cls._connect_consumer(db_path)

        store = cls(conn, db_path, mode, retention_limit)
        logger.info(
            f"Opened sample store {db_path} as {mode.value} "
            f"(retention_limit={store.retention_limit or 'unbounded'})"
        )
        return store

    @staticmethod
    def _connect_producer(db_path: Path) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(str(db_path), check_same_thread=False)
        except sqlite3.Error as e:
            raise OpenFailed(f"Cannot open database {db_path}: {e}") from e

        try:
            with conn:
                conn.execute(CREATE_TABLE_SQL)
        except sqlite3.Error as e:
            conn.close()
            raise OpenFailed(f"Cannot create schema in {db_path}: {e}") from e

        return conn

    @staticmethod
    def _connect_consumer(db_path: Path) -> sqlite3.Connection:
        # Checked up front: the engine would otherwise report a generic open error
        if not db_path.exists():
            raise StoreNotFound(f"Database does not exist: {db_path}")

        uri = f"{db_path.resolve().as_uri()}?mode=ro"
        try:
            conn = sqlite3.connect(uri, uri=True, check_same_thread=False)
        except sqlite3.Error as e:
            raise OpenFailed(f"Cannot open database {db_path}: {e}") from e

        try:
            conn.execute(PROBE_SQL).fetchone()
        except sqlite3.Error as e:
            conn.close()
            raise OpenFailed(f"Cannot read database {db_path}: {e}") from e

        return conn

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def path(self) -> Path:
        """Backing file path."""
        return self._path

    @property
    def mode(self) -> StoreMode:
        """Role this handle was opened in."""
        return self._mode

    @property
    def retention_limit(self) -> int:
        """Max rows kept after each append, 0 when unbounded."""
        return self._retention_limit

    @property
    def closed(self) -> bool:
        return self._conn is None

    @property
    def last_trim_error(self) -> Optional[Exception]:
        """Error raised by the most recent retention trim, or None if it succeeded."""
        return self._last_trim_error

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def append(
        self,
        bmp280_temp: float,
        bmp280_pressure: float,
        htu21d_temp: float,
        htu21d_humidity: float,
    ) -> int:
        """Insert one sample and apply retention.

        Values are stored exactly as given; no range checks are made here.

        Args:
            bmp280_temp: BMP280 temperature
            bmp280_pressure: BMP280 pressure
            htu21d_temp: HTU21D temperature
            htu21d_humidity: HTU21D relative humidity

        Returns:
            id assigned to the new sample

        Raises:
            ReadOnlyViolation: Handle opened as consumer
            WriteFailed: Insert could not be committed (nothing is written)
            StoreClosed: Handle already closed
        """
        conn = self._require_open()

        if not self._mode.may_write:
            raise ReadOnlyViolation(f"Store {self._path} is opened read-only")

        try:
            with conn:
                cursor = conn.execute(
                    INSERT_SQL,
                    (bmp280_temp, bmp280_pressure, htu21d_temp, htu21d_humidity),
                )
        except sqlite3.Error as e:
            raise WriteFailed(f"Insert into {self._path} failed: {e}") from e

        sample_id = cursor.lastrowid
        logger.debug(
            f"Appended sample {sample_id}: bmp280=({bmp280_temp}, {bmp280_pressure}), "
            f"htu21d=({htu21d_temp}, {htu21d_humidity})"
        )

        if self._retention_limit > 0:
            self._trim(conn)

        return sample_id

    def append_readings(self, readings: SensorReadings) -> int:
        """Append a SensorReadings tuple. See append()."""
        return self.append(*readings)

    def _trim(self, conn: sqlite3.Connection) -> None:
        """Evict the lowest-id rows beyond retention_limit.

        Failures are logged and recorded, never raised: the new row is already
        committed.
        """
        try:
            with conn:
                cursor = conn.execute(TRIM_SQL, (self._retention_limit,))
        except Exception as e:
            self._last_trim_error = e
            logger.warning(f"Retention trim on {self._path} failed: {e}")
            return

        self._last_trim_error = None
        if cursor.rowcount > 0:
            logger.debug(
                f"Trimmed {cursor.rowcount} oldest samples, limit {self._retention_limit}"
            )

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def read_latest(self) -> Sample:
        """Get the sample with the highest id.

        Raises:
            EmptyStore: Store holds no samples
            ReadFailed: Query failed
            StoreClosed: Handle already closed
        """
        conn = self._require_open()

        try:
            row = conn.execute(SELECT_LATEST_SQL).fetchone()
        except sqlite3.Error as e:
            raise ReadFailed(f"Reading latest sample from {self._path} failed: {e}") from e

        if row is None:
            raise EmptyStore(f"No samples in {self._path}")

        return row_to_sample(row)

    def read_last_n(self, max_samples: int) -> List[Sample]:
        """Get up to max_samples samples, newest first.

        Args:
            max_samples: Maximum number of samples to return (>= 0)

        Returns:
            List ordered by id descending; empty if the store is empty or max_samples is 0

        Raises:
            ValueError: max_samples is negative
            ReadFailed: Query failed
            StoreClosed: Handle already closed
        """
        conn = self._require_open()

        if max_samples < 0:
            raise ValueError(f"max_samples must be >= 0, got {max_samples}")
        if max_samples == 0:
            return []

        try:
            rows = conn.execute(
                SELECT_LAST_N_SQL, (min(max_samples, SQLITE_MAX_INTEGER),)
            ).fetchall()
        except sqlite3.Error as e:
            raise ReadFailed(f"Reading samples from {self._path} failed: {e}") from e

        return [row_to_sample(row) for row in rows]

    def count(self) -> int:
        """Get the number of stored samples.

        Raises:
            ReadFailed: Query failed
            StoreClosed: Handle already closed
        """
        conn = self._require_open()

        try:
            (total,) = conn.execute(COUNT_SQL).fetchone()
        except sqlite3.Error as e:
            raise ReadFailed(f"Counting samples in {self._path} failed: {e}") from e

        return int(total)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Release the connection. Calling close() again is a no-op."""
        if self._conn is None:
            return

        self._conn.close()
        self._conn = None
        logger.info(f"Closed sample store {self._path} ({self._mode.value})")

    def _require_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise StoreClosed(f"Store {self._path} is closed")
        return self._conn

    def __enter__(self) -> "SampleStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return (
            f"SampleStore(path={str(self._path)!r}, mode={self._mode.value}, "
            f"retention_limit={self._retention_limit}, {state})"
        )


def open_store(
    path: PathLike,
    mode: Union[StoreMode, str] = StoreMode.CONSUMER,
    retention_limit: int = 0,
) -> SampleStore:
    """Open a SampleStore. See SampleStore.open()."""
    return SampleStore.open(path, mode, retention_limit)


def close_store(store: Optional[SampleStore]) -> None:
    """Close a store handle; None is accepted and ignored."""
    if store is None:
        return
    store.close()
