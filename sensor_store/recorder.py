"""Background recorder that polls a reading source and appends to a producer store.

Design notes:
- The recorder opens its own producer handle in start() so open errors surface
  to the caller, then hands that handle to the recorder thread. Nothing else
  uses the handle while the thread runs.
- A failing source or append is logged and the loop keeps going; one bad
  sensor read must not stop recording.
"""

import logging
import threading
from threading import Event, Thread
from typing import Callable, Optional

from sensor_store.models import SensorReadings, StoreMode
from sensor_store.store import PathLike, SampleStore, close_store

logger = logging.getLogger(__name__)

ReadingSource = Callable[[], SensorReadings]


class SampleRecorder:
    """Background producer loop.

    Runs a thread that, every poll_interval_s:
    1. Calls source() to get one SensorReadings tuple
    2. Appends it to the store (retention applied by the store)
    """

    def __init__(
        self,
        path: PathLike,
        source: ReadingSource,
        retention_limit: int = 0,
        poll_interval_s: float = 1.0,
    ) -> None:
        """Initialize recorder (does not start automatically).

        Args:
            path: Backing SQLite file, created on start() if absent
            source: Callable returning the current SensorReadings
            retention_limit: Max rows kept (<= 0 means unbounded)
            poll_interval_s: Polling interval in seconds
        """
        if poll_interval_s <= 0:
            raise ValueError(f"poll_interval_s must be positive, got {poll_interval_s}")

        self._path = path
        self._source = source
        self._retention_limit = retention_limit
        self._poll_interval = poll_interval_s

        self._store: Optional[SampleStore] = None
        self._thread: Optional[Thread] = None
        self._stop_event = Event()
        self._samples_recorded = 0

    @property
    def samples_recorded(self) -> int:
        """Number of samples appended since the last start()."""
        return self._samples_recorded

    def start(self) -> None:
        """Open the producer store and start the recording thread.

        Raises:
            RuntimeError: If recorder is already running
            OpenError: If the store cannot be opened
        """
        if self._thread and self._thread.is_alive():
            raise RuntimeError("Recorder already running")

        logger.info(f"Starting SampleRecorder (poll interval: {self._poll_interval}s)...")
        close_store(self._store)
        self._store = SampleStore.open(self._path, StoreMode.PRODUCER, self._retention_limit)
        self._stop_event.clear()
        self._samples_recorded = 0

        self._thread = Thread(
            target=self._recorder_loop,
            name="SampleRecorder",
            daemon=True,
        )
        self._thread.start()
        logger.info("SampleRecorder started")

    def stop(self) -> int:
        """Stop the recording thread and close the store.

        Returns:
            Number of samples recorded during this run
        """
        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            logger.info("Stopping SampleRecorder...")
            self._thread.join(timeout=5.0)
            if self._thread.is_alive():
                logger.warning("SampleRecorder thread did not stop cleanly")
        else:
            logger.warning("Recorder not running, nothing to stop")

        self._thread = None
        close_store(self._store)
        self._store = None
        logger.info(f"SampleRecorder stopped after {self._samples_recorded} samples")
        return self._samples_recorded

    def is_running(self) -> bool:
        """Check if recorder thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def record_once(self) -> Optional[int]:
        """Poll the source once and append the result.

        Returns:
            id of the new sample, or None if the source or append failed
        """
        store = self._store
        if store is None:
            raise RuntimeError("Recorder not started")

        try:
            readings = self._source()
        except Exception as e:
            logger.error(f"Reading source failed: {e}", exc_info=True)
            return None

        try:
            sample_id = store.append_readings(readings)
        except Exception as e:
            logger.error(f"Append failed: {e}", exc_info=True)
            return None

        self._samples_recorded += 1
        return sample_id

    def _recorder_loop(self) -> None:
        """Background thread loop that polls the source and appends to the store."""
        logger.info(f"Recorder loop started (thread {threading.get_ident()})")

        while not self._stop_event.wait(timeout=self._poll_interval):
            try:
                self.record_once()
            except Exception as e:
                logger.error(f"Error in recorder loop: {e}", exc_info=True)

        logger.info("Recorder loop stopped")
