"""Fake BMP280/HTU21D reading source for recorder tests and local runs.

Produces deterministic readings that drift a fixed step per call, and can be
told to fail on selected calls to exercise the recorder's error handling.
"""

import logging
import threading
from typing import Iterable, List, Optional, Set

from sensor_store.models import SensorReadings

logger = logging.getLogger(__name__)


class SensorReadError(IOError):
    """Raised by FakeSensorSource on an injected failure."""

    pass


class FakeSensorSource:
    """Deterministic stand-in for the sensor acquisition collaborator.

    Call the instance to get the next SensorReadings. Readings start at the
    given base values and each field moves by `step` per successful call.
    """

    def __init__(
        self,
        bmp280_temperature: float = 20.0,
        bmp280_pressure: float = 1013.25,
        htu21d_temperature: float = 20.5,
        htu21d_humidity: float = 40.0,
        step: float = 1.0,
        fail_on: Optional[Iterable[int]] = None,
    ) -> None:
        """Initialize fake source.

        Args:
            bmp280_temperature: First BMP280 temperature
            bmp280_pressure: First BMP280 pressure
            htu21d_temperature: First HTU21D temperature
            htu21d_humidity: First HTU21D humidity
            step: Amount added to every field after each successful read
            fail_on: 1-based call numbers that raise SensorReadError
        """
        self._base = SensorReadings(
            bmp280_temperature, bmp280_pressure, htu21d_temperature, htu21d_humidity
        )
        self._step = step
        self._fail_on: Set[int] = set(fail_on or ())
        self._lock = threading.Lock()
        self._calls = 0
        self._produced = 0
        self.history: List[SensorReadings] = []

    @property
    def calls(self) -> int:
        """Number of times the source was called, failures included."""
        with self._lock:
            return self._calls

    def __call__(self) -> SensorReadings:
        with self._lock:
            self._calls += 1
            if self._calls in self._fail_on:
                logger.debug(f"Injected sensor failure on call {self._calls}")
                raise SensorReadError(f"Simulated I2C read failure (call {self._calls})")

            offset = self._produced * self._step
            readings = SensorReadings(*(value + offset for value in self._base))
            self._produced += 1
            self.history.append(readings)
            return readings
