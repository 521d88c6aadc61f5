"""Data models for the sensor sample store."""

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, NamedTuple, Union


class StoreMode(Enum):
    """Role a store handle is opened in.

    The role is fixed for the lifetime of the handle.
    """

    PRODUCER = "producer"
    CONSUMER = "consumer"

    @property
    def may_create(self) -> bool:
        """Whether opening in this role may create the backing file and schema."""
        return self is StoreMode.PRODUCER

    @property
    def may_write(self) -> bool:
        """Whether this role may insert or evict samples."""
        return self is StoreMode.PRODUCER

    @classmethod
    def parse(cls, value: Union["StoreMode", str]) -> "StoreMode":
        """Accept a StoreMode or its case-insensitive name/value."""
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for mode in cls:
            if text in (mode.value, mode.name.lower()):
                return mode
        raise ValueError(f"mode must be 'producer' or 'consumer', got '{value}'")


class SensorReadings(NamedTuple):
    """The four raw measurements supplied for one append."""

    bmp280_temperature: float
    bmp280_pressure: float
    htu21d_temperature: float
    htu21d_humidity: float


@dataclass(frozen=True)
class Sample:
    """One stored sensor reading.

    Attributes:
        id: Store-assigned surrogate key, strictly increasing in append order.
        timestamp: Store-assigned creation time ("YYYY-MM-DD HH:MM:SS", UTC).
        bmp280_temperature: BMP280 temperature in Celsius.
        bmp280_pressure: BMP280 pressure in hPa.
        htu21d_temperature: HTU21D temperature in Celsius.
        htu21d_humidity: HTU21D relative humidity in percent.
    """

    id: int
    timestamp: str
    bmp280_temperature: float
    bmp280_pressure: float
    htu21d_temperature: float
    htu21d_humidity: float

    @property
    def readings(self) -> SensorReadings:
        """The four measurement fields without id and timestamp."""
        return SensorReadings(
            self.bmp280_temperature,
            self.bmp280_pressure,
            self.htu21d_temperature,
            self.htu21d_humidity,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict keyed by SensorData column names, in column order."""
        return asdict(self)
