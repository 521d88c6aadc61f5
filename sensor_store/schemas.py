"""On-disk schema of the SensorData table and the statements run against it.

The layout must stay compatible with existing deployments: the table name,
column names, and column affinities are read by other processes.
"""

import math
from typing import Any, Optional, Sequence

from sensor_store.models import Sample

TABLE_NAME = "SensorData"

# Column names and the Python type each one is read back as
SCHEMA = {
    "id": int,
    "timestamp": str,  # DATETIME DEFAULT CURRENT_TIMESTAMP, stored as text
    "bmp280_temperature": float,
    "bmp280_pressure": float,
    "htu21d_temperature": float,
    "htu21d_humidity": float,
}

MEASUREMENT_COLUMNS = (
    "bmp280_temperature",
    "bmp280_pressure",
    "htu21d_temperature",
    "htu21d_humidity",
)

CREATE_TABLE_SQL = (
    f"CREATE TABLE IF NOT EXISTS {TABLE_NAME} ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT, "
    "timestamp DATETIME DEFAULT CURRENT_TIMESTAMP, "
    "bmp280_temperature REAL, "
    "bmp280_pressure REAL, "
    "htu21d_temperature REAL, "
    "htu21d_humidity REAL);"
)

# Consumer open probes the file; fails on anything that is not a database
PROBE_SQL = "SELECT count(*) FROM sqlite_master;"

INSERT_SQL = (
    f"INSERT INTO {TABLE_NAME} ({', '.join(MEASUREMENT_COLUMNS)}) "
    "VALUES (?, ?, ?, ?);"
)

_SELECT_COLUMNS = ", ".join(SCHEMA.keys())

SELECT_LATEST_SQL = f"SELECT {_SELECT_COLUMNS} FROM {TABLE_NAME} ORDER BY id DESC LIMIT 1;"

SELECT_LAST_N_SQL = f"SELECT {_SELECT_COLUMNS} FROM {TABLE_NAME} ORDER BY id DESC LIMIT ?;"

COUNT_SQL = f"SELECT count(*) FROM {TABLE_NAME};"

# Largest value SQLite can bind as INTEGER; LIMIT bounds are clamped to it
SQLITE_MAX_INTEGER = 2**63 - 1

TRIM_SQL = (
    f"DELETE FROM {TABLE_NAME} WHERE id NOT IN ("
    f"SELECT id FROM {TABLE_NAME} ORDER BY id DESC LIMIT ?);"
)


def _to_float(value: Optional[float]) -> float:
    # SQLite stores NaN as NULL
    if value is None:
        return math.nan
    return float(value)


def row_to_sample(row: Sequence[Any]) -> Sample:
    """Convert a row selected with SCHEMA column order into a Sample.

    Args:
        row: Tuple (or sqlite3.Row) in SCHEMA column order

    Returns:
        Sample with NULL measurements mapped back to NaN
    """
    return Sample(
        id=int(row[0]),
        timestamp="" if row[1] is None else str(row[1]),
        bmp280_temperature=_to_float(row[2]),
        bmp280_pressure=_to_float(row[3]),
        htu21d_temperature=_to_float(row[4]),
        htu21d_humidity=_to_float(row[5]),
    )

