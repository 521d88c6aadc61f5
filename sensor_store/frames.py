"""pandas views over stored samples: DataFrames, summary statistics, CSV export."""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import pandas as pd

from sensor_store.models import Sample
from sensor_store.schemas import SCHEMA
from sensor_store.store import SampleStore

logger = logging.getLogger(__name__)

# SensorData timestamps are CURRENT_TIMESTAMP text, always UTC
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def samples_to_dataframe(samples: Iterable[Sample]) -> pd.DataFrame:
    """Build a DataFrame with SensorData columns, oldest sample first.

    Args:
        samples: Samples in any order (e.g. from SampleStore.read_last_n())

    Returns:
        DataFrame with SCHEMA columns sorted by id ascending; empty with the
        same columns if no samples are given
    """
    rows = [s.to_dict() for s in samples]
    df = pd.DataFrame(rows, columns=list(SCHEMA.keys()))
    if df.empty:
        return df
    return df.sort_values("id").reset_index(drop=True)


def history_frame(store: SampleStore, max_samples: int) -> pd.DataFrame:
    """Read the last max_samples samples from store as a DataFrame (oldest first)."""
    return samples_to_dataframe(store.read_last_n(max_samples))


def get_stats(samples: Iterable[Sample]) -> dict:
    """Get summary statistics about a set of samples.

    Returns:
        Dictionary with keys:
            - row_count: Number of samples
            - first_id / last_id: Lowest and highest id (or None)
            - start_time / end_time: Timestamps of first and last sample (or None)
            - duration_s: Time span of data in seconds (or 0)
            - est_sample_rate_hz: Estimated sample rate (or 0)
    """
    df = samples_to_dataframe(samples)

    if df.empty:
        return {
            "row_count": 0,
            "first_id": None,
            "last_id": None,
            "start_time": None,
            "end_time": None,
            "duration_s": 0.0,
            "est_sample_rate_hz": 0.0,
        }

    # Rows with a missing or malformed timestamp are left out of the time span
    timestamps = pd.to_datetime(
        df["timestamp"], format=TIMESTAMP_FORMAT, utc=True, errors="coerce"
    ).dropna()

    start_time = end_time = None
    duration_s = 0.0
    rate_hz = 0.0
    if not timestamps.empty:
        start = timestamps.iloc[0]
        end = timestamps.iloc[-1]
        start_time = start.isoformat()
        end_time = end.isoformat()
        duration_s = (end - start).total_seconds()
        if duration_s > 0 and len(timestamps) > 1:
            rate_hz = (len(timestamps) - 1) / duration_s

    return {
        "row_count": len(df),
        "first_id": int(df["id"].iloc[0]),
        "last_id": int(df["id"].iloc[-1]),
        "start_time": start_time,
        "end_time": end_time,
        "duration_s": duration_s,
        "est_sample_rate_hz": rate_hz,
    }


def export_csv(samples: Iterable[Sample], path: Optional[str] = None) -> str:
    """Export samples to a CSV file, oldest first.

    Args:
        samples: Samples to export
        path: Output file path. If None, generates timestamped filename.

    Returns:
        Absolute path to exported file
    """
    df = samples_to_dataframe(samples)

    if path is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        path = f"sensor_samples_{timestamp}.csv"

    df.to_csv(path, index=False)
    abs_path = str(Path(path).resolve())
    logger.info(f"Exported {len(df)} samples to CSV: {abs_path}")
    return abs_path
