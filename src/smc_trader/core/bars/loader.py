"""
Bar file loader.

Reads OHLCV history from CSV or Parquet files into `Bar` objects ordered
oldest first, ready for `InMemoryBarProvider.load()`.

Required columns: ts (epoch seconds) or datetime, open, high, low, close.
`volume` is optional and defaults to 0.
"""
from __future__ import annotations

from pathlib import Path
from typing import List

import pandas as pd

from .bar import Bar

REQUIRED_COLUMNS = ["open", "high", "low", "close"]


def _read_frame(path: Path) -> pd.DataFrame:
    if path.suffix.lower() == ".parquet":
        return pd.read_parquet(path)
    return pd.read_csv(path)


def _timestamps(df: pd.DataFrame, path: Path) -> pd.Series:
    if "ts" in df.columns:
        return df["ts"].astype("int64")
    if "timestamp" in df.columns:
        return df["timestamp"].astype("int64")
    if "datetime" in df.columns:
        moments = pd.to_datetime(df["datetime"], utc=True)
        return (moments - pd.Timestamp(0, tz="UTC")) // pd.Timedelta(seconds=1)
    raise ValueError(f"{path.name}: needs a ts, timestamp or datetime column")


def load_bars(path: Path | str) -> List[Bar]:
    """
    Load bars from a CSV or Parquet file, sorted and de-duplicated by time.

    Raises:
        FileNotFoundError: if the file does not exist
        ValueError: on missing columns
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Bar file not found: {p}")

    df = _read_frame(p)
    missing = set(REQUIRED_COLUMNS) - set(df.columns)
    if missing:
        raise ValueError(f"{p.name}: missing columns {sorted(missing)}")

    df = df.assign(ts=_timestamps(df, p))
    if "volume" not in df.columns:
        df = df.assign(volume=0.0)
    df = df.sort_values("ts", kind="stable").drop_duplicates(subset=["ts"], keep="last")

    return [
        Bar(
            ts=int(row.ts),
            open=float(row.open),
            high=float(row.high),
            low=float(row.low),
            close=float(row.close),
            volume=float(row.volume),
        )
        for row in df.itertuples(index=False)
    ]


__all__ = ["load_bars", "REQUIRED_COLUMNS"]
