"""Technical indicator math (pure NumPy, no I/O).

Every function returns a list the same length as its input, with NaN
where the lookback window is not yet filled. Empty input yields ``[]``.
"""

from typing import Sequence

import numpy as np


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=np.float64)


def _check_period(period: int) -> None:
    if period < 1:
        raise ValueError(f"period must be >= 1, got {period}")


def sma(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Simple Moving Average.

    Args:
        values: Sequence of price values
        period: SMA period

    Returns:
        List of SMA values; the first ``period - 1`` are NaN
    """
    _check_period(period)
    arr = _as_array(values)
    result = np.full(len(arr), np.nan)
    if len(arr) >= period:
        windows = np.lib.stride_tricks.sliding_window_view(arr, period)
        result[period - 1:] = windows.mean(axis=1)
    return result.tolist()


def ema(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Exponential Moving Average.

    Seeded with the SMA of the first ``period`` values, then
    ``ema[i] = value[i] * alpha + ema[i-1] * (1 - alpha)`` with
    ``alpha = 2 / (period + 1)``.

    Args:
        values: Sequence of price values
        period: EMA period

    Returns:
        List of EMA values (same length as input, with NaN for initial values)
    """
    _check_period(period)
    arr = _as_array(values)
    result = np.full(len(arr), np.nan)
    if len(arr) < period:
        return result.tolist()

    alpha = 2.0 / (period + 1)
    prev = float(arr[:period].mean())
    result[period - 1] = prev
    for i in range(period, len(arr)):
        prev = float(arr[i]) * alpha + prev * (1 - alpha)
        result[i] = prev

    return result.tolist()


# RSI reported when both average gain and average loss are zero.
FLAT_MARKET_RSI = 50.0


def _rsi_value(avg_gain: float, avg_loss: float) -> float:
    if avg_loss == 0:
        return 100.0 if avg_gain > 0 else FLAT_MARKET_RSI
    rs = avg_gain / avg_loss
    return 100.0 - 100.0 / (1.0 + rs)


def rsi(values: Sequence[float], period: int) -> list[float]:
    """
    Calculate Relative Strength Index with Wilder's smoothing.

    The first ``period`` outputs are NaN. Average gain/loss are seeded with
    the mean of the first ``period`` deltas and then updated as
    ``avg = (avg * (period - 1) + current) / period``.

    Args:
        values: Sequence of price values
        period: RSI period

    Returns:
        List of RSI values in [0, 100]
    """
    _check_period(period)
    arr = _as_array(values)
    result = np.full(len(arr), np.nan)
    if len(arr) <= period:
        return result.tolist()

    deltas = np.diff(arr)
    gains = np.where(deltas > 0, deltas, 0.0)
    losses = np.where(deltas < 0, -deltas, 0.0)

    avg_gain = float(gains[:period].mean())
    avg_loss = float(losses[:period].mean())
    result[period] = _rsi_value(avg_gain, avg_loss)

    for i in range(period + 1, len(arr)):
        avg_gain = (avg_gain * (period - 1) + float(gains[i - 1])) / period
        avg_loss = (avg_loss * (period - 1) + float(losses[i - 1])) / period
        result[i] = _rsi_value(avg_gain, avg_loss)

    return result.tolist()
