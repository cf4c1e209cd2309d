#!/usr/bin/env python3
"""
Candle CSV inspection
=====================

Parses a regional-format candle CSV the same way the server does and
prints what would be loaded:
1. Row count and time range
2. Price range and total volume
3. Optionally the last values of an indicator

Usage:
    python scripts/inspect_csv.py data/PETR4.csv --symbol PETR4
    python scripts/inspect_csv.py data/PETR4.csv -s PETR4 --indicator rsi --period 14 --tail 5
"""

import argparse
import math
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.data import decode_source, format_decimal, load_candles
from core.errors import EngineError
from core.indicators import calculate_named, list_indicators
from core.models import CandleSeries


def _fmt(value: float) -> str:
    return "-" if math.isnan(value) else format_decimal(value, 2)


def inspect_file(path: str, symbol: str, indicator: str | None, period: int, tail: int) -> int:
    with open(path, "rb") as f:
        text = decode_source(f.read())

    try:
        candles, count = load_candles(text, symbol)
        series = CandleSeries.from_candles(symbol, candles)
    except EngineError as e:
        print(f"  {e.code}: {e}")
        return 1

    print()
    print("=" * 60)
    print(f"   {symbol}: {path}")
    print("=" * 60)

    print()
    print("[1] Rows")
    print("-" * 50)
    print(f"  candles: {count:,}")
    if not count:
        return 0
    print(f"  from:    {series.first_timestamp:%d/%m/%Y %H:%M:%S}")
    print(f"  to:      {series.last_timestamp:%d/%m/%Y %H:%M:%S}")

    print()
    print("[2] Prices")
    print("-" * 50)
    print(f"  low:    {format_decimal(min(c.low for c in candles))}")
    print(f"  high:   {format_decimal(max(c.high for c in candles))}")
    print(f"  close:  {format_decimal(series.latest.close)}")
    print(f"  volume: {format_decimal(sum(c.volume for c in candles))}")
    print(f"  trades: {sum(c.trades for c in candles):,}")

    if indicator:
        try:
            result = calculate_named(indicator, series.candles, {"period": period})
        except EngineError as e:
            print(f"  {e.code}: {e}")
            return 1

        print()
        print(f"[3] {result.name}, last {tail}")
        print("-" * 50)
        rows = list(zip(series.candles, result.values))[-tail:]
        for candle, value in rows:
            print(f"  {candle.timestamp:%d/%m/%Y %H:%M:%S}  close {format_decimal(candle.close):>12}  {_fmt(value):>12}")

    return 0


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Inspect a candle CSV (';' separated, ',' decimals)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("path", help="CSV file")
    parser.add_argument("--symbol", "-s", required=True, help="Symbol to attach to the candles")
    parser.add_argument("--indicator", "-i", choices=list_indicators(), help="Indicator to compute")
    parser.add_argument("--period", "-p", type=int, default=14, help="Indicator period (default: 14)")
    parser.add_argument("--tail", "-n", type=int, default=10, help="Values to print (default: 10)")
    args = parser.parse_args()

    return inspect_file(args.path, args.symbol, args.indicator, args.period, args.tail)


if __name__ == "__main__":
    sys.exit(main())
