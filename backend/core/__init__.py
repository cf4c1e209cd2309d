"""Core logic for candle ingestion, indicators, and models.

This package contains pure business logic with no I/O dependencies
(no file, network, or process state). The async service in app/
builds on it.
"""
