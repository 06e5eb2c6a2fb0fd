"""Output sinks for funding reports."""

from funding_engine.sinks.console import ConsoleSink
from funding_engine.sinks.json_file import JsonFileSink

__all__ = ["ConsoleSink", "JsonFileSink"]
