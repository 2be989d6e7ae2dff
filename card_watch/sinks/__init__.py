"""Output sinks for report exports."""

from card_watch.sinks.console import ConsoleSink
from card_watch.sinks.csv_file import CsvFileSink
from card_watch.sinks.json_file import JsonFileSink

__all__ = ["ConsoleSink", "CsvFileSink", "JsonFileSink"]
