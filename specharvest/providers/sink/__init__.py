"""Item record sinks."""

from specharvest.providers.sink.json_file_sink import JsonFileSink
from specharvest.providers.sink.sqlite_sink import SQLiteItemSink

__all__ = ["JsonFileSink", "SQLiteItemSink"]
