"""In-memory state of the addon: log buffer, configuration store and status aggregation."""

from .logbuffer import LogBuffer, LogEntry
from .status import StatusAggregator, StatusSnapshot
from .store import ConfigurationStore

__all__ = [
    "LogBuffer",
    "LogEntry",
    "ConfigurationStore",
    "StatusAggregator",
    "StatusSnapshot",
]
