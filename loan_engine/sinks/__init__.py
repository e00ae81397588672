"""Output sinks for lifecycle events and loan snapshots."""

from loan_engine.sinks.console import ConsoleSink
from loan_engine.sinks.json_file import JsonFileSink
from loan_engine.sinks.kafka import KafkaSink

__all__ = ["ConsoleSink", "JsonFileSink", "KafkaSink"]
