"""JSON file sink for exporting events and loan snapshots to files."""

import json
from pathlib import Path
from typing import Any

from loan_engine.exceptions import SinkError
from loan_engine.sinks.serialization import to_dict


class JsonFileSink:
    """Append events to JSON Lines files and dump batches as JSON arrays."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print batch JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def send(self, topic: str, record: Any, key: str | None = None) -> None:
        """Append one record to ``<topic>.jsonl``."""
        # Use topic name as filename (replace dots with underscores)
        file_path = self.output_dir / (topic.replace(".", "_") + ".jsonl")
        line = json.dumps(to_dict(record), ensure_ascii=False, default=str)

        try:
            with open(file_path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as e:
            raise SinkError(f"Failed to write to {file_path}: {e}") from e

        self._counts[topic] = self._counts.get(topic, 0) + 1

    def write_batch(self, topic: str, records: list[Any]) -> None:
        """Write a batch of records to ``<topic>.json``, replacing it."""
        file_path = self.output_dir / f"{topic}.json"

        data = [to_dict(record) for record in records]

        with open(file_path, "w", encoding="utf-8") as f:
            if self.pretty:
                json.dump(data, f, indent=2, ensure_ascii=False, default=str)
            else:
                json.dump(data, f, ensure_ascii=False, default=str)

        self._counts[topic] = len(records)

    def close(self) -> None:
        """Print summary."""
        print(f"JSON files written to: {self.output_dir}")
        for topic, count in self._counts.items():
            print(f"  {topic}: {count} records")
