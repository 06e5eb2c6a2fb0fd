"""JSON file sink for exporting funding reports."""

import json
import logging
from pathlib import Path
from typing import Any

from funding_engine.exceptions import SinkError
from funding_engine.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Output records to one JSON file per entity type."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to a JSON file."""
        file_path = self.output_dir / f"{entity_type}.json"

        data = [to_dict(record) for record in records]

        try:
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(data, f, ensure_ascii=False)
        except OSError as exc:
            raise SinkError(f"Failed to write {file_path}: {exc}") from exc

        self._counts[entity_type] = len(records)

    def close(self) -> None:
        """Log a summary of written files."""
        logger.info("JSON files written to: %s", self.output_dir)
        for entity_type, count in self._counts.items():
            logger.info("  %s: %d records", entity_type, count)
