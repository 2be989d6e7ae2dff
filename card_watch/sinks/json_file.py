"""JSON file sink for report exports."""

import json
import logging
from pathlib import Path
from typing import Any

from card_watch.exceptions import SinkError
from card_watch.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class JsonFileSink:
    """Write each batch to ``<output_dir>/<entity_type>.json``."""

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
        self.pretty = pretty
        self._counts: dict[str, int] = {}
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SinkError(f"Cannot create output directory {self.output_dir}: {e}") from e

    def path_for(self, entity_type: str) -> Path:
        return self.output_dir / f"{entity_type}.json"

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to a JSON file, replacing any previous one."""
        data = [to_dict(record) for record in records]
        try:
            with open(self.path_for(entity_type), "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False, default=str)
                else:
                    json.dump(data, f, ensure_ascii=False, default=str)
        except OSError as e:
            raise SinkError(f"Failed to write {entity_type}: {e}") from e

        self._counts[entity_type] = len(records)

    def close(self) -> None:
        """Log what was written."""
        for entity_type, count in self._counts.items():
            logger.info("Wrote %d %s records to %s", count, entity_type, self.path_for(entity_type))
