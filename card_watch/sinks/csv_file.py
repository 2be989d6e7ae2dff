"""CSV file sink for spreadsheet exports."""

import csv
import logging
from pathlib import Path
from typing import Any

from card_watch.exceptions import SinkError
from card_watch.sinks.serialization import to_dict

logger = logging.getLogger(__name__)


class CsvFileSink:
    """Write each batch to ``<output_dir>/<entity_type>.csv``.

    Records should be flat; nested values are written with ``str()``.
    """

    def __init__(self, output_dir: str | Path, columns: list[str] | None = None) -> None:
        """Initialize CSV file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write CSV files.
        columns : list[str] | None
            Header and column order; defaults to the keys of the first record.
        """
        self.output_dir = Path(output_dir)
        self.columns = columns
        self._counts: dict[str, int] = {}
        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise SinkError(f"Cannot create output directory {self.output_dir}: {e}") from e

    def path_for(self, entity_type: str) -> Path:
        return self.output_dir / f"{entity_type}.csv"

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to a CSV file, replacing any previous one."""
        rows = [to_dict(record) for record in records]
        columns = self.columns or (list(rows[0]) if rows else [])
        try:
            with open(self.path_for(entity_type), "w", encoding="utf-8", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=columns, extrasaction="ignore")
                writer.writeheader()
                writer.writerows(rows)
        except OSError as e:
            raise SinkError(f"Failed to write {entity_type}: {e}") from e

        self._counts[entity_type] = len(records)

    def close(self) -> None:
        """Log what was written."""
        for entity_type, count in self._counts.items():
            logger.info("Wrote %d %s rows to %s", count, entity_type, self.path_for(entity_type))
