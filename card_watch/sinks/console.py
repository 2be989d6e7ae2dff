"""Console sink for interactive use."""

import json
from typing import Any

from card_watch.sinks.serialization import to_dict


class ConsoleSink:
    """Output records to stdout, as JSON or as an aligned table."""

    def __init__(self, pretty: bool = True, max_records: int | None = None, table: bool = False) -> None:
        """Initialize console sink.

        Parameters
        ----------
        pretty : bool
            Pretty-print JSON output.
        max_records : int | None
            Maximum records to print per batch (None for all).
        table : bool
            Print one aligned row per record instead of JSON.
        """
        self.pretty = pretty
        self.max_records = max_records
        self.table = table
        self._counts: dict[str, int] = {}

    def write_batch(self, entity_type: str, records: list[Any]) -> None:
        """Write a batch of records to console."""
        print(f"\n{'='*60}")
        print(f"{entity_type} ({len(records)} records)")
        print("=" * 60)

        display_records = records[: self.max_records] if self.max_records else records
        data = [to_dict(record) for record in display_records]

        if self.table:
            for line in format_table(data):
                print(line)
        else:
            for item in data:
                if self.pretty:
                    print(json.dumps(item, indent=2, ensure_ascii=False, default=str))
                else:
                    print(json.dumps(item, ensure_ascii=False, default=str))

        if self.max_records and len(records) > self.max_records:
            print(f"... and {len(records) - self.max_records} more records")

        self._counts[entity_type] = self._counts.get(entity_type, 0) + len(records)

    def close(self) -> None:
        """Print summary and close."""
        if not self._counts:
            return
        print(f"\n{'='*60}")
        for entity_type, count in self._counts.items():
            print(f"  {entity_type}: {count} records")


def format_table(rows: list[dict[str, Any]]) -> list[str]:
    """Render flat dicts as left-aligned columns under a header line."""
    if not rows:
        return []
    columns = list(rows[0])
    cells = [[("" if row.get(c) is None else str(row.get(c))) for c in columns] for row in rows]
    widths = [max(len(c), *(len(r[i]) for r in cells)) for i, c in enumerate(columns)]
    lines = ["  ".join(c.ljust(w) for c, w in zip(columns, widths)).rstrip()]
    lines.append("  ".join("-" * w for w in widths))
    lines.extend("  ".join(v.ljust(w) for v, w in zip(r, widths)).rstrip() for r in cells)
    return lines
