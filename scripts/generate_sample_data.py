#!/usr/bin/env python3
"""Generate sample data files for validation.

This script writes one raw Clover customers page per profile, plus the
analyzed view of each, into the local/ folder. These files can be used for
manual validation of the classification rules and as ``--input`` for the
card-watch CLI.
"""

import json
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from card_watch.analysis import analyze_customers, generate_summary
from card_watch.clover.schemas import parse_customer
from card_watch.generators import CloverCustomerGenerator, CustomerProfile
from card_watch.models import MerchantCurrency
from card_watch.sinks.serialization import serialize_value, to_dict


def save_json(data: object, filename: str, output_dir: Path) -> None:
    """Save data to JSON file."""
    filepath = output_dir / filename
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)
    print(f"Saved {filepath}")


def main() -> None:
    """Generate one file per customer profile."""
    output_dir = project_root / "local"
    output_dir.mkdir(exist_ok=True)

    now = datetime(2026, 11, 15, tzinfo=timezone.utc)
    generator = CloverCustomerGenerator(seed=42)
    per_profile = 5

    print(f"Generating sample data relative to {now.isoformat()}...")
    everything = []
    for profile in CustomerProfile:
        records = [generator.generate(now, profile) for _ in range(per_profile)]
        everything.extend(records)
        save_json({"USD": {"elements": records}}, f"clover_{profile.value}.json", output_dir)

        customers = [parse_customer(r).to_domain(MerchantCurrency.USD) for r in records]
        analyzed = analyze_customers(customers, now)
        save_json([to_dict(a) for a in analyzed], f"analyzed_{profile.value}.json", output_dir)

    customers = [parse_customer(r).to_domain(MerchantCurrency.USD) for r in everything]
    summary = generate_summary(analyze_customers(customers, now))
    save_json(serialize_value(summary), "summary.json", output_dir)
    save_json({"USD": {"elements": everything}}, "clover_all.json", output_dir)

    print(f"\nDone. {len(everything)} customers across {len(CustomerProfile)} profiles.")


if __name__ == "__main__":
    main()
