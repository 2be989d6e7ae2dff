"""Shared serialization utilities for sinks."""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from card_watch.models import CustomerWithExpiration, CustomerWithStatus


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if isinstance(obj, CustomerWithExpiration):
        return analyzed_customer_to_dict(obj)
    if isinstance(obj, CustomerWithStatus):
        return customer_status_to_dict(obj)
    if is_dataclass(obj):
        return dataclass_to_dict(obj)
    if isinstance(obj, dict):
        return {k: serialize_value(v) for k, v in obj.items()}
    return {"value": str(obj)}


def dataclass_to_dict(obj: Any) -> dict:
    """Convert a dataclass, recursing into nested dataclasses, to JSON-ready data."""
    return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Enum):
        return value.value
    elif isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif is_dataclass(value) and not isinstance(value, type):
        return dataclass_to_dict(value)
    elif isinstance(value, dict):
        return {serialize_value(k): serialize_value(v) for k, v in value.items()}
    elif isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    return value


def analyzed_customer_to_dict(analyzed: CustomerWithExpiration) -> dict:
    """Customer record with per-card classification and derived flags."""
    customer = analyzed.customer
    data = dataclass_to_dict(customer)
    data.pop("cards")
    data["display_name"] = customer.display_name
    data["primary_email"] = customer.primary_email
    data["primary_phone"] = customer.primary_phone
    data["total_cards"] = analyzed.total_cards
    data["has_expired"] = analyzed.has_expired
    data["has_expiring_soon"] = analyzed.has_expiring_soon
    data["cards"] = [
        {
            **dataclass_to_dict(a.card),
            "status": a.expiration.status.value,
            "days_until_expiration": a.expiration.days_until_expiration,
            "resolved_expiration_date": serialize_value(a.expiration.expiration_date),
            "warning_level": a.expiration.warning_level.value,
        }
        for a in analyzed.expiration_analysis
    ]
    return data


def customer_status_to_dict(item: CustomerWithStatus) -> dict:
    """Analyzed customer plus its client-status determination."""
    data = analyzed_customer_to_dict(item.analyzed)
    data["client_status"] = dataclass_to_dict(item.client_status)
    return data
