"""Common domain types."""
from datetime import datetime
from uuid import uuid4


def generate_id() -> str:
    """Generate a new UUID string (draft ids, event ids)."""
    return str(uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.utcnow()


def format_date(value: datetime | None) -> str:
    """YYYY-MM-DD as shown in task and transaction lists."""
    return (value or utcnow()).strftime("%Y-%m-%d")


def round_points(value: float) -> float:
    """Points are kept to two decimals."""
    return round(float(value), 2)


def format_points(value: float) -> str:
    """Render points without a trailing .0 for whole numbers (10, 2.5)."""
    value = round_points(value)
    return str(int(value)) if value.is_integer() else str(value)
