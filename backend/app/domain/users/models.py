"""User domain models."""
from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """User domain model. Identity comes from the wallet provider (email + name)."""
    id: int
    email: str
    name: str
    created_at: datetime
