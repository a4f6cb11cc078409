import uuid
from datetime import datetime, timezone


def generate_id(prefix: str) -> str:
    """CUST-1A2B3C4D style public identifiers."""
    return f"{prefix}-{uuid.uuid4().hex[:8].upper()}"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
