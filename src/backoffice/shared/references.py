"""Human-readable document references such as ``ORD-20240115-A1B2C3D4``."""

import secrets
from datetime import UTC, datetime


def generate_reference(prefix: str, at: datetime | None = None) -> str:
    """Build ``PREFIX-YYYYMMDD-XXXXXXXX`` with eight random upper-case hex digits."""
    at = at or datetime.now(UTC)
    return f"{prefix}-{at.strftime('%Y%m%d')}-{secrets.token_hex(4).upper()}"
