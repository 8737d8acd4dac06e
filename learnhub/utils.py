import math
import secrets
from datetime import datetime, timezone


def generate_id(prefix: str) -> str:
    """Generate unique ID with prefix"""
    return f"{prefix}_{secrets.token_hex(8).upper()}"


def utcnow() -> datetime:
    """Timezone-aware current UTC time"""
    return datetime.now(timezone.utc)


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative percentages (2.5 -> 3, not 2)"""
    return int(math.floor(value + 0.5))
