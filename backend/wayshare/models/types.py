"""
WayShare Backend - Shared Column Types
=======================================

What:  Column types reused by every entity table.

    - Identifier: BIGINT surrogate key on PostgreSQL, INTEGER on SQLite
      (SQLite only auto-increments an INTEGER PRIMARY KEY).
    - UTCDateTime: TIMESTAMP WITH TIME ZONE that always hands back aware
      datetimes in UTC, including on backends that drop the offset (SQLite).
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import BigInteger, DateTime, Integer
from sqlalchemy.types import TypeDecorator

Identifier = BigInteger().with_variant(Integer(), "sqlite")


class UTCDateTime(TypeDecorator):
    """Timezone-aware timestamp, normalised to UTC on the way in and out."""

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            # Naive values are taken to be UTC already
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: Optional[datetime], dialect) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
