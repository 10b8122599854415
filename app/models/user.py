"""
User database model.

Defines the ``users`` table, the only table of the service.
"""

from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

AGE_CHECK = "age > 0 AND age < 150"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class User(SQLModel, table=True):
    """
    User model.

    ``id``, ``created_at`` and ``updated_at`` are assigned when the row is
    inserted; ``email`` is unique across the whole table.
    """
    __tablename__ = "users"
    __table_args__ = (
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.CheckConstraint(AGE_CHECK, name="ck_users_age_range"),
        # SQLite would otherwise hand out the rowid of a deleted last row again
        {"sqlite_autoincrement": True},
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, nullable=False)
    email: str = Field(max_length=255, nullable=False)

    # Profile
    age: Optional[int] = Field(default=None)
    phone: Optional[str] = Field(default=None, max_length=20)
    address: Optional[str] = Field(default=None, sa_type=sa.Text)

    # Timestamps
    created_at: datetime = Field(default_factory=utc_now, index=True, nullable=False,
                                 sa_type=sa.DateTime(timezone=True),
                                 sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")})
    updated_at: datetime = Field(default_factory=utc_now, nullable=False,
                                 sa_type=sa.DateTime(timezone=True),
                                 sa_column_kwargs={"server_default": sa.text("CURRENT_TIMESTAMP")})
