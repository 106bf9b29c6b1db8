"""
SQLModel table definitions for the scheduling catalogs.

Instants are stored as ISO-8601 strings so the persisted scheduling fields
round-trip exactly; list-valued fields are stored as JSON.
"""

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel


class TimestampedModel(SQLModel):
    """Base model with timestamp fields."""

    created_at: str
    updated_at: str | None = None


class MachineRow(TimestampedModel, table=True):
    """Machine table definition."""

    __tablename__ = "machines"

    id: str = Field(primary_key=True)
    machine_name: str = Field(max_length=100, index=True)
    machine_type: str
    work_center: str
    department: str = Field(index=True)
    status: str

    min_web_width: float | None = None
    max_web_width: float | None = None
    min_bag_height: float | None = None
    max_bag_height: float | None = None

    standard_speed: float = 0
    setup_time_standard: float = 0
    changeover_color: float | None = None
    changeover_material: float | None = None
    active_shifts: list[str] = Field(default_factory=list, sa_column=Column(JSON))


class OrderRow(TimestampedModel, table=True):
    """Production order table definition."""

    __tablename__ = "production_orders"

    id: str = Field(primary_key=True)
    odp_number: str = Field(index=True)
    article_code: str | None = None
    bag_width: float
    bag_height: float
    bag_step: float
    department: str = Field(index=True)
    phase_id: str | None = None
    quantity: int
    duration: float = 0

    scheduled_machine_id: str | None = Field(default=None, index=True)
    scheduled_start_time: str | None = None
    scheduled_end_time: str | None = None
    status: str = Field(index=True)
    color: str | None = None


class PhaseRow(TimestampedModel, table=True):
    """Processing phase table definition."""

    __tablename__ = "phases"

    id: str = Field(primary_key=True)
    name: str
    department: str
    work_center: str


class AvailabilityRow(SQLModel, table=True):
    """Unavailable hours of one machine on one date."""

    __tablename__ = "machine_availability"

    machine_id: str = Field(primary_key=True)
    date: str = Field(primary_key=True)
    unavailable_hours: list[int] = Field(default_factory=list, sa_column=Column(JSON))
