"""Processing phase reference data."""

from pydantic import Field

from ...shared.base import Entity
from ..value_objects.enums import Department, WorkCenter


class Phase(Entity):
    """A processing phase an order follows; read-only for the scheduler."""

    name: str = Field(min_length=2, max_length=100)
    department: Department
    work_center: WorkCenter
