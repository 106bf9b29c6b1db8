"""Machine entity for printing and packaging equipment."""

import re

from pydantic import Field, ValidationError, field_validator, model_validator

from ...shared.base import Entity
from ...shared.exceptions import InvalidCatalogEntryError
from ..value_objects.enums import (
    Department,
    MachineStatus,
    MachineType,
    Shift,
    WorkCenter,
)

_MACHINE_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9\s\-_]+$")


class Machine(Entity):
    """
    Machine entity representing production equipment.

    Capacity bounds describe the largest web width and bag height the machine
    can run; ``None`` means the bound is not configured and is not enforced.
    The scheduler never writes to machines; only status, capacity and
    timestamps change here, through the catalog.
    """

    machine_name: str = Field(min_length=2, max_length=100)
    machine_type: MachineType
    work_center: WorkCenter
    department: Department
    status: MachineStatus = MachineStatus.ACTIVE

    min_web_width: float | None = Field(default=None, ge=0)
    max_web_width: float | None = Field(default=None, ge=0)
    min_bag_height: float | None = Field(default=None, ge=0)
    max_bag_height: float | None = Field(default=None, ge=0)

    standard_speed: float = Field(default=0, ge=0)
    setup_time_standard: float = Field(default=0, ge=0)
    changeover_color: float | None = Field(default=None, ge=0)
    changeover_material: float | None = Field(default=None, ge=0)
    active_shifts: tuple[Shift, ...] = ()

    @field_validator("machine_name")
    @classmethod
    def sanitize_machine_name(cls, v: str) -> str:
        """Strip whitespace and allow letters, digits, spaces, hyphens, underscores."""
        v = v.strip()
        if not _MACHINE_NAME_PATTERN.match(v):
            raise ValueError(
                "Machine name can only contain letters, numbers, spaces, "
                "hyphens, and underscores"
            )
        return v

    @model_validator(mode="after")
    def check_business_rules(self) -> "Machine":
        if (
            self.min_web_width is not None
            and self.max_web_width is not None
            and self.min_web_width > self.max_web_width
        ):
            raise ValueError(
                "Minimum web width cannot be greater than maximum web width"
            )
        if (
            self.min_bag_height is not None
            and self.max_bag_height is not None
            and self.min_bag_height > self.max_bag_height
        ):
            raise ValueError(
                "Minimum bag height cannot be greater than maximum bag height"
            )
        if self.machine_type not in self.department.machine_types:
            raise ValueError(
                f"Machine type '{self.machine_type.value}' is not valid for "
                f"department '{self.department.value}'"
            )
        if self.department == Department.PRINTING and self.changeover_color is None:
            raise ValueError("Color changeover time is required for printing machines")
        if (
            self.department == Department.PACKAGING
            and self.changeover_material is None
        ):
            raise ValueError(
                "Material changeover time is required for packaging machines"
            )
        return self

    @property
    def display_key(self) -> str:
        """Key legacy scheduling events used to reference this machine."""
        return self.machine_name

    @property
    def is_available_for_work(self) -> bool:
        return self.status.is_available_for_work

    def change_status(self, new_status: MachineStatus) -> "Machine":
        """Return this machine with a new status (unchanged instance if equal)."""
        if new_status == self.status:
            return self
        return self.evolve(status=new_status)

    def update_capacity(self, **bounds: float | None) -> "Machine":
        """
        Return this machine with new capacity bounds.

        Args:
            **bounds: Any of min/max web width and min/max bag height

        Raises:
            InvalidCatalogEntryError: If an unknown bound is given or min > max
        """
        allowed = {"min_web_width", "max_web_width", "min_bag_height", "max_bag_height"}
        unknown = set(bounds) - allowed
        if unknown:
            raise InvalidCatalogEntryError(
                "machine", f"unknown capacity fields: {sorted(unknown)}"
            )
        try:
            return self.evolve(**bounds)
        except ValidationError as e:
            raise InvalidCatalogEntryError("machine", str(e)) from e

    @staticmethod
    def create(**data) -> "Machine":
        """
        Factory method to create a new Machine from catalog data.

        Raises:
            InvalidCatalogEntryError: If the data breaks a machine invariant
        """
        try:
            return Machine.model_validate(data)
        except ValidationError as e:
            raise InvalidCatalogEntryError("machine", str(e)) from e
