"""Domain enums for scheduling."""

from enum import Enum


class Department(str, Enum):
    """Production stage a machine or order belongs to."""

    PRINTING = "PRINTING"
    PACKAGING = "PACKAGING"

    @property
    def machine_types(self) -> frozenset["MachineType"]:
        """Machine types valid for this department."""
        return _DEPARTMENT_MACHINE_TYPES[self]


class WorkCenter(str, Enum):
    """Physical production site."""

    ZANICA = "ZANICA"
    BUSTO_GAROLFO = "BUSTO_GAROLFO"

    @property
    def code(self) -> str:
        return "BGF" if self is WorkCenter.BUSTO_GAROLFO else "ZAN"


class MachineType(str, Enum):
    """Machine type enumeration."""

    DIGITAL_PRINT = "DIGITAL_PRINT"
    FLEXO_PRINT = "FLEXO_PRINT"
    ROTOGRAVURE = "ROTOGRAVURE"
    DOYPACK = "DOYPACK"
    PLURI_PIU = "PLURI_PIU"
    MONO_PIU = "MONO_PIU"
    CONFEZIONAMENTO_TRADIZIONALE = "CONFEZIONAMENTO_TRADIZIONALE"
    CONFEZIONAMENTO_POLVERI = "CONFEZIONAMENTO_POLVERI"

    @property
    def department(self) -> Department:
        for department, types in _DEPARTMENT_MACHINE_TYPES.items():
            if self in types:
                return department
        raise ValueError(f"Machine type {self.value} has no department")


_DEPARTMENT_MACHINE_TYPES: dict[Department, frozenset[MachineType]] = {
    Department.PRINTING: frozenset(
        {MachineType.DIGITAL_PRINT, MachineType.FLEXO_PRINT, MachineType.ROTOGRAVURE}
    ),
    Department.PACKAGING: frozenset(
        {
            MachineType.DOYPACK,
            MachineType.PLURI_PIU,
            MachineType.MONO_PIU,
            MachineType.CONFEZIONAMENTO_TRADIZIONALE,
            MachineType.CONFEZIONAMENTO_POLVERI,
        }
    ),
}


class MachineStatus(str, Enum):
    """Machine status enumeration."""

    ACTIVE = "ACTIVE"
    MAINTENANCE = "MAINTENANCE"
    INACTIVE = "INACTIVE"

    @property
    def is_available_for_work(self) -> bool:
        """Check if machine can accept new scheduling assignments."""
        return self == MachineStatus.ACTIVE


class OrderStatus(str, Enum):
    """Production order (ODP) status.

    Only NOT_SCHEDULED and SCHEDULED are written by the scheduler; the other
    states belong to the shop floor and are left alone.
    """

    NOT_SCHEDULED = "NOT_SCHEDULED"
    SCHEDULED = "SCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @property
    def is_schedulable(self) -> bool:
        return self == OrderStatus.NOT_SCHEDULED


class Shift(str, Enum):
    """Working shifts a machine can run."""

    T1 = "T1"
    T2 = "T2"
    T3 = "T3"
