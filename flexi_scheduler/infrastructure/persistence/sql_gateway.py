"""
SQL persistence gateway.

Implements the persistence gateway on top of SQLModel tables. Database
errors are rolled back and surfaced as ``PersistenceFailure``; nothing is
retried here.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import date
from typing import Any

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine, select

from flexi_scheduler.core.observability import get_logger
from flexi_scheduler.domain.scheduling.entities import (
    AvailabilityRecord,
    Machine,
    Phase,
    ProductionOrder,
)
from flexi_scheduler.domain.scheduling.repositories import PersistenceGateway
from flexi_scheduler.domain.shared.exceptions import (
    OrderNotFoundError,
    PersistenceFailure,
)

from .sql_models import AvailabilityRow, MachineRow, OrderRow, PhaseRow

logger = get_logger(__name__)


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across sessions."""
    if database_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)
    return create_engine(database_url, echo=echo, pool_pre_ping=True)


class SqlPersistenceGateway(PersistenceGateway):
    """Database-backed implementation of the persistence gateway."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    @classmethod
    def from_url(cls, database_url: str, echo: bool = False) -> "SqlPersistenceGateway":
        gateway = cls(create_db_engine(database_url, echo=echo))
        gateway.create_tables()
        return gateway

    def create_tables(self) -> None:
        SQLModel.metadata.create_all(self._engine)

    @contextmanager
    def _session(self, operation: str) -> Iterator[Session]:
        session = Session(self._engine)
        try:
            yield session
        except SQLAlchemyError as e:
            session.rollback()
            logger.error("database_error", operation=operation, error=str(e))
            raise PersistenceFailure(
                f"Database error during {operation}: {e}", operation
            ) from e
        finally:
            session.close()

    async def list_machines(self) -> list[Machine]:
        with self._session("list_machines") as session:
            rows = session.exec(select(MachineRow)).all()
            return [Machine.model_validate(row.model_dump()) for row in rows]

    async def list_orders(self) -> list[ProductionOrder]:
        with self._session("list_orders") as session:
            rows = session.exec(select(OrderRow)).all()
            return [ProductionOrder.model_validate(row.model_dump()) for row in rows]

    async def get_order(self, order_id: str) -> ProductionOrder | None:
        with self._session("get_order") as session:
            row = session.get(OrderRow, order_id)
            return ProductionOrder.model_validate(row.model_dump()) if row else None

    async def update_order(
        self, order_id: str, fields: dict[str, Any]
    ) -> ProductionOrder:
        with self._session("update_order") as session:
            row = session.get(OrderRow, order_id)
            if row is None:
                raise OrderNotFoundError(order_id)
            updated = ProductionOrder.model_validate(row.model_dump()).apply_fields(
                fields
            )
            for key, value in updated.model_dump(mode="json").items():
                setattr(row, key, value)
            session.add(row)
            session.commit()
            logger.debug("order_updated", order_id=order_id, fields=sorted(fields))
            return updated

    async def get_availability(self, machine_id: str, day: date) -> list[int]:
        with self._session("get_availability") as session:
            row = session.get(AvailabilityRow, (machine_id, day.isoformat()))
            return sorted(row.unavailable_hours) if row else []

    async def set_availability(
        self, machine_id: str, day: date, hours: list[int]
    ) -> None:
        record = AvailabilityRecord(
            machine_id=machine_id, date=day, unavailable_hours=hours
        )
        with self._session("set_availability") as session:
            row = session.get(AvailabilityRow, (machine_id, day.isoformat()))
            if not record.unavailable_hours:
                if row is not None:
                    session.delete(row)
            elif row is None:
                session.add(
                    AvailabilityRow(
                        machine_id=machine_id,
                        date=day.isoformat(),
                        unavailable_hours=record.sorted_hours(),
                    )
                )
            else:
                row.unavailable_hours = record.sorted_hours()
                session.add(row)
            session.commit()

    async def list_availability(
        self,
        machine_id: str | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> list[AvailabilityRecord]:
        statement = select(AvailabilityRow)
        if machine_id is not None:
            statement = statement.where(AvailabilityRow.machine_id == machine_id)
        # ISO dates sort lexicographically
        if start is not None:
            statement = statement.where(AvailabilityRow.date >= start.isoformat())
        if end is not None:
            statement = statement.where(AvailabilityRow.date <= end.isoformat())
        statement = statement.order_by(AvailabilityRow.machine_id, AvailabilityRow.date)

        with self._session("list_availability") as session:
            return [
                AvailabilityRecord(
                    machine_id=row.machine_id,
                    date=date.fromisoformat(row.date),
                    unavailable_hours=row.unavailable_hours,
                )
                for row in session.exec(statement).all()
            ]

    async def add_machine(self, machine: Machine) -> Machine:
        with self._session("add_machine") as session:
            session.add(MachineRow(**machine.model_dump(mode="json")))
            session.commit()
        return machine

    async def delete_machine(self, machine_id: str) -> bool:
        with self._session("delete_machine") as session:
            row = session.get(MachineRow, machine_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    async def add_order(self, order: ProductionOrder) -> ProductionOrder:
        with self._session("add_order") as session:
            session.add(OrderRow(**order.model_dump(mode="json")))
            session.commit()
        return order

    async def delete_order(self, order_id: str) -> bool:
        with self._session("delete_order") as session:
            row = session.get(OrderRow, order_id)
            if row is None:
                return False
            session.delete(row)
            session.commit()
            return True

    async def list_phases(self) -> list[Phase]:
        with self._session("list_phases") as session:
            rows = session.exec(select(PhaseRow)).all()
            return [Phase.model_validate(row.model_dump()) for row in rows]

    async def add_phase(self, phase: Phase) -> Phase:
        with self._session("add_phase") as session:
            session.add(PhaseRow(**phase.model_dump(mode="json")))
            session.commit()
        return phase
