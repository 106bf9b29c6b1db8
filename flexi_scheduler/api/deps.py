"""
API dependencies.

Route handlers receive services from the container attached to the app.
"""

from typing import Annotated

from fastapi import Depends, Header, Request

from flexi_scheduler.application.scheduling import SchedulingCommandDispatcher
from flexi_scheduler.application.services import (
    IntegrityMonitor,
    OffTimeService,
    OrderCatalogService,
)
from flexi_scheduler.core.container import ServiceContainer
from flexi_scheduler.domain.scheduling.services import DEFAULT_VIEW


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


ContainerDep = Annotated[ServiceContainer, Depends(get_container)]


def get_dispatcher(
    container: ContainerDep,
    x_client_id: Annotated[str | None, Header()] = None,
) -> SchedulingCommandDispatcher:
    """Each client (``X-Client-Id`` header) gets its own view of the calendar."""
    return container.dispatcher_for(x_client_id or DEFAULT_VIEW)


def get_integrity_monitor(container: ContainerDep) -> IntegrityMonitor:
    return container.integrity_monitor


def get_off_time_service(container: ContainerDep) -> OffTimeService:
    return container.off_time


def get_order_catalog(container: ContainerDep) -> OrderCatalogService:
    return container.order_catalog


DispatcherDep = Annotated[SchedulingCommandDispatcher, Depends(get_dispatcher)]
IntegrityMonitorDep = Annotated[IntegrityMonitor, Depends(get_integrity_monitor)]
OffTimeServiceDep = Annotated[OffTimeService, Depends(get_off_time_service)]
OrderCatalogDep = Annotated[OrderCatalogService, Depends(get_order_catalog)]
