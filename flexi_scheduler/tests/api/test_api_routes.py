"""
API route tests.

Run the FastAPI app against an in-memory catalog and check that domain
errors reach the client with the right HTTP status.
"""

from datetime import date, datetime, timezone

import pytest
from fastapi.testclient import TestClient

from flexi_scheduler.api.main import create_app
from flexi_scheduler.core.config import settings
from flexi_scheduler.core.container import ServiceContainer
from flexi_scheduler.domain.scheduling.entities import ProductionOrder
from flexi_scheduler.domain.scheduling.value_objects import TimeWindow
from flexi_scheduler.infrastructure.persistence import InMemoryPersistenceGateway

API = settings.API_V1_STR


@pytest.fixture
def container(gateway):
    return ServiceContainer(gateway=gateway)


@pytest.fixture
def client(container):
    app = create_app(container, start_monitor=False)
    with TestClient(app) as test_client:
        yield test_client


def drop(client, order_id, hour, machine_id="M1", day="2024-01-01"):
    return client.post(
        f"{API}/scheduler/drop-on-slot",
        json={"order_id": order_id, "machine_id": machine_id, "day": day, "hour": hour},
    )


class TestSchedulerRoutes:
    """Test the drag-and-drop endpoints."""

    def test_drop_on_slot(self, client):
        response = drop(client, "O1", 8)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["order"]["scheduled_start_time"] == "2024-01-01T08:00:00+00:00"
        assert body["order"]["scheduled_end_time"] == "2024-01-01T10:00:00+00:00"

    def test_overlap_is_422_with_reasons(self, client):
        drop(client, "O1", 8)
        response = drop(client, "O2", 9)
        assert response.status_code == 422
        body = response.json()
        assert body["success"] is False
        assert body["error"]["type"] == "validation"
        assert any("overlaps" in r for r in body["error"]["reasons"])

    def test_unknown_order_is_404(self, client):
        assert drop(client, "nope", 8).status_code == 404

    def test_drop_on_pool_of_backlog_order_is_409(self, client):
        response = client.post(
            f"{API}/scheduler/drop-on-pool", json={"order_id": "O1"}
        )
        assert response.status_code == 409
        assert response.json()["error"]["type"] == "precondition"

    def test_round_trip_through_pool(self, client):
        drop(client, "O1", 8)
        response = client.post(
            f"{API}/scheduler/drop-on-pool", json={"order_id": "O1"}
        )
        assert response.status_code == 200
        assert response.json()["order"]["status"] == "NOT_SCHEDULED"

    def test_malformed_request_is_422(self, client):
        assert drop(client, "O1", 24).status_code == 422

    def test_events_for_day(self, client):
        drop(client, "O1", 8)
        response = client.get(f"{API}/scheduler/events", params={"day": "2024-01-01"})
        assert response.status_code == 200
        (event,) = response.json()
        assert event["order_id"] == "O1"
        assert event["left_percent"] == pytest.approx(33.3333)

        empty = client.get(f"{API}/scheduler/events", params={"day": "2024-01-02"})
        assert empty.json() == []

    def test_events_query_does_not_move_view(self, client, container):
        client.get(f"{API}/scheduler/events", params={"day": "2024-01-05"})
        dispatcher = container.dispatcher_for()
        assert container.engine.generation(dispatcher.view_id) == 0

    def test_view_is_scoped_to_client(self, client, container):
        response = client.put(
            f"{API}/scheduler/view",
            json={"day": "2024-01-02"},
            headers={"X-Client-Id": "floor"},
        )
        assert response.status_code == 200
        assert response.json() == {"view_id": "floor", "day": "2024-01-02"}
        assert container.engine.generation("floor") == 1
        assert container.engine.generation("planner") == 0
        assert container.dispatcher_for("planner").view_day != date(2024, 1, 2)


class TestOrderRoutes:
    """Test order deletion."""

    def test_delete_backlog_order(self, client):
        assert client.delete(f"{API}/orders/O2").status_code == 204

    def test_delete_scheduled_order_is_409(self, client):
        drop(client, "O1", 8)
        response = client.delete(f"{API}/orders/O1")
        assert response.status_code == 409
        assert "unschedule" in response.json()["error"]["message"]

    def test_delete_unknown_order_is_404(self, client):
        assert client.delete(f"{API}/orders/O404").status_code == 404


class TestAvailabilityRoutes:
    """Test off-time entry."""

    def test_set_off_time(self, client):
        response = client.post(
            f"{API}/availability/off-time",
            json={
                "machine_id": "M1",
                "start_date": "2024-01-01",
                "end_date": "2024-01-02",
                "start_hour": 12,
                "end_hour": 14,
            },
        )
        assert response.status_code == 200
        assert response.json() == [
            {"machine_id": "M1", "date": "2024-01-01", "unavailable_hours": [12, 13]},
            {"machine_id": "M1", "date": "2024-01-02", "unavailable_hours": [12, 13]},
        ]

        blocked = drop(client, "O1", 13)
        assert blocked.status_code == 422

    def test_unknown_machine_is_404(self, client):
        response = client.post(
            f"{API}/availability/off-time",
            json={
                "machine_id": "M404",
                "start_date": "2024-01-01",
                "end_date": "2024-01-01",
                "start_hour": 8,
                "end_hour": 9,
            },
        )
        assert response.status_code == 404


class TestIntegrityRoutes:
    """Test the integrity endpoints."""

    @pytest.fixture
    def orphaned_client(self, m1, o1):
        window = TimeWindow(
            datetime(2024, 1, 1, 8, tzinfo=timezone.utc),
            datetime(2024, 1, 1, 10, tzinfo=timezone.utc),
        )
        stray = o1.apply_fields(ProductionOrder.scheduled_fields("M404", window))
        gateway = InMemoryPersistenceGateway([m1], [stray])
        app = create_app(ServiceContainer(gateway=gateway), start_monitor=False)
        with TestClient(app) as test_client:
            yield test_client

    def test_check_reports_without_cleaning(self, orphaned_client):
        body = orphaned_client.get(f"{API}/integrity").json()
        assert body["orphan_event_count"] == 1
        assert body["orphan_machine_count"] == 1
        assert body["cleared_order_ids"] == []

    def test_cleanup(self, orphaned_client):
        body = orphaned_client.post(f"{API}/integrity/cleanup").json()
        assert body["cleared_order_ids"] == ["O1"]
        assert orphaned_client.get(f"{API}/integrity").json()["orphan_event_count"] == 0
