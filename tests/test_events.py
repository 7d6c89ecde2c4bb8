"""
Tests for the domain event bus
"""

import pytest
from datetime import date
import uuid

from gymkeeper.core.events import EventBus, MembershipsExpiringSoon, MemberStatusesReconciled


@pytest.fixture
def bus():
    return EventBus()


def expiring_event():
    return MembershipsExpiringSoon(
        tenant_id=uuid.uuid4(),
        window_start=date(2024, 3, 15),
        window_end=date(2024, 3, 22),
        members=[{"name": "Ravi Kumar", "expiry_date": "2024-03-20"}],
    )


@pytest.mark.asyncio
async def test_publish_reaches_only_matching_subscribers(bus):
    expiring, reconciled = [], []

    async def on_expiring(event):
        expiring.append(event)

    async def on_reconciled(event):
        reconciled.append(event)

    bus.subscribe("MembershipsExpiringSoon", on_expiring)
    bus.subscribe("MemberStatusesReconciled", on_reconciled)

    await bus.publish(expiring_event())

    assert len(expiring) == 1
    assert reconciled == []


@pytest.mark.asyncio
async def test_unsubscribe(bus):
    received = []

    async def handler(event):
        received.append(event)

    bus.subscribe("MembershipsExpiringSoon", handler)
    bus.unsubscribe("MembershipsExpiringSoon", handler)
    await bus.publish(expiring_event())

    assert received == []


@pytest.mark.asyncio
async def test_handler_error_is_isolated(bus):
    received = []

    async def broken(event):
        raise RuntimeError("gateway down")

    async def healthy(event):
        received.append(event)

    bus.subscribe("MembershipsExpiringSoon", broken)
    bus.subscribe("MembershipsExpiringSoon", healthy)
    await bus.publish(expiring_event())

    assert len(received) == 1


def test_event_serialization():
    data = MemberStatusesReconciled(run_date=date(2024, 3, 15), activated=1, deactivated=2, failed=0).to_dict()

    assert data["event_type"] == "MemberStatusesReconciled"
    assert data["run_date"] == "2024-03-15"
    assert data["deactivated"] == 2

    expiring = expiring_event().to_dict()
    assert expiring["window_end"] == "2024-03-22"
    assert expiring["members"][0]["name"] == "Ravi Kumar"
