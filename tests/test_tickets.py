from __future__ import annotations

from datetime import datetime

import pytest

from src.timeharbor.timeharbor.core.enums import NotificationType, TicketPriority, TicketStatus, WorkLogType
from src.timeharbor.timeharbor.core.exceptions import AuthorizationError, ValidationError
from src.timeharbor.timeharbor.timelog.model import WorkLogEvent


@pytest.fixture
def team_setup(container, signup):
    alice, alice_headers = signup("alice@example.com", "Alice")
    bob, bob_headers = signup("bob@example.com", "Bob")
    team = container.team_service.create_team(alice, name="Core")
    container.team_service.join_team(bob, code=team.code)
    return alice, bob, team


def test_create_ticket_defaults_and_assignment_notification(container, team_setup):
    alice, bob, team = team_setup

    ticket = container.ticket_service.create_ticket(
        user_id=alice.id, team_id=team.id, data={"title": "Fix login", "assignedTo": bob.id}
    )

    assert ticket.status == TicketStatus.OPEN
    assert ticket.priority == TicketPriority.MEDIUM
    assert ticket.creator.email == "alice@example.com"
    assert ticket.assignee.id == bob.id

    notes = container.notifications_repo.for_user(bob.id)
    assert notes[-1].type == NotificationType.TICKET_ASSIGNED.value
    assert notes[-1].body == "You've been assigned: Fix login"


def test_assignee_must_be_team_member(container, team_setup, signup):
    alice, _, team = team_setup
    outsider, _ = signup("eve@example.com")

    with pytest.raises(ValidationError, match="Assignee is not a member"):
        container.ticket_service.create_ticket(
            user_id=alice.id, team_id=team.id, data={"title": "x", "assignedTo": outsider.id}
        )


def test_non_creator_can_only_change_status(container, team_setup):
    alice, bob, team = team_setup
    ticket = container.ticket_service.create_ticket(user_id=alice.id, team_id=team.id, data={"title": "Docs"})

    with pytest.raises(AuthorizationError, match="Only the creator"):
        container.ticket_service.update_ticket(
            user_id=bob.id, team_id=team.id, ticket_id=ticket.id, data={"title": "Hijacked"}
        )

    updated = container.ticket_service.update_ticket(
        user_id=bob.id, team_id=team.id, ticket_id=ticket.id, data={"status": "In Progress"}
    )
    assert updated.status == TicketStatus.IN_PROGRESS
    assert updated.title == "Docs"

    status_note = container.notifications_repo.for_user(alice.id)[-1]
    assert status_note.type == NotificationType.TICKET_STATUS.value
    assert status_note.data["status"] == "In Progress"


def test_only_creator_deletes(container, team_setup):
    alice, bob, team = team_setup
    ticket = container.ticket_service.create_ticket(user_id=alice.id, team_id=team.id, data={"title": "Docs"})

    with pytest.raises(AuthorizationError):
        container.ticket_service.delete_ticket(user_id=bob.id, team_id=team.id, ticket_id=ticket.id)

    container.ticket_service.delete_ticket(user_id=alice.id, team_id=team.id, ticket_id=ticket.id)
    assert container.ticket_service.list_tickets(user_id=alice.id, team_id=team.id) == []


def test_list_filters_open_and_sorts_by_recent_activity(container, team_setup):
    alice, _, team = team_setup
    svc = container.ticket_service
    first = svc.create_ticket(user_id=alice.id, team_id=team.id, data={"title": "First"})
    second = svc.create_ticket(user_id=alice.id, team_id=team.id, data={"title": "Second"})
    closed = svc.create_ticket(user_id=alice.id, team_id=team.id, data={"title": "Closed", "status": "Closed"})

    container.work_logs_repo.upsert_many(
        [
            WorkLogEvent(
                id="ev-1",
                user_id=alice.id,
                type=WorkLogType.START_TICKET,
                timestamp=datetime(2026, 3, 10, 9, 0),
                team_id=team.id,
                ticket_id=first.id,
                ticket_title="First",
            )
        ]
    )

    open_titles = [t.title for t in svc.list_tickets(user_id=alice.id, team_id=team.id, status="open")]
    assert open_titles == ["Second", "First"]

    recent = svc.list_tickets(user_id=alice.id, team_id=team.id, sort="recent")
    assert [t.id for t in recent] == [first.id, closed.id, second.id]

    only_closed = svc.list_tickets(user_id=alice.id, team_id=team.id, status="Closed")
    assert [t.id for t in only_closed] == [closed.id]

    with pytest.raises(ValidationError, match="Invalid status"):
        svc.list_tickets(user_id=alice.id, team_id=team.id, status="Blocked")


def test_count_open_assigned(container, team_setup):
    alice, bob, team = team_setup
    svc = container.ticket_service
    svc.create_ticket(user_id=alice.id, team_id=team.id, data={"title": "A", "assignedTo": bob.id})
    svc.create_ticket(user_id=alice.id, team_id=team.id, data={"title": "B", "assignedTo": bob.id, "status": "Closed"})

    assert svc.count_open_assigned(bob.id) == 1
    assert svc.count_open_assigned(bob.id, team_id=team.id) == 1
    assert svc.count_open_assigned(alice.id) == 0


def test_ticket_routes(client, container, signup):
    alice, headers = signup("alice@example.com")
    _, outsider_headers = signup("eve@example.com")
    team = container.team_service.create_team(alice, name="Core")

    created = client.post(
        f"/teams/{team.id}/tickets", json={"title": "Ship it", "priority": "High"}, headers=headers
    )
    assert created.status_code == 201
    ticket_id = created.get_json()["id"]

    listed = client.get(f"/teams/{team.id}/tickets", headers=headers).get_json()
    assert [t["priority"] for t in listed] == ["High"]

    updated = client.put(f"/teams/{team.id}/tickets/{ticket_id}", json={"status": "Closed"}, headers=headers)
    assert updated.get_json()["status"] == "Closed"

    denied = client.get(f"/teams/{team.id}/tickets", headers=outsider_headers)
    assert denied.status_code == 403
    assert denied.get_json() == {"error": "You are not a member of this team"}

    bad = client.post(f"/teams/{team.id}/tickets", json={"title": "x", "priority": "Urgent"}, headers=headers)
    assert bad.status_code == 400
    assert bad.get_json()["error"].startswith("Invalid priority")
