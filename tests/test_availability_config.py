from datetime import UTC, datetime

import pytest
from fastapi import status

from app.core.errors import InvalidInputError, NotFoundError
from app.services import availability_config as cfg
from conftest import MONDAY, at

# ---------- service ----------


def test_add_and_list_weekly_rules(repo, test_professional):
    cfg.add_weekly_rule(repo, test_professional.id, 1, "14:00", "18:00")
    cfg.add_weekly_rule(repo, test_professional.id, 1, "09:00", "12:00")
    rows = cfg.list_weekly_rules(repo, test_professional.id)
    assert [(r.weekday, r.start_time.strftime("%H:%M")) for r in rows] == [
        (1, "09:00"),
        (1, "14:00"),
    ]


def test_midnight_end_stored_as_sentinel(repo, test_professional):
    row = cfg.add_weekly_rule(repo, test_professional.id, 5, "22:00", "00:00")
    assert row.end_time.strftime("%H:%M") == "00:00"


@pytest.mark.parametrize(
    "weekday,start,end",
    [
        (7, "09:00", "12:00"),
        (-1, "09:00", "12:00"),
        (1, "12:00", "09:00"),
        (1, "10:00", "10:00"),
        (1, "9h", "12:00"),
    ],
)
def test_invalid_weekly_rule(repo, test_professional, weekday, start, end):
    with pytest.raises(InvalidInputError):
        cfg.add_weekly_rule(repo, test_professional.id, weekday, start, end)


def test_overlapping_rule_rejected(repo, test_professional):
    cfg.add_weekly_rule(repo, test_professional.id, 1, "09:00", "12:00")
    with pytest.raises(InvalidInputError):
        cfg.add_weekly_rule(repo, test_professional.id, 1, "11:00", "13:00")
    # adjacent is fine, other weekday is fine
    cfg.add_weekly_rule(repo, test_professional.id, 1, "12:00", "13:00")
    cfg.add_weekly_rule(repo, test_professional.id, 2, "11:00", "13:00")


def test_rule_for_unknown_professional(repo):
    with pytest.raises(NotFoundError):
        cfg.add_weekly_rule(repo, 999, 1, "09:00", "12:00")


def test_delete_rule(repo, test_professional):
    row = cfg.add_weekly_rule(repo, test_professional.id, 1, "09:00", "12:00")
    cfg.delete_weekly_rule(repo, row.id)
    assert cfg.list_weekly_rules(repo, test_professional.id) == []
    with pytest.raises(NotFoundError):
        cfg.delete_weekly_rule(repo, row.id)


def test_override_overlap_only_on_same_date(repo, test_professional):
    cfg.add_override(repo, test_professional.id, MONDAY, "09:00", "12:00")
    with pytest.raises(InvalidInputError):
        cfg.add_override(repo, test_professional.id, MONDAY, "10:00", "11:00")
    cfg.add_override(repo, test_professional.id, "2025-06-03", "10:00", "11:00")
    assert len(cfg.list_overrides(repo, test_professional.id, MONDAY, MONDAY)) == 1


def test_block_requires_order_and_timezone(repo, test_professional):
    with pytest.raises(InvalidInputError):
        cfg.add_block(repo, test_professional.id, at(MONDAY, 11), at(MONDAY, 10))
    with pytest.raises(InvalidInputError):
        cfg.add_block(
            repo, test_professional.id, datetime(2025, 6, 2, 10), datetime(2025, 6, 2, 11)
        )


def test_block_round_trips_as_aware_utc(repo, test_professional):
    row = cfg.add_block(repo, test_professional.id, at(MONDAY, 10), at(MONDAY, 10, 30))
    [stored] = cfg.list_blocks(repo, test_professional.id)
    assert stored.id == row.id
    assert stored.starts_at == datetime(2025, 6, 2, 14, 0, tzinfo=UTC)
    assert stored.starts_at.tzinfo is not None


# ---------- HTTP ----------


def test_rules_endpoints(client, test_professional):
    response = client.post(
        "/api/v1/availability/rules",
        json={"professional_id": test_professional.id, "weekday": 1, "start": "09:00", "end": "12:00"},
    )
    assert response.status_code == status.HTTP_201_CREATED
    rule_id = response.json()["id"]

    response = client.post(
        "/api/v1/availability/rules",
        json={"professional_id": test_professional.id, "weekday": 1, "start": "11:00", "end": "13:00"},
    )
    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["code"] == "invalid_input"

    response = client.get(
        "/api/v1/availability/rules", params={"professional_id": test_professional.id}
    )
    assert [(r["start_time"], r["end_time"]) for r in response.json()] == [("09:00", "12:00")]

    # the rule shows up in the slot query
    response = client.get(
        "/api/v1/slots", params={"professional_id": test_professional.id, "date": "2025-06-02"}
    )
    assert len(response.json()["slots"]) == 3

    response = client.delete(f"/api/v1/availability/rules/{rule_id}")
    assert response.status_code == status.HTTP_204_NO_CONTENT


def test_override_endpoint_closes_a_day(client, test_professional, monday_rule):
    response = client.post(
        "/api/v1/availability/overrides",
        json={
            "professional_id": test_professional.id,
            "for_date": "2025-06-02",
            "start": "09:00",
            "end": "12:00",
            "is_available": False,
        },
    )
    assert response.status_code == status.HTTP_201_CREATED
    response = client.get(
        "/api/v1/slots", params={"professional_id": test_professional.id, "date": "2025-06-02"}
    )
    assert response.json()["slots"] == []


def test_blocks_endpoints(client, test_professional):
    response = client.post(
        "/api/v1/availability/blocks",
        json={
            "professional_id": test_professional.id,
            "starts_at": "2025-06-02T10:00:00-04:00",
            "ends_at": "2025-06-02T10:30:00-04:00",
            "reason": "Supervisión",
        },
    )
    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["starts_at"] == "2025-06-02T14:00:00Z"

    response = client.get(
        "/api/v1/availability/blocks", params={"professional_id": test_professional.id}
    )
    assert len(response.json()) == 1

    response = client.delete("/api/v1/availability/blocks/999")
    assert response.status_code == status.HTTP_404_NOT_FOUND
