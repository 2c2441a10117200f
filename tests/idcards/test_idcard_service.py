from datetime import date, datetime

import pytest

from src.idcard_system.idcard_system.core.exceptions import BadInput, DuplicateIdentifier, NotFound
from src.idcard_system.idcard_system.idcards.service import IdCardService, parse_form_date
from tests.conftest import write_png


@pytest.fixture
def service(cards_repo, storage, fixed_now):
    return IdCardService(cards_repo, storage, clock=lambda: fixed_now)


def test_create_card_defaults_issue_date_to_today(service, fixed_now):
    card = service.create_card(owner_id=1, fields={"full_name": "Alice", "id_number": "A-100"})

    assert card.card_id == 1
    assert card.owner_id == 1
    assert card.issue_date == fixed_now.date()
    assert card.expiry_date is None
    assert card.designation is None


def test_create_card_keeps_given_dates(service):
    card = service.create_card(
        owner_id=1,
        fields={
            "full_name": "Alice",
            "id_number": "A-100",
            "issue_date": "2024-01-15",
            "expiry_date": "2025-01-15T00:00:00.000Z",
        },
    )

    assert card.issue_date == date(2024, 1, 15)
    assert card.expiry_date == date(2025, 1, 15)


@pytest.mark.parametrize("missing", ["full_name", "id_number"])
def test_create_card_requires_name_and_id_number(service, missing):
    fields = {"full_name": "Alice", "id_number": "A-100"}
    fields[missing] = "  "

    with pytest.raises(BadInput):
        service.create_card(owner_id=1, fields=fields)


def test_create_card_rejects_unparseable_date(service):
    with pytest.raises(BadInput):
        service.create_card(owner_id=1, fields={"full_name": "A", "id_number": "X", "issue_date": "15/01/2024"})


def test_id_number_is_unique_across_owners(service):
    service.create_card(owner_id=1, fields={"full_name": "Alice", "id_number": "A-100"})

    with pytest.raises(DuplicateIdentifier):
        service.create_card(owner_id=2, fields={"full_name": "Bob", "id_number": "A-100"})


def test_failed_create_removes_saved_photo(service, storage, make_card):
    make_card(id_number="A-100")
    write_png(storage.path_for("1767225600000.png"))

    with pytest.raises(DuplicateIdentifier):
        service.create_card(owner_id=1, fields={"full_name": "Bob", "id_number": "A-100"}, photo="1767225600000.png")

    assert not storage.path_for("1767225600000.png").exists()


def test_cards_are_scoped_to_their_owner(service, make_card):
    card = make_card(owner_id=1)

    assert service.list_cards(2) == []
    with pytest.raises(NotFound):
        service.get_card(card_id=card.card_id, owner_id=2)
    with pytest.raises(NotFound):
        service.update_card(card_id=card.card_id, owner_id=2, fields={"department": "HR"})
    with pytest.raises(NotFound):
        service.delete_card(card_id=card.card_id, owner_id=2)

    assert service.get_card(card_id=card.card_id, owner_id=1) == card


def test_list_cards_returns_only_own_cards(service, make_card):
    make_card(owner_id=1, id_number="A-1")
    make_card(owner_id=2, id_number="B-1")
    make_card(owner_id=1, id_number="A-2")

    assert [c.id_number for c in service.list_cards(1)] == ["A-1", "A-2"]


def test_update_card_changes_only_given_fields(service, make_card):
    card = make_card(designation="Engineer", department="IT")

    updated = service.update_card(card_id=card.card_id, owner_id=1, fields={"department": "Finance"})

    assert updated.department == "Finance"
    assert updated.designation == "Engineer"
    assert updated.full_name == card.full_name
    assert updated.id_number == card.id_number


def test_update_card_to_taken_id_number_is_rejected(service, make_card):
    make_card(id_number="A-1")
    second = make_card(id_number="A-2")

    with pytest.raises(DuplicateIdentifier):
        service.update_card(card_id=second.card_id, owner_id=1, fields={"id_number": "A-1"})


def test_update_card_replaces_photo_and_removes_old_file(service, storage, make_card):
    write_png(storage.path_for("old.png"))
    write_png(storage.path_for("new.png"))
    card = make_card(photo="old.png")

    updated = service.update_card(card_id=card.card_id, owner_id=1, fields={}, photo="new.png")

    assert updated.photo == "new.png"
    assert not storage.path_for("old.png").exists()
    assert storage.path_for("new.png").exists()


def test_delete_card_removes_record_and_photo(service, storage, cards_repo, make_card):
    write_png(storage.path_for("face.png"))
    card = make_card(photo="face.png")

    deleted = service.delete_card(card_id=card.card_id, owner_id=1)

    assert deleted.card_id == card.card_id
    assert cards_repo.all() == []
    assert not storage.path_for("face.png").exists()


def test_delete_card_tolerates_missing_photo_file(service, make_card):
    card = make_card(photo="gone.png")

    service.delete_card(card_id=card.card_id, owner_id=1)


def test_parse_form_date_accepts_date_objects():
    assert parse_form_date(datetime(2024, 3, 1, 10, 0), "Issue Date") == date(2024, 3, 1)
    assert parse_form_date(date(2024, 3, 1), "Issue Date") == date(2024, 3, 1)
    assert parse_form_date("", "Issue Date") is None


def test_id_numbers_differing_only_in_case_are_distinct(service):
    service.create_card(owner_id=1, fields={"full_name": "Alice", "id_number": "EMP-001"})

    card = service.create_card(owner_id=1, fields={"full_name": "Bob", "id_number": "emp-001"})

    assert card.id_number == "emp-001"
