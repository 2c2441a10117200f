import pandas as pd
import pytest

from src.idcard_system.idcard_system.bulk_import.service import BulkImportService
from src.idcard_system.idcard_system.core.exceptions import BadInput


def write_workbook(path, rows):
    pd.DataFrame(rows).to_excel(path, index=False)
    return path


@pytest.fixture
def service(cards_repo, storage):
    return BulkImportService(cards_repo, storage)


@pytest.fixture
def three_rows():
    return [
        {"fullName": "Alice", "designation": "Engineer", "department": "IT", "idNumber": "A-1", "issueDate": "2024-01-15"},
        {"fullName": "Bob", "designation": "Analyst", "department": "Finance", "idNumber": "B-2", "issueDate": "2024-02-01"},
        {"fullName": "Alice Again", "designation": "Lead", "department": "IT", "idNumber": "A-1", "issueDate": "2024-03-01"},
    ]


def test_import_skips_duplicates_within_the_file(service, storage, cards_repo, three_rows):
    path = write_workbook(storage.path_for("upload.xlsx"), three_rows)

    result = service.import_file(owner_id=7, file_path=path)

    assert result.count == 2
    assert [c.id_number for c in result.records] == ["A-1", "B-2"]
    assert all(c.owner_id == 7 for c in result.records)
    assert cards_repo.all()[0].full_name == "Alice"
    assert not path.exists()


def test_reimporting_the_same_file_adds_nothing(service, storage, cards_repo, three_rows):
    service.import_file(owner_id=7, file_path=write_workbook(storage.path_for("first.xlsx"), three_rows))

    result = service.import_file(owner_id=7, file_path=write_workbook(storage.path_for("second.xlsx"), three_rows))

    assert result.count == 0
    assert result.records == []
    assert len(cards_repo.all()) == 2


def test_import_skips_id_numbers_owned_by_someone_else(service, storage, make_card, three_rows):
    make_card(owner_id=99, id_number="B-2")

    result = service.import_file(owner_id=7, file_path=write_workbook(storage.path_for("u.xlsx"), three_rows))

    assert [c.id_number for c in result.records] == ["A-1"]


def test_import_coerces_dates_and_keeps_photo_reference(service, storage):
    rows = [{"fullName": "Dana", "idNumber": "D-4", "issueDate": "2024-01-15", "expiryDate": 45671, "photoFileName": "dana.png"}]

    (card,) = service.import_file(owner_id=1, file_path=write_workbook(storage.path_for("u.xlsx"), rows)).records

    assert card.issue_date.isoformat() == "2024-01-15"
    assert card.expiry_date.isoformat() == "2025-01-14"
    assert card.photo == "dana.png"


def test_import_without_file_is_rejected(service):
    with pytest.raises(BadInput, match="No file uploaded"):
        service.import_file(owner_id=1, file_path=None)


def test_store_failure_aborts_remaining_rows_and_keeps_file(service, storage, cards_repo, three_rows):
    cards_repo.fail_on_id_numbers.add("B-2")
    path = write_workbook(storage.path_for("u.xlsx"), three_rows)

    with pytest.raises(RuntimeError):
        service.import_file(owner_id=1, file_path=path)

    assert [c.id_number for c in cards_repo.all()] == ["A-1"]
    assert path.exists()


def test_row_missing_required_value_aborts_import(service, storage, cards_repo):
    rows = [{"fullName": "Eve", "idNumber": "E-5"}, {"fullName": None, "idNumber": "F-6"}]
    path = write_workbook(storage.path_for("u.xlsx"), rows)

    with pytest.raises(RuntimeError):
        service.import_file(owner_id=1, file_path=path)

    assert [c.id_number for c in cards_repo.all()] == ["E-5"]


def test_existing_middle_row_is_skipped(service, storage, make_card):
    make_card(owner_id=1, id_number="B-2")
    rows = [
        {"fullName": "Alice", "idNumber": "A-1"},
        {"fullName": "Bob", "idNumber": "B-2"},
        {"fullName": "Carol", "idNumber": "C-3"},
    ]

    result = service.import_file(owner_id=1, file_path=write_workbook(storage.path_for("u.xlsx"), rows))

    assert result.count == 2
    assert [c.full_name for c in result.records] == ["Alice", "Carol"]
