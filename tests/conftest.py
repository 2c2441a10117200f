from __future__ import annotations

import dataclasses
import io
import re
from datetime import date, datetime
from typing import Optional

import pytest
from PIL import Image

from src.idcard_system.idcard_system.container import wire_services
from src.idcard_system.idcard_system.core.exceptions import DuplicateIdentifier
from src.idcard_system.idcard_system.core.security import TokenService
from src.idcard_system.idcard_system.documents.renderer import IdCardPdfRenderer
from src.idcard_system.idcard_system.idcards.model import IdCard
from src.idcard_system.idcard_system.uploads.storage import UploadStorage
from src.idcard_system.idcard_system.users.model import User

FIXED_EPOCH = 1767225600.0  # 2026-01-01T00:00:00Z


class InMemoryIdCards:
    """Mirrors the MySQL repository: UNIQUE id_number, NOT NULL required columns."""

    def __init__(self):
        self._cards: dict[int, IdCard] = {}
        self._next_id = 1
        self.fail_on_id_numbers: set[str] = set()

    def id_number_exists(self, id_number: str) -> bool:
        return any(c.id_number == id_number for c in self._cards.values())

    def create(self, *, owner_id, full_name, designation, department, id_number, issue_date, expiry_date, photo) -> IdCard:
        if id_number in self.fail_on_id_numbers:
            raise RuntimeError(f"store unavailable while writing {id_number}")
        if full_name is None or id_number is None:
            raise RuntimeError("Column cannot be null")
        if self.id_number_exists(id_number):
            raise DuplicateIdentifier("ID Number already exists")

        stamp = datetime(2026, 1, 1, 9, 0, 0)
        card = IdCard(
            card_id=self._next_id,
            owner_id=owner_id,
            full_name=full_name,
            designation=designation,
            department=department,
            id_number=id_number,
            issue_date=issue_date,
            expiry_date=expiry_date,
            photo=photo,
            created_at=stamp,
            updated_at=stamp,
        )
        self._cards[card.card_id] = card
        self._next_id += 1
        return card

    def list_for_owner(self, owner_id: int):
        return [c for _, c in sorted(self._cards.items()) if c.owner_id == owner_id]

    def get_for_owner(self, *, card_id: int, owner_id: int) -> Optional[IdCard]:
        card = self._cards.get(card_id)
        if not card or card.owner_id != owner_id:
            return None
        return card

    def update_for_owner(self, *, card_id: int, owner_id: int, changes) -> Optional[IdCard]:
        card = self.get_for_owner(card_id=card_id, owner_id=owner_id)
        if not card:
            return None
        new_id = changes.get("id_number")
        if new_id and new_id != card.id_number and self.id_number_exists(new_id):
            raise DuplicateIdentifier("ID Number already exists")
        updated = dataclasses.replace(card, **dict(changes))
        self._cards[card_id] = updated
        return updated

    def delete_for_owner(self, *, card_id: int, owner_id: int) -> Optional[IdCard]:
        card = self.get_for_owner(card_id=card_id, owner_id=owner_id)
        if card:
            del self._cards[card_id]
        return card

    def all(self) -> list[IdCard]:
        return [c for _, c in sorted(self._cards.items())]


class InMemoryUsers:
    def __init__(self):
        self._users: dict[int, User] = {}

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self._users.values() if u.email == email), None)

    def create_user(self, *, full_name: str, email: str, password_hash: str) -> int:
        user_id = len(self._users) + 1
        self._users[user_id] = User(user_id=user_id, full_name=full_name, email=email, password_hash=password_hash)
        return user_id


def count_pdf_pages(pdf: bytes) -> int:
    return len(re.findall(rb"/Type\s*/Page\b", pdf))


def write_png(path, size=(300, 200)) -> None:
    Image.new("RGB", size, "navy").save(path, format="PNG")


def png_bytes(size=(300, 200)) -> io.BytesIO:
    buf = io.BytesIO()
    Image.new("RGB", size, "navy").save(buf, format="PNG")
    buf.seek(0)
    return buf


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 2, 2, 8, 25, 0)


@pytest.fixture
def storage(tmp_path) -> UploadStorage:
    return UploadStorage(tmp_path / "uploads", clock=lambda: FIXED_EPOCH)


@pytest.fixture
def cards_repo() -> InMemoryIdCards:
    return InMemoryIdCards()


@pytest.fixture
def users_repo() -> InMemoryUsers:
    return InMemoryUsers()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService("test-secret", ttl_hours=1)


@pytest.fixture
def renderer(storage) -> IdCardPdfRenderer:
    # Uncompressed Helvetica output keeps card text searchable in the raw PDF bytes.
    return IdCardPdfRenderer(storage, font_name="Helvetica", compress=False)


@pytest.fixture
def container(cards_repo, users_repo, storage, token_service, renderer):
    return wire_services(
        conn=None,
        users_repo=users_repo,
        idcards_repo=cards_repo,
        upload_storage=storage,
        token_service=token_service,
        renderer=renderer,
    )


@pytest.fixture
def app(monkeypatch, container):
    monkeypatch.setenv("APP_ENV", "testing")
    from src.idcard_system.idcard_system.main import create_app

    return create_app(container=container)


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(token_service):
    def _headers(user_id: int = 1) -> dict:
        return {"Authorization": f"Bearer {token_service.issue(user_id)}"}

    return _headers


@pytest.fixture
def make_card(cards_repo):
    def _make(owner_id: int = 1, id_number: str = "EMP-001", **overrides) -> IdCard:
        fields = dict(
            owner_id=owner_id,
            full_name="Alice Nguyen",
            designation="Engineer",
            department="IT",
            id_number=id_number,
            issue_date=date(2024, 1, 15),
            expiry_date=None,
            photo=None,
        )
        fields.update(overrides)
        return cards_repo.create(**fields)

    return _make
