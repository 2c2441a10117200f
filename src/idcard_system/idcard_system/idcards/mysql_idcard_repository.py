from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Optional, Sequence

import mysql.connector

from ..core.exceptions import DuplicateIdentifier
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import UPDATABLE_FIELDS, IdCard
from .repository import IdCardRepository

_SELECT = """
    SELECT card_id, owner_id, full_name, designation, department, id_number,
           issue_date, expiry_date, photo, created_at, updated_at
    FROM id_cards
"""


def _row_to_card(row: dict) -> IdCard:
    return IdCard(
        card_id=int(row["card_id"]),
        owner_id=int(row["owner_id"]),
        full_name=row["full_name"],
        designation=row.get("designation"),
        department=row.get("department"),
        id_number=row["id_number"],
        issue_date=row.get("issue_date"),
        expiry_date=row.get("expiry_date"),
        photo=row.get("photo"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class MySQLIdCardRepository(IdCardRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def id_number_exists(self, id_number: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT 1 AS found FROM id_cards WHERE id_number=%s LIMIT 1", (id_number,))
            return fetchone(cur) is not None

    def create(
        self,
        *,
        owner_id: int,
        full_name: str,
        designation: Optional[str],
        department: Optional[str],
        id_number: str,
        issue_date: Optional[date],
        expiry_date: Optional[date],
        photo: Optional[str],
    ) -> IdCard:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO id_cards(owner_id, full_name, designation, department, id_number,
                                         issue_date, expiry_date, photo)
                    VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                    """,
                    (owner_id, full_name, designation, department, id_number, issue_date, expiry_date, photo),
                )
                card_id = int(cur.lastrowid)
                cur.execute(_SELECT + " WHERE card_id=%s", (card_id,))
                return _row_to_card(fetchone(cur))
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateIdentifier("ID Number already exists") from e
            raise

    def list_for_owner(self, owner_id: int) -> Sequence[IdCard]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE owner_id=%s ORDER BY card_id ASC", (owner_id,))
            return [_row_to_card(r) for r in fetchall(cur)]

    def get_for_owner(self, *, card_id: int, owner_id: int) -> Optional[IdCard]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE card_id=%s AND owner_id=%s", (card_id, owner_id))
            row = fetchone(cur)
            return _row_to_card(row) if row else None

    def update_for_owner(self, *, card_id: int, owner_id: int, changes: Mapping[str, Any]) -> Optional[IdCard]:
        columns = [name for name in UPDATABLE_FIELDS if name in changes]
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                if columns:
                    assignments = ", ".join(f"{name}=%s" for name in columns)
                    params = [changes[name] for name in columns] + [card_id, owner_id]
                    cur.execute(
                        f"UPDATE id_cards SET {assignments} WHERE card_id=%s AND owner_id=%s",
                        tuple(params),
                    )
                # rowcount is 0 when values are unchanged, so re-read instead.
                cur.execute(_SELECT + " WHERE card_id=%s AND owner_id=%s", (card_id, owner_id))
                row = fetchone(cur)
                return _row_to_card(row) if row else None
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateIdentifier("ID Number already exists") from e
            raise

    def delete_for_owner(self, *, card_id: int, owner_id: int) -> Optional[IdCard]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE card_id=%s AND owner_id=%s FOR UPDATE", (card_id, owner_id))
            row = fetchone(cur)
            if not row:
                return None
            cur.execute("DELETE FROM id_cards WHERE card_id=%s AND owner_id=%s", (card_id, owner_id))
            return _row_to_card(row)
