from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .bulk_import.service import BulkImportService
from .core.constants import DEFAULT_TOKEN_TTL_HOURS
from .core.security import TokenService
from .database.connection import DBConfig, DatabaseConnection
from .documents.renderer import IdCardPdfRenderer
from .documents.service import DocumentService
from .idcards.mysql_idcard_repository import MySQLIdCardRepository
from .idcards.repository import IdCardRepository
from .idcards.service import IdCardService
from .uploads.storage import UploadStorage
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    idcards_repo: IdCardRepository
    upload_storage: UploadStorage
    token_service: TokenService

    auth_service: AuthService
    idcard_service: IdCardService
    import_service: BulkImportService
    document_service: DocumentService


def wire_services(
    *,
    conn: Optional[DatabaseConnection],
    users_repo: UserRepository,
    idcards_repo: IdCardRepository,
    upload_storage: UploadStorage,
    token_service: TokenService,
    renderer: Optional[IdCardPdfRenderer] = None,
) -> Container:
    """Assemble services around already-built repositories (also used by tests)."""
    return Container(
        conn=conn,
        users_repo=users_repo,
        idcards_repo=idcards_repo,
        upload_storage=upload_storage,
        token_service=token_service,
        auth_service=AuthService(users_repo, token_service),
        idcard_service=IdCardService(idcards_repo, upload_storage),
        import_service=BulkImportService(idcards_repo, upload_storage),
        document_service=DocumentService(idcards_repo, renderer or IdCardPdfRenderer(upload_storage)),
    )


def build_container(
    *,
    db_config: dict,
    upload_folder: str | Path,
    token_secret: str,
    token_ttl_hours: int = DEFAULT_TOKEN_TTL_HOURS,
    public_path: str = "/uploads",
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))

    return wire_services(
        conn=conn,
        users_repo=MySQLUserRepository(conn),
        idcards_repo=MySQLIdCardRepository(conn),
        upload_storage=UploadStorage(upload_folder, public_path=public_path),
        token_service=TokenService(token_secret, ttl_hours=token_ttl_hours),
    )
