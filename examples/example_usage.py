"""Example: drive the service layer directly (no Flask).

Imports a spreadsheet for one owner, then writes all of that owner's cards
to a PDF next to it.

    python -m examples.example_usage cards.xlsx 1
"""

import importlib
import sys
from pathlib import Path

from config import get_settings_module

from src.idcard_system.idcard_system.container import build_container


def main():
    source, owner_id = Path(sys.argv[1]), int(sys.argv[2])

    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=settings.DB_CONFIG,
        upload_folder=settings.UPLOAD_FOLDER,
        token_secret=settings.SECRET_KEY,
    )

    # The import removes its input file afterwards, so hand it a copy.
    working_copy = container.upload_storage.root / f"example{source.suffix}"
    working_copy.write_bytes(source.read_bytes())
    result = container.import_service.import_file(owner_id=owner_id, file_path=working_copy)
    print(f"Imported {result.count} card(s)")

    document = container.document_service.all_cards_document(owner_id=owner_id)
    out = source.with_name(document.filename)
    out.write_bytes(container.document_service.render_bytes(document))
    print(f"Wrote {out}")


if __name__ == "__main__":
    main()
