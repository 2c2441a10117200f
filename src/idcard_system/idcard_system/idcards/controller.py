from __future__ import annotations

import logging

from flask import Flask, Response, jsonify, request
from werkzeug.http import dump_options_header

from ..container import Container
from ..core.exceptions import BadInput, DuplicateIdentifier, NotFound
from ..core.security import current_owner_id, make_bearer_required
from ..documents.service import PdfDocument
from .serializers import card_to_dict, fields_from_payload

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container, *, url_prefix: str = "/api", public_base_url: str | None = None) -> None:
    bearer_required = make_bearer_required(container.token_service)
    base = f"{url_prefix}/idcards"

    def _to_json(card) -> dict:
        return card_to_dict(card, storage=container.upload_storage, base_url=public_base_url or request.host_url)

    def _payload():
        if request.is_json:
            return request.get_json(silent=True) or {}
        return request.form

    def _store_photo() -> str | None:
        photo = request.files.get("photo")
        if not photo or not photo.filename:
            return None
        return container.upload_storage.save(photo)

    def _server_error(message: str, error: Exception):
        logger.exception(message)
        return jsonify({"message": "Server error", "error": str(error)}), 500

    def _pdf_response(document: PdfDocument) -> Response:
        def generate():
            try:
                yield from container.document_service.stream(document)
            except Exception:
                logger.exception("PDF rendering failed for %s", document.filename)
                raise

        return Response(
            generate(),
            mimetype="application/pdf",
            headers={"Content-Disposition": dump_options_header("attachment", {"filename": document.filename})},
        )

    @app.route(base, methods=["POST"], endpoint="create_idcard")
    @bearer_required
    def create_idcard():
        try:
            card = container.idcard_service.create_card(
                owner_id=current_owner_id(),
                fields=fields_from_payload(_payload()),
                photo=_store_photo(),
            )
            return jsonify({"message": "ID Card created", "idCard": _to_json(card)}), 201
        except (DuplicateIdentifier, BadInput) as e:
            return jsonify({"message": str(e)}), 400
        except Exception as e:
            return _server_error("Creating ID card failed", e)

    @app.route(base, methods=["GET"], endpoint="list_idcards")
    @bearer_required
    def list_idcards():
        try:
            cards = container.idcard_service.list_cards(current_owner_id())
            return jsonify([_to_json(c) for c in cards]), 200
        except Exception as e:
            return _server_error("Listing ID cards failed", e)

    @app.route(f"{base}/pdf/all", methods=["GET"], endpoint="idcards_pdf_all")
    @bearer_required
    def idcards_pdf_all():
        try:
            document = container.document_service.all_cards_document(owner_id=current_owner_id())
        except NotFound as e:
            return jsonify({"message": str(e)}), 404
        except Exception as e:
            return _server_error("Preparing ID cards PDF failed", e)
        return _pdf_response(document)

    @app.route(f"{base}/pdf/<int:card_id>", methods=["GET"], endpoint="idcard_pdf")
    @bearer_required
    def idcard_pdf(card_id: int):
        try:
            document = container.document_service.single_card_document(card_id=card_id, owner_id=current_owner_id())
        except NotFound as e:
            return jsonify({"message": str(e)}), 404
        except Exception as e:
            return _server_error("Preparing ID card PDF failed", e)
        return _pdf_response(document)

    @app.route(f"{base}/bulk-upload", methods=["POST"], endpoint="bulk_upload_idcards")
    @bearer_required
    def bulk_upload_idcards():
        try:
            upload = request.files.get("file")
            file_path = None
            if upload and upload.filename:
                file_path = container.upload_storage.path_for(container.upload_storage.save(upload))

            result = container.import_service.import_file(owner_id=current_owner_id(), file_path=file_path)
            return (
                jsonify(
                    {
                        "message": f"{result.count} ID cards imported successfully",
                        "count": result.count,
                        "records": [_to_json(c) for c in result.records],
                    }
                ),
                201,
            )
        except BadInput as e:
            return jsonify({"message": str(e)}), 400
        except Exception as e:
            logger.exception("Bulk import failed")
            return jsonify({"message": "Bulk import failed", "error": str(e)}), 500

    @app.route(f"{base}/<int:card_id>", methods=["GET"], endpoint="get_idcard")
    @bearer_required
    def get_idcard(card_id: int):
        try:
            card = container.idcard_service.get_card(card_id=card_id, owner_id=current_owner_id())
            return jsonify(_to_json(card)), 200
        except NotFound as e:
            return jsonify({"message": str(e)}), 404
        except Exception as e:
            return _server_error("Fetching ID card failed", e)

    @app.route(f"{base}/<int:card_id>", methods=["PUT"], endpoint="update_idcard")
    @bearer_required
    def update_idcard(card_id: int):
        try:
            card = container.idcard_service.update_card(
                card_id=card_id,
                owner_id=current_owner_id(),
                fields=fields_from_payload(_payload()),
                photo=_store_photo(),
            )
            return jsonify({"message": "ID Card updated", "card": _to_json(card)}), 200
        except NotFound as e:
            return jsonify({"message": str(e)}), 404
        except (DuplicateIdentifier, BadInput) as e:
            return jsonify({"message": str(e)}), 400
        except Exception as e:
            return _server_error("Updating ID card failed", e)

    @app.route(f"{base}/<int:card_id>", methods=["DELETE"], endpoint="delete_idcard")
    @bearer_required
    def delete_idcard(card_id: int):
        try:
            container.idcard_service.delete_card(card_id=card_id, owner_id=current_owner_id())
            return jsonify({"message": "ID Card deleted"}), 200
        except NotFound as e:
            return jsonify({"message": str(e)}), 404
        except Exception as e:
            return _server_error("Deleting ID card failed", e)
