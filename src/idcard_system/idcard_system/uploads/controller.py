from __future__ import annotations

from flask import Flask, send_from_directory

from ..container import Container


def register(app: Flask, container: Container) -> None:
    storage = container.upload_storage

    @app.route(f"{storage.public_path}/<path:filename>", methods=["GET"], endpoint="uploaded_file")
    def uploaded_file(filename: str):
        return send_from_directory(storage.root, filename)
