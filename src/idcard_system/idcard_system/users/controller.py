from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import AuthenticationError, ValidationError
from .service import user_to_dict

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container, *, url_prefix: str = "/api") -> None:
    def _payload() -> dict:
        return request.get_json(silent=True) or request.form.to_dict()

    @app.route(f"{url_prefix}/auth/register", methods=["POST"], endpoint="auth_register")
    def auth_register():
        data = _payload()
        try:
            session = container.auth_service.register(
                full_name=data.get("fullName", ""),
                email=data.get("email", ""),
                password=data.get("password", ""),
            )
            return jsonify({"token": session.token, "user": user_to_dict(session.user)}), 201
        except ValidationError as e:
            return jsonify({"message": str(e)}), 400
        except Exception as e:
            logger.exception("Registration failed")
            return jsonify({"message": "Server error", "error": str(e)}), 500

    @app.route(f"{url_prefix}/auth/login", methods=["POST"], endpoint="auth_login")
    def auth_login():
        data = _payload()
        email = data.get("email", "")
        password = data.get("password", "")
        if not email or not password:
            return jsonify({"message": "Email and password are required"}), 400

        try:
            session = container.auth_service.authenticate(email, password)
            return jsonify({"token": session.token, "user": user_to_dict(session.user)}), 200
        except AuthenticationError as e:
            return jsonify({"message": str(e)}), 401
        except Exception as e:
            logger.exception("Login failed")
            return jsonify({"message": "Server error", "error": str(e)}), 500
