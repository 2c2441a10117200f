"""Run the ID card API with Flask's built-in server.

Production deployments should point a WSGI server at ``app:app`` instead.
"""
from __future__ import annotations

import importlib

from config import get_settings_module

from src.idcard_system.idcard_system.main import create_app

app = create_app()


if __name__ == "__main__":
    settings = importlib.import_module(get_settings_module())
    app.run(host="0.0.0.0", port=int(getattr(settings, "PORT", 5000)), debug=bool(getattr(settings, "DEBUG", False)))
