"""Flask adapter exposing ``POST /api/execute``.

Execution failures (syntax, runtime, timeout, internal) are answered with
200 and an ``error`` key; only request problems and host faults change the
status code.
"""

from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from .config import SandboxConfig
from .exceptions import InvalidRequest, SandboxBusy
from .service import Sandbox

logger = logging.getLogger(__name__)


def create_app(sandbox: Sandbox | None = None) -> Flask:
    """Build the Flask app around *sandbox* (one from the environment by default)."""
    box = sandbox or Sandbox(SandboxConfig.from_env())

    app = Flask(__name__)
    app.extensions["scriptbox"] = box

    @app.route("/api/execute", methods=["POST"])
    def execute():
        payload = request.get_json(silent=True)
        code = payload.get("code") if isinstance(payload, dict) else None
        if not code or not isinstance(code, str):
            return jsonify({"error": "Invalid code provided"}), 400
        timeout = payload.get("timeout")

        try:
            result = box.execute(code, deadline=timeout)
        except InvalidRequest as exc:
            return jsonify({"error": str(exc)}), exc.status
        except SandboxBusy as exc:
            return jsonify({"error": str(exc)}), 503
        except Exception:
            logger.exception("unexpected failure executing code")
            return jsonify({"error": "Failed to execute code"}), 500
        return jsonify(result.to_dict())

    @app.route("/api/health")
    def health():
        return jsonify({"status": "ok"})

    return app
