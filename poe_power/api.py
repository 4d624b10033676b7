"""
HTTP routes for the MAAS webhook power driver.

MAAS sends the machine's system id in the `system_id` request header.
"""

import logging

from flask import Blueprint, Flask, current_app, jsonify, request
from werkzeug.serving import WSGIRequestHandler

from .errors import MissingSystemId
from .service import PowerResult, PowerService

logger = logging.getLogger(__name__)

SYSTEM_ID_HEADER = "system_id"
SYSTEM_ID_ENVIRON_KEY = "HTTP_SYSTEM_ID"

power_bp = Blueprint("power", __name__)


def _service() -> PowerService:
    return current_app.config["POWER_SERVICE"]


def _respond(result: PowerResult):
    body, status = result.to_response()
    return jsonify(body), status


def _with_system_id(operation):
    system_id = request.headers.get(SYSTEM_ID_HEADER)
    if not system_id:
        logger.warning("%s %s without %s header", request.method, request.path, SYSTEM_ID_HEADER)
        return _respond(PowerResult.failure(MissingSystemId()))
    return _respond(operation(system_id))


@power_bp.route("/power-status", methods=["GET"])
def power_status():
    return _with_system_id(_service().get_power_status)


@power_bp.route("/power-on", methods=["POST"])
def power_on():
    return _with_system_id(_service().power_on)


@power_bp.route("/power-off", methods=["POST"])
def power_off():
    return _with_system_id(_service().power_off)


def create_app(service: PowerService) -> Flask:
    app = Flask(__name__)
    app.config["POWER_SERVICE"] = service
    app.register_blueprint(power_bp)
    return app


class SystemIdRequestHandler(WSGIRequestHandler):
    """
    Development-server handler that keeps the `system_id` header.

    Werkzeug's server drops every header whose name contains an underscore,
    which is exactly how MAAS spells the system id header.
    """

    def make_environ(self):
        environ = super().make_environ()
        for key, value in self.headers.items():
            if key.lower() == SYSTEM_ID_HEADER:
                environ[SYSTEM_ID_ENVIRON_KEY] = value.replace("\r\n", "").strip()
        return environ
