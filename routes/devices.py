"""
Device routes.

Handles:
- GET /api/devices/<serial> - Scanner lookup: device, owner and repair history
"""

from flask import Blueprint, current_app, jsonify

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

devices_bp = Blueprint("devices", __name__)


@devices_bp.route("/api/devices/<path:serial>", methods=["GET"])
def device_lookup(serial: str):
    """Look up a scanned serial number; 404 if the workshop has never seen it."""
    history = current_app.config["JOB_SERVICE"].device_history(serial)
    logger.debug(f"Device lookup {serial}: {len(history.jobs)} jobs")
    return jsonify(history.to_dict())
