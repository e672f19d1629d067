"""
Main routes (index, health).
"""

from flask import Blueprint, jsonify, redirect, url_for

main_bp = Blueprint("main", __name__)


@main_bp.route("/")
def index():
    """Redirect root to the job board."""
    return redirect(url_for("jobs.list_jobs"))


@main_bp.route("/health", methods=["GET"])
def health():
    """Liveness check."""
    return jsonify({"status": "ok"})
