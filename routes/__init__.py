"""
Flask route blueprints for FixFlow.

This module contains all route handlers organized by functionality:
- main: Index redirect and health check
- jobs: Board, intake, job detail, status changes, AI triage
- devices: Serial-number lookup for the scanner

Each blueprint is registered with the Flask app in create_app().
"""

from .main import main_bp
from .jobs import jobs_bp
from .devices import devices_bp

__all__ = [
    "main_bp",
    "jobs_bp",
    "devices_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(main_bp)
    app.register_blueprint(jobs_bp)
    app.register_blueprint(devices_bp)
