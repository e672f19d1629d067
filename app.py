"""
FixFlow - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration and sets up logging
2. Builds the entity store (JSON file, in-memory, or demo data)
3. Builds the AI client if an API key is configured
4. Creates the job service (intake, status changes, notifications)
5. Registers route blueprints and JSON error handlers

ARCHITECTURE:
    Flask request thread
    └── JobService
        ├── EntityStore          (single source of truth, atomic upserts)
        ├── transition()         (status changes)
        ├── NotificationPolicy   (rules first, AI judge second)
        └── OpenAIClient         (optional, one blocking call, no retry)

Collaborators can be injected (tests pass their own store and mock AI).
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from flask import Flask, jsonify
from werkzeug.exceptions import HTTPException

from logging_config import setup_logging, get_logger
from core.ai_client import NotificationJudge, OpenAIClient, TriageAssistant
from core.exceptions import FixFlowError, ValidationError
from services.entity_store import EntityStore, InMemoryEntityStore, JsonFileEntityStore
from services.job_service import JobService
from services.notification_policy import NotificationPolicy
from modules.demo_data import load_demo_data
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _get_base_path() -> Path:
    """
    Get the base path for the application.

    In a frozen bundle: the directory containing the executable
    In development: the directory containing app.py
    """
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).parent


def _build_store(app: Flask) -> EntityStore:
    store_path = app.config.get("STORE_PATH")
    if store_path:
        logger.info(f"Using JSON entity store at {store_path}")
        return JsonFileEntityStore(store_path)

    store = InMemoryEntityStore()
    if app.config.get("DEMO_DATA"):
        load_demo_data(store)
        logger.info("In-memory entity store seeded with demo data")
    else:
        logger.warning("Using in-memory entity store - data is lost on restart")
    return store


def _build_ai_client(app: Flask) -> Optional[OpenAIClient]:
    api_key = app.config.get("OPENAI_API_KEY")
    if not api_key:
        logger.warning("OPENAI_API_KEY not set - AI judgment and triage disabled")
        return None
    client = OpenAIClient(
        api_key=api_key,
        model=app.config.get("AI_MODEL", "gpt-4o-mini"),
        timeout_seconds=app.config.get("AI_TIMEOUT_SECONDS", 15.0),
        logger=get_logger("core.ai_client"),
    )
    logger.info(f"AI client configured with model {client.model}")
    return client


def create_app(
    config_object: Union[str, object] = "config.Config",
    store: Optional[EntityStore] = None,
    judge: Optional[NotificationJudge] = None,
    triage: Optional[TriageAssistant] = None,
) -> Flask:
    """
    Application factory - creates and configures Flask app.

    Args:
        config_object: Config class or import path
        store: Entity store to use instead of the configured one
        judge: AI notification judge to use instead of the configured one
        triage: AI triage assistant to use instead of the configured one

    Returns:
        Configured Flask application
    """
    base_path = _get_base_path()
    env_file = base_path / '.env'
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        load_dotenv(override=True)

    app = Flask(__name__)
    app.config.from_object(config_object)
    app.json.sort_keys = False

    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=enable_file_logging
    )
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting FixFlow in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    if store is None:
        store = _build_store(app)

    if judge is None or triage is None:
        ai_client = _build_ai_client(app) if not app.config.get("TESTING") else None
        judge = judge or ai_client
        triage = triage or ai_client

    policy = NotificationPolicy(
        judge=judge,
        currency_symbol=app.config.get("CURRENCY_SYMBOL", "$"),
    )
    job_service = JobService(
        store=store,
        policy=policy,
        triage=triage,
        whatsapp_base_url=app.config.get("WHATSAPP_BASE_URL", "https://wa.me"),
    )

    app.config["ENTITY_STORE"] = store
    app.config["JOB_SERVICE"] = job_service

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(FixFlowError)
    def handle_fixflow_error(e: FixFlowError):
        if isinstance(e, ValidationError):
            logger.info(f"Rejected request: {e}")
            body = e.to_dict()
            body["field_errors"] = e.field_errors
            return jsonify(body), e.status_code
        logger.warning(f"{type(e).__name__}: {e}")
        return jsonify(e.to_dict()), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        if e.code is None or e.code < 400:
            # Routing redirects
            return e
        return jsonify({"error": e.name, "message": e.description}), e.code

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        return jsonify({"error": "Internal Server Error", "message": "An unexpected error occurred."}), 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode)
