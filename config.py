"""
Configuration for FixFlow.

Values come from environment variables (a .env file is loaded first).
The AI client is optional: without OPENAI_API_KEY the app still runs, the
Waiting-status judgment degrades to "do not notify" and triage returns 502.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    SESSION_COOKIE_NAME = "fixflow_session"
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")
    DEBUG = _env_flag("FLASK_DEBUG", "1")

    # ==========================================================================
    # Entity store
    # ==========================================================================
    # FIXFLOW_STORE_PATH: JSON document file for customers/devices/jobs.
    #   Empty -> in-memory store (lost on restart)
    # FIXFLOW_DEMO_DATA: seed the in-memory store with demo jobs
    # ==========================================================================
    STORE_PATH = os.environ.get("FIXFLOW_STORE_PATH", "")
    DEMO_DATA = _env_flag("FIXFLOW_DEMO_DATA", "0")

    # ==========================================================================
    # AI capability
    # ==========================================================================
    OPENAI_API_KEY = os.environ.get("OPENAI_API_KEY", "")
    AI_MODEL = os.environ.get("FIXFLOW_AI_MODEL", "gpt-4o-mini")
    AI_TIMEOUT_SECONDS = float(os.environ.get("FIXFLOW_AI_TIMEOUT_SECONDS", "15"))

    # ==========================================================================
    # Customer notifications
    # ==========================================================================
    WHATSAPP_BASE_URL = os.environ.get("WHATSAPP_BASE_URL", "https://wa.me")
    CURRENCY_SYMBOL = os.environ.get("FIXFLOW_CURRENCY_SYMBOL", "$")

    # Free-text limits applied by the API before sanitizing
    MAX_DESCRIPTION_LENGTH = 2000


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    DEMO_DATA = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    STORE_PATH = ""
    DEMO_DATA = False
    OPENAI_API_KEY = ""
