"""Centralized configuration for the Task Tracker application."""

import logging
import os
import secrets
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

# ==================== Paths ====================
PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
TEMPLATE_DIR = PROJECT_ROOT / os.getenv("TEMPLATE_DIR", "templates")
STATIC_DIR = PROJECT_ROOT / os.getenv("STATIC_DIR", "static")

# ==================== Flask Configuration ====================
FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
FLASK_PORT = int(os.getenv("FLASK_PORT", "3000"))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "false").lower() == "true"

# Comma separated list, "*" allows any origin
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]

# ==================== Logging ====================
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# ==================== Security Configuration ====================
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
JWT_ACCESS_TOKEN_EXPIRES = int(os.getenv("JWT_ACCESS_TOKEN_EXPIRES", "3600"))

# Validation
if not JWT_SECRET_KEY:
    JWT_SECRET_KEY = secrets.token_hex(32)
    logger.warning("JWT_SECRET_KEY not set. Using random key, tokens will not survive a restart")

# ==================== Export commonly used groups ====================
__all__ = [
    'FLASK_HOST', 'FLASK_PORT', 'FLASK_DEBUG', 'CORS_ORIGINS',
    'LOG_LEVEL', 'LOG_FORMAT',
    'JWT_SECRET_KEY', 'JWT_ACCESS_TOKEN_EXPIRES',
    'TEMPLATE_DIR', 'STATIC_DIR',
]
