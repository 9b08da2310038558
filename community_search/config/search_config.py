"""
Configuration settings for the community search service.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Base directories
BASE_DIR = Path(__file__).parent.parent.parent

# Load .env file if it exists (production credentials and paths)
env_path = BASE_DIR / '.env'
if env_path.exists():
    load_dotenv(env_path)

# Data directory - use environment variable in production, local path in development
DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))

# Content store path - support environment variable override for production
DATABASE_PATH = os.getenv("DATABASE_PATH", str(DATA_DIR / "community.db"))


# IDENTITY SERVICE
#
# Bearer credentials are resolved to a user id with GET {AUTH_URL}/auth/v1/user.
# Leave AUTH_URL unset to treat every caller as anonymous.

AUTH_URL = os.getenv("AUTH_URL", "").rstrip("/")
SERVICE_ROLE_KEY = os.getenv("SERVICE_ROLE_KEY", "")


# RANKING CONFIGURATION
#
# Tiers are evaluated in precedence order; the first criterion that fires
# sets the rank. Term tiers decay with the term's extraction index.

RANKING_CONFIG = {
    "title_exact": 100,
    "excerpt_exact": 80,
    "body_exact": 60,

    # Per extracted term: base - decay * index, never below term_floor
    "term_title_base": 90,
    "term_body_base": 70,
    "term_decay": 5,
    "term_floor": 10,

    # Added on top of the tier for featured / pinned records
    "featured_bonus": 20,

    # Selected by the filter but no criterion fired
    "minimum": 10,

    # Fallback pass: title matches first, everything else after
    "fallback_title": 2.0,
    "fallback_other": 1.0,
}


# SEARCH CONFIGURATION

SEARCH_CONFIG = {
    "default_limit": 50,
    "max_limit": 100,
    "max_query_length": 500,

    # Rows fetched per content type before ranking (on top of offset + limit)
    "candidate_pool_size": 200,

    "related_limit": 3,
    "inline_suggestion_limit": 5,
    # Inline suggestions only for queries longer than this
    "inline_suggestion_min_length": 2,
}


# SUGGESTION CONFIGURATION

SUGGESTION_CONFIG = {
    "min_query_length": 2,
    "default_limit": 10,
    "max_limit": 50,

    # Rows requested from each source
    "popular_limit": 5,
    "title_limit": 5,
    "synonym_limit": 3,

    # Synonym weights are scaled per suggestion kind
    "synonym_multiplier": 10,
    "synonym_match_multiplier": 5,

    # Higher sorts first
    "source_priority": {
        "popular": 4,
        "article_title": 3,
        "synonym": 2,
        "synonym_match": 1,
    },
}


# TERM EXTRACTION

TERM_CONFIG = {
    "patterns": [
        r"how do i (\w+)",
        r"how to (\w+)",
        r"what is (\w+)",
        r"where is (\w+)",
        r"can i (\w+)",
    ],
    "stop_words": [
        "how", "do", "i", "the", "a", "an", "to", "is",
        "can", "what", "where", "when", "why",
    ],
    # Tokens shorter than this are dropped
    "min_token_length": 3,
    "strip_chars": ".,!?;:\"'()",
}


# CONCURRENCY CONFIGURATION

CONCURRENCY_CONFIG = {
    "search_thread_pool_size": int(os.getenv("SEARCH_THREAD_POOL_SIZE", "8")),
    "store_timeout_seconds": float(os.getenv("STORE_TIMEOUT_SECONDS", "5.0")),
    "identity_timeout_seconds": float(os.getenv("IDENTITY_TIMEOUT_SECONDS", "3.0")),
    "analytics_timeout_seconds": float(os.getenv("ANALYTICS_TIMEOUT_SECONDS", "5.0")),
}


# CORS CONFIGURATION
#
# The caller is a browser-resident front end served from anywhere.

CORS_CONFIG = {
    "allow_origins": ["*"],
    "allow_credentials": False,
    "allow_methods": ["POST", "GET", "OPTIONS", "PUT", "DELETE", "PATCH"],
    "allow_headers": ["authorization", "x-client-info", "apikey", "content-type"],
    "max_age": 86400,
}


# LOGGING CONFIGURATION

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = Path(os.getenv("LOG_DIR", str(BASE_DIR / "logs")))
LOG_DIR.mkdir(parents=True, exist_ok=True)

LOG_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "class": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s"
        },
        "standard": {
            "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "level": LOG_LEVEL,
            "formatter": "standard",
            "stream": "ext://sys.stdout"
        },
        "api": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(LOG_DIR / "api.log"),
            "maxBytes": 10485760,  # 10MB
            "backupCount": 5,
            "formatter": "json",
            "level": LOG_LEVEL
        },
        "search": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(LOG_DIR / "search.log"),
            "maxBytes": 10485760,
            "backupCount": 5,
            "formatter": "json",
            "level": LOG_LEVEL
        },
        "errors": {
            "class": "logging.handlers.RotatingFileHandler",
            "filename": str(LOG_DIR / "errors.log"),
            "maxBytes": 10485760,
            "backupCount": 5,
            "formatter": "json",
            "level": "ERROR"
        }
    },
    "loggers": {
        "api": {
            "handlers": ["console", "api", "errors"],
            "level": LOG_LEVEL,
            "propagate": False
        },
        "search": {
            "handlers": ["console", "search", "errors"],
            "level": LOG_LEVEL,
            "propagate": False
        },
        "store": {
            "handlers": ["console", "search", "errors"],
            "level": LOG_LEVEL,
            "propagate": False
        },
        "": {  # Root logger
            "handlers": ["console", "errors"],
            "level": LOG_LEVEL
        }
    }
}


# API CONFIGURATION

API_CONFIG = {
    "host": os.getenv("API_HOST", "0.0.0.0"),
    "port": int(os.getenv("API_PORT", "8000")),
    "reload": os.getenv("RELOAD", "false").lower() == "true",
    "log_level": LOG_LEVEL.lower()
}


# ENVIRONMENT

DEBUG = os.getenv("DEBUG", "false").lower() == "true"
ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
