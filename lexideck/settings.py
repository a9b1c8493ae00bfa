import os
from pathlib import Path

import structlog

BASE_DIR = Path(__file__).resolve().parent.parent


def env_bool(name, default=False):
    value = os.environ.get(name)
    if value is None:
        return default
    return value.lower() in ("1", "true", "yes", "on")


SECRET_KEY = os.environ.get("LEXIDECK_SECRET_KEY", "dev-insecure-lexideck-key")
DEBUG = env_bool("LEXIDECK_DEBUG", True)
ALLOWED_HOSTS = os.environ.get("LEXIDECK_ALLOWED_HOSTS", "localhost,127.0.0.1,testserver").split(",")

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.auth",
    "rest_framework",
    "lexideck",
    "srs.data",
]

MIDDLEWARE = [
    "django.middleware.common.CommonMiddleware",
    "lexideck.middleware.RequestLogMiddleware",
]

ROOT_URLCONF = "lexideck.urls"

DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": os.environ.get("LEXIDECK_DB_PATH", str(BASE_DIR / "lexideck.sqlite3")),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

LANGUAGE_CODE = "zh-hans"
TIME_ZONE = os.environ.get("LEXIDECK_TIME_ZONE", "Asia/Shanghai")
USE_I18N = True
USE_TZ = True

REST_FRAMEWORK = {
    "DEFAULT_RENDERER_CLASSES": ["rest_framework.renderers.JSONRenderer"],
    "DEFAULT_PARSER_CLASSES": ["rest_framework.parsers.JSONParser"],
    "DEFAULT_AUTHENTICATION_CLASSES": [],
    "DEFAULT_PERMISSION_CLASSES": ["rest_framework.permissions.AllowAny"],
    "UNAUTHENTICATED_USER": None,
}

# Review scheduler parameters. Replaced wholesale, never merged per field;
# learning steps are given in minutes.
SRS_SCHEDULER = {
    "desired_retention": 0.9,
    "maximum_interval": 36500,
    "learning_steps": [1, 10],
    "relearning_steps": [10],
    "enable_fuzzing": True,
}

# Session queue sizes
SRS_NEW_CARDS_PER_SESSION = 20
SRS_REVIEWS_PER_SESSION = 200

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plain": {"format": "%(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "plain"},
    },
    "root": {"handlers": ["console"], "level": os.environ.get("LEXIDECK_LOG_LEVEL", "INFO")},
}

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer() if DEBUG else structlog.processors.JSONRenderer(),
    ],
    logger_factory=structlog.stdlib.LoggerFactory(),
    wrapper_class=structlog.stdlib.BoundLogger,
    cache_logger_on_first_use=True,
)
