"""
Configuration for the Greenhouse Bridge
=======================================
Runtime settings loaded from ``GREENHOUSE_*`` environment variables:
broker connection, snapshot store, save cadence and HTTP server.
Sets up the logging configuration as well.
"""

import os
from contextlib import suppress
from dataclasses import dataclass, field
from typing import Any

from app.constants import Intervals


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.lower() in {"1", "true", "t", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer.") from None


STORE_BACKENDS = ("sqlite", "firestore")


@dataclass
class AppConfig:
    """Runtime configuration loaded from environment variables."""

    environment: str = field(default_factory=lambda: os.getenv("GREENHOUSE_ENV", "development"))
    DEBUG: bool = field(default_factory=lambda: _env_bool("GREENHOUSE_DEBUG", False))
    secret_key: str = field(default_factory=lambda: os.getenv("GREENHOUSE_SECRET_KEY", "GreenhouseDevSecretKey"))
    log_level: str = field(default_factory=lambda: os.getenv("GREENHOUSE_LOG_LEVEL", "INFO"))

    # HTTP / Socket.IO server
    host: str = field(default_factory=lambda: os.getenv("GREENHOUSE_HOST", "0.0.0.0"))
    port: int = field(default_factory=lambda: _env_int("GREENHOUSE_PORT", _env_int("PORT", 3000)))
    socketio_cors_origins: str = field(default_factory=lambda: os.getenv("GREENHOUSE_SOCKETIO_CORS", "*"))
    public_dir: str = field(default_factory=lambda: os.getenv("GREENHOUSE_PUBLIC_DIR", "public"))

    # MQTT broker (TLS on 8883 by default, certificate checks off like the field node)
    enable_mqtt: bool = field(default_factory=lambda: _env_bool("GREENHOUSE_ENABLE_MQTT", True))
    mqtt_broker_host: str = field(default_factory=lambda: os.getenv("GREENHOUSE_MQTT_HOST", "localhost"))
    mqtt_broker_port: int = field(default_factory=lambda: _env_int("GREENHOUSE_MQTT_PORT", 8883))
    mqtt_username: str = field(default_factory=lambda: os.getenv("GREENHOUSE_MQTT_USERNAME", ""))
    mqtt_password: str = field(default_factory=lambda: os.getenv("GREENHOUSE_MQTT_PASSWORD", ""))
    mqtt_tls: bool = field(default_factory=lambda: _env_bool("GREENHOUSE_MQTT_TLS", True))
    mqtt_tls_insecure: bool = field(default_factory=lambda: _env_bool("GREENHOUSE_MQTT_TLS_INSECURE", True))
    mqtt_client_id: str = field(default_factory=lambda: os.getenv("GREENHOUSE_MQTT_CLIENT_ID", ""))

    # Snapshot store
    store_backend: str = field(default_factory=lambda: os.getenv("GREENHOUSE_STORE_BACKEND", "sqlite").lower())
    database_path: str = field(
        default_factory=lambda: os.getenv("GREENHOUSE_DATABASE_PATH", "database/greenhouse.db")
    )
    firebase_credentials: str = field(
        default_factory=lambda: os.getenv("GREENHOUSE_FIREBASE_CREDENTIALS", "serviceAccountKey.json")
    )
    firestore_collection: str = field(
        default_factory=lambda: os.getenv("GREENHOUSE_FIRESTORE_COLLECTION", "sensorData")
    )
    save_interval_seconds: int = field(
        default_factory=lambda: _env_int("GREENHOUSE_SAVE_INTERVAL_SECONDS", Intervals.SNAPSHOT_SAVE_DEFAULT)
    )

    audit_log_path: str = field(default_factory=lambda: os.getenv("GREENHOUSE_AUDIT_LOG_PATH", "logs/audit.log"))
    mqtt_log_path: str = field(default_factory=lambda: os.getenv("GREENHOUSE_MQTT_LOG_PATH", "logs/mqtt.log"))

    # Default insecure secret key - used only for detection
    _DEFAULT_SECRET_KEY: str = field(default="GreenhouseDevSecretKey", init=False, repr=False)

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        # SECURITY: Fail fast if using default secret key in production
        if self.environment == "production" and self.secret_key == self._DEFAULT_SECRET_KEY:
            raise RuntimeError(
                "SECURITY ERROR: Cannot use default secret key in production!\n"
                "Set GREENHOUSE_SECRET_KEY environment variable to a secure random value.\n"
                'Generate one with: python -c "import secrets; print(secrets.token_hex(32))"'
            )
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"GREENHOUSE_STORE_BACKEND must be one of {', '.join(STORE_BACKENDS)}, got {self.store_backend!r}"
            )
        if self.save_interval_seconds <= 0:
            raise ValueError("GREENHOUSE_SAVE_INTERVAL_SECONDS must be positive.")

    def as_flask_config(self) -> dict[str, Any]:
        """Render configuration values for Flask application."""
        if not self.secret_key:
            raise RuntimeError(
                "Missing GREENHOUSE_SECRET_KEY environment variable. "
                "Production systems must set an explicit secret key."
            )

        return {
            "ENV": self.environment,
            "SECRET_KEY": self.secret_key,
            "DEBUG": self.DEBUG,
            "DATABASE_PATH": self.database_path,
            "STORE_BACKEND": self.store_backend,
            "MQTT_BROKER_HOST": self.mqtt_broker_host,
            "MQTT_BROKER_PORT": self.mqtt_broker_port,
            "SOCKETIO_CORS_ALLOWED_ORIGINS": self.socketio_cors_origins,
            "PUBLIC_DIR": self.public_dir,
            "AUDIT_LOG_PATH": self.audit_log_path,
            "MQTT_LOG_PATH": self.mqtt_log_path,
            "SAVE_INTERVAL_SECONDS": self.save_interval_seconds,
        }


def setup_logging(debug: bool = False, level: str | None = None) -> None:
    """Setup logging configuration."""
    import logging
    import sys
    from logging.handlers import RotatingFileHandler

    if debug:
        log_level = logging.DEBUG
    else:
        log_level = getattr(logging, (level or "INFO").upper(), logging.INFO)

    # Root logger
    root = logging.getLogger()
    root.setLevel(log_level)

    # Keep existing handlers but avoid adding duplicates when create_app is called multiple times
    has_console = any(getattr(h, "name", "") == "greenhouse_console" for h in root.handlers)
    has_file = any(getattr(h, "name", "") == "greenhouse_file" for h in root.handlers)
    added_handler = False

    # Console handler (force UTF-8 to avoid UnicodeEncodeError on Windows terminals)
    stream = sys.stdout
    with suppress(AttributeError, ValueError):
        stream.reconfigure(encoding="utf-8", errors="replace")
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    if not has_console:
        console_handler = logging.StreamHandler(stream=stream)
        console_handler.name = "greenhouse_console"
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)
        added_handler = True

    if not has_file:
        os.makedirs("logs", exist_ok=True)
        file_handler = RotatingFileHandler(
            "logs/greenhouse.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.name = "greenhouse_file"
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)
        added_handler = True

    # Ensure handler levels follow the desired log level
    for handler in root.handlers:
        if getattr(handler, "name", "") in {"greenhouse_console", "greenhouse_file"}:
            handler.setLevel(log_level)

    if added_handler:
        root.info("Logging initialized at level: %s", logging.getLevelName(log_level))

    if _env_bool("GREENHOUSE_SILENCE_WERKZEUG", True):
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    # Engine.IO polling logs a line per request
    if _env_bool("GREENHOUSE_SILENCE_SOCKETIO", True):
        logging.getLogger("socketio").setLevel(logging.WARNING)
        logging.getLogger("engineio").setLevel(logging.WARNING)


def load_config() -> AppConfig:
    """Helper for callers to load and validate configuration."""
    return AppConfig()
