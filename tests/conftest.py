"""
Shared test fixtures for the greenhouse bridge test suite.

Provides:
- In-memory SQLite snapshot store
- Fake Socket.IO server and paho client doubles
- A Flask app built without the broker runtime, plus its HTTP and
  Socket.IO test clients

Usage:
    def test_example(snapshot_repo, emitter, fake_sio):
        ...
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from types import SimpleNamespace
from typing import Any
from unittest.mock import patch

import pytest

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.domain.greenhouse_state import GreenhouseState
from app.hardware.mqtt.mqtt_broker_wrapper import MQTTClientWrapper
from app.utils.emitters import EmitterService
from infrastructure.database.repositories.snapshots import SnapshotRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)


# ========================== Test Doubles ===================================


class FakeSocketIO:
    """Records every emit instead of sending it."""

    def __init__(self) -> None:
        self.emits: list[dict] = []

    def emit(self, event, payload, room=None, namespace="/"):
        self.emits.append(
            {
                "event": event,
                "payload": payload,
                "room": room,
                "namespace": namespace,
            }
        )

    def events(self, name: str) -> list[dict]:
        return [e for e in self.emits if e["event"] == name]


class DummyMessage:
    def __init__(self, topic: str, payload: bytes):
        self.topic = topic
        self.payload = payload


class DummyClient:
    """Minimal stand-in for ``paho.mqtt.client.Client``."""

    def __init__(self, publish_rc: int = 0):
        self.on_message = None
        self.on_connect = None
        self.on_disconnect = None
        self.subscriptions: list[str] = []
        self.published: list[tuple[str, Any]] = []
        self.publish_rc = publish_rc
        self.connect_calls: list[tuple] = []
        self.loop_started = False

    def connect_async(self, *args, **_kwargs):
        self.connect_calls.append(args)
        return 0

    def loop_start(self):
        self.loop_started = True

    def disconnect(self):
        return 0

    def loop_stop(self):
        self.loop_started = False

    def subscribe(self, topic):
        self.subscriptions.append(topic)
        return (0, len(self.subscriptions))

    def publish(self, topic, payload):
        self.published.append((topic, payload))
        return SimpleNamespace(rc=self.publish_rc, topic=topic, payload=payload)


class FailingStore:
    """Snapshot store whose writes always fail."""

    backend_name = "failing"

    def __init__(self, exc: Exception):
        self.exc = exc
        self.calls = 0

    def add(self, document):
        self.calls += 1
        raise self.exc

    def recent(self, limit):
        raise self.exc


def build_wrapper(dummy_client: DummyClient, *, connected: bool = True) -> MQTTClientWrapper:
    """MQTTClientWrapper around a DummyClient, optionally already connected."""
    with patch(
        "app.hardware.mqtt.mqtt_broker_wrapper.create_mqtt_client",
        return_value=dummy_client,
    ):
        wrapper = MQTTClientWrapper(broker="broker.test", port=8883)
    if connected:
        wrapper._on_connect(dummy_client, None, {}, 0)
    return wrapper


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with the snapshot table created.

    Each test gets a fresh database.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    yield handler
    handler.close_db()


@pytest.fixture()
def snapshot_repo(db_handler):
    return SnapshotRepository(db_handler)


# ========================== Service Fixtures ===============================


@pytest.fixture()
def state():
    return GreenhouseState()


@pytest.fixture()
def fake_sio():
    return FakeSocketIO()


@pytest.fixture()
def emitter(fake_sio):
    return EmitterService(sio=fake_sio)


@pytest.fixture()
def dummy_client():
    return DummyClient()


@pytest.fixture()
def mqtt_wrapper(dummy_client):
    return build_wrapper(dummy_client)


# ========================== Application Fixtures ===========================


@pytest.fixture()
def app(tmp_path, monkeypatch):
    monkeypatch.setenv("GREENHOUSE_SECRET_KEY", "test-secret")
    public_dir = tmp_path / "public"
    public_dir.mkdir()
    (public_dir / "index.html").write_text("<html><body>Greenhouse</body></html>", encoding="utf-8")

    app = create_test_app(
        {
            "database_path": str(tmp_path / "test.db"),
            "audit_log_path": str(tmp_path / "audit.log"),
            "public_dir": str(public_dir),
        }
    )
    yield app
    app.config["CONTAINER"].shutdown()


def create_test_app(overrides: dict[str, Any]):
    from app import create_app

    app = create_app(overrides)
    app.config["TESTING"] = True
    return app


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def container(app):
    return app.config["CONTAINER"]


@pytest.fixture()
def socket_client(app):
    from app.extensions import socketio

    sock = socketio.test_client(app)
    yield sock
    if sock.is_connected():
        sock.disconnect()
