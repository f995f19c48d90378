"""AuditLogger writes JSON lines to its own rotating file."""

import json
import logging
from logging.handlers import RotatingFileHandler

from infrastructure.logging.audit import AuditLogger


def _flush(audit):
    for handler in audit.logger.handlers:
        handler.flush()


def _records(path):
    return [json.loads(line.split(" | ", 2)[2]) for line in path.read_text(encoding="utf-8").splitlines()]


def test_file_handler_added_next_to_foreign_handlers(tmp_path):
    foreign = logging.StreamHandler()
    logging.getLogger("greenhouse.audit").addHandler(foreign)
    try:
        audit = AuditLogger(str(tmp_path / "audit.log"))
        audit.log_event("api", "turn_on", "pump", "success")
        _flush(audit)

        assert any(isinstance(h, RotatingFileHandler) for h in audit.logger.handlers)
        assert _records(tmp_path / "audit.log")[0]["resource"] == "pump"
    finally:
        logging.getLogger("greenhouse.audit").removeHandler(foreign)


def test_rebuilding_with_new_path_moves_the_file_handler(tmp_path):
    AuditLogger(str(tmp_path / "first.log"))
    audit = AuditLogger(str(tmp_path / "second.log"))
    audit.log_event("api", "turn_off", "valve", "failure", topic="esp32/control/solenoid")
    _flush(audit)

    file_handlers = [h for h in audit.logger.handlers if isinstance(h, RotatingFileHandler)]
    assert len(file_handlers) == 1
    [record] = _records(tmp_path / "second.log")
    assert record["meta"] == {"topic": "esp32/control/solenoid"}
    assert not (tmp_path / "first.log").exists()
