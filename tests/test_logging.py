from __future__ import annotations

import json
import logging

from rbac_engine.core.logging import JsonFormatter


def make_record(**extra: object) -> logging.LogRecord:
    record = logging.LogRecord("rbac_engine.services.authorization", logging.INFO, __file__, 1, "authorization_denied", (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_decision_fields_are_top_level() -> None:
    formatter = JsonFormatter("rbac-engine", "test")
    record = make_record(principal_type="service", principal_id="42", guard_name="api", permission="deploy")

    entry = json.loads(formatter.format(record))

    assert entry["message"] == "authorization_denied"
    assert entry["service"] == "rbac-engine"
    assert entry["environment"] == "test"
    assert entry["principal"] == "service:42"
    assert entry["guard"] == "api"
    assert entry["extra"] == {"permission": "deploy"}


def test_plain_records_have_no_extra() -> None:
    entry = json.loads(JsonFormatter("rbac-engine").format(make_record()))

    assert "principal" not in entry
    assert "extra" not in entry
    assert entry["level"] == "INFO"
