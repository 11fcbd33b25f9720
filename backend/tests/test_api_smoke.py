import importlib
import logging

from fastapi.testclient import TestClient

import timesheet_insights.core.logging as logging_setup
import timesheet_insights.main as main_module
from timesheet_insights.main import app

client = TestClient(app)

BREAK_TEXT = "\n".join(
    [
        "Data,Nome,Líder,Tempo Catraca",
        "2025-11-22,Ana,L1,1:10:00",
        "2025-11-22,Bruno,L1,0:40:00",
        "2025-11-23,Ana,L1,0:50:00",
    ]
)


def test_health() -> None:
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"


def test_report_kinds() -> None:
    response = client.get("/reports/kinds")
    assert response.status_code == 200
    kinds = {item["kind"]: item for item in response.json()}
    assert set(kinds) == {"performance", "punctuality", "break"}
    assert kinds["break"]["default_metric"] == "turnstile_duration"
    assert "late_start" in kinds["punctuality"]["rules"]


def test_analyze_break_endpoint() -> None:
    response = client.post(
        "/reports/break/analyze",
        json={"text": BREAK_TEXT, "query": {"leader": "L1", "collaborator": "Ana"}},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert [record["name"] for record in body["offenders"]["turnstile"]] == ["Ana"]
    assert body["matrix"]["periods"] == ["2025-11-22", "2025-11-23"]
    assert body["matrix"]["rows"][0]["average_formatted"] == "01:00:00"
    assert body["collaborators"][0]["occurrence_count"] == 2


def test_analyze_endpoint_reports_structural_errors() -> None:
    response = client.post("/reports/break/analyze", json={"text": "Nome\nAna\n"})
    assert response.status_code == 422
    assert "turnstile_duration" in response.json()["detail"]


def test_analyze_endpoint_rejects_unknown_kind() -> None:
    response = client.post("/reports/payroll/analyze", json={"text": "a,b\n1,2\n"})
    assert response.status_code == 422


def test_importing_the_app_leaves_root_logging_alone(monkeypatch) -> None:
    monkeypatch.setattr(logging_setup, "_configured", False)
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    importlib.reload(main_module)
    assert root.handlers == handlers
    assert root.level == level
    assert logging_setup._configured is False


def test_logging_is_configured_at_startup(monkeypatch) -> None:
    calls = []
    monkeypatch.setattr(main_module, "setup_logging", lambda: calls.append("setup"))
    with TestClient(main_module.app) as startup_client:
        assert startup_client.get("/health").status_code == 200
    assert calls == ["setup"]
