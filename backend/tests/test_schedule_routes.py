"""Schedule endpoints with the agent runner stubbed out."""

from __future__ import annotations

import json
import re
from types import SimpleNamespace
from typing import Any, Dict, List

import pytest
from agents import Runner
from fastapi.testclient import TestClient

from planner.cache.schedule_store import get_schedule_store
from planner.main import app
from planner.operations import ScheduleOperations
from planner.schedule_agent import EDIT_FAILED_WARNING


GENERATED = {
    "school": "Northeastern University",
    "major": "Computer Science",
    "degree": "BS",
    "startTerm": "Fall 2025",
    "graduationTerm": "Spring 2029",
    "totalCredits": 128,
    "semesters": [
        {
            "term": "Fall 2025",
            "type": "academic",
            "courses": [
                {"code": "CS 1800", "name": "Discrete Structures", "credits": 4},
                {"code": "CS 2500", "name": "Fundamentals of Computer Science 1", "credits": 4},
            ],
            "totalCredits": 16,
        },
        {"term": "Summer 2026", "type": "co-op", "coopNumber": 1},
    ],
    "warnings": "- Verify prerequisites with an advisor",
}

GENERATE_REQUEST = {
    "school": {"name": "Northeastern University", "catalogUrl": "https://catalog.northeastern.edu"},
    "major": "Computer Science",
    "preferences": {"startingSemester": "Fall 2025", "creditsPerSemester": "standard", "coopPlan": "one"},
    "completedCourses": [{"code": "MATH 1341", "name": "Calculus 1", "credits": 4}],
}


@pytest.fixture
def client() -> TestClient:
    get_schedule_store().clear()
    return TestClient(app)


@pytest.fixture
def prompts() -> List[str]:
    return []


def _stub_runner(monkeypatch, prompts: List[str], output: Any) -> None:
    async def fake_run(agent, message, **kwargs):
        prompts.append(message)
        return SimpleNamespace(final_output=output)

    monkeypatch.setattr(Runner, "run", fake_run)


def test_generate_normalizes_and_stores(client: TestClient, monkeypatch, prompts: List[str]) -> None:
    _stub_runner(monkeypatch, prompts, json.dumps({"answer": json.dumps(GENERATED)}))

    response = client.post("/api/schedule/generate", json=GENERATE_REQUEST)

    assert response.status_code == 200
    payload = response.json()
    schedule = payload["schedule"]
    assert payload["version"] == 1
    assert schedule["semesters"][0]["totalCredits"] == 8
    assert schedule["semesters"][1] == {"type": "coop", "term": "Summer 2026", "coopNumber": 1}
    assert schedule["warnings"] == ["Verify prerequisites with an advisor"]
    assert "MATH 1341" in prompts[0]
    assert "Northeastern University" in prompts[0]

    stored = client.get(f"/api/schedule/{payload['scheduleId']}")
    assert stored.status_code == 200
    assert stored.json()["schedule"] == schedule


def test_generate_accepts_plain_school_and_markdown_output(client: TestClient, monkeypatch, prompts: List[str]) -> None:
    markdown = "**Year 1**\n- Fall 2025 (8 credits):\n  - CS 1800: Discrete Structures (4)\n  - CS 2500: Fundies 1 (4)\n"
    _stub_runner(monkeypatch, prompts, markdown)

    request = {**GENERATE_REQUEST, "school": "Northeastern University"}
    response = client.post("/api/schedule/generate", json=request)

    assert response.status_code == 200
    schedule = response.json()["schedule"]
    assert schedule["school"] == "Northeastern University"
    assert schedule["major"] == "Computer Science"
    assert schedule["startTerm"] == "Fall 2025"
    assert schedule["totalCredits"] == 8
    assert len(schedule["warnings"]) == 1


def test_generate_agent_failure_is_502(client: TestClient, monkeypatch) -> None:
    async def failing_run(agent, message, **kwargs):
        raise RuntimeError("model unavailable")

    monkeypatch.setattr(Runner, "run", failing_run)

    response = client.post("/api/schedule/generate", json=GENERATE_REQUEST)

    assert response.status_code == 502
    assert "model unavailable" in response.json()["detail"]


def test_generate_rejects_incomplete_request(client: TestClient) -> None:
    response = client.post("/api/schedule/generate", json={"school": "NEU"})

    assert response.status_code == 422


def test_patch_recovers_schedule_from_surrounding_text(client: TestClient, monkeypatch, prompts: List[str]) -> None:
    patched = {**GENERATED, "major": ""}
    patched["semesters"] = [GENERATED["semesters"][0]]
    _stub_runner(monkeypatch, prompts, f"Here you go: {json.dumps(patched)} Let me know!")

    response = client.post(
        "/api/schedule/patch",
        json={"currentSchedule": GENERATED, "editRequest": "Drop the co-op"},
    )

    assert response.status_code == 200
    schedule = response.json()["schedule"]
    assert [semester["term"] for semester in schedule["semesters"]] == ["Fall 2025"]
    assert schedule["major"] == "Computer Science"
    assert "Drop the co-op" in prompts[0]


def test_patch_falls_back_to_current_schedule(client: TestClient, monkeypatch, prompts: List[str]) -> None:
    _stub_runner(monkeypatch, prompts, "Sorry, I could not do that.")

    response = client.post(
        "/api/schedule/patch",
        json={"currentSchedule": GENERATED, "editRequest": "Make it better"},
    )

    assert response.status_code == 200
    schedule = response.json()["schedule"]
    assert [semester["term"] for semester in schedule["semesters"]] == ["Fall 2025", "Summer 2026"]
    assert schedule["warnings"][-1] == EDIT_FAILED_WARNING


def test_edit_applies_tool_mutations(client: TestClient, monkeypatch, prompts: List[str]) -> None:
    async def fake_run(agent, message, **kwargs):
        prompts.append(message)
        handle = re.search(r"scheduleId: (\w+)", message).group(1)
        ScheduleOperations(get_schedule_store()).add_course(handle, "Fall 2025", "CS 2510", "Fundies 2", 4)
        return SimpleNamespace(final_output="Added CS 2510 to Fall 2025.")

    monkeypatch.setattr(Runner, "run", fake_run)

    response = client.post(
        "/api/schedule/edit",
        json={"currentSchedule": GENERATED, "editRequest": "Add Fundies 2 in my first fall"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["answer"] == "Added CS 2510 to Fall 2025."
    assert payload["version"] == 2
    assert payload["lastAction"] == "add_course"
    assert payload["schedule"]["semesters"][0]["totalCredits"] == 12
    assert "Add Fundies 2 in my first fall" in prompts[0]

    follow_up = client.get(f"/api/schedule/{payload['scheduleId']}")
    assert follow_up.json()["version"] == 2


def test_edit_unknown_schedule_id_is_404(client: TestClient) -> None:
    response = client.post("/api/schedule/edit", json={"scheduleId": "missing", "editRequest": "Anything"})

    assert response.status_code == 404
    assert response.json()["detail"] == "Schedule not found or expired"


def test_edit_requires_a_schedule_source(client: TestClient) -> None:
    response = client.post("/api/schedule/edit", json={"editRequest": "Anything"})

    assert response.status_code == 422


def test_normalize_endpoint_without_storing(client: TestClient) -> None:
    response = client.post(
        "/api/schedule/normalize",
        json={"raw": {"semesters": '[{"term": "fall 2025", "type": "academic", "courses": []}],\n'}, "school": "NEU", "store": False},
    )

    assert response.status_code == 200
    payload: Dict[str, Any] = response.json()
    assert "scheduleId" not in payload
    assert payload["schedule"]["school"] == "NEU"
    assert payload["schedule"]["semesters"][0]["term"] == "Fall 2025"
    assert payload["schedule"]["warnings"] == []


def test_normalize_endpoint_stores_raw_text(client: TestClient) -> None:
    response = client.post("/api/schedule/normalize", json={"raw": json.dumps({"answer": json.dumps(GENERATED)})})

    assert response.status_code == 200
    payload = response.json()
    assert payload["version"] == 1
    assert client.get(f"/api/schedule/{payload['scheduleId']}").status_code == 200


def test_unknown_schedule_is_404(client: TestClient) -> None:
    response = client.get("/api/schedule/does-not-exist")

    assert response.status_code == 404
