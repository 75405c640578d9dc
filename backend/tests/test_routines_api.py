"""
Tests for POST /api/v1/routines/expand
======================================
Covers:
- Happy path: mixed timed/reps routine expanded with injected rests
- Response uses camelCase keys and carries total duration
- Validation: unknown exercise type rejected (422)
- Validation: timed exercise without duration rejected (422)
- Validation: exercise without sets rejected (422)
- Health endpoint

Run: pytest tests/test_routines_api.py -v
"""

from __future__ import annotations

from fastapi.testclient import TestClient

from routine_player.main import app

client = TestClient(app)

_ROUTINE = {
    "title": "Ankle Rehab",
    "subtitle": "Daily mobility",
    "exercises": [
        {"section": "Warm-up", "name": "Ankle circles", "type": "timed", "sets": 2,
         "duration": 30, "restBetweenSets": 10, "instructions": "Slow and controlled"},
        {"section": "Strength", "name": "Calf raises", "type": "reps", "sets": 3,
         "reps": "12 reps", "restAfterExercise": 60},
    ],
}


class TestExpand:

    def test_expands_mixed_routine(self):
        resp = client.post("/api/v1/routines/expand", json=_ROUTINE)

        assert resp.status_code == 200
        data = resp.json()
        assert data["title"] == "Ankle Rehab"
        assert data["totalSteps"] == 5
        assert [s["name"] for s in data["steps"]] == [
            "Ankle circles", "Rest", "Ankle circles", "Calf raises", "Rest",
        ]
        assert data["totalDurationSeconds"] == 30 + 10 + 30 + 60

    def test_step_shape(self):
        data = client.post("/api/v1/routines/expand", json=_ROUTINE).json()
        first, rest, _, combined, _ = data["steps"]

        assert first["type"] == "timed"
        assert first["setNumber"] == 1
        assert first["totalSets"] == 2
        assert first["instructions"] == "Slow and controlled"
        assert rest["isRest"] is True
        assert rest["isInjectedRest"] is True
        assert rest["duration"] == 10
        assert combined["type"] == "reps"
        assert combined["setNumber"] is None
        assert combined["totalSets"] == 3

    def test_unknown_type_rejected(self):
        body = {"exercises": [{"section": "A", "name": "B", "type": "distance", "sets": 1}]}
        resp = client.post("/api/v1/routines/expand", json=body)
        assert resp.status_code == 422

    def test_missing_duration_rejected(self):
        body = {"exercises": [{"section": "A", "name": "B", "type": "timed", "sets": 1}]}
        resp = client.post("/api/v1/routines/expand", json=body)
        assert resp.status_code == 422

    def test_missing_sets_rejected(self):
        body = {"exercises": [{"section": "A", "name": "B", "type": "timed", "duration": 30}]}
        resp = client.post("/api/v1/routines/expand", json=body)
        assert resp.status_code == 422

    def test_empty_routine(self):
        resp = client.post("/api/v1/routines/expand", json={"title": "Nothing"})
        assert resp.status_code == 200
        assert resp.json()["steps"] == []


class TestHealth:

    def test_health(self):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "service": "routine-player-api"}
