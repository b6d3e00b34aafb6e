import asyncio
from typing import Optional, get_type_hints

import pytest
from fastapi import HTTPException, Request
from fastapi.testclient import TestClient

from circuit_challenge.config import settings
from circuit_challenge.main import app, configure_logging
from circuit_challenge.middleware.security import limiter, validate_json_size


API = settings.API_PREFIX


@pytest.fixture(scope="module")
def client():
    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
    limiter.enabled = settings.RATE_LIMIT_ENABLED


class TestHealth:
    """Служебные endpoints"""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["app"] == settings.APP_NAME

    def test_api_health(self, client):
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json()["max_attempts"] == settings.GENERATION_MAX_ATTEMPTS

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json()["health"] == "/health"

    def test_security_headers(self, client):
        response = client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"


class TestPresets:
    """Пресеты и Story Mode"""

    def test_list_presets(self, client):
        response = client.get(f"{API}/puzzles/presets")
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 10
        assert data[0]["level"] == 1
        assert data[0]["profile"]["name"] == "Tiny Tot"

    def test_get_preset(self, client):
        response = client.get(f"{API}/puzzles/presets/10")
        assert response.status_code == 200
        assert response.json()["profile"]["name"] == "Expert"

    def test_unknown_preset(self, client):
        response = client.get(f"{API}/puzzles/presets/11")
        assert response.status_code == 404

    def test_story_profile(self, client):
        response = client.get(f"{API}/puzzles/story/3-C")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Story 3-C"
        assert data["subtraction_enabled"] is True

    def test_bad_story_code(self, client):
        response = client.get(f"{API}/puzzles/story/banana")
        assert response.status_code == 400


class TestGenerate:
    """Генерация через API"""

    def test_generate_by_level(self, client):
        response = client.post(f"{API}/puzzles/generate", json={"level": 3, "seed": 42, "max_attempts": 100})
        assert response.status_code == 200
        data = response.json()

        assert data["seed"] == 42
        assert data["meta"]["rows"] == 4
        assert data["meta"]["cols"] == 5
        assert data["meta"]["operations"] == ["addition", "subtraction"]
        assert data["meta"]["path_length"] == len(data["puzzle"]["solution"])
        assert data["puzzle"]["difficulty_label"] == "Easy"

    def test_generate_is_reproducible(self, client):
        body = {"level": 2, "seed": 7, "max_attempts": 100}
        first = client.post(f"{API}/puzzles/generate", json=body).json()
        second = client.post(f"{API}/puzzles/generate", json=body).json()
        assert first["puzzle"] == second["puzzle"]

    def test_generate_story_compact(self, client):
        response = client.post(
            f"{API}/puzzles/generate",
            json={"story": "9-B", "compact": True, "seed": 3, "max_attempts": 100},
        )
        assert response.status_code == 200
        meta = response.json()["meta"]
        assert (meta["rows"], meta["cols"]) == (4, 6)

    def test_generate_custom_profile(self, client):
        profile = {
            "name": "Mine",
            "add_sub_range": 15,
            "connector_min": 5,
            "connector_max": 15,
            "grid_rows": 4,
            "grid_cols": 5,
        }
        response = client.post(f"{API}/puzzles/generate", json={"profile": profile, "seed": 1, "max_attempts": 100})
        assert response.status_code == 200
        assert response.json()["puzzle"]["difficulty_label"] == "Mine"

    def test_exactly_one_source(self, client):
        response = client.post(f"{API}/puzzles/generate", json={"level": 1, "story": "1-A"})
        assert response.status_code == 422
        response = client.post(f"{API}/puzzles/generate", json={})
        assert response.status_code == 422

    def test_invalid_profile_rejected(self, client):
        profile = {"multiplication_enabled": True, "mult_div_range": 1}
        response = client.post(f"{API}/puzzles/generate", json={"profile": profile})
        assert response.status_code == 422

    def test_bad_story_in_body(self, client):
        response = client.post(f"{API}/puzzles/generate", json={"story": "11"})
        assert response.status_code == 400

    def test_exhaustion_is_422(self, client):
        profile = {"connector_min": 1, "connector_max": 2}
        response = client.post(f"{API}/puzzles/generate", json={"profile": profile, "seed": 5, "max_attempts": 2})
        assert response.status_code == 422
        detail = response.json()["detail"]
        assert "Try different settings" in detail["message"]
        assert detail["attempts"] == 2


class TestValidateAndMoves:
    """Проверка пазла и маршрута"""

    def test_validate_generated(self, client):
        puzzle = client.post(f"{API}/puzzles/generate", json={"level": 1, "seed": 9, "max_attempts": 100}).json()["puzzle"]
        response = client.post(f"{API}/puzzles/validate", json=puzzle)
        assert response.status_code == 200
        assert response.json() == {"valid": True, "errors": []}

    def test_validate_broken(self, client, handmade_puzzle):
        puzzle = handmade_puzzle.model_dump(mode="json")
        puzzle["grid"][1][1]["expression"] = "1 + 1"
        response = client.post(f"{API}/puzzles/validate", json=puzzle)
        data = response.json()
        assert data["valid"] is False
        assert any("(1,1)" in error for error in data["errors"])

    def test_check_moves(self, client, handmade_puzzle):
        body = {
            "puzzle": handmade_puzzle.model_dump(mode="json"),
            "moves": [list(cell) for cell in handmade_puzzle.solution],
        }
        response = client.post(f"{API}/puzzles/check-moves", json=body)
        assert response.status_code == 200
        assert response.json() == {"valid": True, "error": None}

    def test_check_moves_wrong_step(self, client, handmade_puzzle):
        body = {
            "puzzle": handmade_puzzle.model_dump(mode="json"),
            "moves": [[0, 0], [1, 0]],
        }
        data = client.post(f"{API}/puzzles/check-moves", json=body).json()
        assert data["valid"] is False
        assert data["error"].startswith("Step 1:")

    def test_request_too_large(self):
        request = Request({"type": "http", "headers": [(b"content-length", str(1024 * 1024).encode())]})
        with pytest.raises(HTTPException) as exc_info:
            asyncio.run(validate_json_size(request))
        assert exc_info.value.status_code == 413

    def test_small_request_passes(self):
        request = Request({"type": "http", "headers": [(b"content-length", b"512")]})
        assert asyncio.run(validate_json_size(request)) is None


class TestStoryGeneration:
    """Генерация уровней Story Mode"""

    @pytest.mark.parametrize("code", ["1-A", "1-C", "1-E"])
    def test_first_chapter_generates(self, client, code):
        response = client.post(f"{API}/puzzles/generate", json={"story": code, "seed": 4})
        assert response.status_code == 200
        assert response.json()["puzzle"]["difficulty_label"] == f"Story {code}"


class TestLogging:
    """Настройка логов"""

    def test_level_is_optional(self):
        assert get_type_hints(configure_logging)["level"] == Optional[str]
