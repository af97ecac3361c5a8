"""
Unit tests for the /movies handlers.
Requests are MagicMocks shaped like firebase_functions.https_fn.Request.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from api.schedule.auth import IdentityVerifier
from api.schedule.handlers import ScheduleHandler
from api.schedule.models import IdentityError

pytestmark = pytest.mark.unit


def create_mock_request(
    method: str = "GET", body: dict | str | None = None, headers: dict | None = None
) -> MagicMock:
    """Create a mock Firebase Functions Request object."""
    mock_req = MagicMock()
    mock_req.method = method
    mock_req.args = {}
    mock_req.headers = headers or {}
    raw = json.dumps(body) if isinstance(body, dict) else (body or "")
    mock_req.get_data.return_value = raw
    return mock_req


def parse(response) -> dict:
    data = response.get_data(as_text=True)
    return json.loads(data) if data else {}


@pytest.fixture
def verifier():
    mock_verifier = MagicMock(spec=IdentityVerifier)
    mock_verifier.verify.return_value = "neo@zion.test"
    return mock_verifier


@pytest.fixture
def handler(wrapper, verifier):
    return ScheduleHandler(wrapper=wrapper, verifier=verifier)


MATRIX = {"catalogId": 603, "discussionDate": "2025-03-01"}


class TestAddMovieHandler:
    def test_created(self, handler, redis):
        response = handler.movies(create_mock_request("POST", MATRIX))

        assert response.status_code == 201
        assert response.headers["Content-Type"] == "application/json"
        assert response.headers["Access-Control-Allow-Origin"] == "https://club.test"
        result = parse(response)
        assert result["success"] is True
        assert result["message"] == "Movie successfully added to schedule"
        assert result["movie"]["catalogId"] == 603
        assert result["movie"]["title"] == "The Matrix"
        assert result["movie"]["addedBy"] == "neo@zion.test"
        assert "test:movie:603" in redis.strings

    def test_duplicate_conflict(self, handler):
        handler.movies(create_mock_request("POST", MATRIX))
        response = handler.movies(create_mock_request("POST", MATRIX))

        assert response.status_code == 409
        result = parse(response)
        assert result["error"] == "Conflict"
        assert "603" in result["message"]

    def test_not_found(self, handler, redis):
        response = handler.movies(
            create_mock_request("POST", {"catalogId": 999999999, "discussionDate": "2025-03-01"})
        )

        assert response.status_code == 404
        assert parse(response) == {
            "error": "Not found",
            "message": "Movie with TMDb ID 999999999 not found",
        }
        assert redis.write_count == 0

    def test_bad_date(self, handler, redis):
        response = handler.movies(
            create_mock_request("POST", {"catalogId": 603, "discussionDate": "03/01/2025"})
        )

        assert response.status_code == 400
        result = parse(response)
        assert result["error"] == "Validation error"
        assert "YYYY-MM-DD" in result["message"]
        assert redis.calls == []

    def test_malformed_json(self, handler):
        response = handler.movies(create_mock_request("POST", "{oops"))
        assert response.status_code == 400
        assert parse(response)["message"] == "Request body must be valid JSON"

    def test_notes_too_long_has_details(self, handler):
        response = handler.movies(create_mock_request("POST", {**MATRIX, "notes": "x" * 1001}))

        assert response.status_code == 400
        assert parse(response)["details"] == {"length": 1001}

    def test_unauthenticated(self, handler, verifier, redis, catalog_service):
        verifier.verify.side_effect = IdentityError("Authorization header required", 401)

        response = handler.movies(create_mock_request("POST", MATRIX))

        assert response.status_code == 401
        assert parse(response)["error"] == "Unauthorized"
        catalog_service.fetch_by_id.assert_not_awaited()
        assert redis.calls == []

    def test_unverified_email(self, handler, verifier):
        verifier.verify.side_effect = IdentityError("Email address is not verified", 403)

        response = handler.movies(create_mock_request("POST", MATRIX))

        assert response.status_code == 403
        assert parse(response)["error"] == "Forbidden"

    def test_store_failure(self, handler, redis):
        redis.fail_on.add("evalsha")

        response = handler.movies(create_mock_request("POST", MATRIX))

        assert response.status_code == 500
        assert parse(response)["error"] == "Internal server error"

    def test_unexpected_error_is_500(self, handler, wrapper):
        wrapper.repository = None

        response = handler.movies(create_mock_request("POST", MATRIX))

        assert response.status_code == 500
        assert parse(response)["error"] == "Internal server error"


class TestGetScheduleHandler:
    def test_empty(self, handler, verifier):
        response = handler.movies(create_mock_request("GET"))

        assert response.status_code == 200
        assert parse(response) == {"movies": [], "count": 0}
        # Listing is public
        verifier.verify.assert_not_called()

    def test_lists_added_movies(self, handler):
        handler.movies(
            create_mock_request("POST", {"catalogId": 27205, "discussionDate": "2025-04-01"})
        )
        handler.movies(create_mock_request("POST", MATRIX))

        response = handler.movies(create_mock_request("GET"))

        assert response.status_code == 200
        assert response.headers["Access-Control-Allow-Origin"] == "https://club.test"
        result = parse(response)
        assert result["count"] == 2
        assert [m["catalogId"] for m in result["movies"]] == [603, 27205]
        first = result["movies"][0]
        assert first["discussionDate"] == "2025-03-01"
        assert first["posterUrl"].endswith("/f89U3ADr1oiB1s9GkdPOEpXUk5H.jpg")
        assert first["enriched"] is True
        # Listing keeps nulls so the frontend sees every field
        assert "notes" in first and first["notes"] is None

    def test_credential_failure(self, handler, secret_loader):
        secret_loader.side_effect = RuntimeError("secret manager down")

        response = handler.movies(create_mock_request("GET"))

        assert response.status_code == 500
        assert parse(response) == {
            "error": "Internal server error",
            "message": "Failed to retrieve catalog API key from secret store",
        }


class TestRouting:
    def test_preflight(self, handler):
        response = handler.movies(create_mock_request("OPTIONS"))

        assert response.status_code == 204
        assert response.headers["Access-Control-Allow-Origin"] == "https://club.test"
        assert "POST" in response.headers["Access-Control-Allow-Methods"]
        assert "Authorization" in response.headers["Access-Control-Allow-Headers"]

    @pytest.mark.parametrize("method", ["DELETE", "PUT", "PATCH"])
    def test_method_not_allowed(self, handler, method):
        response = handler.movies(create_mock_request(method))

        assert response.status_code == 405
        assert response.headers["Allow"] == "GET, POST, OPTIONS"
        assert parse(response)["error"] == "Method not allowed"


class TestStoreClientRelease:
    @pytest.mark.parametrize("method, body", [("GET", None), ("POST", MATRIX)])
    def test_redis_client_closed_after_request(self, handler, method, body):
        with patch("api.schedule.handlers.close_redis", new=AsyncMock()) as mock_close:
            handler.movies(create_mock_request(method, body))
        mock_close.assert_awaited_once()

    def test_redis_client_closed_after_failure(self, handler, redis):
        redis.fail_on.add("evalsha")
        with patch("api.schedule.handlers.close_redis", new=AsyncMock()) as mock_close:
            response = handler.movies(create_mock_request("POST", MATRIX))
        assert response.status_code == 500
        mock_close.assert_awaited_once()
