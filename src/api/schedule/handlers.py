"""
Schedule Firebase Functions Handlers

HTTP layer for /movies. Handlers parse the request, call the wrapper and map
the outcome to a JSON response; no business logic lives here.
"""

import json
from collections.abc import Coroutine
from typing import Any

from firebase_functions import https_fn

from adapters.redis_manager import close_redis
from api.schedule.auth import IdentityVerifier, identity_verifier
from api.schedule.wrappers import ScheduleWrapper, schedule_wrapper
from contracts.models import ErrorCategory, ErrorResponse, ServiceError
from utils.async_runner import run_async
from utils.get_logger import get_logger

logger = get_logger(__name__)

ALLOWED_METHODS = "GET, POST, OPTIONS"


class ScheduleHandler:
    """Class containing the /movies Firebase Function handlers."""

    def __init__(
        self,
        wrapper: ScheduleWrapper | None = None,
        verifier: IdentityVerifier | None = None,
    ):
        self.wrapper = wrapper or schedule_wrapper
        self.verifier = verifier or identity_verifier

    @property
    def cors_origin(self) -> str:
        return self.wrapper.settings.cors_allow_origin

    def _json_response(self, body: Any, status: int) -> https_fn.Response:
        return https_fn.Response(
            json.dumps(body, default=str),
            status=status,
            headers={
                "Content-Type": "application/json",
                "Access-Control-Allow-Origin": self.cors_origin,
            },
        )

    def _error_response(self, error: ServiceError) -> https_fn.Response:
        return self._json_response(error.to_response().to_body(), error.status_code)

    def _internal_error(self, e: Exception) -> https_fn.Response:
        body = ErrorResponse(error=ErrorCategory.INTERNAL.value, message=str(e) or "Unknown error")
        return self._json_response(body.to_body(), 500)

    @staticmethod
    def _run(coro: Coroutine[Any, Any, Any]) -> Any:
        """Run a wrapper call, releasing this loop's Redis client afterwards."""

        async def _request() -> Any:
            try:
                return await coro
            finally:
                await close_redis()

        return run_async(_request())

    def get_schedule(self, req: https_fn.Request) -> https_fn.Response:
        """
        List movies scheduled for discussion, soonest first.

        Usage: GET /movies
        """
        logger.info(f"GET /movies request received: {dict(req.args)}")
        try:
            result = self._run(self.wrapper.get_schedule())
            return self._json_response(result.to_wire(exclude_none=False), 200)

        except ServiceError as e:
            logger.error(f"Error in get_schedule: {e}", exc_info=True)
            return self._error_response(e)
        except Exception as e:
            logger.error(f"Unexpected error in get_schedule: {e}", exc_info=True)
            return self._internal_error(e)

    def add_movie(self, req: https_fn.Request) -> https_fn.Response:
        """
        Add a movie to the schedule. Requires a Firebase ID token.

        Usage: POST /movies
        Body: {"catalogId": 603, "discussionDate": "2025-03-01", "status": "scheduled", "notes": "..."}
        """
        try:
            user_email = self.verifier.verify(req)
            body = req.get_data(as_text=True)
            logger.info(f"POST /movies request received from {user_email}: {body}")

            result = self._run(self.wrapper.add_movie(body, added_by=user_email))
            return self._json_response(result.to_wire(), 201)

        except ServiceError as e:
            if e.status_code >= 500:
                logger.error(f"Error in add_movie: {e}", exc_info=True)
            else:
                logger.warning(f"add_movie rejected ({e.status_code}): {e}")
            return self._error_response(e)
        except Exception as e:
            logger.error(f"Unexpected error in add_movie: {e}", exc_info=True)
            return self._internal_error(e)

    def movies(self, req: https_fn.Request) -> https_fn.Response:
        """Route /movies by method."""
        if req.method == "GET":
            return self.get_schedule(req)
        if req.method == "POST":
            return self.add_movie(req)
        if req.method == "OPTIONS":
            return https_fn.Response(
                "",
                status=204,
                headers={
                    "Access-Control-Allow-Origin": self.cors_origin,
                    "Access-Control-Allow-Methods": ALLOWED_METHODS,
                    "Access-Control-Allow-Headers": "Authorization, Content-Type",
                    "Access-Control-Max-Age": "3600",
                },
            )

        body = ErrorResponse(
            error=ErrorCategory.METHOD_NOT_ALLOWED.value,
            message=f"Method {req.method} is not supported on /movies",
        )
        response = self._json_response(body.to_body(), 405)
        response.headers["Allow"] = ALLOWED_METHODS
        return response


# Create a global instance of the handler
schedule_handler = ScheduleHandler()
