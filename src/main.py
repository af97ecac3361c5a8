"""
Firebase Cloud Functions entrypoint for the movie club schedule API.

Deploys one HTTP function, `movies`, serving GET /movies and POST /movies.
"""

from utils.setup_logging import setup_cloud_logging

setup_cloud_logging()

from adapters.config import load_env  # noqa: E402

load_env()

from firebase_functions import https_fn  # noqa: E402

from api.catalog.auth import TMDB_API_KEY  # noqa: E402
from api.schedule.handlers import schedule_handler  # noqa: E402


@https_fn.on_request(secrets=[TMDB_API_KEY])
def movies(req: https_fn.Request) -> https_fn.Response:
    return schedule_handler.movies(req)
