from collections.abc import Callable
from datetime import date

from pydantic import ValidationError
from redis.asyncio import Redis
from redis.exceptions import RedisError

from api.schedule.models import MovieAlreadyExistsError, ScheduleEntry, StoreUnavailableError
from contracts.models import MovieStatus
from utils.get_logger import get_logger

from .redis_manager import get_redis

logger = get_logger(__name__)

# KEYS[1] entry key, KEYS[2] status index
# ARGV[1] entry JSON, ARGV[2] date score, ARGV[3] index member
# Returns 1 when inserted, 0 when the entry key already exists.
INSERT_IF_ABSENT_SCRIPT = """
if redis.call('SET', KEYS[1], ARGV[1], 'NX') then
    redis.call('ZADD', KEYS[2], ARGV[2], ARGV[3])
    return 1
end
return 0
"""


class ScheduleRepository:
    """
    Schedule store on Redis.

    Each entry is a JSON document at {prefix}:movie:{catalog_id}. A sorted set
    per status, {prefix}:status:{status}, indexes entries by discussion date
    (score = date ordinal), which gives the ascending listing query.
    """

    def __init__(self, redis: Redis | None = None, key_prefix: str = "movieclub"):
        self._redis = redis
        self._redis_factory: Callable[[], Redis] = get_redis
        self.key_prefix = key_prefix

    @property
    def redis(self) -> Redis:
        if self._redis is not None:
            return self._redis
        return self._redis_factory()

    def entry_key(self, catalog_id: int) -> str:
        return f"{self.key_prefix}:movie:{catalog_id}"

    def status_key(self, status: MovieStatus) -> str:
        return f"{self.key_prefix}:status:{status.value}"

    @staticmethod
    def date_score(discussion_date: str) -> int:
        return date.fromisoformat(discussion_date).toordinal()

    async def insert_if_absent(self, entry: ScheduleEntry) -> ScheduleEntry:
        """
        Persist a new entry unless one with the same catalog id exists.

        The document write (SET NX) and the status index write (ZADD) run in
        one Lua script, so an insert either lands both or neither, and two
        concurrent inserts for the same id cannot both succeed.

        Raises:
            MovieAlreadyExistsError: If the catalog id is already stored
            StoreUnavailableError: On any Redis failure; nothing is left written
        """
        redis = self.redis
        insert = redis.register_script(INSERT_IF_ABSENT_SCRIPT)

        try:
            created = await insert(
                keys=[self.entry_key(entry.catalog_id), self.status_key(entry.status)],
                args=[
                    entry.model_dump_json(),
                    self.date_score(entry.discussion_date),
                    str(entry.catalog_id),
                ],
            )
        except RedisError as e:
            logger.error(f"Error saving movie {entry.catalog_id} to Redis: {e}")
            raise StoreUnavailableError("Failed to save movie to database") from e

        if not created:
            raise MovieAlreadyExistsError(entry.catalog_id)

        logger.info(f"Movie {entry.catalog_id} saved to Redis")
        return entry

    async def query_by_status(self, status: MovieStatus) -> list[ScheduleEntry]:
        """
        Return all entries with the given status, ascending by discussion date.

        Ties on date are ordered by catalog id. Returns [] when nothing matches.

        Raises:
            StoreUnavailableError: On any Redis failure
        """
        redis = self.redis
        try:
            members = await redis.zrange(self.status_key(status), 0, -1)
            if not members:
                logger.info(f"No {status.value} movies found")
                return []
            documents = await redis.mget([self.entry_key(int(m)) for m in members])
        except RedisError as e:
            logger.error(f"Error querying Redis: {e}")
            raise StoreUnavailableError("Failed to retrieve movies from database") from e

        entries: list[ScheduleEntry] = []
        for member, document in zip(members, documents, strict=True):
            if document is None:
                logger.warning(f"Index {self.status_key(status)} references missing movie {member}")
                continue
            try:
                entry = ScheduleEntry.model_validate_json(document)
            except ValidationError as e:
                logger.warning(f"Skipping unreadable movie document {member}: {e}")
                continue
            if entry.status != status:
                logger.warning(
                    f"Movie {member} indexed as {status.value} but stored as {entry.status.value}"
                )
                continue
            entries.append(entry)

        entries.sort(key=lambda e: (e.discussion_date, e.catalog_id))
        return entries
