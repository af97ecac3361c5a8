"""
Pytest utilities for testing.

Usage:
    from utils.pytest_utils import InMemoryRedis, load_json_fixture

    redis = InMemoryRedis()
    repo = ScheduleRepository(redis=redis)

    # Make a command fail the way a dropped connection would
    redis.fail_on.add("evalsha")
"""

import json
from pathlib import Path
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError

from adapters.schedule_repository import INSERT_IF_ABSENT_SCRIPT


def load_json_fixture(fixtures_dir: Path, filename: str) -> Any:
    """Load a JSON fixture.

    Raises:
        FileNotFoundError: If the fixture file doesn't exist
    """
    fixture_path = fixtures_dir / filename
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture file not found: {fixture_path}")
    with open(fixture_path, encoding="utf-8") as f:
        return json.load(f)


class InMemoryRedis:
    """
    Async test double for the subset of redis.asyncio.Redis used by the
    schedule repository (decode_responses=True semantics).
    """

    def __init__(self) -> None:
        self.strings: dict[str, str] = {}
        self.sorted_sets: dict[str, dict[str, float]] = {}
        self.fail_on: set[str] = set()
        self.calls: list[str] = []

    def _record(self, command: str) -> None:
        self.calls.append(command)
        if command in self.fail_on:
            raise RedisConnectionError(f"simulated failure on {command}")

    @property
    def write_count(self) -> int:
        return sum(1 for c in self.calls if c == "evalsha")

    async def mget(self, keys: list[str]) -> list[str | None]:
        self._record("mget")
        return [self.strings.get(k) for k in keys]

    async def zrange(self, key: str, start: int, end: int) -> list[str]:
        self._record("zrange")
        zset = self.sorted_sets.get(key, {})
        ordered = [m for m, _ in sorted(zset.items(), key=lambda item: (item[1], item[0]))]
        stop = None if end == -1 else end + 1
        return ordered[start:stop]

    def register_script(self, script: str) -> "InMemoryScript":
        return InMemoryScript(self, script)


class InMemoryScript:
    """
    Stand-in for redis.commands.core.AsyncScript.

    Known scripts are run as Python against the owning InMemoryRedis with no
    await in between, which matches Redis running a script atomically.
    """

    def __init__(self, redis: InMemoryRedis, script: str):
        self.redis = redis
        self.script = script

    async def __call__(self, keys: list[str], args: list[Any]) -> int:
        self.redis._record("evalsha")
        if self.script == INSERT_IF_ABSENT_SCRIPT:
            entry_key, status_key = keys
            document, score, member = args
            if entry_key in self.redis.strings:
                return 0
            self.redis.strings[entry_key] = document
            self.redis.sorted_sets.setdefault(status_key, {})[str(member)] = float(score)
            return 1
        raise NotImplementedError("InMemoryRedis does not emulate this script")
