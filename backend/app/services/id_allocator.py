"""Sequential, human-readable ids for roadmap phases and milestones."""

import re
from collections.abc import Iterable

PHASE_PREFIX = "p"
MILESTONE_PREFIX = "m"


def phase_id(n: int) -> str:
    return f"{PHASE_PREFIX}{n}"


def milestone_id(n: int) -> str:
    return f"{MILESTONE_PREFIX}{n}"


def _highest_suffix(prefix: str, ids: Iterable[str]) -> int:
    pattern = re.compile(rf"^{re.escape(prefix)}(\d+)$")
    highest = 0
    for item in ids:
        match = pattern.match(item)
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


class IdAllocator:
    """One monotonically increasing counter per entity kind.

    Milestone ids come from a single counter shared by every phase, so they
    are unique across the whole roadmap. An allocator is scoped to one
    generation call; ``continuing`` builds one that extends an existing
    roadmap without reusing any id already present.
    """

    def __init__(self, phase_start: int = 0, milestone_start: int = 0) -> None:
        self._phase_count = phase_start
        self._milestone_count = milestone_start
        self._taken: set[str] = set()

    @classmethod
    def continuing(cls, phase_ids: Iterable[str], milestone_ids: Iterable[str]) -> "IdAllocator":
        phase_ids = list(phase_ids)
        milestone_ids = list(milestone_ids)
        allocator = cls(
            phase_start=_highest_suffix(PHASE_PREFIX, phase_ids),
            milestone_start=_highest_suffix(MILESTONE_PREFIX, milestone_ids),
        )
        allocator._taken.update(phase_ids)
        allocator._taken.update(milestone_ids)
        return allocator

    def next_phase_id(self) -> str:
        while True:
            self._phase_count += 1
            candidate = phase_id(self._phase_count)
            if candidate not in self._taken:
                self._taken.add(candidate)
                return candidate

    def next_milestone_id(self) -> str:
        while True:
            self._milestone_count += 1
            candidate = milestone_id(self._milestone_count)
            if candidate not in self._taken:
                self._taken.add(candidate)
                return candidate
