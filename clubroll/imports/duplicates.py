"""Duplicate DONMAN # detection for a single import run."""

from collections.abc import Iterable

REASON_IN_DATABASE = "Already exists in database"
REASON_IN_FILE = "Duplicate within file"


class DuplicateResolver:
    """Tracks DONMAN numbers already taken, in the database or earlier in the file.

    One resolver serves one validate or execute call. The database set is
    loaded once up front and is not refreshed; rows must be checked in file
    order for the in-file check to mean "seen earlier".
    """

    def __init__(self, existing_ids: Iterable[int]):
        """Initialize resolver.

        Args:
            existing_ids: DONMAN numbers already persisted.
        """
        self.existing_ids = frozenset(existing_ids)
        self.seen_ids: set[int] = set()

    def check(self, donman_id: int) -> str | None:
        """Return the skip reason for a DONMAN #, or None if it is free."""
        if donman_id in self.existing_ids:
            return REASON_IN_DATABASE
        if donman_id in self.seen_ids:
            return REASON_IN_FILE
        return None

    def accept(self, donman_id: int) -> None:
        """Record a DONMAN # as taken by an accepted row."""
        self.seen_ids.add(donman_id)
