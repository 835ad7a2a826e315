from __future__ import annotations

from enum import Enum


class LockMode(Enum):
    """Select locking behavior for container resolution.

    Shared services are cached with a check-then-set. ``THREAD`` makes that
    step atomic across threads; ``NONE`` skips locking for single-threaded
    applications.
    """

    THREAD = "thread"
    """Guard resolution with one re-entrant ``threading.RLock`` per container."""

    NONE = "none"
    """Disable locking around resolution."""
