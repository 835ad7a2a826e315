from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

from svcwire.exceptions import SvcWireCircularDependencyError

# (owner id, name) pairs being resolved in this execution context (thread or task).
_resolution_stack: ContextVar[tuple[tuple[int, str], ...]] = ContextVar(
    "svcwire_resolution_stack",
    default=(),
)


def current_resolution_stack(owner: object | None = None) -> tuple[str, ...]:
    """Return the names being resolved in the current context, outermost first.

    With ``owner``, only names resolved by that owner are returned.
    """
    stack = _resolution_stack.get()
    if owner is None:
        return tuple(name for _, name in stack)
    return tuple(name for owner_id, name in stack if owner_id == id(owner))


@contextmanager
def resolving(owner: object, name: str) -> Iterator[None]:
    """Track ``name`` as in flight for ``owner`` for the duration of the block.

    Names are scoped per owner, so a container handing a name over to another
    container that uses the same name is not a cycle.

    Raises:
        SvcWireCircularDependencyError: If ``owner`` is already resolving
            ``name`` further up the current call stack.

    """
    entry = (id(owner), name)
    stack = _resolution_stack.get()
    if entry in stack:
        raise SvcWireCircularDependencyError(name, current_resolution_stack(owner))
    token = _resolution_stack.set((*stack, entry))
    try:
        yield
    finally:
        _resolution_stack.reset(token)
