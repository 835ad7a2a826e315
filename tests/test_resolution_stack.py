from __future__ import annotations

import asyncio

import pytest

from svcwire.exceptions import SvcWireCircularDependencyError
from svcwire.resolution_stack import current_resolution_stack, resolving


class Owner:
    pass


@pytest.fixture()
def owner() -> Owner:
    return Owner()


def test_stack_tracks_nested_names(owner: Owner) -> None:
    with resolving(owner, "a"):
        with resolving(owner, "b"):
            assert current_resolution_stack(owner) == ("a", "b")
        assert current_resolution_stack(owner) == ("a",)

    assert current_resolution_stack(owner) == ()


def test_reentering_a_name_raises(owner: Owner) -> None:
    with resolving(owner, "a"), resolving(owner, "b"):
        with pytest.raises(SvcWireCircularDependencyError) as exc_info:
            with resolving(owner, "a"):
                pass

    assert exc_info.value.stack == ["a", "b"]


def test_names_are_scoped_per_owner(owner: Owner) -> None:
    other = Owner()

    with resolving(owner, "logger"), resolving(other, "logger"):
        assert current_resolution_stack(owner) == ("logger",)
        assert current_resolution_stack(other) == ("logger",)
        assert current_resolution_stack() == ("logger", "logger")


def test_cycle_error_lists_only_the_owners_names(owner: Owner) -> None:
    other = Owner()

    with resolving(owner, "a"), resolving(other, "x"):
        with pytest.raises(SvcWireCircularDependencyError) as exc_info:
            with resolving(owner, "a"):
                pass

    assert exc_info.value.stack == ["a"]


def test_stack_is_restored_after_an_error(owner: Owner) -> None:
    with pytest.raises(ValueError, match="boom"):
        with resolving(owner, "a"):
            raise ValueError("boom")

    assert current_resolution_stack() == ()


def test_concurrent_tasks_have_separate_stacks(owner: Owner) -> None:
    async def resolve(name: str) -> tuple[str, ...]:
        with resolving(owner, name):
            await asyncio.sleep(0)
            return current_resolution_stack(owner)

    async def main() -> list[tuple[str, ...]]:
        return list(await asyncio.gather(resolve("a"), resolve("a")))

    assert asyncio.run(main()) == [("a",), ("a",)]
