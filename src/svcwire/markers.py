from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class FromService:
    """Mark a parameter as resolved from a named container service.

    Use it as ``typing.Annotated`` metadata. ``parameters`` are forwarded to
    ``Container.get`` as positional constructor arguments.

    Examples:
        .. code-block:: python

            @container.inject
            def send(mailer: Annotated[Mailer, FromService("mailer")]) -> None:
                mailer.send("hello")

    """

    name: str
    parameters: tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "parameters", tuple(self.parameters))


__all__ = ["FromService"]
