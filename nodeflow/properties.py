"""A small named-value store with typed retrieval."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, TypeVar

T = TypeVar("T")


@dataclass
class Properties:
    """Values stored by name and read back converted to a requested type."""

    values: dict[str, Any] = field(default_factory=dict)

    def put(self, name: str, value: Any) -> None:
        self.values[name] = value

    def get(self, name: str, kind: type[T]) -> T:
        """Return the value named ``name`` as ``kind``.

        Raises KeyError if nothing is stored under ``name`` and TypeError if
        the stored value cannot be converted to ``kind``.
        """
        try:
            value = self.values[name]
        except KeyError:
            raise KeyError(name) from None
        if isinstance(value, kind):
            return value
        try:
            return kind(value)  # type: ignore[call-arg]
        except (TypeError, ValueError) as exc:
            raise TypeError(
                f"property {name!r} cannot be read as {kind.__name__}"
            ) from exc