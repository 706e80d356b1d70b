"""Identity source contract for mutating registry calls.

The acting user is never an argument to a write. Services ask an
:class:`IdentitySource` who the caller is at call time, so a user can
only ever append to their own namespace.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@runtime_checkable
class IdentitySource(Protocol):
    """Supplies the authenticated caller for the current call."""

    def current_user(self) -> str:
        """Return the identifier of the acting user."""
        ...


@dataclass(frozen=True)
class StaticIdentity:
    """An identity source fixed at construction (CLI process, tests)."""

    user: str

    def __post_init__(self) -> None:
        if not self.user:
            msg = "Identity user must be a non-empty string"
            raise ValueError(msg)

    def current_user(self) -> str:
        return self.user


class DeferredIdentity:
    """Identity source resolved on first use, then remembered.

    Lookups never ask who the caller is, so a CLI run that only reads
    works even where the caller cannot be determined.
    """

    def __init__(self, resolve: Callable[[], IdentitySource]) -> None:
        self._resolve = resolve
        self._source: IdentitySource | None = None

    def current_user(self) -> str:
        if self._source is None:
            self._source = self._resolve()
        return self._source.current_user()
