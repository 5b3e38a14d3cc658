"""Read-side view of a user's macros at the moment of expansion."""

from collections.abc import Iterable

from dictassist.engine.schemas import Macro


class MacroRegistry:
    """Personal and global macros for one user.

    ``active()`` lists personal macros first, then global ones, both in the
    order given. Macros sharing a name are not deduplicated: both apply, the
    personal one first.
    """

    def __init__(self, personal: Iterable[Macro] = (), global_macros: Iterable[Macro] = ()):
        self._personal = tuple(personal)
        self._global = tuple(global_macros)

    @property
    def personal(self) -> tuple[Macro, ...]:
        return self._personal

    @property
    def global_macros(self) -> tuple[Macro, ...]:
        return self._global

    def active(self) -> list[Macro]:
        return [m for m in (*self._personal, *self._global) if m.is_active]

    def __len__(self) -> int:
        return len(self._personal) + len(self._global)
