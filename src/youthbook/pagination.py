from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


def clamp_limit(
    limit: int | None,
    *,
    default: int = DEFAULT_PAGE_SIZE,
    maximum: int = MAX_PAGE_SIZE,
) -> int:
    """Bound a requested page size to ``[1, maximum]``.

    Out-of-range values are coerced rather than rejected; ``None`` selects
    ``default``.
    """
    if limit is None:
        limit = default
    return max(MIN_PAGE_SIZE, min(int(limit), maximum))


@dataclass(frozen=True)
class PageResult(Generic[T]):  # noqa: UP046
    items: Sequence[T] = field(default_factory=tuple)
    has_more: bool = False
    next_cursor: str | None = None

    def __post_init__(self) -> None:
        if self.has_more != (self.next_cursor is not None):
            raise ValueError("next_cursor must be set exactly when has_more is true")

    @property
    def returned_count(self) -> int:
        return len(self.items)


__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "MIN_PAGE_SIZE",
    "PageResult",
    "clamp_limit",
]
