"""Pagination of ranked results over a generic item source."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Generic, Protocol, TypeVar

from docsite_search.exceptions import ValidationError

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)

ALL_KEYWORD = "all"


@dataclass(frozen=True)
class AllItems:
    """Page size returning every item without slicing."""


@dataclass(frozen=True)
class FixedSize:
    """Page size of ``n`` items."""

    n: int

    def __post_init__(self) -> None:
        if self.n < 1:
            msg = "Size must be 'all' or at least 1"
            raise ValidationError(msg)


PageSize = AllItems | FixedSize

ALL = AllItems()


def parse_page_size(value: PageSize | int | str | None, default: int, maximum: int | None = None) -> PageSize:
    """Interpret a requested page size.

    Args:
        value: ``"all"``, a positive integer (or its string form), a PageSize, or None.
        default: Size used when ``value`` is None.
        maximum: Upper clamp for fixed sizes.

    Returns:
        The page size variant.

    Raises:
        ValidationError: If the value is neither ``"all"`` nor a positive integer.
    """
    if isinstance(value, AllItems | FixedSize):
        size = value
    elif value is None:
        size = FixedSize(default)
    elif isinstance(value, str) and value.strip().lower() == ALL_KEYWORD:
        return ALL
    else:
        try:
            n = int(value)
        except (TypeError, ValueError) as exc:
            msg = f"Size must be 'all' or at least 1, got {value!r}"
            raise ValidationError(msg) from exc
        size = FixedSize(n)

    if isinstance(size, FixedSize) and maximum is not None and size.n > maximum:
        return FixedSize(maximum)
    return size


class ItemSource(Protocol[T_co]):
    """Countable, sliceable collection of items."""

    def count(self) -> int:
        """Return the total number of items."""
        ...

    def slice(self, offset: int, limit: int | None) -> list[T_co]:
        """Return up to ``limit`` items starting at ``offset`` (all remaining when None)."""
        ...


class ListSource(Generic[T]):
    """Item source over an in-memory sequence."""

    def __init__(self, items: Sequence[T]) -> None:
        self.items = items

    def count(self) -> int:
        return len(self.items)

    def slice(self, offset: int, limit: int | None) -> list[T]:
        end = None if limit is None else offset + limit
        return list(self.items[offset:end])


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of items.

    ``total`` counts every item of the source, ``size`` is 0 for unbounded pages.
    """

    rows: list[T]
    total: int
    page: int
    size: int


class Paginator(Generic[T]):
    """Slices an item source into 1-based pages."""

    def paginate(self, source: ItemSource[T], page: int = 1, size: PageSize = ALL) -> Page[T]:
        """Return the requested page.

        Args:
            source: Items to paginate.
            page: 1-based page number.
            size: Page size, ``ALL`` for no slicing.

        Returns:
            Page of items. A page past the end has no rows but accurate counts.

        Raises:
            ValidationError: If ``page`` is lower than 1.
        """
        if page < 1:
            msg = "Page must be at least 1"
            raise ValidationError(msg)

        total = source.count()
        if isinstance(size, AllItems):
            return Page(rows=source.slice(0, None), total=total, page=page, size=0)

        offset = (page - 1) * size.n
        rows = source.slice(offset, size.n) if offset < total else []
        return Page(rows=rows, total=total, page=page, size=size.n)
