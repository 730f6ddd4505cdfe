"""Page window arithmetic shared by project and task listings."""
from dataclasses import dataclass, field
from typing import Generic, Optional, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class PageWindow:
    """A normalized page selection."""

    page: int
    page_size: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @classmethod
    def normalize(
        cls,
        page: Optional[int],
        page_size: Optional[int],
        default_page_size: int = DEFAULT_PAGE_SIZE,
        max_page_size: int = MAX_PAGE_SIZE,
    ) -> "PageWindow":
        """
        Floor the page at 1 and clamp the page size to [1, max_page_size].

        Args:
            page: Requested page (None means the first page)
            page_size: Requested page size (None means the default)
            default_page_size: Size used when none was requested
            max_page_size: Upper bound for the page size

        Returns:
            Normalized PageWindow
        """
        page = max(page if page is not None else 1, 1)
        page_size = default_page_size if page_size is None else page_size
        page_size = min(max(page_size, 1), max_page_size)
        return cls(page=page, page_size=page_size)


@dataclass
class Page(Generic[T]):
    """One page of results plus the total matching count."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    has_more: bool = False

    @classmethod
    def build(cls, items: list[T], total: int, window: PageWindow) -> "Page[T]":
        return cls(
            items=items,
            total=total,
            page=window.page,
            page_size=window.page_size,
            has_more=window.offset + len(items) < total,
        )
