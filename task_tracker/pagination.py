import math
from dataclasses import dataclass

from task_tracker.errors import InvalidPageError


@dataclass(frozen=True)
class PageWindow:
    """Offset and metadata for one page of a query result"""
    page: int
    page_size: int
    total_items: int
    skip: int
    total_pages: int
    has_next: bool
    has_previous: bool


def validate_page_request(page: int, page_size: int) -> None:
    if page < 1 or page_size < 1:
        raise InvalidPageError(page, page_size)


def paginate(page: int, page_size: int, total: int) -> PageWindow:
    """Compute the page window; page and page_size must already be validated"""
    total_pages = math.ceil(total / page_size) if total > 0 else 0
    return PageWindow(
        page=page,
        page_size=page_size,
        total_items=total,
        skip=(page - 1) * page_size,
        total_pages=total_pages,
        has_next=page < total_pages,
        has_previous=page > 1,
    )
