# pagination.py
import math
import re
from typing import List, Sequence, TypeVar, Union

ELLIPSIS = "..."
DELTA = 2
LEADING_INT = re.compile(r"\s*[-+]?\d+")

PaginationToken = Union[int, str]

T = TypeVar('T')


def get_pagination(current_page: int, total_pages: int, delta: int = DELTA) -> List[PaginationToken]:
    """
    Build the truncated list of page links to render.
    Examples:
        get_pagination(10, 20) -> [1, '...', 8, 9, 10, 11, 12, '...', 20]
        get_pagination(2, 20) -> [1, 2, 3, 4, 5, '...', 20]
        get_pagination(1, 1) -> [1]
    """
    if total_pages <= 1:
        return [1]

    start = max(2, current_page - delta)
    end = min(total_pages - 1, current_page + delta)

    # Near the edges, keep a fixed-width window of interior pages
    if current_page - delta <= 1:
        end = min(5, total_pages - 1)
    if current_page + delta >= total_pages:
        start = max(total_pages - 4, 2)

    pages: List[PaginationToken] = [1]
    if start > 2:
        pages.append(ELLIPSIS)
    pages.extend(range(start, end + 1))
    if end < total_pages - 1:
        pages.append(ELLIPSIS)
    pages.append(total_pages)
    return pages


def total_pages_for(count: int, page_size: int) -> int:
    return math.ceil(count / page_size) if count > 0 else 0


def paginate(items: Sequence[T], page: int, page_size: int) -> List[T]:
    if page < 1:
        return []
    return list(items[(page - 1) * page_size:page * page_size])


def parse_page(value, default: int = 1) -> int:
    """
    Parse a page or episode number from its leading digits, so "3abc" is 3 and "2.5" is 2.
    Values without leading digits, and zero, fall back to the default.
    """
    match = LEADING_INT.match(str(value)) if value is not None else None
    if match is None:
        return default
    number = int(match.group())
    return number if number != 0 else default
