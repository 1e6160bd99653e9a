from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from typing_extensions import TypedDict

T = TypeVar("T")

__all__ = [
    "PageRequest",
    "PaginationError",
    "clamp_page",
    "parse_page_params",
    "make_page_response",
    "paginate_sequence",
    "DEFAULT_PAGE_NUMBER",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
]


class PageRequest(TypedDict):
    page_number: int  # 1-based
    page_size: int


class PaginationError(ValueError):
    """Raised when pagination query params are not integers."""


DEFAULT_PAGE_NUMBER = 1
DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def clamp_page(page_number: int, page_size: int) -> PageRequest:
    """Out-of-range values fall back instead of failing: page < 1 -> 1, size outside 1..100 -> 10."""
    if page_number < 1:
        page_number = DEFAULT_PAGE_NUMBER
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        page_size = DEFAULT_PAGE_SIZE
    return PageRequest(page_number=page_number, page_size=page_size)


def _int_arg(args: Mapping[str, Any], key: str, default: int) -> int:
    raw = args.get(key)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except (TypeError, ValueError) as e:
        raise PaginationError(f"invalid {key} parameter") from e


def parse_page_params(args: Mapping[str, Any]) -> PageRequest:
    """Parse ``pageNumber`` / ``pageSize`` from a dict-like (e.g. request.args)."""
    return clamp_page(
        _int_arg(args, "pageNumber", DEFAULT_PAGE_NUMBER),
        _int_arg(args, "pageSize", DEFAULT_PAGE_SIZE),
    )


def make_page_response(key: str, items: Sequence[Any], page_req: PageRequest, total: int) -> dict[str, Any]:
    return {
        key: list(items),
        "totalCount": total,
        "pageNumber": page_req["page_number"],
        "pageSize": page_req["page_size"],
    }


def paginate_sequence(seq: Sequence[T], page_req: PageRequest) -> list[T]:
    start = (page_req["page_number"] - 1) * page_req["page_size"]
    return list(seq[start : start + page_req["page_size"]])
