"""View model for the page-link widget.

The backend hands out Laravel-style pagination descriptors. This turns one into
the buttons the ``pager`` macro in ``_macros.html`` renders; page changes are
plain links built by the caller.
"""

from __future__ import annotations

import html
import re
from collections.abc import Callable
from dataclasses import dataclass

from license_console.backend.models import Pagination

_DIGITS = re.compile(r"^\d+$")

# Laravel emits these as the first and last entries of ``links``.
_PREV_NEXT_LABELS = frozenset({"« Previous", "Next »", "Previous", "Next"})


@dataclass(frozen=True)
class PageButton:
    label: str
    page: int | None
    href: str | None
    active: bool
    disabled: bool


@dataclass(frozen=True)
class PaginationView:
    total: int
    first_item: int
    last_item: int
    current_page: int
    last_page: int
    prev: PageButton
    next: PageButton
    pages: list[PageButton]


def coerce_page(raw: str | int | None) -> int:
    """Turn a ``?page=`` value into a page number; junk means page 1."""

    if raw is None:
        return 1
    try:
        page = int(str(raw).strip())
    except ValueError:
        return 1
    return page if page >= 1 else 1


def _is_prev_next(label: str) -> bool:
    return html.unescape(label).strip() in _PREV_NEXT_LABELS


def build_pagination_view(
    pagination: Pagination | None, *, href: Callable[[int], str]
) -> PaginationView | None:
    """Build the widget for ``pagination``; ``href(page)`` links to another page."""

    if pagination is None:
        return None

    current = pagination.current_page
    last = max(pagination.last_page, 1)

    has_prev = pagination.prev_page_url is not None and current > 1
    has_next = pagination.next_page_url is not None and current < last

    prev = PageButton(
        label="Previous",
        page=current - 1 if has_prev else None,
        href=href(current - 1) if has_prev else None,
        active=False,
        disabled=not has_prev,
    )
    nxt = PageButton(
        label="Next",
        page=current + 1 if has_next else None,
        href=href(current + 1) if has_next else None,
        active=False,
        disabled=not has_next,
    )

    pages: list[PageButton] = []
    for link in pagination.links:
        if _is_prev_next(link.label):
            continue
        label = html.unescape(link.label).strip()
        page = int(label) if _DIGITS.match(label) else None
        pages.append(
            PageButton(
                label=label,
                page=page,
                href=href(page) if page is not None else None,
                active=link.active,
                disabled=page is None,
            )
        )

    return PaginationView(
        total=pagination.total,
        first_item=pagination.from_ or 0,
        last_item=pagination.to or 0,
        current_page=current,
        last_page=last,
        prev=prev,
        next=nxt,
        pages=pages,
    )
