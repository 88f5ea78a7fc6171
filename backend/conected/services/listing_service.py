"""
Paginated, searchable subject listing.

A call issues one COUNT and one page SELECT against the subjects table.
Page numbers are validated against the number of pages the search actually
produces; when nothing matches, page 1 is the only valid page.
"""
import logging
import math
import re
from typing import Any, Optional
from sqlalchemy import func, or_, true
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from conected.core.config import settings
from conected.core.errors import InvalidPage, StoreError
from conected.models.subject import Subject
from conected.types import ListingPage, ListingQuery, SubjectResponse

logger = logging.getLogger(__name__)

_DIGITS = re.compile(r"^\+?\d+$")


def parse_page_number(raw_page: Any) -> int:
    """
    Resolve a raw `page` parameter to a positive integer.

    None means the first page. Accepts ints, integral floats and digit strings;
    raises InvalidPage for anything else.
    """
    if raw_page is None:
        return 1

    if isinstance(raw_page, bool):
        raise InvalidPage()

    if isinstance(raw_page, int):
        page = raw_page
    elif isinstance(raw_page, float):
        if not math.isfinite(raw_page) or not raw_page.is_integer():
            raise InvalidPage()
        page = int(raw_page)
    elif isinstance(raw_page, str) and _DIGITS.match(raw_page.strip()):
        page = int(raw_page.strip())
    else:
        raise InvalidPage()

    if page < 1:
        raise InvalidPage()
    return page


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def search_predicate(search_text: Optional[str]):
    """Case-insensitive substring match on title or call link; match-all when blank"""
    text = (search_text or "").strip()
    if not text:
        return true()
    pattern = f"%{_escape_like(text)}%"
    return or_(
        Subject.title.ilike(pattern, escape="\\"),
        Subject.link_to_call.ilike(pattern, escape="\\"),
    )


def total_pages_for(total_matching: int, page_size: int) -> int:
    return math.ceil(total_matching / page_size)


class ListingService:

    @staticmethod
    def list_subjects(
        db: Session,
        raw_page: Any = None,
        raw_search: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> ListingPage:
        """
        Return one page of subjects matching `raw_search`.

        Raises InvalidPage when the page is not a positive integer or lies
        beyond the last page; callers redirect to the first page in that case.
        """
        if page_size is None:
            page_size = settings.SUBJECTS_PER_PAGE
        if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size < 1:
            raise ValueError(f"page_size must be a positive integer, got {page_size!r}")

        query = ListingQuery(page_number=parse_page_number(raw_page), search_text=raw_search)
        predicate = search_predicate(query.search_text)

        try:
            total_matching = db.query(func.count(Subject.id)).filter(predicate).scalar() or 0
        except SQLAlchemyError as e:
            logger.exception("Database error while counting subjects")
            raise StoreError() from e

        total_pages = total_pages_for(total_matching, page_size)
        if query.page_number > max(total_pages, 1):
            raise InvalidPage(
                f"Page {query.page_number} is out of range (last page is {max(total_pages, 1)})"
            )

        skip = (query.page_number - 1) * page_size
        try:
            subjects = (
                db.query(Subject)
                .filter(predicate)
                .order_by(Subject.id)
                .offset(skip)
                .limit(page_size)
                .all()
            )
        except SQLAlchemyError as e:
            logger.exception("Database error while fetching subjects")
            raise StoreError() from e

        return ListingPage(
            items=[SubjectResponse.model_validate(subject) for subject in subjects],
            total_pages=total_pages,
            current_page=query.page_number,
            search_text=raw_search,
        )


listing_service = ListingService()
