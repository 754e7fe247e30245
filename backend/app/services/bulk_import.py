import logging
from typing import Any
from sqlalchemy import func, insert, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.db.session import run_in_transaction
from app.models import Book, book_categories
from app.schemas.bulk_import import ImportResult, SkippedRow
from app.services.category_service import get_or_create_category

logger = logging.getLogger(__name__)


def _safe_string(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _find_book(db: Session, title: str, author: str | None) -> int | None:
    stmt = select(Book.id).where(func.lower(Book.title) == func.lower(title))
    if author:
        stmt = stmt.where(func.lower(Book.author) == func.lower(author))
    else:
        stmt = stmt.where(Book.author.is_(None))
    return db.scalars(stmt.order_by(Book.id).limit(1)).first()


def _link(db: Session, book_id: int, category_id: int) -> None:
    linked = db.execute(
        select(book_categories.c.book_id).where(
            book_categories.c.book_id == book_id,
            book_categories.c.category_id == category_id,
        )
    ).first()
    if not linked:
        db.execute(insert(book_categories).values(book_id=book_id, category_id=category_id))


def _upsert(db: Session, title: str, author: str | None, book_number: str | None, category_name: str | None) -> None:
    category_id = get_or_create_category(db, category_name) if category_name else None

    book_id = _find_book(db, title, author)
    if book_id is not None:
        book = db.get(Book, book_id)
        book.book_number = book_number
        db.flush()
    else:
        book = Book(title=title, author=author, book_number=book_number)
        db.add(book)
        db.flush()
        book_id = book.id

    if category_id is not None:
        _link(db, book_id, category_id)


def import_books(db: Session, records: list[Any]) -> ImportResult:
    """Upsert a batch of book records in one transaction.

    Books are matched on title and author, case-insensitively. A matched book
    gets the record's ``bookNumber`` and keeps its existing categories; the
    record's category is added alongside them. Bad records are skipped, each
    one runs in its own savepoint so a failing row never poisons the batch.
    """
    result = ImportResult(total=len(records))

    def _skip(index: int, reason: str) -> None:
        logger.warning("Skipping import record", extra={"index": index, "reason": reason})
        result.skipped_rows.append(SkippedRow(index=index, reason=reason))

    def _import(db: Session) -> None:
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                _skip(index, "record is not an object")
                continue
            title = _safe_string(record.get("title"))
            if not title:
                _skip(index, "missing title")
                continue
            try:
                with db.begin_nested():
                    _upsert(
                        db,
                        title=title,
                        author=_safe_string(record.get("author")),
                        book_number=_safe_string(record.get("bookNumber")),
                        category_name=_safe_string(record.get("categoryName")),
                    )
            except SQLAlchemyError as exc:
                _skip(index, f"database error: {exc.__class__.__name__}")
                continue
            result.processed += 1

    run_in_transaction(db, _import)
    result.skipped = len(result.skipped_rows)
    logger.info(
        "Bulk import finished",
        extra={"total": result.total, "processed": result.processed, "skipped": result.skipped},
    )
    return result
