import logging
import math
from sqlalchemy import delete, func, insert, or_, select
from sqlalchemy.orm import Session, selectinload
from app.core.errors import NotFound, UpstreamAssetError, ValidationError
from app.db.session import run_in_transaction
from app.models import Book, Category, book_categories
from app.schemas.book import BookCreate, BookOut, BookPage, BookUpdate, Pagination
from app.services.asset_store import AssetStore, StoredAsset

logger = logging.getLogger(__name__)


def build_search_pattern(query: str) -> str:
    """``"Great  Gatsby"`` -> ``"%great%gatsby%"``: one LIKE pattern, tokens in order."""
    return "%" + "%".join(query.lower().split()) + "%"


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def book_out(book: Book) -> BookOut:
    return BookOut(
        id=book.id,
        title=book.title,
        author=book.author,
        book_number=book.book_number,
        pdf_url=book.pdf_url,
        public_id=book.public_id,
        category_ids=[category.id for category in book.categories],
        category_names=[category.name for category in book.categories],
    )


def _filters(query: str | None, category_id: int | None) -> list:
    clauses = []
    if query and query.strip():
        pattern = build_search_pattern(query)
        clauses.append(
            or_(
                func.lower(Book.title).like(pattern),
                func.lower(Book.author).like(pattern),
                func.lower(Book.book_number).like(pattern),
            )
        )
    if category_id is not None:
        linked = select(book_categories.c.book_id).where(book_categories.c.category_id == category_id)
        clauses.append(Book.id.in_(linked))
    return clauses


def list_books(
    db: Session,
    query: str | None = None,
    category_id: int | None = None,
    page: int = 1,
    limit: int = 12,
) -> BookPage:
    if page < 1 or limit < 1:
        raise ValidationError("page and limit must be positive integers")
    clauses = _filters(query, category_id)
    offset = (page - 1) * limit

    ids = db.scalars(
        select(Book.id).where(*clauses).order_by(Book.id.desc()).limit(limit).offset(offset)
    ).all()

    rows: list[BookOut] = []
    if ids:
        books = db.scalars(
            select(Book).where(Book.id.in_(ids)).options(selectinload(Book.categories)).order_by(Book.id.desc())
        ).all()
        rows = [book_out(book) for book in books]

    total = db.scalar(select(func.count()).select_from(Book).where(*clauses)) or 0
    return BookPage(
        data=rows,
        pagination=Pagination(page=page, total_pages=math.ceil(total / limit), total_books=total),
    )


def _check_categories(db: Session, category_ids: list[int]) -> list[int]:
    wanted = list(dict.fromkeys(category_ids))
    if not wanted:
        return wanted
    known = set(db.scalars(select(Category.id).where(Category.id.in_(wanted))).all())
    missing = [category_id for category_id in wanted if category_id not in known]
    if missing:
        raise ValidationError(f"Unknown category ids: {missing}")
    return wanted


def _link_categories(db: Session, book_id: int, category_ids: list[int]) -> None:
    for category_id in _check_categories(db, category_ids):
        db.execute(insert(book_categories).values(book_id=book_id, category_id=category_id))


def create_book(db: Session, payload: BookCreate) -> int:
    title = _clean(payload.title)
    if not title:
        raise ValidationError("Title is required.")
    pdf_url = _clean(payload.pdf_url)
    public_id = _clean(payload.public_id)
    if bool(pdf_url) != bool(public_id):
        raise ValidationError("pdfUrl and publicId must be supplied together.")

    def _create(db: Session) -> int:
        book = Book(
            title=title,
            author=_clean(payload.author),
            book_number=_clean(payload.book_number),
            pdf_url=pdf_url,
            public_id=public_id,
        )
        db.add(book)
        db.flush()
        _link_categories(db, book.id, payload.category_ids or [])
        return book.id

    book_id = run_in_transaction(db, _create)
    logger.info("Book created", extra={"book_id": book_id})
    return book_id


def update_book(db: Session, asset_store: AssetStore, book_id: int, payload: BookUpdate) -> None:
    """Apply a partial update, including the PDF transition.

    * explicit ``pdfUrl: null`` and ``publicId: null`` with ``oldPublicId``:
      the old asset is destroyed and both columns are cleared;
    * a new ``pdfUrl`` and ``publicId``: the old asset (if ``oldPublicId``
      is given) is destroyed first, then the new pair is stored;
    * anything else leaves the PDF columns alone.

    Category ids are checked before any asset is destroyed. Asset-store
    deletions happen inside the database transaction but are not undone if
    it later rolls back.
    """
    fields = payload.model_fields_set
    if "title" in fields and not _clean(payload.title):
        raise ValidationError("Title cannot be empty.")

    remove_pdf = (
        {"pdf_url", "public_id"} <= fields
        and payload.pdf_url is None
        and payload.public_id is None
        and bool(payload.old_public_id)
    )
    pdf_url = _clean(payload.pdf_url)
    public_id = _clean(payload.public_id)
    replace_pdf = bool(pdf_url) and bool(public_id)
    if not replace_pdf and (pdf_url or public_id):
        raise ValidationError("pdfUrl and publicId must be supplied together.")

    def _update(db: Session) -> None:
        book = db.get(Book, book_id)
        if not book:
            raise NotFound("Book not found")
        if payload.category_ids is not None:
            _check_categories(db, payload.category_ids)

        if "title" in fields:
            book.title = _clean(payload.title)
        if "author" in fields:
            book.author = _clean(payload.author)
        if "book_number" in fields:
            book.book_number = _clean(payload.book_number)
        if payload.category_ids is not None:
            db.execute(delete(book_categories).where(book_categories.c.book_id == book_id))
            _link_categories(db, book_id, payload.category_ids)
        db.flush()

        # asset calls stay the last step that can fail
        if remove_pdf:
            asset_store.destroy(payload.old_public_id)
            book.pdf_url = None
            book.public_id = None
        elif replace_pdf:
            if payload.old_public_id:
                asset_store.destroy(payload.old_public_id)
            book.pdf_url = pdf_url
            book.public_id = public_id
        db.flush()

    run_in_transaction(db, _update)
    logger.info("Book updated", extra={"book_id": book_id, "pdf_removed": remove_pdf, "pdf_replaced": replace_pdf})


def delete_book(db: Session, asset_store: AssetStore, book_id: int, strict_assets: bool = False) -> None:
    book = db.get(Book, book_id)
    if not book:
        raise NotFound("Book not found")

    if book.public_id:
        try:
            asset_store.destroy(book.public_id)
        except UpstreamAssetError:
            if strict_assets:
                raise
            logger.warning("Failed to delete asset", extra={"book_id": book_id, "public_id": book.public_id})

    def _delete(db: Session) -> None:
        db.delete(book)

    run_in_transaction(db, _delete)
    logger.info("Book deleted", extra={"book_id": book_id})


def upload_pdf(asset_store: AssetStore, filename: str | None, content: bytes) -> StoredAsset:
    if not filename or not filename.lower().endswith(".pdf"):
        raise ValidationError("Only PDF files are supported")
    if not content:
        raise ValidationError("Uploaded file is empty")
    return asset_store.upload(filename, content)
