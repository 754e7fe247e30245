"""Tests for the bulk import service and the Excel reader."""
import io

import pandas
import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, OperationalError

from app.core.errors import StoreError, ValidationError
from app.models import Book, Category, book_categories
from app.schemas.book import BookCreate
from app.services import book_service, bulk_import, category_service
from app.services.bulk_import import import_books
from app.services.spreadsheet import read_workbook


def _books(db):
    return db.scalars(select(Book).order_by(Book.id)).all()


def _category_ids(db, book_id):
    rows = db.scalars(select(book_categories.c.category_id).where(book_categories.c.book_id == book_id)).all()
    return sorted(rows)


def test_skips_record_without_title(db):
    result = import_books(db, [{"title": "A", "bookNumber": "1"}, {"bookNumber": "2"}, {"title": "B", "bookNumber": "3"}])

    assert (result.processed, result.skipped, result.total) == (2, 1, 3)
    assert result.skipped_rows[0].index == 1
    assert [(book.title, book.book_number) for book in _books(db)] == [("A", "1"), ("B", "3")]


def test_skips_non_object_records(db):
    result = import_books(db, ["just a string", None, {"title": "Real"}])

    assert result.processed == 1
    assert result.skipped == 2
    assert [row.reason for row in result.skipped_rows] == ["record is not an object"] * 2


def test_creates_categories_once(db):
    result = import_books(
        db,
        [
            {"title": "Cosmos", "author": "Carl Sagan", "categoryName": "Science"},
            {"title": "Brief History of Time", "author": "Stephen Hawking", "categoryName": "Science"},
        ],
    )

    assert result.processed == 2
    categories = db.scalars(select(Category)).all()
    assert [category.name for category in categories] == ["Science"]
    for book in _books(db):
        assert _category_ids(db, book.id) == [categories[0].id]


def test_reuses_existing_category(db):
    history = category_service.create_category(db, "History")

    import_books(db, [{"title": "SPQR", "author": "Mary Beard", "categoryName": " History "}])

    assert db.scalar(select(func.count()).select_from(Category)) == 1
    assert _category_ids(db, _books(db)[0].id) == [history]


def test_matches_existing_book_by_title_and_author(db):
    fiction = category_service.create_category(db, "Fiction")
    book_id = book_service.create_book(
        db, BookCreate(title="Middlemarch", author="George Eliot", book_number="OLD-1", category_ids=[fiction])
    )

    result = import_books(
        db, [{"title": "MIDDLEMARCH", "author": "george eliot", "bookNumber": "NEW-9", "categoryName": "Victorian"}]
    )

    assert result.processed == 1
    books = _books(db)
    assert len(books) == 1
    assert books[0].id == book_id
    assert books[0].book_number == "NEW-9"
    victorian = category_service.get_or_create_category(db, "Victorian")
    assert _category_ids(db, book_id) == sorted([fiction, victorian])


def test_relinking_same_category_is_ignored(db):
    import_books(db, [{"title": "Walden", "author": "Thoreau", "categoryName": "Essays"}])
    result = import_books(db, [{"title": "Walden", "author": "Thoreau", "categoryName": "Essays"}])

    assert result.processed == 1
    book = _books(db)[0]
    assert len(_category_ids(db, book.id)) == 1


def test_author_less_records_match_author_less_books(db):
    import_books(db, [{"title": "Anonymous Poems", "bookNumber": "P-1"}])
    import_books(db, [{"title": "Anonymous Poems", "bookNumber": "P-2"}, {"title": "Anonymous Poems", "author": "Known", "bookNumber": "P-3"}])

    assert [(book.author, book.book_number) for book in _books(db)] == [(None, "P-2"), ("Known", "P-3")]


def test_book_number_is_not_an_identity_key(db):
    result = import_books(db, [{"title": "Volume One", "bookNumber": "7"}, {"title": "Volume Two", "bookNumber": "7"}])

    assert result.processed == 2
    assert len(_books(db)) == 2


def test_numbers_are_stored_as_text(db):
    import_books(db, [{"title": "Numbered", "bookNumber": 1042}])

    assert _books(db)[0].book_number == "1042"


def test_database_error_skips_only_that_record(db, monkeypatch):
    real_get_or_create = bulk_import.get_or_create_category

    def flaky_get_or_create(db, name):
        category_id = real_get_or_create(db, name)
        if name == "Cursed":
            raise IntegrityError("INSERT INTO books", {}, Exception("constraint failed"))
        return category_id

    monkeypatch.setattr(bulk_import, "get_or_create_category", flaky_get_or_create)

    result = import_books(db, [{"title": "A"}, {"title": "B", "categoryName": "Cursed"}, {"title": "C"}])

    assert (result.processed, result.skipped) == (2, 1)
    assert result.skipped_rows[0].index == 1
    assert "IntegrityError" in result.skipped_rows[0].reason
    assert [book.title for book in _books(db)] == ["A", "C"]
    assert db.scalars(select(Category.name)).all() == []


def test_failed_commit_discards_whole_batch(db, monkeypatch):
    def broken_commit():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", broken_commit)

    with pytest.raises(StoreError):
        import_books(db, [{"title": "Lost 1"}, {"title": "Lost 2"}])

    monkeypatch.undo()
    assert _books(db) == []


def _workbook(sheets):
    buffer = io.BytesIO()
    with pandas.ExcelWriter(buffer, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pandas.DataFrame(rows).to_excel(writer, sheet_name=name, index=False)
    return buffer.getvalue()


def test_read_workbook_maps_headers_across_sheets():
    content = _workbook(
        {
            "Shelf A": [
                {"Book Name": "Dracula", "Author": "Bram Stoker", "Barcode": "A-1", "Category": "Horror", "Notes": "x"},
                {"Book Name": "Carmilla", "Author": None, "Barcode": "A-2", "Category": None, "Notes": None},
            ],
            "Shelf B": [{"title": "Frankenstein", "bookNumber": "B-1"}],
        }
    )

    records = read_workbook(content)

    assert records == [
        {"title": "Dracula", "author": "Bram Stoker", "bookNumber": "A-1", "categoryName": "Horror"},
        {"title": "Carmilla", "bookNumber": "A-2"},
        {"title": "Frankenstein", "bookNumber": "B-1"},
    ]


def test_read_workbook_rejects_garbage():
    with pytest.raises(ValidationError):
        read_workbook(b"this is not a spreadsheet")


def test_read_workbook_first_matching_header_wins():
    content = _workbook({"Shelf": [{"Title": "Emma", "Book Name": "Ignored", "Author": "Jane Austen"}]})

    assert read_workbook(content) == [{"title": "Emma", "author": "Jane Austen"}]
