import logging
from sqlalchemy import select
from sqlalchemy.orm import Session
from app.core.errors import NotFound, ValidationError
from app.db.session import run_in_transaction
from app.models import Category

logger = logging.getLogger(__name__)


def list_categories(db: Session) -> list[Category]:
    return db.scalars(select(Category).order_by(Category.name.asc())).all()


def create_category(db: Session, name: str | None) -> int:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Category name is required.")

    def _create(db: Session) -> int:
        category = Category(name=name)
        db.add(category)
        db.flush()
        return category.id

    category_id = run_in_transaction(db, _create)
    logger.info("Category created", extra={"category_id": category_id})
    return category_id


def rename_category(db: Session, category_id: int | None, name: str | None) -> None:
    name = (name or "").strip()
    if not category_id or not name:
        raise ValidationError("ID and name are required for renaming.")

    def _rename(db: Session) -> None:
        category = db.get(Category, category_id)
        if not category:
            raise NotFound("Category not found")
        category.name = name

    run_in_transaction(db, _rename)
    logger.info("Category renamed", extra={"category_id": category_id})


def delete_category(db: Session, category_id: int | None) -> None:
    if not category_id:
        raise ValidationError("Category ID is required for deletion.")

    def _delete(db: Session) -> None:
        category = db.get(Category, category_id)
        if not category:
            raise NotFound("Category not found")
        # the many-to-many relationship removes the book_categories rows
        db.delete(category)

    run_in_transaction(db, _delete)
    logger.info("Category deleted", extra={"category_id": category_id})


def get_or_create_category(db: Session, name: str) -> int:
    """Exact-name lookup; when duplicates exist the oldest row wins."""
    existing = db.scalars(select(Category.id).where(Category.name == name).order_by(Category.id).limit(1)).first()
    if existing is not None:
        return existing
    category = Category(name=name)
    db.add(category)
    db.flush()
    return category.id
