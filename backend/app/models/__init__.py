from app.models.base import Base
from app.models.book_category import book_categories
from app.models.book import Book
from app.models.category import Category
from app.models.video import Video

__all__ = [
    "Base",
    "book_categories",
    "Book",
    "Category",
    "Video",
]
