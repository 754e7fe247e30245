from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.models.base import Base
from app.models.book_category import book_categories


class Book(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(512))
    author: Mapped[str | None] = mapped_column(String(255), nullable=True)
    book_number: Mapped[str | None] = mapped_column("bookNumber", String(255), nullable=True, index=True)
    pdf_url: Mapped[str | None] = mapped_column("pdfUrl", Text, nullable=True)
    public_id: Mapped[str | None] = mapped_column("publicId", String(512), nullable=True)

    categories = relationship(
        "Category",
        secondary=book_categories,
        back_populates="books",
        order_by="Category.id",
    )
