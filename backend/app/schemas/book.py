from pydantic import BaseModel, Field


class BookCreate(BaseModel):
    title: str | None = None
    author: str | None = None
    book_number: str | None = Field(None, alias="bookNumber")
    pdf_url: str | None = Field(None, alias="pdfUrl")
    public_id: str | None = Field(None, alias="publicId")
    category_ids: list[int] | None = Field(None, alias="categoryIds")

    class Config:
        populate_by_name = True


class BookUpdate(BaseModel):
    """Partial update; only keys present in the request body are applied."""

    title: str | None = None
    author: str | None = None
    book_number: str | None = Field(None, alias="bookNumber")
    pdf_url: str | None = Field(None, alias="pdfUrl")
    public_id: str | None = Field(None, alias="publicId")
    old_public_id: str | None = Field(None, alias="oldPublicId")
    category_ids: list[int] | None = Field(None, alias="categoryIds")

    class Config:
        populate_by_name = True


class BookOut(BaseModel):
    id: int
    title: str
    author: str | None
    book_number: str | None = Field(None, alias="bookNumber")
    pdf_url: str | None = Field(None, alias="pdfUrl")
    public_id: str | None = Field(None, alias="publicId")
    category_ids: list[int] = Field(default_factory=list)
    category_names: list[str] = Field(default_factory=list)

    class Config:
        populate_by_name = True


class Pagination(BaseModel):
    page: int
    total_pages: int = Field(alias="totalPages")
    total_books: int = Field(alias="totalBooks")

    class Config:
        populate_by_name = True


class BookPage(BaseModel):
    data: list[BookOut]
    pagination: Pagination


class PdfUploadOut(BaseModel):
    pdf_url: str = Field(alias="pdfUrl")
    public_id: str = Field(alias="publicId")

    class Config:
        populate_by_name = True
