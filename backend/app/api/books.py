import logging
from typing import Any
from fastapi import APIRouter, Body, Depends, File, Query, UploadFile
from sqlalchemy.orm import Session
from app.api.deps import get_asset_store, get_settings, parse_body, require_admin
from app.core.config import Settings
from app.core.errors import ValidationError
from app.db.session import get_db
from app.schemas.book import BookCreate, BookUpdate, PdfUploadOut
from app.schemas.video import VideoIn, VideoOut
from app.services import book_service, video_service
from app.services.asset_store import AssetStore
from app.services.bulk_import import import_books
from app.services.spreadsheet import read_workbook

logger = logging.getLogger(__name__)

router = APIRouter()

VIDEOS = "videos"


def _require_id(value: int | None, what: str = "Book") -> int:
    if value is None:
        raise ValidationError(f"{what} ID is required.")
    return value


@router.get("/books")
def list_books(
    q: str | None = None,
    category_id: int | None = Query(None, alias="categoryId"),
    page: int = 1,
    limit: int | None = None,
    kind: str | None = Query(None, alias="type"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    if kind == VIDEOS:
        return {"data": [VideoOut.model_validate(video) for video in video_service.list_videos(db)]}
    return book_service.list_books(db, q, category_id, page, settings.default_page_size if limit is None else limit)


@router.post("/books", status_code=201, dependencies=[Depends(require_admin)])
def create_entry(
    payload: dict = Body(...),
    kind: str | None = Query(None, alias="type"),
    db: Session = Depends(get_db),
):
    if kind == VIDEOS:
        video_id = video_service.create_video(db, parse_body(VideoIn, payload))
        return {"message": "Video created", "id": video_id}
    book_id = book_service.create_book(db, parse_body(BookCreate, payload))
    return {"message": "Book record created", "id": book_id}


@router.put("/books", dependencies=[Depends(require_admin)])
def update_entry(
    payload: dict = Body(...),
    id: int | None = Query(None),
    kind: str | None = Query(None, alias="type"),
    db: Session = Depends(get_db),
    asset_store: AssetStore = Depends(get_asset_store),
):
    if kind == VIDEOS:
        video_service.update_video(db, _require_id(id, "Video"), parse_body(VideoIn, payload))
        return {"message": "Video updated"}
    book_service.update_book(db, asset_store, _require_id(id), parse_body(BookUpdate, payload))
    return {"message": "Book updated"}


@router.delete("/books", dependencies=[Depends(require_admin)])
def delete_entry(
    id: int | None = Query(None),
    kind: str | None = Query(None, alias="type"),
    db: Session = Depends(get_db),
    asset_store: AssetStore = Depends(get_asset_store),
    settings: Settings = Depends(get_settings),
):
    if kind == VIDEOS:
        video_service.delete_video(db, _require_id(id, "Video"))
        return {"message": "Video deleted successfully"}
    book_service.delete_book(db, asset_store, _require_id(id), strict_assets=settings.strict_asset_delete)
    return {"message": "Book deleted successfully"}


@router.post("/books/bulk-import", dependencies=[Depends(require_admin)])
def bulk_import(payload: Any = Body(...), db: Session = Depends(get_db)):
    if not isinstance(payload, list):
        raise ValidationError("Request body must be an array of books.")
    result = import_books(db, payload)
    return {"message": result.message, **result.model_dump(by_alias=True)}


@router.post("/books/bulk-import/excel", dependencies=[Depends(require_admin)])
async def bulk_import_excel(file: UploadFile = File(...), db: Session = Depends(get_db)):
    if not file.filename or not file.filename.lower().endswith(".xlsx"):
        raise ValidationError("Only .xlsx files are supported")
    records = read_workbook(await file.read())
    result = import_books(db, records)
    logger.info("Excel import finished", extra={"upload": file.filename, "total": result.total})
    return {"message": result.message, **result.model_dump(by_alias=True)}


@router.post("/books/pdf", status_code=201, response_model=PdfUploadOut, dependencies=[Depends(require_admin)])
async def upload_pdf(file: UploadFile = File(...), asset_store: AssetStore = Depends(get_asset_store)):
    asset = book_service.upload_pdf(asset_store, file.filename, await file.read())
    return PdfUploadOut(pdf_url=asset.url, public_id=asset.public_id)
