from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session
from app.api.deps import parse_body, require_admin
from app.db.session import get_db
from app.schemas.category import CategoryCreate, CategoryOut, CategoryRename
from app.services import category_service

router = APIRouter()


@router.get("/categories")
def list_categories(db: Session = Depends(get_db)):
    categories = category_service.list_categories(db)
    return {"data": [CategoryOut.model_validate(category) for category in categories]}


@router.post("/categories", status_code=201, dependencies=[Depends(require_admin)])
def create_category(payload: dict = Body(...), db: Session = Depends(get_db)):
    category_in = parse_body(CategoryCreate, payload)
    category_id = category_service.create_category(db, category_in.name)
    return {"message": "Category created", "id": category_id}


@router.put("/categories", dependencies=[Depends(require_admin)])
def rename_category(payload: dict = Body(...), db: Session = Depends(get_db)):
    rename = parse_body(CategoryRename, payload)
    category_service.rename_category(db, rename.id, rename.name)
    return {"message": "Category renamed successfully"}


@router.delete("/categories", dependencies=[Depends(require_admin)])
def delete_category(
    id: int | None = Query(None),
    payload: dict | None = Body(None),
    db: Session = Depends(get_db),
):
    category_id = id
    if category_id is None and payload:
        category_id = parse_body(CategoryRename, payload).id
    category_service.delete_category(db, category_id)
    return {"message": "Category deleted successfully"}
