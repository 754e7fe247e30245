from fastapi import APIRouter
from app.api import auth, books, categories

api_router = APIRouter()
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(books.router, tags=["books"])
api_router.include_router(categories.router, tags=["categories"])
