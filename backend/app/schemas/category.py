from pydantic import BaseModel


class CategoryCreate(BaseModel):
    name: str | None = None


class CategoryRename(BaseModel):
    id: int | None = None
    name: str | None = None


class CategoryOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True
