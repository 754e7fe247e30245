from pydantic import BaseModel


class VideoIn(BaseModel):
    title: str | None = None
    youtube_url: str | None = None
    academic_year: str | None = None


class VideoOut(BaseModel):
    id: int
    title: str
    youtube_url: str
    academic_year: str

    class Config:
        from_attributes = True
