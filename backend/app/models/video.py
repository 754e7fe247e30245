from sqlalchemy import Column, Integer, String, Text
from app.models.base import Base


class Video(Base):
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(512), nullable=False)
    youtube_url = Column(Text, nullable=False)
    academic_year = Column(String(32), nullable=False, index=True)
