import logging
from sqlalchemy import select
from sqlalchemy.orm import Session
from app.core.errors import NotFound, ValidationError
from app.db.session import run_in_transaction
from app.models import Video
from app.schemas.video import VideoIn

logger = logging.getLogger(__name__)


def _required(payload: VideoIn) -> tuple[str, str, str]:
    title = (payload.title or "").strip()
    youtube_url = (payload.youtube_url or "").strip()
    academic_year = (payload.academic_year or "").strip()
    if not title or not youtube_url or not academic_year:
        raise ValidationError("title, youtube_url and academic_year are required.")
    return title, youtube_url, academic_year


def list_videos(db: Session) -> list[Video]:
    return db.scalars(select(Video).order_by(Video.academic_year.desc(), Video.title.asc())).all()


def create_video(db: Session, payload: VideoIn) -> int:
    title, youtube_url, academic_year = _required(payload)

    def _create(db: Session) -> int:
        video = Video(title=title, youtube_url=youtube_url, academic_year=academic_year)
        db.add(video)
        db.flush()
        return video.id

    video_id = run_in_transaction(db, _create)
    logger.info("Video created", extra={"video_id": video_id})
    return video_id


def update_video(db: Session, video_id: int, payload: VideoIn) -> None:
    title, youtube_url, academic_year = _required(payload)

    def _update(db: Session) -> None:
        video = db.get(Video, video_id)
        if not video:
            raise NotFound("Video not found")
        video.title = title
        video.youtube_url = youtube_url
        video.academic_year = academic_year

    run_in_transaction(db, _update)
    logger.info("Video updated", extra={"video_id": video_id})


def delete_video(db: Session, video_id: int) -> None:
    def _delete(db: Session) -> None:
        video = db.get(Video, video_id)
        if not video:
            raise NotFound("Video not found")
        db.delete(video)

    run_in_transaction(db, _delete)
    logger.info("Video deleted", extra={"video_id": video_id})
