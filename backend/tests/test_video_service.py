"""Tests for the e-content video service."""
import pytest

from app.core.errors import NotFound, ValidationError
from app.models import Video
from app.schemas.video import VideoIn
from app.services import video_service


def _video(title, year, url="https://www.youtube.com/watch?v=dQw4w9WgXcQ"):
    return VideoIn(title=title, youtube_url=url, academic_year=year)


def test_list_videos_orders_by_year_then_title(db):
    video_service.create_video(db, _video("Optics", "2023-24"))
    video_service.create_video(db, _video("Algebra", "2024-25"))
    video_service.create_video(db, _video("Calculus", "2024-25"))

    videos = video_service.list_videos(db)

    assert [(video.academic_year, video.title) for video in videos] == [
        ("2024-25", "Algebra"),
        ("2024-25", "Calculus"),
        ("2023-24", "Optics"),
    ]


@pytest.mark.parametrize(
    "payload",
    [
        VideoIn(youtube_url="https://youtu.be/x", academic_year="2024-25"),
        VideoIn(title="No link", academic_year="2024-25"),
        VideoIn(title="No year", youtube_url="https://youtu.be/x", academic_year="  "),
    ],
)
def test_create_video_requires_all_fields(db, payload):
    with pytest.raises(ValidationError):
        video_service.create_video(db, payload)


def test_update_video(db):
    video_id = video_service.create_video(db, _video("Intro", "2022-23"))

    video_service.update_video(db, video_id, _video("Introduction", "2023-24", url="https://youtu.be/abc"))

    video = db.get(Video, video_id)
    assert (video.title, video.academic_year, video.youtube_url) == ("Introduction", "2023-24", "https://youtu.be/abc")


def test_update_video_requires_all_fields(db):
    video_id = video_service.create_video(db, _video("Intro", "2022-23"))

    with pytest.raises(ValidationError):
        video_service.update_video(db, video_id, VideoIn(title="Only a title"))


def test_update_and_delete_unknown_video(db):
    with pytest.raises(NotFound):
        video_service.update_video(db, 77, _video("Ghost", "2024-25"))
    with pytest.raises(NotFound):
        video_service.delete_video(db, 77)


def test_delete_video(db):
    video_id = video_service.create_video(db, _video("Temporary", "2024-25"))

    video_service.delete_video(db, video_id)

    assert db.get(Video, video_id) is None
