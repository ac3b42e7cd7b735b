"""Service for managing instructional video records."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import replace
from datetime import datetime, timezone
import logging
from typing import Any

from eduportal.core.errors import NotFound, ValidationError
from eduportal.core.models import Video

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"title", "video_url"})


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class VideoLibrary:
    def __init__(self, clock: Callable[[], datetime] = _utc_now) -> None:
        self._videos: dict[str, Video] = {}
        self._video_counter: int = 0
        self._clock = clock

    def create(self, title: str, video_url: str, created_by: str) -> Video:
        video = Video(
            id=self._next_video_id(),
            title=self._require_text(title, "Video title"),
            video_url=self._require_text(video_url, "Video URL"),
            created_by=created_by,
            created_at=self._clock(),
        )
        self._videos[video.id] = video
        logger.info("Created video %s for author %s", video.id, created_by)
        return video

    def get(self, video_id: str) -> Video:
        video = self._videos.get(video_id)
        if video is None:
            raise NotFound("Video", video_id)
        return video

    def list(self) -> list[Video]:
        return list(self._videos.values())

    def list_by_author(self, author_id: str) -> list[Video]:
        return [video for video in self._videos.values() if video.created_by == author_id]

    def update(self, video_id: str, changes: Mapping[str, Any]) -> Video:
        current = self.get(video_id)
        unknown = set(changes) - _UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Cannot update video field(s): {', '.join(sorted(unknown))}.")
        values = {}
        if "title" in changes:
            values["title"] = self._require_text(changes["title"], "Video title")
        if "video_url" in changes:
            values["video_url"] = self._require_text(changes["video_url"], "Video URL")
        updated = replace(current, **values)
        self._videos[video_id] = updated
        logger.info("Updated video %s", video_id)
        return updated

    def delete(self, video_id: str) -> None:
        if video_id not in self._videos:
            raise NotFound("Video", video_id)
        del self._videos[video_id]
        logger.info("Deleted video %s", video_id)

    def load_videos(self, videos: Iterable[Video]) -> None:
        for video in videos:
            self._videos[video.id] = video
            if video.id.isdigit():
                self._video_counter = max(self._video_counter, int(video.id))

    def _next_video_id(self) -> str:
        self._video_counter += 1
        while str(self._video_counter) in self._videos:
            self._video_counter += 1
        return str(self._video_counter)

    @staticmethod
    def _require_text(value: str, label: str) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{label} must not be empty.")
        return value
