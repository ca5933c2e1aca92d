"""
Test Data Factories

Factory classes for generating test data.
"""

import random
import string
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Sequence
from uuid import uuid4

from virtualtv.config import ChannelPolicy
from virtualtv.library import ContentItem, ItemType
from virtualtv.playout import ScheduledProgram, ScheduledSegment, SegmentKind


class BaseFactory:
    """Base factory class."""

    _counter = 0

    @classmethod
    def _next_id(cls) -> int:
        BaseFactory._counter += 1
        return BaseFactory._counter

    @classmethod
    def _random_string(cls, length: int = 8) -> str:
        return ''.join(random.choices(string.ascii_letters, k=length))


class ContentItemFactory(BaseFactory):
    """Factory for movies and other main content."""

    @classmethod
    def create(
        cls,
        name: Optional[str] = None,
        minutes: Optional[float] = 30,
        **kwargs
    ) -> ContentItem:
        """Create a playable ContentItem."""
        item_id = kwargs.pop("id", None) or f"item-{cls._next_id()}"
        return ContentItem(
            id=item_id,
            name=name or f"Test Movie {cls._random_string()}",
            duration=timedelta(minutes=minutes) if minutes is not None else None,
            path=kwargs.pop("path", f"/media/movies/{item_id}.mkv"),
            item_type=kwargs.pop("item_type", ItemType.MOVIE),
            **kwargs,
        )

    @classmethod
    def create_batch(cls, count: int, **kwargs) -> List[ContentItem]:
        """Create multiple ContentItem instances."""
        return [cls.create(**kwargs) for _ in range(count)]

    @classmethod
    def create_episodes(
        cls,
        series_id: str,
        seasons: int = 2,
        episodes: int = 3,
        minutes: float = 22,
    ) -> List[ContentItem]:
        """Create every episode of a series, in broadcast order."""
        return [
            cls.create(
                name=f"Episode {episode}",
                minutes=minutes,
                id=f"{series_id}-s{season}e{episode}",
                path=f"/media/tv/{series_id}/s{season:02d}e{episode:02d}.mkv",
                item_type=ItemType.EPISODE,
                series_id=series_id,
                series_name=f"Series {series_id}",
                season_number=season,
                episode_number=episode,
            )
            for season in range(1, seasons + 1)
            for episode in range(1, episodes + 1)
        ]


class CommercialFactory(BaseFactory):
    """Factory for commercial pool items."""

    @classmethod
    def create(cls, folder: str = "/media/commercials", seconds: float = 30) -> ContentItem:
        number = cls._next_id()
        return ContentItem(
            id=f"ad-{number}",
            name=f"Commercial {number}",
            duration=timedelta(seconds=seconds),
            path=f"{folder}/ad-{number}.mp4",
            item_type=ItemType.VIDEO,
        )

    @classmethod
    def create_batch(cls, count: int, **kwargs) -> List[ContentItem]:
        return [cls.create(**kwargs) for _ in range(count)]


class ChannelPolicyFactory(BaseFactory):
    """Factory for creating ChannelPolicy test instances."""

    @classmethod
    def create(
        cls,
        number: Optional[int] = None,
        name: Optional[str] = None,
        **kwargs
    ) -> ChannelPolicy:
        """Create a ChannelPolicy instance."""
        return ChannelPolicy(**cls.create_dict(number=number, name=name, **kwargs))

    @classmethod
    def create_dict(
        cls,
        number: Optional[int] = None,
        name: Optional[str] = None,
        **kwargs
    ) -> Dict[str, Any]:
        """Create ChannelPolicy data as dictionary."""
        number = number or 2000 + cls._next_id()
        data = {
            "id": f"channel_{number}",
            "name": name or f"Test Channel {number}",
            "number": number,
            "type": "all",
            "commercial_interval_seconds": 900,
            "enable_pre_rolls": False,
        }
        data.update(kwargs)
        return data


class ProgramFactory(BaseFactory):
    """Factory for hand-built scheduled programs."""

    @classmethod
    def create(
        cls,
        start_time: datetime,
        segment_minutes: Sequence[float] = (30,),
        channel_id: str = "virtual_1",
        item: Optional[ContentItem] = None,
    ) -> ScheduledProgram:
        """Create a program whose content chunks have the given lengths."""
        total = timedelta(minutes=sum(segment_minutes))
        item = item or ContentItemFactory.create(minutes=sum(segment_minutes))

        segments = []
        offset = timedelta(0)
        for minutes in segment_minutes:
            duration = timedelta(minutes=minutes)
            segments.append(ScheduledSegment(
                kind=SegmentKind.CONTENT,
                item=item,
                duration=duration,
                start_offset=offset,
            ))
            offset += duration

        return ScheduledProgram(
            id=str(uuid4()),
            item=item,
            start_time=start_time,
            end_time=start_time + total,
            channel_id=channel_id,
            segments=tuple(segments),
        )
