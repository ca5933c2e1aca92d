"""
Unit tests for XMLTV and M3U output.
"""

from datetime import datetime, timedelta, timezone
from xml.etree import ElementTree

import pytest

from tests.fixtures.factories import ChannelPolicyFactory, ContentItemFactory, ProgramFactory
from virtualtv.epg import build_xmltv, channel_playlist, format_xmltv_time, master_playlist
from virtualtv.library import ItemType

START = datetime(2024, 3, 1, 18, 0, tzinfo=timezone.utc)


@pytest.mark.unit
class TestXmltv:
    """Tests for XMLTV rendering."""

    def test_time_format(self):
        """Test XMLTV timestamps are rendered in UTC."""
        eastern = timezone(timedelta(hours=-5))

        assert format_xmltv_time(START) == "20240301180000 +0000"
        assert format_xmltv_time(datetime(2024, 3, 1, 13, 0, tzinfo=eastern)) == (
            "20240301180000 +0000"
        )

    def test_document(self):
        """Test channels and programmes are rendered."""
        channel = ChannelPolicyFactory.create(
            number=1001, name="Comedy & Friends", logo_path="/logos/comedy.png",
        )
        episode = ContentItemFactory.create(
            name="Pilot <Part 1>",
            minutes=30,
            item_type=ItemType.EPISODE,
            season_number=2,
            episode_number=5,
            overview="It begins.",
            genres=("Comedy", "Sitcom", "Family", "Classic"),
            year=1996,
        )
        program = ProgramFactory.create(START, (30,), channel.channel_id, item=episode)

        document = build_xmltv([channel], {channel.channel_id: [program]})
        root = ElementTree.fromstring(document)

        channel_element = root.find("channel")
        assert channel_element.get("id") == "virtual_1001"
        assert channel_element.findtext("display-name") == "Comedy & Friends"
        assert channel_element.find("icon").get("src") == "/logos/comedy.png"

        programme = root.find("programme")
        assert programme.get("start") == "20240301180000 +0000"
        assert programme.get("stop") == "20240301183000 +0000"
        assert programme.findtext("title") == "Pilot <Part 1>"
        assert programme.findtext("desc") == "It begins."
        numbers = {e.get("system"): e.text for e in programme.findall("episode-num")}
        assert numbers == {"onscreen": "S02E05", "xmltv_ns": "1.4."}
        assert [c.text for c in programme.findall("category")] == [
            "Comedy", "Sitcom", "Family",
        ]
        assert programme.findtext("date") == "1996"

    def test_disabled_channels_left_out(self):
        """Test disabled channels and their programmes are skipped."""
        enabled = ChannelPolicyFactory.create(number=1)
        disabled = ChannelPolicyFactory.create(number=2, enabled=False)
        programs = {
            disabled.channel_id: [ProgramFactory.create(START, channel_id=disabled.channel_id)],
        }

        root = ElementTree.fromstring(build_xmltv([enabled, disabled], programs))

        assert [c.get("id") for c in root.findall("channel")] == ["virtual_1"]
        assert root.findall("programme") == []


@pytest.mark.unit
class TestPlaylists:
    """Tests for M3U playlists."""

    def test_channel_playlist(self):
        """Test a single-channel playlist."""
        channel = ChannelPolicyFactory.create(number=1001, name="Comedy")

        playlist = channel_playlist(channel, "http://tv.local:8097/")

        assert playlist.splitlines() == [
            "#EXTM3U",
            '#EXTINF:-1 tvg-id="virtual_1001" tvg-chno="1001",Comedy',
            "http://tv.local:8097/virtualchannels/1001/stream.m3u8",
        ]

    def test_master_playlist_sorted_and_enabled_only(self):
        """Test the master playlist lists enabled channels by number."""
        channels = [
            ChannelPolicyFactory.create(number=30, name="Thirty"),
            ChannelPolicyFactory.create(number=10, name="Ten"),
            ChannelPolicyFactory.create(number=20, name="Twenty", enabled=False),
        ]

        lines = master_playlist(channels, "http://tv.local").splitlines()

        assert lines[0] == "#EXTM3U"
        assert lines[1].endswith(",Ten")
        assert lines[3].endswith(",Thirty")
        assert len(lines) == 5
