"""XMLTV program guide rendering."""

import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List
from xml.sax.saxutils import escape as xml_escape

from virtualtv.config import ChannelPolicy
from virtualtv.library.base import ItemType
from virtualtv.playout.models import ScheduledProgram

logger = logging.getLogger(__name__)

GENERATOR_NAME = "VirtualTV"
MAX_CATEGORIES = 3


def _xml(value) -> str:
    """Safely escape XML text/attribute values."""
    if value is None:
        return ""
    return xml_escape(str(value), {'"': "&quot;", "'": "&apos;"})


def format_xmltv_time(value: datetime) -> str:
    """Format a time as XMLTV expects (YYYYmmddHHMMSS +0000)."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y%m%d%H%M%S +0000")


def build_xmltv(
    channels: Iterable[ChannelPolicy],
    programs: Dict[str, List[ScheduledProgram]],
) -> str:
    """
    Render an XMLTV document.

    Args:
        channels: Channel policies; disabled channels are left out.
        programs: Programs per channel id.

    Returns:
        XMLTV document as a string.
    """
    enabled = [channel for channel in channels if channel.enabled]

    xml_content = '<?xml version="1.0" encoding="UTF-8"?>\n'
    xml_content += f'<tv generator-info-name="{GENERATOR_NAME}">\n'

    for channel in enabled:
        xml_content += f'  <channel id="{_xml(channel.channel_id)}">\n'
        xml_content += f"    <display-name>{_xml(channel.name)}</display-name>\n"
        if channel.logo_path:
            xml_content += f'    <icon src="{_xml(channel.logo_path)}" />\n'
        xml_content += "  </channel>\n"

    programme_count = 0
    for channel in enabled:
        for program in programs.get(channel.channel_id, []):
            xml_content += _programme(channel, program)
            programme_count += 1

    xml_content += "</tv>\n"

    logger.debug(f"Rendered XMLTV with {len(enabled)} channels, {programme_count} programmes")
    return xml_content


def _programme(channel: ChannelPolicy, program: ScheduledProgram) -> str:
    """Render one <programme> entry."""
    item = program.item
    start_str = format_xmltv_time(program.start_time)
    end_str = format_xmltv_time(program.end_time)

    entry = (
        f'  <programme start="{_xml(start_str)}" stop="{_xml(end_str)}" '
        f'channel="{_xml(channel.channel_id)}">\n'
    )
    entry += f"    <title>{_xml(item.name or 'Unknown')}</title>\n"

    if item.overview:
        entry += f"    <desc>{_xml(item.overview)}</desc>\n"

    # Episode info for TV shows
    if (
        item.item_type == ItemType.EPISODE
        and item.season_number is not None
        and item.episode_number is not None
    ):
        onscreen = f"S{item.season_number:02d}E{item.episode_number:02d}"
        season_ep = f"{item.season_number - 1}.{item.episode_number - 1}."
        entry += f'    <episode-num system="onscreen">{_xml(onscreen)}</episode-num>\n'
        entry += f'    <episode-num system="xmltv_ns">{_xml(season_ep)}</episode-num>\n'

    for genre in item.genres[:MAX_CATEGORIES]:
        entry += f"    <category>{_xml(genre)}</category>\n"

    if item.year:
        entry += f"    <date>{_xml(item.year)}</date>\n"

    entry += "  </programme>\n"
    return entry
