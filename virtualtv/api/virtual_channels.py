"""Virtual channel API endpoints."""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from virtualtv.exceptions import ChannelNotFoundError, VirtualTVError
from virtualtv.service import VirtualChannelService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/virtualchannels", tags=["Virtual Channels"])

M3U_MEDIA_TYPE = "audio/x-mpegurl"
XMLTV_MEDIA_TYPE = "application/xml"


def get_service(request: Request) -> VirtualChannelService:
    """Get the channel service attached to the application."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Virtual channel service not running")
    return service


def _base_url(request: Request, service: VirtualChannelService) -> str:
    return service.config.server.base_url or str(request.base_url).rstrip("/")


@router.get("/epg/xmltv")
async def get_xmltv(service: VirtualChannelService = Depends(get_service)) -> Response:
    """Get the program guide for all virtual channels (XMLTV format)"""
    content = await service.xmltv()
    return Response(content=content, media_type=XMLTV_MEDIA_TYPE)


@router.get("/playlist.m3u")
async def get_playlist(
    request: Request,
    service: VirtualChannelService = Depends(get_service),
) -> Response:
    """Get the M3U playlist of all enabled virtual channels"""
    content = service.m3u_playlist(_base_url(request, service))
    return Response(content=content, media_type=M3U_MEDIA_TYPE)


@router.get("/{number}/playlist.m3u")
async def get_channel_playlist(
    number: int,
    request: Request,
    service: VirtualChannelService = Depends(get_service),
) -> Response:
    """Get the M3U playlist for one channel"""
    try:
        content = service.channel_playlist(number, _base_url(request, service))
    except ChannelNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return Response(content=content, media_type=M3U_MEDIA_TYPE)


@router.get("/{number}/now")
async def get_now_playing(
    number: int,
    service: VirtualChannelService = Depends(get_service),
) -> dict[str, Any]:
    """Get the program and segment currently on air"""
    try:
        playback = await service.now_playing(number)
    except ChannelNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    if playback is None:
        raise HTTPException(status_code=404, detail="Nothing scheduled on this channel")
    return playback.to_dict()


@router.post("/{number}/play")
async def start_playback(
    number: int,
    service: VirtualChannelService = Depends(get_service),
) -> dict[str, Any]:
    """Start a channel at its current position"""
    try:
        playback = await service.start_playback(number)
    except ChannelNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except VirtualTVError as e:
        logger.error(f"Failed to start channel {number}: {e}")
        raise HTTPException(status_code=500, detail=f"Error starting channel: {e!s}")

    if playback is None:
        raise HTTPException(status_code=404, detail="Nothing scheduled on this channel")
    return playback.to_dict()


@router.post("/{number}/stop")
async def stop_playback(
    number: int,
    service: VirtualChannelService = Depends(get_service),
) -> dict[str, Any]:
    """Stop a channel's stream"""
    try:
        await service.stop_playback(number)
    except ChannelNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"status": "stopped", "number": number}


@router.post("/refresh")
async def refresh_channels(
    channel_id: Optional[str] = None,
    service: VirtualChannelService = Depends(get_service),
) -> dict[str, Any]:
    """Rebuild one channel (by id) or all channels"""
    try:
        result = await service.refresh(channel_id)
    except ChannelNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {
        "status": "refreshed",
        "channel_id": channel_id,
        "programs": result.program_count,
        "errors": result.errors,
    }


@router.get("/stats")
async def get_statistics(
    service: VirtualChannelService = Depends(get_service),
) -> dict[str, Any]:
    """Get channel statistics and background task status"""
    return {
        **service.statistics().to_dict(),
        "configured_channels": len(service.channels),
        "tasks": service.scheduler.get_tasks(),
    }


@router.post("/auto-generate")
async def auto_generate_channels(
    service: VirtualChannelService = Depends(get_service),
) -> dict[str, Any]:
    """Regenerate genre and decade channels from the library"""
    try:
        channels = await service.update_auto_channels()
    except VirtualTVError as e:
        logger.error(f"Auto channel generation failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return {
        "total": len(channels),
        "channels": [
            {
                "id": channel.id,
                "number": channel.number,
                "name": channel.name,
                "type": channel.type.value,
            }
            for channel in channels
        ],
    }


@router.get("/genres")
async def list_genres(
    service: VirtualChannelService = Depends(get_service),
) -> dict[str, Any]:
    """List library genres with item counts"""
    try:
        genres = await service.list_genres()
    except VirtualTVError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return {"genres": genres}
