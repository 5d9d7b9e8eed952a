from fastapi import APIRouter, Depends, HTTPException

from logging_config import get_logger
from registry import RoomRegistry, get_registry
from schemas.rooms import RoomDetailsResponse, RoomListResponse, RoomSummary

logger = get_logger(__name__)

rooms_router = APIRouter(prefix="/rooms", tags=["rooms"])


@rooms_router.get("/", response_model=RoomListResponse)
async def list_rooms(registry: RoomRegistry = Depends(get_registry)):
    """List every room referenced since startup, empty ones included."""
    summaries = []
    for name in registry.names():
        room = registry.find(name)
        if room is not None:
            summaries.append(RoomSummary(name=name, member_count=len(room)))
    logger.debug(f"Listing {len(summaries)} rooms")
    return RoomListResponse(rooms=summaries)


@rooms_router.get("/{room_name}", response_model=RoomDetailsResponse)
async def get_room_details(room_name: str, registry: RoomRegistry = Depends(get_registry)):
    """
    Get a room's current members.

    Inspection never creates a room: names that no connection has used yet
    return 404.
    """
    room = registry.find(room_name)
    if room is None:
        logger.warning(f"Room details failed: Room {room_name} not found")
        raise HTTPException(status_code=404, detail="Room not found")

    members = room.member_names()
    logger.info(f"Room details retrieved for {room_name}: {len(members)} members")
    return RoomDetailsResponse(name=room.name, member_count=len(members), members=members)
