from pydantic import BaseModel


class RoomSummary(BaseModel):
    name: str
    member_count: int

class RoomListResponse(BaseModel):
    rooms: list[RoomSummary]

class RoomDetailsResponse(BaseModel):
    name: str
    member_count: int
    members: list[str]
