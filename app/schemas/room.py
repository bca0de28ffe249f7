from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional
from uuid import UUID
from datetime import datetime

from app.models.enums import RoomCondition, RoomStatus


# ---------------------------------------------------------
# ROOM INVENTORY
# ---------------------------------------------------------
class RoomCreate(BaseModel):
    room_number: str = Field(min_length=1)
    floor: str = Field(min_length=1)
    room_type: Optional[str] = None
    room_size: Optional[str] = None
    max_occupancy: int = Field(default=2, gt=0)
    condition: RoomCondition = RoomCondition.Good


class RoomUpdate(BaseModel):
    room_type: Optional[str] = None
    room_size: Optional[str] = None
    max_occupancy: Optional[int] = Field(default=None, gt=0)
    condition: Optional[RoomCondition] = None
    last_inspection: Optional[datetime] = None


class RoomRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    room_number: str
    floor: str
    room_type: Optional[str] = None
    room_size: Optional[str] = None
    max_occupancy: int
    current_occupancy: int
    status: RoomStatus
    condition: RoomCondition
    last_inspection: Optional[datetime] = None


class Occupant(BaseModel):
    student_id: UUID
    email: str
    name: str
    assigned_at: datetime


class RoomDetail(RoomRead):
    occupants: List[Occupant] = []
    available_beds: int = 0


class FloorStats(BaseModel):
    total: int = 0
    occupied: int = 0
    vacant: int = 0
    full: int = 0
    maintenance: int = 0


class RoomStatsResponse(BaseModel):
    floors: Dict[str, FloorStats]
    total_rooms: int
    total_capacity: int
    total_occupancy: int


class OccupancyRead(BaseModel):
    room_id: UUID
    room_number: str
    current_occupancy: int
    max_occupancy: int


# ---------------------------------------------------------
# ASSIGNMENT
# ---------------------------------------------------------
class AssignRequest(BaseModel):
    student_ids: List[UUID] = Field(min_length=1)
    force: bool = False


class ConflictCheckRequest(BaseModel):
    student_ids: List[UUID] = Field(min_length=1)


class AssignmentConflict(BaseModel):
    student_id: UUID
    room_id: UUID
    room_number: str


class ConflictCheckResponse(BaseModel):
    has_conflicts: bool
    conflicts: List[AssignmentConflict]


class AssignmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    room_id: UUID
    student_id: UUID
    is_active: bool
    assigned_at: datetime
    vacated_at: Optional[datetime] = None


class AssignResult(BaseModel):
    room: RoomRead
    assignments: List[AssignmentRead]
    reassigned_from: List[AssignmentConflict] = []


class VacateResult(BaseModel):
    room: RoomRead
    vacated: int


# ---------------------------------------------------------
# FURNITURE
# ---------------------------------------------------------
class FurnitureCreate(BaseModel):
    item_name: str = Field(min_length=1)
    condition: RoomCondition = RoomCondition.Good


class FurnitureUpdate(BaseModel):
    item_name: Optional[str] = None
    condition: Optional[RoomCondition] = None


class FurnitureRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    room_id: UUID
    item_name: str
    condition: RoomCondition
    updated_at: datetime
