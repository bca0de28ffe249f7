from pydantic import BaseModel
from typing import List, Optional

from app.schemas.announcement import AnnouncementRead
from app.schemas.registration import RegistrationRead
from app.schemas.request import RequestRead
from app.schemas.room import RoomRead


class AdminStats(BaseModel):
    total_users: int
    pending_registrations: int
    active_students: int
    staff_members: int


class StaffStats(BaseModel):
    total_rooms: int
    occupied_rooms: int
    vacant_rooms: int
    full_rooms: int
    maintenance_rooms: int
    total_capacity: int
    total_occupancy: int
    pending_registrations: int
    open_requests: int
    high_priority_requests: int
    recent_requests: List[RequestRead]


class StudentOverview(BaseModel):
    registration: Optional[RegistrationRead] = None
    room: Optional[RoomRead] = None
    roommates: List[str] = []
    requests: List[RequestRead]
    announcements: List[AnnouncementRead]
