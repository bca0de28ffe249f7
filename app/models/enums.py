from enum import Enum

class UserRole(str, Enum):
    Student = "student"
    Staff = "staff"
    Admin = "admin"


class RoomStatus(str, Enum):
    Vacant = "Vacant"
    Occupied = "Occupied"
    Full = "Full"
    Maintenance = "Maintenance"


class RoomCondition(str, Enum):
    Good = "Good"
    Fair = "Fair"
    Poor = "Poor"
    Maintenance = "Maintenance"
    UnderRepair = "Under Repair"


# Conditions that take a room out of service
UNAVAILABLE_CONDITIONS = {RoomCondition.Maintenance, RoomCondition.UnderRepair}


class RegistrationStatus(str, Enum):
    Pending = "pending"
    Approved = "approved"
    Rejected = "rejected"


class GraduationStatus(str, Enum):
    Active = "active"
    PassedOut = "passed_out"


class RequestStatus(str, Enum):
    Pending = "Pending"
    InProgress = "In Progress"
    Completed = "Completed"
    Rejected = "Rejected"


class RequestPriority(str, Enum):
    Low = "Low"
    Medium = "Medium"
    High = "High"


class AnnouncementType(str, Enum):
    Info = "info"
    Warning = "warning"
    Urgent = "urgent"


def enum_values(enum_cls):
    """Persist enum *values* (e.g. 'Under Repair'), not member names."""
    return [member.value for member in enum_cls]
