"""ORM models package."""
from .activity_log import ActivityCategory, ActivityLog
from .admin_user import AdminUser
from .amenity import Amenity, AmenityCategory
from .api_key import ApiKey, ApiScope
from .attendance import AttendanceStatus, MemberAttendance, PartnerAttendance
from .base import Base
from .batch import Batch, BatchSession, BatchStatus, SessionStatus, batch_members, batch_partners
from .person import Member, Partner, PartnerPayType, PersonKind, PersonStatus

__all__ = [
    "ActivityCategory",
    "ActivityLog",
    "AdminUser",
    "Amenity",
    "AmenityCategory",
    "ApiKey",
    "ApiScope",
    "AttendanceStatus",
    "Base",
    "Batch",
    "BatchSession",
    "BatchStatus",
    "Member",
    "MemberAttendance",
    "Partner",
    "PartnerAttendance",
    "PartnerPayType",
    "PersonKind",
    "PersonStatus",
    "SessionStatus",
    "batch_members",
    "batch_partners",
]
