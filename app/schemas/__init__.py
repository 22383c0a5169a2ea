"""Schema package exports."""
from .activity_log import ActivityLogCreate, ActivityLogRead
from .amenity import AmenityBulkItem, AmenityBulkUpdate, AmenityCreate, AmenityRead
from .attendance import (
    AttendanceRecordRead,
    AttendanceSnapshotRead,
    BatchRosterRead,
    MarkAttendanceIn,
    PersonRefRead,
    RosterPersonRead,
    SessionRefRead,
)
from .batch import BatchCreate, BatchRead, SessionCreate, SessionRead, SessionReschedule, SessionUpdate
from .common import Paginated
from .people import (
    MemberCreate,
    MemberRead,
    MemberUpdate,
    PartnerCreate,
    PartnerRead,
    PartnerUpdate,
    TogglePauseIn,
)

__all__ = [
    "ActivityLogCreate",
    "ActivityLogRead",
    "AmenityBulkItem",
    "AmenityBulkUpdate",
    "AmenityCreate",
    "AmenityRead",
    "AttendanceRecordRead",
    "AttendanceSnapshotRead",
    "BatchRosterRead",
    "MarkAttendanceIn",
    "PersonRefRead",
    "RosterPersonRead",
    "SessionRefRead",
    "BatchCreate",
    "BatchRead",
    "SessionCreate",
    "SessionRead",
    "SessionReschedule",
    "SessionUpdate",
    "Paginated",
    "MemberCreate",
    "MemberRead",
    "MemberUpdate",
    "PartnerCreate",
    "PartnerRead",
    "PartnerUpdate",
    "TogglePauseIn",
]
