from enum import Enum


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    ORGANIZER = "ORGANIZER"
    STUDENT = "STUDENT"


class EventStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class AttendanceStatus(str, Enum):
    PENDING = "pending"
    PRESENT = "present"
    ABSENT = "absent"


class ClaimStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class ClaimAction(str, Enum):
    SUBMITTED = "SUBMITTED"
    RESUBMITTED = "RESUBMITTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class MyCSDCategory(str, Enum):
    REKA_CIPTA_DAN_INOVASI = "REKA CIPTA DAN INOVASI"
    KEUSAHAWANAN = "KEUSAHAWANAN"
    KEBUDAYAAN = "KEBUDAYAAN"
    SUKAN_REKREASI_SOSIALISASI = "SUKAN/REKREASI/SOSIALISASI"
    KEPIMPINAN = "KEPIMPINAN"


class MyCSDLevel(str, Enum):
    ANTARABANGSA = "Antarabangsa"
    KEBANGSAAN = "Kebangsaan / Antara University"
    KAMPUS = "Kampus"


class NotificationType(str, Enum):
    EVENT = "event"
    REGISTRATION = "registration"
    MYCSD = "mycsd"
    ADMIN = "admin"
    PROPOSAL = "proposal"
