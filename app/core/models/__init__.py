from app.core.models.organization import Organization
from app.core.models.event_proposal import EventProposal
from app.core.models.event import Event
from app.core.models.registration import Registration
from app.core.models.mycsd_request import MyCSDRequest
from app.core.models.mycsd_record import MyCSDRecord
from app.core.models.mycsd_log import MyCSDLog
from app.core.models.mycsd_audit_log import MyCSDAuditLog
from app.core.models.notification import Notification

__all__ = [
    "Organization",
    "EventProposal",
    "Event",
    "Registration",
    "MyCSDRequest",
    "MyCSDRecord",
    "MyCSDLog",
    "MyCSDAuditLog",
    "Notification",
]
