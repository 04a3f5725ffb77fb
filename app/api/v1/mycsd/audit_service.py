"""
Audit logging for claim state changes. Call on every transition, before commit.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import ClaimAction
from app.core.models import MyCSDAuditLog


async def log_claim_audit(
    db: AsyncSession,
    request_id: UUID,
    action: ClaimAction,
    performed_by: UUID,
    performed_by_role: str,
    *,
    from_status: Optional[str] = None,
    to_status: Optional[str] = None,
    remarks: Optional[str] = None,
) -> None:
    """Append one audit log entry. Caller must commit."""
    entry = MyCSDAuditLog(
        request_id=request_id,
        action=action.value,
        from_status=from_status,
        to_status=to_status,
        performed_by=performed_by,
        performed_by_role=performed_by_role,
        remarks=remarks,
    )
    db.add(entry)
