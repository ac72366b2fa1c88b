"""Audit service for logging ledger and request lifecycle events."""

from sqlalchemy.ext.asyncio import AsyncSession

from fundledger.models.audit_log import AuditLog


class AuditService:
    """Service for audit log operations.

    Entries are added to the caller's session so they commit (or roll
    back) together with the change they describe.
    """

    @staticmethod
    def log(
        session: AsyncSession,
        org_id: int | None,
        entity_type: str,
        entity_id: int,
        action: str,
        actor_id: int | None = None,
        changes: dict | None = None,
    ) -> AuditLog:
        """Create audit log entry (one-liner).

        Args:
            session: Database session
            org_id: Organization the entity belongs to
            entity_type: Type of entity ("transaction", "reimbursement_request", etc.)
            entity_id: Primary key of the entity
            action: Action performed ("create", "transfer", "approved", etc.)
            actor_id: User who performed the action (optional)
            changes: Optional JSON snapshot of changed fields

        Returns:
            Created AuditLog object
        """
        audit = AuditLog(
            org_id=org_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            actor_id=actor_id,
            changes=changes,
        )
        session.add(audit)
        return audit


__all__ = ["AuditService"]
