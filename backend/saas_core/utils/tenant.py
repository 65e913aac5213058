"""Multi-tenancy and soft-delete query helpers."""

import uuid


def not_deleted(model):
    """
    Return a filter clause excluding soft-deleted rows.

    Soft delete is never applied automatically, so every query that must
    hide deleted rows adds this clause itself.

    Usage:
        query = select(User).where(User.email == email, not_deleted(User))
    """
    return model.deleted_at.is_(None)


def tenant_filter(model, organization_id: uuid.UUID):
    """
    Return a filter clause scoping a query to one organization's live rows.

    Usage:
        query = select(OrganizationMember).where(tenant_filter(OrganizationMember, org_id))
    """
    return (model.organization_id == organization_id) & not_deleted(model)
