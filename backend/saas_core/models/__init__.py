from saas_core.models.organization import Organization
from saas_core.models.organization_member import OrganizationMember
from saas_core.models.user import User
from saas_core.models.plan import Plan
from saas_core.models.subscription import Subscription
from saas_core.models.audit_log import AuditLog
from saas_core.models.role import SystemRole, OrganizationRole

__all__ = [
    "Organization",
    "OrganizationMember",
    "User",
    "Plan",
    "Subscription",
    "AuditLog",
    "SystemRole",
    "OrganizationRole",
]
