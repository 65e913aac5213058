"""Platform-level and organization-level role taxonomies."""

import enum

from saas_core.errors import ValidationError


class SystemRole(str, enum.Enum):
    """Platform-wide privilege of a user, in ascending order."""

    USER = "user"
    SUPPORT = "support"
    ADMIN = "admin"
    SUPER_ADMIN = "super_admin"


class OrganizationRole(str, enum.Enum):
    """Privilege of a user inside one organization, in ascending order."""

    MEMBER = "member"
    ADMIN = "admin"
    OWNER = "owner"


def is_system_admin(role: SystemRole) -> bool:
    return role in (SystemRole.ADMIN, SystemRole.SUPER_ADMIN)


def is_super_admin(role: SystemRole) -> bool:
    return role == SystemRole.SUPER_ADMIN


def is_support(role: SystemRole) -> bool:
    return role == SystemRole.SUPPORT or is_system_admin(role)


def is_owner(role: OrganizationRole) -> bool:
    return role == OrganizationRole.OWNER


def is_admin(role: OrganizationRole) -> bool:
    return role in (OrganizationRole.ADMIN, OrganizationRole.OWNER)


def is_member(role: OrganizationRole) -> bool:
    # Every valid organization role counts as membership.
    return role == OrganizationRole.MEMBER or is_admin(role)


ORGANIZATION_ROLE_CHECKS = {
    OrganizationRole.MEMBER: is_member,
    OrganizationRole.ADMIN: is_admin,
    OrganizationRole.OWNER: is_owner,
}


def has_organization_role(role: OrganizationRole, minimum: OrganizationRole) -> bool:
    """Check that ``role`` grants at least the privilege of ``minimum``."""
    return ORGANIZATION_ROLE_CHECKS[minimum](role)


def validate_system_role(value: str | SystemRole) -> SystemRole:
    """Turn a raw value into a SystemRole or raise ValidationError."""
    try:
        return SystemRole(value)
    except ValueError:
        valid = ", ".join(role.value for role in SystemRole)
        raise ValidationError(f"Invalid system role: {value}, must be one of: {valid}")


def validate_organization_role(value: str | OrganizationRole) -> OrganizationRole:
    """Turn a raw value into an OrganizationRole or raise ValidationError."""
    try:
        return OrganizationRole(value)
    except ValueError:
        valid = ", ".join(role.value for role in OrganizationRole)
        raise ValidationError(f"Invalid organization role: {value}, must be one of: {valid}")
