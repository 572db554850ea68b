"""
Role capabilities.

Every check takes the role explicitly; nothing here reads a session or a
global "current user". The HTTP layer resolves the role from the request and
passes it in.
"""

from types import MappingProxyType
from typing import FrozenSet, List, Mapping, Union

from wellness_clinic.core.exceptions import PermissionDenied, ValidationError
from wellness_clinic.domain.entities import UserRole

RoleLike = Union[UserRole, str]

ALL_ROLES: FrozenSet[UserRole] = frozenset(UserRole)
STAFF_ROLES: FrozenSet[UserRole] = frozenset(
    {UserRole.ADMIN, UserRole.DOCTOR, UserRole.STAFF}
)

# Navigation sections in display order, with the roles that may open them
NAVIGATION: Mapping[str, FrozenSet[UserRole]] = MappingProxyType(
    {
        "dashboard": ALL_ROLES,
        "appointments": ALL_ROLES,
        "patients": STAFF_ROLES,
        "doctors": frozenset({UserRole.ADMIN, UserRole.STAFF}),
        "packages": frozenset({UserRole.ADMIN, UserRole.STAFF, UserRole.PATIENT}),
        "billing": frozenset({UserRole.ADMIN, UserRole.STAFF, UserRole.PATIENT}),
        "records": frozenset({UserRole.DOCTOR, UserRole.PATIENT}),
        "reports": frozenset({UserRole.ADMIN}),
        "settings": frozenset({UserRole.ADMIN}),
    }
)


def parse_role(role: RoleLike) -> UserRole:
    try:
        return UserRole(role)
    except ValueError:
        raise ValidationError(f"Unknown role '{role}'", field="role")


def can_view_medical_history(role: RoleLike) -> bool:
    return parse_role(role) in (UserRole.DOCTOR, UserRole.ADMIN)


def can_edit_patient(role: RoleLike) -> bool:
    return parse_role(role) != UserRole.PATIENT


def can_book_appointments(role: RoleLike) -> bool:
    return parse_role(role) != UserRole.PATIENT


def can_manage_bills(role: RoleLike) -> bool:
    return parse_role(role) != UserRole.PATIENT


def can_add_consultation_notes(role: RoleLike) -> bool:
    return parse_role(role) == UserRole.DOCTOR


def can_view_package_income(role: RoleLike) -> bool:
    return parse_role(role) == UserRole.ADMIN


def can_manage_packages(role: RoleLike) -> bool:
    return parse_role(role) == UserRole.ADMIN


def can_view_reports(role: RoleLike) -> bool:
    return "reports" in visible_sections(role)


def visible_sections(role: RoleLike) -> List[str]:
    """Navigation sections shown to `role`, in display order."""
    role = parse_role(role)
    return [section for section, roles in NAVIGATION.items() if role in roles]


def require(allowed: bool, action: str) -> None:
    """Raise PermissionDenied unless `allowed`."""
    if not allowed:
        raise PermissionDenied(f"Not allowed to {action}")
