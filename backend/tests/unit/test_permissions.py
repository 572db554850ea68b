"""Unit tests for role capabilities and navigation visibility."""

import pytest

from wellness_clinic.core.exceptions import PermissionDenied, ValidationError
from wellness_clinic.core.permissions import (
    can_add_consultation_notes,
    can_book_appointments,
    can_edit_patient,
    can_manage_bills,
    can_manage_packages,
    can_view_medical_history,
    can_view_package_income,
    require,
    visible_sections,
)
from wellness_clinic.domain.entities import UserRole


@pytest.mark.unit
class TestCapabilities:
    @pytest.mark.parametrize(
        "role,expected",
        [("admin", True), ("doctor", True), ("staff", False), ("patient", False)],
    )
    def test_medical_history(self, role, expected):
        assert can_view_medical_history(role) is expected

    @pytest.mark.parametrize(
        "check", [can_edit_patient, can_book_appointments, can_manage_bills]
    )
    def test_everyone_but_patients(self, check):
        assert check(UserRole.ADMIN)
        assert check(UserRole.DOCTOR)
        assert check(UserRole.STAFF)
        assert not check(UserRole.PATIENT)

    def test_only_doctors_write_notes(self):
        assert [r.value for r in UserRole if can_add_consultation_notes(r)] == ["doctor"]

    @pytest.mark.parametrize("check", [can_view_package_income, can_manage_packages])
    def test_admin_only(self, check):
        assert [r.value for r in UserRole if check(r)] == ["admin"]

    def test_unknown_role(self):
        with pytest.raises(ValidationError):
            can_edit_patient("nurse")

    def test_require(self):
        require(True, "do anything")
        with pytest.raises(PermissionDenied):
            require(False, "view reports")


@pytest.mark.unit
class TestVisibleSections:
    def test_admin(self):
        assert visible_sections("admin") == [
            "dashboard",
            "appointments",
            "patients",
            "doctors",
            "packages",
            "billing",
            "reports",
            "settings",
        ]

    def test_doctor(self):
        assert visible_sections("doctor") == [
            "dashboard",
            "appointments",
            "patients",
            "records",
        ]

    def test_staff(self):
        assert visible_sections("staff") == [
            "dashboard",
            "appointments",
            "patients",
            "doctors",
            "packages",
            "billing",
        ]

    def test_patient(self):
        assert visible_sections("patient") == [
            "dashboard",
            "appointments",
            "packages",
            "billing",
            "records",
        ]
