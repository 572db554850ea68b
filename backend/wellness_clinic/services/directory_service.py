"""Doctor directory and wellness package catalog."""

from dataclasses import dataclass
from typing import Dict, List, Optional

from wellness_clinic.core.exceptions import NotFoundError, ValidationError
from wellness_clinic.domain.entities import Doctor, ServiceType, WellnessPackage
from wellness_clinic.domain.interfaces import (
    IBranchReader,
    IDoctorReader,
    IPackageReader,
)


def _service_filter(service_type: Optional[str]) -> Optional[ServiceType]:
    if not service_type or service_type == "all":
        return None
    try:
        return ServiceType(service_type)
    except ValueError:
        raise ValidationError(
            f"Unknown service type '{service_type}'", field="service_type"
        )


@dataclass
class DoctorAvailability:
    available: int
    unavailable: int


class DirectoryService:
    def __init__(
        self,
        doctor_repo: IDoctorReader,
        package_repo: IPackageReader,
        branch_repo: IBranchReader,
    ) -> None:
        self.doctor_repo = doctor_repo
        self.package_repo = package_repo
        self.branch_repo = branch_repo

    def search_doctors(
        self,
        term: str = "",
        branch_id: Optional[str] = None,
        service_type: Optional[str] = None,
    ) -> List[Doctor]:
        """Match first name, last name or email, sorted by last name.

        Unavailable doctors are listed too; callers show their state.
        """
        term = (term or "").strip().lower()
        wanted = _service_filter(service_type)
        if branch_id and branch_id != "all":
            if self.branch_repo.get_by_id(branch_id) is None:
                raise NotFoundError(f"Branch {branch_id} not found")
            doctors = self.doctor_repo.list_by_branch(branch_id)
        else:
            doctors = self.doctor_repo.list_all()

        results = [
            d
            for d in doctors
            if (wanted is None or d.can_perform(wanted))
            and (
                not term
                or term in d.first_name.lower()
                or term in d.last_name.lower()
                or term in d.email.lower()
            )
        ]
        return sorted(results, key=lambda d: (d.last_name, d.first_name))

    def doctor_availability(self) -> DoctorAvailability:
        """Headcount of bookable and unavailable doctors across all branches."""
        doctors = self.doctor_repo.list_all()
        available = sum(1 for d in doctors if d.is_available)
        return DoctorAvailability(
            available=available, unavailable=len(doctors) - available
        )

    def search_packages(
        self, term: str = "", service_type: Optional[str] = None
    ) -> List[WellnessPackage]:
        """Active packages whose name or description matches `term`."""
        term = (term or "").strip().lower()
        wanted = _service_filter(service_type)
        return [
            p
            for p in self.package_repo.list_all()
            if p.is_active
            and (wanted is None or p.service_type == wanted)
            and (not term or term in p.name.lower() or term in p.description.lower())
        ]

    def active_packages_by_service(self) -> Dict[str, int]:
        """Active package count for every service type, zeros included."""
        active = [p for p in self.package_repo.list_all() if p.is_active]
        return {
            service.value: sum(1 for p in active if p.service_type == service)
            for service in ServiceType
        }
