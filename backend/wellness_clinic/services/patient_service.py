"""Patient registration and lookup."""

import logging
from dataclasses import replace
from datetime import date
from typing import List, Optional, Union

from wellness_clinic.core.exceptions import NotFoundError, ValidationError
from wellness_clinic.domain.entities import MembershipTier, Patient, new_id
from wellness_clinic.domain.interfaces import IPatientRepository
from wellness_clinic.schemas.dtos import PatientRegistrationRequest, parse_date

logger = logging.getLogger(__name__)


class PatientService:
    """Application service for patient-related use-cases."""

    def __init__(self, patient_repo: IPatientRepository) -> None:
        self.patient_repo = patient_repo

    def register(self, request: PatientRegistrationRequest) -> Patient:
        """Create a patient record from a validated registration request."""
        request.validate()
        email = request.email.strip().lower()
        if any(p.email.lower() == email for p in self.patient_repo.list_all()):
            raise ValidationError(
                f"A patient with email {email} already exists", field="email"
            )

        patient = Patient(
            id=new_id("patient"),
            first_name=request.first_name.strip(),
            last_name=request.last_name.strip(),
            email=email,
            phone=request.phone,
            date_of_birth=(
                parse_date(request.date_of_birth) if request.date_of_birth else None
            ),
            gender=request.gender,
            address=request.address,
            membership_tier=request.membership_tier,
            membership_expiry=(
                parse_date(request.membership_expiry)
                if request.membership_expiry
                else None
            ),
            medical_history=request.medical_history,
            allergies=request.allergies,
        )
        saved = self.patient_repo.create(patient)
        logger.info(
            "Patient registered",
            extra={
                "context": {
                    "patient_id": saved.id,
                    "membership_tier": saved.membership_tier.value,
                }
            },
        )
        return saved

    def get(self, patient_id: str) -> Patient:
        patient = self.patient_repo.get_by_id(patient_id)
        if patient is None:
            raise NotFoundError(f"Patient {patient_id} not found")
        return patient

    def list_all(self) -> List[Patient]:
        return self.patient_repo.list_all()

    def search(self, term: str = "", membership: Optional[str] = None) -> List[Patient]:
        """Match name, email or phone (case-insensitive), optionally by tier."""
        term = (term or "").strip().lower()
        tier = None
        if membership and membership != "all":
            try:
                tier = MembershipTier(membership)
            except ValueError:
                raise ValidationError(
                    f"Unknown membership tier '{membership}'", field="membership"
                )
        results = []
        for patient in self.patient_repo.list_all():
            if tier is not None and patient.membership_tier != tier:
                continue
            haystack = " ".join(
                (patient.full_name, patient.email, patient.phone)
            ).lower()
            if term and term not in haystack:
                continue
            results.append(patient)
        return sorted(results, key=lambda p: (p.last_name, p.first_name))

    def update_membership(
        self,
        patient_id: str,
        tier: Union[MembershipTier, str],
        expiry: Optional[Union[date, str]] = None,
    ) -> Patient:
        """Change a patient's tier; future bills use the new discount."""
        patient = self.get(patient_id)
        try:
            new_tier = MembershipTier(tier)
        except ValueError:
            raise ValidationError(f"Unknown membership tier '{tier}'", field="tier")
        try:
            new_expiry = parse_date(expiry) if expiry else None
        except (TypeError, ValueError):
            raise ValidationError("expiry must be an ISO date", field="expiry")
        if new_tier == MembershipTier.NONE:
            new_expiry = None

        saved = self.patient_repo.update(
            replace(patient, membership_tier=new_tier, membership_expiry=new_expiry)
        )
        logger.info(
            "Membership updated",
            extra={
                "context": {
                    "patient_id": patient_id,
                    "from": patient.membership_tier.value,
                    "to": new_tier.value,
                }
            },
        )
        return saved
