"""Domain entity representing a voter profile."""

from dataclasses import dataclass
from datetime import date, datetime

ELIGIBILITY_PENDING = "pending"
ELIGIBILITY_ACTIVE = "active"
ELIGIBILITY_DISABLED = "disabled"

ROLE_VOTER = "voter"
ROLE_ADMIN = "admin"


@dataclass
class VoterProfile:
    """Attributes of a registered voter used by eligibility and scoping."""

    id: int | None
    email: str | None = None
    full_name: str | None = None
    national_id: str | None = None
    date_of_birth: date | None = None
    state: str | None = None
    residence_lga: str | None = None
    eligibility_status: str = ELIGIBILITY_PENDING
    role: str = ROLE_VOTER
    email_verified_at: datetime | None = None

    def is_admin(self) -> bool:
        """Return ``True`` when the profile belongs to an administrator."""

        return (self.role or "").lower() == ROLE_ADMIN

    def is_disabled(self) -> bool:
        return (self.eligibility_status or "").lower() == ELIGIBILITY_DISABLED
