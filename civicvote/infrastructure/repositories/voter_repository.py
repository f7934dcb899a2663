"""Persistence layer for voter profiles and the eligible-voters whitelist."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session

from civicvote.domain.entities import ELIGIBILITY_ACTIVE, ROLE_ADMIN, VoterProfile
from civicvote.infrastructure.models import EligibleVoterModel, VoterModel
from civicvote.utils import ensure_app_naive_datetime, ensure_app_timezone


class VoterRepository:
    """Provide read and write access to :class:`VoterProfile` records."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def get(self, voter_id: int) -> VoterProfile | None:
        model = self.session.get(VoterModel, voter_id)
        return self._to_entity(model) if model else None

    def create(self, voter: VoterProfile) -> VoterProfile:
        model = VoterModel()
        self._apply_entity_to_model(model, voter)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update(self, voter: VoterProfile) -> VoterProfile:
        model = self.session.get(VoterModel, voter.id)
        if model is None:
            msg = f"Voter with id {voter.id} not found"
            raise ValueError(msg)
        self._apply_entity_to_model(model, voter)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def list_verified_active(self) -> Sequence[VoterProfile]:
        """Return active voters holding a verified email address."""

        query = (
            self.session.query(VoterModel)
            .filter(func.lower(VoterModel.eligibility_status) == ELIGIBILITY_ACTIVE)
            .filter(VoterModel.email.isnot(None))
            .filter(VoterModel.email != "")
            .filter(VoterModel.email_verified_at.isnot(None))
            .order_by(VoterModel.id.asc())
        )
        return [self._to_entity(model) for model in query.all()]

    def list_admin_ids(self) -> list[int]:
        rows = (
            self.session.query(VoterModel.id)
            .filter(func.lower(VoterModel.role) == ROLE_ADMIN)
            .order_by(VoterModel.id.asc())
            .all()
        )
        return [row.id for row in rows]

    def is_whitelisted(self, email: str | None, national_id: str | None) -> bool:
        """Return ``True`` when ``email`` or ``national_id`` is on the allow-list."""

        conditions = []
        if email:
            conditions.append(
                and_(
                    EligibleVoterModel.email.isnot(None),
                    func.lower(EligibleVoterModel.email) == email.strip().lower(),
                )
            )
        if national_id:
            conditions.append(
                and_(
                    EligibleVoterModel.national_id.isnot(None),
                    EligibleVoterModel.national_id == national_id.strip(),
                )
            )
        if not conditions:
            return False
        row = (
            self.session.query(EligibleVoterModel.id)
            .filter(or_(*conditions))
            .limit(1)
            .first()
        )
        return row is not None

    def add_to_whitelist(self, *, email: str | None = None, national_id: str | None = None) -> None:
        if not (email or national_id):
            raise ValueError("A whitelist entry needs an email or a national id")
        self.session.add(EligibleVoterModel(email=email, national_id=national_id))
        self.session.commit()

    @staticmethod
    def _apply_entity_to_model(model: VoterModel, voter: VoterProfile) -> None:
        model.email = voter.email
        model.email_verified_at = ensure_app_naive_datetime(voter.email_verified_at)
        model.full_name = voter.full_name
        model.national_id = voter.national_id
        model.date_of_birth = voter.date_of_birth
        model.state = voter.state
        model.residence_lga = voter.residence_lga
        model.eligibility_status = voter.eligibility_status
        model.role = voter.role

    @staticmethod
    def _to_entity(model: VoterModel) -> VoterProfile:
        return VoterProfile(
            id=model.id,
            email=model.email,
            full_name=model.full_name,
            national_id=model.national_id,
            date_of_birth=model.date_of_birth,
            state=model.state,
            residence_lga=model.residence_lga,
            eligibility_status=model.eligibility_status,
            role=model.role,
            email_verified_at=ensure_app_timezone(model.email_verified_at),
        )


__all__ = ["VoterRepository"]
