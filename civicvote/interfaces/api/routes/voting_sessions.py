"""Administrative endpoints for voting sessions."""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from civicvote.application.use_cases.sessions import (
    LifecycleTransitionError,
    VotingSessionNotFoundError,
    VotingSessionValidationError,
    check_session_eligibility,
    create_voting_session,
    end_voting_session_early,
    list_sessions_for_admin,
    publish_voting_session_results,
)
from civicvote.domain.entities import VoterProfile, VotingSession
from civicvote.infrastructure.database import get_db
from civicvote.interfaces.api.dependencies import get_current_user, require_admin
from civicvote.interfaces.api.schemas import (
    EligibilityRead,
    LifecycleMarksRead,
    VotingSessionCreate,
    VotingSessionRead,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _session_to_schema(voting_session: VotingSession) -> VotingSessionRead:
    marks = voting_session.marks
    return VotingSessionRead(
        id=voting_session.id or 0,
        title=voting_session.title,
        description=voting_session.description,
        start_time=voting_session.start_time,
        end_time=voting_session.end_time,
        min_age=voting_session.min_age,
        scope=voting_session.scope,
        scope_state=voting_session.scope_state,
        scope_lga=voting_session.scope_lga,
        require_whitelist=voting_session.require_whitelist,
        forced_ended=voting_session.forced_ended,
        results_published=voting_session.results_published,
        created_at=voting_session.created_at,
        notified=LifecycleMarksRead(
            scheduled=marks.notify_scheduled_at,
            started=marks.notify_started_at,
            ended=marks.notify_ended_at,
            results=marks.notify_results_at,
        ),
    )


def _raise_http(exc: ValueError) -> None:
    if isinstance(exc, VotingSessionNotFoundError):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if isinstance(exc, LifecycleTransitionError):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.post("/", response_model=VotingSessionRead, status_code=status.HTTP_201_CREATED)
def create_session(
    payload: VotingSessionCreate,
    db: Session = Depends(get_db),
    current_user: VoterProfile = Depends(require_admin),
) -> VotingSessionRead:
    """Schedule a new voting session; announces it when it starts in the future."""

    try:
        created = create_voting_session(db, actor=current_user, **payload.model_dump())
    except VotingSessionValidationError as exc:
        _raise_http(exc)
    return _session_to_schema(created)


@router.get("/", response_model=list[VotingSessionRead])
def list_sessions(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: VoterProfile = Depends(require_admin),
) -> list[VotingSessionRead]:
    sessions = list_sessions_for_admin(db, current_user, skip=skip, limit=limit)
    return [_session_to_schema(item) for item in sessions]


@router.post("/{session_id}/end-early", response_model=VotingSessionRead)
def end_session_early(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: VoterProfile = Depends(require_admin),
) -> VotingSessionRead:
    try:
        voting_session = end_voting_session_early(db, session_id, actor=current_user)
    except ValueError as exc:
        _raise_http(exc)
    return _session_to_schema(voting_session)


@router.post("/{session_id}/publish-results", response_model=VotingSessionRead)
def publish_results(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: VoterProfile = Depends(require_admin),
) -> VotingSessionRead:
    try:
        voting_session = publish_voting_session_results(db, session_id, actor=current_user)
    except ValueError as exc:
        _raise_http(exc)
    return _session_to_schema(voting_session)


@router.get("/{session_id}/eligibility", response_model=EligibilityRead)
def session_eligibility(
    session_id: int,
    db: Session = Depends(get_db),
    current_user: VoterProfile = Depends(get_current_user),
) -> EligibilityRead:
    """Tell the current voter whether they may take part in the session."""

    try:
        result = check_session_eligibility(db, session_id, current_user)
    except VotingSessionNotFoundError as exc:
        _raise_http(exc)
    return EligibilityRead(eligible=result.eligible, reason=result.reason)
