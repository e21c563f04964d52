from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Header, HTTPException, Query, Request, Response
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from models import ActionType, Session
from services.directory import Directory


router = APIRouter(prefix="/profiles", tags=["profiles"])


class ActionRequest(BaseModel):
    action_type: ActionType = Field(alias="actionType")


def get_session(x_user_email: Optional[str] = Header(default=None)) -> Session:
    """Identity comes from a plain header; it is not verified."""
    if not x_user_email:
        raise HTTPException(status_code=401, detail="Missing X-User-Email header")
    try:
        return Session(email=x_user_email)
    except PydanticValidationError as exc:
        raise HTTPException(status_code=401, detail="Invalid X-User-Email header") from exc


def _directory(request: Request) -> Directory:
    return request.app.state.directory


@router.get("")
def list_profiles(
    request: Request,
    search: Optional[str] = Query(default=None),
    area: Optional[str] = Query(default=None),
    city: Optional[str] = Query(default=None),
    session: Session = Depends(get_session),
) -> List[Dict[str, Any]]:
    with request.app.state.lock:
        profiles = _directory(request).list_profiles(session, search=search, area=area, city=city)
    return [p.to_record() for p in profiles]


@router.get("/filters")
def filter_options(request: Request, session: Session = Depends(get_session)) -> Dict[str, List[str]]:
    with request.app.state.lock:
        return _directory(request).filter_options(session)


@router.get("/me")
def my_profile(request: Request, session: Session = Depends(get_session)) -> Dict[str, Any]:
    with request.app.state.lock:
        profile = _directory(request).my_profile(session)
    if profile is None:
        raise HTTPException(status_code=404, detail="No profile registered for this e-mail")
    return profile.to_record()


@router.get("/followed")
def followed_ids(request: Request, session: Session = Depends(get_session)) -> List[str]:
    with request.app.state.lock:
        return sorted(_directory(request).followed_ids(session))


@router.post("", status_code=201)
def create_profile(
    request: Request,
    data: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
) -> Dict[str, Any]:
    with request.app.state.lock:
        return _directory(request).create_profile(session, data).to_record()


@router.patch("/{profile_id}")
def update_profile(
    profile_id: str,
    request: Request,
    changes: Dict[str, Any] = Body(...),
    session: Session = Depends(get_session),
) -> Dict[str, Any]:
    with request.app.state.lock:
        return _directory(request).update_profile(session, profile_id, changes).to_record()


@router.delete("/{profile_id}", status_code=204)
def delete_profile(profile_id: str, request: Request, session: Session = Depends(get_session)) -> Response:
    with request.app.state.lock:
        _directory(request).delete_profile(session, profile_id)
    return Response(status_code=204)


@router.post("/{profile_id}/actions", status_code=204)
def track_action(
    profile_id: str,
    body: ActionRequest,
    request: Request,
    session: Session = Depends(get_session),
) -> Response:
    with request.app.state.lock:
        _directory(request).track_action(session, profile_id, body.action_type)
    return Response(status_code=204)


@router.post("/{profile_id}/follow")
def follow_profile(profile_id: str, request: Request, session: Session = Depends(get_session)) -> Dict[str, str]:
    with request.app.state.lock:
        return {"linkedinUrl": _directory(request).follow_profile(session, profile_id)}


@router.post("/{profile_id}/icebreaker")
def generate_icebreaker(profile_id: str, request: Request, session: Session = Depends(get_session)) -> Dict[str, str]:
    directory = _directory(request)
    with request.app.state.lock:
        sender, target = directory.icebreaker_parties(session, profile_id)
    # Lock released: the collaborator call may take seconds
    return {"text": directory.ai.icebreaker(sender, target)}
