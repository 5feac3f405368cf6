# File: glamping/api/v1/endpoints/members.py
from typing import Any, List, Optional
from fastapi import APIRouter, Depends, status
from glamping.api.deps import get_state_service, http_error
from glamping.core.exceptions import GlampingError
from glamping.schemas.member import (
    Member,
    MemberAnalysis,
    MemberCreate,
    MemberUpdate,
    WelcomeMessage,
)
from glamping.services.state_service import ResortStateService

router = APIRouter()


@router.get("/", response_model=List[Member], operation_id="list_members")
def list_members(
    *,
    service: ResortStateService = Depends(get_state_service),
    search: Optional[str] = None,
) -> Any:
    """List members, searching name, phone, location and tags"""
    return service.list_members(search)


@router.post("/", response_model=Member, status_code=status.HTTP_201_CREATED, operation_id="create_member")
def create_member(
    *,
    service: ResortStateService = Depends(get_state_service),
    member_in: MemberCreate,
) -> Any:
    return service.create_member(member_in)


@router.get("/{member_id}", response_model=Member, operation_id="get_member")
def get_member(*, service: ResortStateService = Depends(get_state_service), member_id: str) -> Any:
    try:
        return service.get_member(member_id)
    except GlampingError as e:
        raise http_error(e)


@router.put("/{member_id}", response_model=Member, operation_id="update_member")
def update_member(
    *,
    service: ResortStateService = Depends(get_state_service),
    member_id: str,
    member_update: MemberUpdate,
) -> Any:
    try:
        return service.update_member(member_id, member_update)
    except GlampingError as e:
        raise http_error(e)


@router.delete("/{member_id}", operation_id="delete_member")
def delete_member(*, service: ResortStateService = Depends(get_state_service), member_id: str) -> Any:
    try:
        service.delete_member(member_id)
    except GlampingError as e:
        raise http_error(e)
    return {"message": "Member deleted successfully"}


@router.post("/{member_id}/analyze", response_model=MemberAnalysis, operation_id="analyze_member_notes")
def analyze_member(*, service: ResortStateService = Depends(get_state_service), member_id: str) -> Any:
    """Run AI analysis on the member's notes and merge the findings into the profile"""
    try:
        member, analysis = service.analyze_member(member_id)
    except GlampingError as e:
        raise http_error(e)
    return MemberAnalysis(member=member, analysis=analysis)


@router.get("/{member_id}/welcome", response_model=WelcomeMessage, operation_id="member_welcome_message")
def welcome_message(*, service: ResortStateService = Depends(get_state_service), member_id: str) -> Any:
    try:
        message = service.welcome_message(member_id)
    except GlampingError as e:
        raise http_error(e)
    return WelcomeMessage(member_id=member_id, message=message)
