"""Passwordless authentication and invitation acceptance."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from ... import schemas
from ...models import User
from ...services import AuthService, WorkplaceService
from ..deps import (
    client_ip,
    get_auth_service,
    get_bearer_token,
    get_current_user,
    get_optional_user,
    get_workplace_service,
    ok,
)

router = APIRouter(prefix="/v1/auths", tags=["auth"])


@router.post(
    "/register",
    response_model=schemas.Envelope[schemas.UserResponse],
    status_code=status.HTTP_201_CREATED,
)
def register(
    request: schemas.EmailRequest,
    auth: AuthService = Depends(get_auth_service),
):
    user = auth.register(request)
    return ok(schemas.UserResponse.model_validate(user), "User registered")


@router.post("/login", response_model=schemas.Envelope[schemas.OtpRequestResponse])
def login(
    request: schemas.EmailRequest,
    auth: AuthService = Depends(get_auth_service),
):
    """Email a one-time code."""
    return ok(auth.request_otp(request.email), "OTP sent")


@router.post("/verify_otp", response_model=schemas.Envelope[schemas.LoginResponse])
def verify_otp(
    request: schemas.OtpVerifyRequest,
    http_request: Request,
    auth: AuthService = Depends(get_auth_service),
):
    result = auth.verify_otp(request, client_ip(http_request))
    return ok(result, "Login successful" if result.exists else "OTP verified")


@router.post(
    "/setup-workplace",
    response_model=schemas.Envelope[schemas.SetupWorkplaceResponse],
    status_code=status.HTTP_201_CREATED,
)
def setup_workplace(
    request: schemas.SetupWorkplaceRequest,
    http_request: Request,
    auth: AuthService = Depends(get_auth_service),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """New accounts need a verified OTP; existing accounts must be signed in."""
    result = auth.setup_workplace(request, client_ip(http_request), current_user)
    return ok(result, "Workplace created")


@router.post("/refresh", response_model=schemas.Envelope[schemas.RefreshResponse])
def refresh(
    request: schemas.RefreshRequest,
    auth: AuthService = Depends(get_auth_service),
):
    return ok(auth.refresh(request.refresh_token), "Token refreshed")


@router.post("/logout", response_model=schemas.Envelope[None])
def logout(
    token: str = Depends(get_bearer_token),
    user: User = Depends(get_current_user),
    auth: AuthService = Depends(get_auth_service),
):
    auth.logout(user, token)
    return ok(None, "Logged out")


# ========================================================================
# 초대
# ========================================================================


@router.get(
    "/invitations/verify",
    response_model=schemas.Envelope[schemas.InvitationVerifyResponse],
)
def verify_invitation(
    token: str = Query(..., min_length=1),
    workplaces: WorkplaceService = Depends(get_workplace_service),
):
    return ok(workplaces.verify_invitation(token), "Invitation is valid")


@router.post(
    "/invitations/accept",
    response_model=schemas.Envelope[schemas.InvitationAcceptResponse],
)
def accept_invitation(
    request: schemas.InvitationAcceptRequest,
    http_request: Request,
    auth: AuthService = Depends(get_auth_service),
):
    return ok(auth.accept_invitation(request, client_ip(http_request)), "Invitation accepted")
