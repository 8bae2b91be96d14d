# backend/trailblazers/routes/v1/auth.py
"""
Authentication routes - API v1

Endpoints:
    POST /register - Create a guest account
    POST /login - Sign in and receive an ID token
    GET /me - The signed-in principal
    POST /password-reset - Set a new password from a reset/setup link
    POST /guide-invitations - Invite a guide (admin)
    GET /guide-invitations/{token} - Check an invitation
    POST /guide-invitations/{token}/complete - Register the invited guide
"""

import logging

from fastapi import APIRouter, Depends, status

from ...api.dependencies import (
    get_current_user,
    get_guide_invitation_service,
    get_identity_service,
    require_admin,
)
from ...schemas.auth import (
    CompleteGuideRegistration,
    GuideInvitationCreate,
    GuideInvitationResponse,
    GuideInvitationStatus,
    LoginRequest,
    PasswordResetRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)
from ...services.guide_invitation_service import GuideInvitationService
from ...services.identity_service import AuthUser, IdentityService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth-v1"])


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    payload: RegisterRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> UserResponse:
    """Create a guest account."""
    user = identity.register(payload.name, payload.email, payload.password)
    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> TokenResponse:
    result = identity.sign_in(payload.email, payload.password)
    user = identity.get_user(result.user.uid)
    return TokenResponse(
        access_token=result.id_token,
        expires_in=result.expires_in,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
def me(
    current_user: AuthUser = Depends(get_current_user),
    identity: IdentityService = Depends(get_identity_service),
) -> UserResponse:
    return UserResponse.model_validate(identity.get_user(current_user.uid))


@router.post("/password-reset", status_code=status.HTTP_200_OK)
def reset_password(
    payload: PasswordResetRequest,
    identity: IdentityService = Depends(get_identity_service),
) -> dict[str, str]:
    """Consume a reset or password-setup link; returns where to continue."""
    continue_url = identity.reset_password(payload.token, payload.new_password)
    return {"continue_url": continue_url}


@router.post(
    "/guide-invitations",
    response_model=GuideInvitationResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_guide_invitation(
    payload: GuideInvitationCreate,
    admin: AuthUser = Depends(require_admin),
    service: GuideInvitationService = Depends(get_guide_invitation_service),
) -> GuideInvitationResponse:
    invitation = service.create_invitation(payload.name, payload.email, admin)
    return GuideInvitationResponse(
        token=invitation.token,
        name=invitation.name,
        email=invitation.email,
        expires_at=invitation.expires_at,
        registration_url=service.registration_url(invitation.token),
    )


@router.get("/guide-invitations/{token}", response_model=GuideInvitationStatus)
def verify_guide_invitation(
    token: str,
    service: GuideInvitationService = Depends(get_guide_invitation_service),
) -> GuideInvitationStatus:
    invitation = service.verify(token)
    if invitation is None:
        return GuideInvitationStatus(valid=False)
    return GuideInvitationStatus(valid=True, email=invitation.email, name=invitation.name)


@router.post(
    "/guide-invitations/{token}/complete",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
def complete_guide_registration(
    token: str,
    payload: CompleteGuideRegistration,
    service: GuideInvitationService = Depends(get_guide_invitation_service),
) -> UserResponse:
    user = service.complete_registration(token, payload.password)
    return UserResponse.model_validate(user)
