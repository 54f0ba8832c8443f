# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""Controller: Authentication. Login, member selection, password reset, current user."""
from fastapi import APIRouter, Depends

from clubhours.core.dependencies import get_auth_service
from clubhours.core.security import get_current_member_id
from clubhours.schemas import (
    ForgotPasswordRequest,
    LoginRequest,
    LoginResponse,
    ResetPasswordRequest,
    SelectMemberRequest,
)
from clubhours.services.auth_service import AuthService

router = APIRouter(prefix="/api", tags=["Auth"])


@router.post("/login")
async def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    """Token for a single matching member, or a selection list when an e-mail is shared."""
    return await service.login(body.email, body.password)


@router.post("/select-member", response_model=LoginResponse)
async def select_member(body: SelectMemberRequest,
                        service: AuthService = Depends(get_auth_service)):
    return await service.select_member(body.selection_token, body.member_id)


@router.post("/forgotPassword")
async def forgot_password(body: ForgotPasswordRequest,
                          service: AuthService = Depends(get_auth_service)):
    return await service.forgot_password(body.email)


@router.post("/resetPassword")
async def reset_password(body: ResetPasswordRequest,
                         service: AuthService = Depends(get_auth_service)):
    return await service.reset_password(body.token, body.password)


@router.get("/user")
async def get_user(member_id: str = Depends(get_current_member_id),
                   service: AuthService = Depends(get_auth_service)):
    return await service.get_user(member_id)


@router.get("/verify-token")
async def verify_token(member_id: str = Depends(get_current_member_id),
                       service: AuthService = Depends(get_auth_service)):
    return await service.get_user(member_id)
