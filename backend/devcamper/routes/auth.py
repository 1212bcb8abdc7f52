"""
DevCamper Backend — Auth Routes
=================================

What:  /api/v1/auth: register, login, logout, me, updatedetails,
       updatepassword, forgotpassword, resetpassword/{resettoken}.
How:   Token-issuing endpoints answer {"success": true, "token": ...} and
       set the same JWT as the httponly `token` cookie; logout clears it.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext, get_context
from devcamper.database import get_db_session
from devcamper.models.user import User
from devcamper.responses import clear_token_response, render, token_response
from devcamper.routes.deps import get_current_user
from devcamper.schemas.user import (
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateDetailsRequest,
    UpdatePasswordRequest,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.post("/register")
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return token_response(await context.auth.register(db, payload), context.settings)


@router.post("/login")
async def login(
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return token_response(await context.auth.login(db, payload), context.settings)


@router.get("/logout")
async def logout():
    return clear_token_response()


@router.get("/me")
async def me(
    user: User = Depends(get_current_user),
    context: AppContext = Depends(get_context),
):
    return render(await context.auth.me(user))


@router.put("/updatedetails")
async def update_details(
    payload: UpdateDetailsRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.auth.update_details(db, user, payload))


@router.put("/updatepassword")
async def update_password(
    payload: UpdatePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return token_response(await context.auth.update_password(db, user, payload), context.settings)


@router.post("/forgotpassword")
async def forgot_password(
    payload: ForgotPasswordRequest,
    request: Request,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.auth.forgot_password(db, payload.email, str(request.base_url)))


@router.put("/resetpassword/{resettoken}")
async def reset_password(
    resettoken: str,
    payload: ResetPasswordRequest,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return token_response(
        await context.auth.reset_password(db, resettoken, payload.password), context.settings
    )
