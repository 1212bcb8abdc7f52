"""
Admin user management: /api/v1/users. Every route requires the admin role.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext, get_context
from devcamper.database import get_db_session
from devcamper.models.user import User
from devcamper.responses import render
from devcamper.result import Result
from devcamper.routes.deps import admin_only
from devcamper.schemas.common import ListResponse, SuccessResponse
from devcamper.schemas.user import UserCreate, UserUpdate, user_to_dict
from devcamper.services.query_service import AdvancedResults

router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(admin_only)])

user_results = AdvancedResults(User, user_to_dict)


@router.get("", response_model=ListResponse)
async def list_users(results: Result = Depends(user_results)):
    return render(results, wrap=False)


@router.get("/{user_id}", response_model=SuccessResponse)
async def get_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.users.get(db, user_id))


@router.post("", status_code=201, response_model=SuccessResponse)
async def create_user(
    payload: UserCreate,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.users.create(db, payload), status_code=201)


@router.put("/{user_id}", response_model=SuccessResponse)
async def update_user(
    user_id: str,
    payload: UserUpdate,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.users.update(db, user_id, payload))


@router.delete("/{user_id}", response_model=SuccessResponse)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.users.delete(db, user_id))
