"""
DevCamper Backend — Bootcamp Routes
=====================================

What:  /api/v1/bootcamps: list, get, create, update, delete, radius search
       and photo upload.
How:   Thin handlers: resolve the caller (deps), call BootcampService, render
       the Result. Listing goes through the generic AdvancedResults
       dependency with each bootcamp's courses populated.

Access:
    GET                         → public
    POST / PUT / DELETE / photo → publisher or admin (ownership checked by the service)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext, get_context
from devcamper.database import get_db_session
from devcamper.models.bootcamp import Bootcamp
from devcamper.models.user import User
from devcamper.responses import render
from devcamper.result import Result
from devcamper.routes.deps import publisher_or_admin
from devcamper.schemas.bootcamp import BootcampCreate, BootcampUpdate, bootcamp_to_dict
from devcamper.schemas.common import ErrorResponse, ListResponse, SuccessResponse
from devcamper.schemas.course import course_to_dict
from devcamper.services.query_service import AdvancedResults, Populate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bootcamps", tags=["Bootcamps"])

bootcamp_results = AdvancedResults(
    Bootcamp,
    bootcamp_to_dict,
    Populate("courses", lambda courses: [course_to_dict(c) for c in courses]),
)

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
}


@router.get("", response_model=ListResponse, summary="List bootcamps (filter, select, sort, paginate)")
async def list_bootcamps(results: Result = Depends(bootcamp_results)):
    return render(results, wrap=False)


@router.get(
    "/radius/{zipcode}/{distance}",
    responses=_ERRORS,
    summary="Bootcamps within {distance} miles of a zipcode",
)
async def bootcamps_in_radius(
    zipcode: str,
    distance: str,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.bootcamps.within_radius(db, zipcode, distance), wrap=False)


@router.get("/{bootcamp_id}", response_model=SuccessResponse, responses=_ERRORS)
async def get_bootcamp(
    bootcamp_id: str,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.bootcamps.get(db, bootcamp_id))


@router.post("", status_code=201, response_model=SuccessResponse, responses=_ERRORS)
async def create_bootcamp(
    payload: BootcampCreate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.bootcamps.create(db, user, payload), status_code=201)


@router.put("/{bootcamp_id}", response_model=SuccessResponse, responses=_ERRORS)
async def update_bootcamp(
    bootcamp_id: str,
    payload: BootcampUpdate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.bootcamps.update(db, user, bootcamp_id, payload))


@router.delete("/{bootcamp_id}", response_model=SuccessResponse, responses=_ERRORS)
async def delete_bootcamp(
    bootcamp_id: str,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.bootcamps.delete(db, user, bootcamp_id))


@router.put("/{bootcamp_id}/photo", response_model=SuccessResponse, responses=_ERRORS)
async def upload_bootcamp_photo(
    bootcamp_id: str,
    file: Optional[UploadFile] = File(None),
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.bootcamps.upload_photo(db, user, bootcamp_id, file))
