"""
Course routes: /api/v1/courses plus the nested
/api/v1/bootcamps/{bootcamp_id}/courses list and create.

The flat list uses AdvancedResults with the parent bootcamp's id, name and
description populated; the nested list returns every course of the bootcamp.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext, get_context
from devcamper.database import get_db_session
from devcamper.models.course import Course
from devcamper.models.user import User
from devcamper.responses import render
from devcamper.result import Result
from devcamper.routes.deps import publisher_or_admin
from devcamper.schemas.common import ListResponse, SuccessResponse
from devcamper.schemas.course import CourseCreate, CourseUpdate, course_to_dict
from devcamper.services.course_service import bootcamp_summary
from devcamper.services.query_service import AdvancedResults, Populate

router = APIRouter(prefix="/courses", tags=["Courses"])
nested_router = APIRouter(prefix="/bootcamps/{bootcamp_id}/courses", tags=["Courses"])

course_results = AdvancedResults(Course, course_to_dict, Populate("bootcamp", bootcamp_summary))


@nested_router.get("", summary="All courses of a bootcamp")
async def list_bootcamp_courses(
    bootcamp_id: str,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.courses.list_for_bootcamp(db, bootcamp_id), wrap=False)


@nested_router.post("", status_code=201, response_model=SuccessResponse)
async def create_course(
    bootcamp_id: str,
    payload: CourseCreate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.courses.create(db, user, bootcamp_id, payload), status_code=201)


@router.get("", response_model=ListResponse)
async def list_courses(results: Result = Depends(course_results)):
    return render(results, wrap=False)


@router.get("/{course_id}", response_model=SuccessResponse)
async def get_course(
    course_id: str,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.courses.get(db, course_id))


@router.put("/{course_id}", response_model=SuccessResponse)
async def update_course(
    course_id: str,
    payload: CourseUpdate,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.courses.update(db, user, course_id, payload))


@router.delete("/{course_id}", response_model=SuccessResponse)
async def delete_course(
    course_id: str,
    user: User = Depends(publisher_or_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.courses.delete(db, user, course_id))
