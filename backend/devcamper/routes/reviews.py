"""
Review routes: /api/v1/reviews plus the nested
/api/v1/bootcamps/{bootcamp_id}/reviews list and create.

Writing reviews is open to the `user` and `admin` roles; publishers cannot
review bootcamps.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from devcamper.context import AppContext, get_context
from devcamper.database import get_db_session
from devcamper.models.review import Review
from devcamper.models.user import User
from devcamper.responses import render
from devcamper.result import Result
from devcamper.routes.deps import user_or_admin
from devcamper.schemas.common import ListResponse, SuccessResponse
from devcamper.schemas.review import ReviewCreate, ReviewUpdate, review_to_dict
from devcamper.services.course_service import bootcamp_summary
from devcamper.services.query_service import AdvancedResults, Populate

router = APIRouter(prefix="/reviews", tags=["Reviews"])
nested_router = APIRouter(prefix="/bootcamps/{bootcamp_id}/reviews", tags=["Reviews"])

review_results = AdvancedResults(Review, review_to_dict, Populate("bootcamp", bootcamp_summary))


@nested_router.get("")
async def list_bootcamp_reviews(
    bootcamp_id: str,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.reviews.list_for_bootcamp(db, bootcamp_id), wrap=False)


@nested_router.post("", status_code=201, response_model=SuccessResponse)
async def create_review(
    bootcamp_id: str,
    payload: ReviewCreate,
    user: User = Depends(user_or_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.reviews.create(db, user, bootcamp_id, payload), status_code=201)


@router.get("", response_model=ListResponse)
async def list_reviews(results: Result = Depends(review_results)):
    return render(results, wrap=False)


@router.get("/{review_id}", response_model=SuccessResponse)
async def get_review(
    review_id: str,
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.reviews.get(db, review_id))


@router.put("/{review_id}", response_model=SuccessResponse)
async def update_review(
    review_id: str,
    payload: ReviewUpdate,
    user: User = Depends(user_or_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.reviews.update(db, user, review_id, payload))


@router.delete("/{review_id}", response_model=SuccessResponse)
async def delete_review(
    review_id: str,
    user: User = Depends(user_or_admin),
    db: AsyncSession = Depends(get_db_session),
    context: AppContext = Depends(get_context),
):
    return render(await context.reviews.delete(db, user, review_id))
