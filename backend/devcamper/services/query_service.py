"""
DevCamper Backend — Generic Query Helper ("advanced results")
===============================================================

What:  Turns raw query-string parameters into a filtered, sorted,
       field-limited, paginated SELECT against one model, executes it, and
       produces the list envelope.
How:   parse_query() builds SQLAlchemy predicates and ordering from the
       params; run_query() executes count + page queries; AdvancedResults
       wraps both as a FastAPI dependency and stores the outcome on
       request.state.advanced_results for the route to return unchanged.

Query-string grammar:
    select=name,description        → only these keys (plus id) in each item
    sort=name,-average_cost        → ascending / descending; default -created_at
    page=2&limit=10                → default page 1, limit 25 (max 100)
    field=value                    → equality
    field[gt|gte|lt|lte]=value     → comparisons
    field[in]=a,b,c                → membership
    location.state=MA              → aliases declared by the model (FILTER_ALIASES)

Unknown fields are ignored. Values are coerced to the column's Python type;
a value that cannot be coerced yields Err(CastError) (400).

JSON list columns (Bootcamp.careers) match when any element equals the
value; `in` matches when any element equals any listed value.

Envelope:
    {"count": <items on this page>,
     "pagination": {"next": {"page", "limit"}?, "prev": {"page", "limit"}?},
     "data": [...]}
"""

import json
import logging
import operator
import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from fastapi import Depends, Request
from sqlalchemy import JSON, String, cast, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from devcamper.database import get_db_session
from devcamper.exceptions import CastError
from devcamper.result import Err, Ok, Result

logger = logging.getLogger(__name__)

FILTER_PATTERN = re.compile(r"^(?P<field>[\w.]+)\[(?P<op>gt|gte|lt|lte|in)\]$")
RESERVED_PARAMS = frozenset({"select", "sort", "page", "limit"})
DEFAULT_SORT = "-created_at"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 25
MAX_LIMIT = 100

_COMPARATORS = {
    "eq": operator.eq,
    "gt": operator.gt,
    "gte": operator.ge,
    "lt": operator.lt,
    "lte": operator.le,
}

_TRUE = {"true", "1", "yes"}
_FALSE = {"false", "0", "no"}


@dataclass(frozen=True)
class Populate:
    """Relationship to eager-load and how to render it under the same key."""
    attribute: str
    serializer: Callable[[Any], Any]


@dataclass
class ParsedQuery:
    filters: List[Any] = field(default_factory=list)
    order_by: List[Any] = field(default_factory=list)
    fields: Optional[List[str]] = None
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT


# ══════════════════════════════════════════════════════════════════════════
# Parsing
# ══════════════════════════════════════════════════════════════════════════

def _resolve_column(model, name: str):
    name = getattr(model, "FILTER_ALIASES", {}).get(name, name)
    if name in getattr(model, "PRIVATE_COLUMNS", ()):
        return None
    return model.__table__.columns.get(name)


def _coerce(column, raw: str) -> Any:
    """Convert a query-string value to the column's Python type (ValueError on failure)."""
    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw

    if python_type is bool:
        lowered = raw.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        raise ValueError(raw)
    if python_type is datetime:
        return datetime.fromisoformat(raw)
    if python_type is uuid.UUID:
        return uuid.UUID(raw)
    return python_type(raw)


def _json_contains(column, value: str):
    return cast(column, String).contains(json.dumps(value), autoescape=True)


def _predicate(column, op: str, raw: str) -> Result[Any]:
    if isinstance(column.type, JSON):
        if op == "eq":
            return Ok(_json_contains(column, raw))
        if op == "in":
            return Ok(or_(*[_json_contains(column, v.strip()) for v in raw.split(",") if v.strip()]))
        return Err(CastError(raw, message=f"Operator '{op}' is not supported for field {column.name}"))

    try:
        if op == "in":
            values = [_coerce(column, v.strip()) for v in raw.split(",") if v.strip()]
            return Ok(column.in_(values))
        return Ok(_COMPARATORS[op](column, _coerce(column, raw)))
    except ValueError:
        return Err(CastError(raw, message=f"Invalid value '{raw}' for field {column.name}"))


def _positive_int(raw: Optional[str], default: int, name: str) -> Result[int]:
    if raw is None or raw == "":
        return Ok(default)
    try:
        value = int(raw)
    except ValueError:
        return Err(CastError(raw, message=f"Invalid value '{raw}' for {name}"))
    return Ok(max(value, 1))


def parse_query(model, params: Mapping[str, str]) -> Result[ParsedQuery]:
    """Build predicates, ordering, field selection and paging from params."""
    parsed = ParsedQuery()

    # ── Filters ───────────────────────────────────────────────────────────
    for key, raw in params.items():
        if key in RESERVED_PARAMS:
            continue
        match = FILTER_PATTERN.match(key)
        name, op = (match.group("field"), match.group("op")) if match else (key, "eq")
        column = _resolve_column(model, name)
        if column is None:
            logger.debug("Ignoring unknown filter field '%s' on %s", name, model.__name__)
            continue
        predicate = _predicate(column, op, raw)
        if not predicate.ok:
            return predicate
        parsed.filters.append(predicate.value)

    # ── Select ────────────────────────────────────────────────────────────
    if params.get("select"):
        parsed.fields = [f.strip() for f in params["select"].split(",") if f.strip()]

    # ── Sort ──────────────────────────────────────────────────────────────
    for item in (params.get("sort") or DEFAULT_SORT).split(","):
        item = item.strip()
        descending = item.startswith("-")
        column = _resolve_column(model, item.lstrip("-"))
        if column is None:
            continue
        parsed.order_by.append(column.desc() if descending else column.asc())
    if not parsed.order_by:
        parsed.order_by.append(model.__table__.columns["created_at"].desc())
    parsed.order_by.append(model.__table__.columns["id"].asc())

    # ── Paging ────────────────────────────────────────────────────────────
    page = _positive_int(params.get("page"), DEFAULT_PAGE, "page")
    if not page.ok:
        return page
    limit = _positive_int(params.get("limit"), DEFAULT_LIMIT, "limit")
    if not limit.ok:
        return limit
    parsed.page = page.value
    parsed.limit = min(limit.value, MAX_LIMIT)

    return Ok(parsed)


# ══════════════════════════════════════════════════════════════════════════
# Execution
# ══════════════════════════════════════════════════════════════════════════

def _limit_fields(item: Dict[str, Any], fields: Optional[List[str]]) -> Dict[str, Any]:
    if not fields:
        return item
    keep = set(fields) | {"id"}
    return {key: value for key, value in item.items() if key in keep}


def build_pagination(page: int, limit: int, total: int) -> Dict[str, Dict[str, int]]:
    start = (page - 1) * limit
    end = page * limit
    pagination: Dict[str, Dict[str, int]] = {}
    if end < total:
        pagination["next"] = {"page": page + 1, "limit": limit}
    if start > 0:
        pagination["prev"] = {"page": page - 1, "limit": limit}
    return pagination


async def run_query(
    db: AsyncSession,
    model,
    parsed: ParsedQuery,
    serializer: Callable[[Any], Dict[str, Any]],
    populate: Optional[Populate] = None,
) -> Dict[str, Any]:
    total = (
        await db.execute(select(func.count()).select_from(model).where(*parsed.filters))
    ).scalar_one()

    query = (
        select(model)
        .where(*parsed.filters)
        .order_by(*parsed.order_by)
        .offset((parsed.page - 1) * parsed.limit)
        .limit(parsed.limit)
    )
    if populate:
        query = query.options(selectinload(getattr(model, populate.attribute)))

    rows = (await db.execute(query)).scalars().all()

    data = []
    for row in rows:
        item = serializer(row)
        if populate:
            item[populate.attribute] = populate.serializer(getattr(row, populate.attribute))
        data.append(_limit_fields(item, parsed.fields))

    return {
        "count": len(data),
        "pagination": build_pagination(parsed.page, parsed.limit, total),
        "data": data,
    }


class AdvancedResults:
    """
    FastAPI dependency producing the paginated list for one model.

    Usage:
        bootcamp_results = AdvancedResults(Bootcamp, bootcamp_to_dict, Populate(...))

        @router.get("")
        async def list_bootcamps(results=Depends(bootcamp_results)):
            return render(results, wrap=False)
    """

    def __init__(
        self,
        model,
        serializer: Callable[[Any], Dict[str, Any]],
        populate: Optional[Populate] = None,
    ):
        self.model = model
        self.serializer = serializer
        self.populate = populate

    async def __call__(
        self,
        request: Request,
        db: AsyncSession = Depends(get_db_session),
    ) -> Result[Dict[str, Any]]:
        parsed = parse_query(self.model, request.query_params)
        if parsed.ok:
            result = Ok(await run_query(db, self.model, parsed.value, self.serializer, self.populate))
        else:
            result = parsed
        request.state.advanced_results = result
        return result
