from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .analytics.aggregator import get_ranking_stats
from .auth.dependencies import require_user
from .auth.models import LoginRequest, RegisterRequest
from .auth.users import RegistrationError, authenticate, register
from .rankings.aggregator import RankingQuery, get_rankings
from .rankings.config import DEFAULT_RANKING_CONFIG
from .rankings.errors import InvalidQueryError, RankingError
from .rankings.models import (
    ApiResponse,
    RankingFilters,
    RankingsData,
    RankingStatsData,
    TopRestaurantsData,
)
from .rankings.params import (
    clean_pattern,
    parse_category,
    parse_int,
    parse_limit,
    parse_order,
    parse_page,
)
from .rankings.top_lists import get_top
from .restaurants.browse import get_restaurant_detail, list_restaurants
from .restaurants.models import (
    RestaurantDetailData,
    RestaurantListData,
    ReviewData,
    ReviewRequest,
)
from .restaurants.reviews import submit_review
from .store.dependencies import get_store
from .store.documents import DocumentStore

logging.basicConfig(level=os.environ.get("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = DocumentStore()
    store.open()
    app.state.store = store
    try:
        yield
    finally:
        store.close()
        app.state.store = None


app = FastAPI(title="Restaurant Review Rankings API", version="1.0.0", lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "review-rankings-secret-change-in-production"),
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


def _server_error(message: str, endpoint: str, **context) -> JSONResponse:
    # Called from inside an ``except`` block so the traceback is logged.
    logger.exception("%s failed (%s)", endpoint, context)
    return _error(500, message)


# ── Error envelope ───────────────────────────────────────────────────────


@app.exception_handler(RankingError)
async def ranking_error_handler(request: Request, exc: RankingError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(exc.status_code, "Server error")
    return _error(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return _error(400, "Invalid request body")


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/register", status_code=201)
def register_user(body: RegisterRequest, request: Request) -> dict:
    try:
        user = register(body.name, body.email, body.password)
    except RegistrationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    request.session["user"] = user
    return {"success": True, "data": {"user": user}}


@app.post("/auth/login")
def login(body: LoginRequest, request: Request) -> dict:
    user = authenticate(body.email, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return {"success": True, "data": {"user": user}}


@app.post("/auth/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"success": True, "message": "Logged out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return {"success": True, "data": {"user": user}}


# ── Ranking endpoints ────────────────────────────────────────────────────


@app.get("/rankings/restaurants", response_model=ApiResponse[RankingsData])
def restaurant_rankings(
    cuisine: str | None = None,
    location: str | None = None,
    min_comments: str | None = Query(default=None, alias="minComments"),
    sort_by: str | None = Query(default=None, alias="sortBy"),
    order: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    store: DocumentStore = Depends(get_store),
):
    config = DEFAULT_RANKING_CONFIG
    query = RankingQuery(
        cuisine=clean_pattern(cuisine),
        location=clean_pattern(location),
        min_comments=parse_int(min_comments, config.default_min_comments, minimum=0),
        sort_by=sort_by or "overallScore",
        order=parse_order(order),
        page=parse_page(page),
        limit=parse_limit(limit, config.default_page_size, config),
    )

    try:
        rankings, pagination = get_rankings(store, query, config)
    except InvalidQueryError:
        raise
    except Exception:
        return _server_error(
            "Server error while calculating rankings", "get_rankings", query=query,
        )

    return ApiResponse[RankingsData](data=RankingsData(
        rankings=rankings,
        pagination=pagination,
        filters=RankingFilters(
            cuisine=query.cuisine,
            location=query.location,
            min_comments=query.min_comments,
            sort_by=query.sort_by,
            order=query.order,
        ),
    ))


@app.get("/rankings/top", response_model=ApiResponse[TopRestaurantsData])
def top_restaurants(
    category: str | None = None,
    limit: str | None = None,
    store: DocumentStore = Depends(get_store),
):
    config = DEFAULT_RANKING_CONFIG
    resolved = parse_category(category)
    top_limit = parse_limit(limit, config.default_top_limit, config)

    try:
        top = get_top(store, resolved, top_limit, config=config)
    except Exception:
        return _server_error(
            "Server error while fetching top restaurants", "get_top",
            category=resolved.value, limit=top_limit,
        )

    return ApiResponse[TopRestaurantsData](data=TopRestaurantsData(
        category=resolved, top_restaurants=top, count=len(top),
    ))


@app.get("/rankings/stats", response_model=ApiResponse[RankingStatsData])
def ranking_stats(store: DocumentStore = Depends(get_store)):
    try:
        stats = get_ranking_stats(store)
    except Exception:
        return _server_error("Server error while fetching ranking statistics", "get_ranking_stats")
    return ApiResponse[RankingStatsData](data=stats)


# ── User endpoints ───────────────────────────────────────────────────────


@app.get("/restaurants", response_model=ApiResponse[RestaurantListData])
def restaurants(
    cuisine: str | None = None,
    page: str | None = None,
    limit: str | None = None,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    config = DEFAULT_RANKING_CONFIG
    return ApiResponse[RestaurantListData](data=list_restaurants(
        store,
        page=parse_page(page),
        limit=parse_limit(limit, config.default_browse_page_size, config),
        cuisine=clean_pattern(cuisine),
    ))


@app.get("/restaurants/{restaurant_id}", response_model=ApiResponse[RestaurantDetailData])
def restaurant_detail(
    restaurant_id: str,
    include_comments: str | None = Query(default=None, alias="includeComments"),
    page: str | None = None,
    limit: str | None = None,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    config = DEFAULT_RANKING_CONFIG
    return ApiResponse[RestaurantDetailData](data=get_restaurant_detail(
        store,
        restaurant_id,
        include_comments=(include_comments or "").lower() == "true",
        page=parse_page(page),
        limit=parse_limit(limit, config.default_comments_page_size, config),
    ))


@app.post("/reviews/submit", response_model=ApiResponse[ReviewData])
def reviews_submit(
    body: ReviewRequest,
    user: dict = Depends(require_user),
    store: DocumentStore = Depends(get_store),
):
    review = submit_review(store, user["id"], body.restaurant_id, body.comment)
    return ApiResponse[ReviewData](data=review)
