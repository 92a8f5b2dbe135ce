import logging
import os
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from flex_reviews import __version__, config
from flex_reviews.errors import AlreadyApprovedError, ReviewNotFoundError
from flex_reviews.query import FilterCriteria
from flex_reviews.service import ReviewService

config.setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="Flex Living Reviews API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[config.FRONTEND_URL],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_service = None


def get_service() -> ReviewService:
    global _service
    if _service is None:
        _service = ReviewService.from_config()
    return _service


def error_response(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    content = {"status": "error", "message": message}
    if error:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content)


# ----------------- Middleware & handlers -----------------
@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return error_response(400, "Invalid request parameters", str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404:
        return JSONResponse(
            status_code=404,
            content={"status": "error", "message": "Endpoint not found", "path": request.url.path},
        )
    return error_response(exc.status_code, str(exc.detail))


# ----------------- Review routes -----------------
router = APIRouter(prefix="/api/reviews")


@router.get("")
@router.get("/hostaway")
async def get_all_reviews(service: ReviewService = Depends(get_service)):
    try:
        reviews = await service.get_normalized_reviews()
    except Exception as e:
        logger.exception("Error fetching reviews")
        return error_response(500, "Failed to fetch reviews", str(e))
    return {"status": "success", "count": len(reviews), "reviews": [r.to_dict() for r in reviews]}


@router.get("/search")
async def get_filtered_reviews(
    listing: Optional[str] = None,
    min_rating: Optional[str] = Query(None, alias="minRating"),
    type: Optional[str] = None,
    status: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    search: Optional[str] = None,
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: str = Query("desc", alias="sortOrder"),
    service: ReviewService = Depends(get_service),
):
    filters = {
        "listing": listing,
        "minRating": min_rating or None,
        "type": type,
        "status": status,
        "startDate": start_date,
        "endDate": end_date,
        "search": search,
    }
    try:
        criteria = FilterCriteria(
            listing=listing,
            min_rating=min_rating,
            type=type,
            status=status,
            start_date=start_date,
            end_date=end_date,
            search=search,
        )
        filters["minRating"] = criteria.min_rating
        reviews = await service.search(criteria, sort_by=sort_by, sort_order=sort_order)
    except ValueError as e:
        return error_response(400, "Invalid filter parameters", str(e))
    except Exception as e:
        logger.exception("Error filtering reviews")
        return error_response(500, "Failed to filter reviews", str(e))

    return {
        "status": "success",
        "count": len(reviews),
        "filters": filters,
        "reviews": [r.to_dict() for r in reviews],
    }


@router.get("/stats")
async def get_review_stats(service: ReviewService = Depends(get_service)):
    try:
        stats = await service.get_stats()
    except Exception as e:
        logger.exception("Error calculating stats")
        return error_response(500, "Failed to calculate statistics", str(e))
    return {"status": "success", "stats": stats}


# Must be registered before /{review_id}
@router.get("/approved")
async def get_approved_reviews(
    listing_id: Optional[str] = Query(None, alias="listingId"),
    service: ReviewService = Depends(get_service),
):
    # an empty listingId means no listing filter
    try:
        listing_id = int(listing_id) if listing_id else None
    except ValueError:
        return error_response(400, "Invalid request parameters", f"Invalid listingId: {listing_id!r}")

    try:
        reviews = await service.get_approved(listing_id)
    except Exception as e:
        logger.exception("Error fetching approved reviews")
        return error_response(500, "Failed to fetch approved reviews", str(e))
    return {"status": "success", "count": len(reviews), "reviews": [r.to_dict() for r in reviews]}


@router.get("/{review_id}")
async def get_review_by_id(review_id: int, service: ReviewService = Depends(get_service)):
    try:
        review = await service.get_review(review_id)
    except ReviewNotFoundError:
        return error_response(404, "Review not found")
    except Exception as e:
        logger.exception("Error fetching review")
        return error_response(500, "Failed to fetch review", str(e))
    return {"status": "success", "review": review.to_dict()}


@router.post("/{review_id}/approve")
async def approve_review(review_id: int, service: ReviewService = Depends(get_service)):
    try:
        review = await service.approve(review_id)
    except ReviewNotFoundError:
        return error_response(404, "Review not found")
    except AlreadyApprovedError:
        return error_response(400, "Review already approved")
    except Exception as e:
        logger.exception("Error approving review")
        return error_response(500, "Failed to approve review", str(e))
    return {
        "status": "success",
        "message": f"Review {review_id} approved successfully",
        "review": review.to_dict(),
    }


@router.delete("/{review_id}/approve")
async def unapprove_review(review_id: int, service: ReviewService = Depends(get_service)):
    try:
        await service.unapprove(review_id)
    except ReviewNotFoundError as e:
        return error_response(404, str(e))
    except Exception as e:
        logger.exception("Error unapproving review")
        return error_response(500, "Failed to unapprove review", str(e))
    return {"status": "success", "message": f"Review {review_id} removed from approved list"}


app.include_router(router)


# ----------------- Service info -----------------
@app.get("/health")
def health():
    return {
        "status": "ok",
        "message": "Flex Living Reviews API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/api")
def api_info():
    return {
        "name": "Flex Living Reviews API",
        "version": __version__,
        "description": "API for managing property reviews from Hostaway",
        "endpoints": {
            "GET /api/reviews": "Get all reviews",
            "GET /api/reviews/search": "Search reviews with filters",
            "GET /api/reviews/stats": "Get review statistics",
            "GET /api/reviews/approved": "Get approved reviews",
            "GET /api/reviews/{id}": "Get a specific review",
            "POST /api/reviews/{id}/approve": "Approve a review",
            "DELETE /api/reviews/{id}/approve": "Remove a review's approval",
            "GET /health": "Health check",
        },
        "config": {
            "accountId": config.HOSTAWAY_ACCOUNT_ID,
            "apiKeyConfigured": bool(config.HOSTAWAY_API_KEY),
            "useMockData": config.USE_MOCK_DATA,
        },
    }


@app.get("/")
def root():
    return {"message": "Flex Living Reviews API", "documentation": "/api"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "5000")))
