import logging

from fastapi import APIRouter, Depends, status

from app.api.models.schemas import ErrorResponse, GenerateItineraryRequest, GenerateItineraryResponse
from app.core.errors import APIError
from app.dependencies import get_itinerary_service
from app.domain.services.itinerary_service import ItineraryService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["itineraries"])


@router.post(
    "/generate-itinerary",
    response_model=GenerateItineraryResponse,
    responses={code: {"model": ErrorResponse} for code in (402, 404, 409, 429, 500)},
)
async def generate_itinerary(
    body: GenerateItineraryRequest, svc: ItineraryService = Depends(get_itinerary_service)
):
    try:
        await svc.generate(body)
    except APIError as exc:
        logger.error("generate-itinerary error (trip %s): %s", body.tripId, exc.detail)
        raise
    except Exception as exc:
        logger.exception("generate-itinerary error (trip %s): %s", body.tripId, exc)
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Unknown error") from exc
    return GenerateItineraryResponse(success=True)
