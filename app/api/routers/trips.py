import logging

from fastapi import APIRouter, Depends, status

from app.api.models.schemas import ErrorResponse, ShareTripResponse, TripItineraryView
from app.core.errors import APIError
from app.dependencies import get_trip_reader
from app.domain.services.itinerary_service import ItineraryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trips", tags=["trips"])

_ERROR_RESPONSES = {code: {"model": ErrorResponse} for code in (404, 500)}


@router.get("/{trip_ref}/itinerary", response_model=TripItineraryView, responses=_ERROR_RESPONSES)
async def get_trip_itinerary(trip_ref: str, svc: ItineraryService = Depends(get_trip_reader)):
    try:
        return await svc.get_itinerary_view(trip_ref)
    except APIError:
        raise
    except Exception as exc:
        logger.exception("itinerary view error (trip %s): %s", trip_ref, exc)
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Unknown error") from exc


@router.post("/{trip_id}/share", response_model=ShareTripResponse, responses=_ERROR_RESPONSES)
async def share_trip(trip_id: str, svc: ItineraryService = Depends(get_trip_reader)):
    try:
        slug = await svc.share_trip(trip_id)
    except APIError:
        raise
    except Exception as exc:
        logger.exception("share error (trip %s): %s", trip_id, exc)
        raise APIError(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc) or "Unknown error") from exc
    return ShareTripResponse(publicSlug=slug)
