# beautyshelf/api/routes/suggestions.py
from fastapi import APIRouter, Depends

from beautyshelf.api.deps import CurrentUser, get_current_user, get_settings, get_suggestion_service
from beautyshelf.api.schemas.suggestions import Availability, ProductStats, SuggestionResult
from beautyshelf.config import Settings
from beautyshelf.services.suggestions import SuggestionService

router = APIRouter(prefix="/api/suggestions", tags=["suggestions"])


@router.get("/availability", response_model=Availability)
def availability(settings: Settings = Depends(get_settings)):
    return Availability(available=settings.ai_available)


@router.post("/", response_model=SuggestionResult)
async def generate(user: CurrentUser = Depends(get_current_user),
                   service: SuggestionService = Depends(get_suggestion_service)):
    return await service.generate(user.id)


@router.get("/stats", response_model=ProductStats)
def stats(user: CurrentUser = Depends(get_current_user),
          service: SuggestionService = Depends(get_suggestion_service)):
    return service.get_user_product_stats(user.id)
