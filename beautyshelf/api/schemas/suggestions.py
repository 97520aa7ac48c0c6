from typing import List, Optional

from pydantic import BaseModel, Field


class ProductSuggestion(BaseModel):
    name: str = Field(..., description="Product name")
    brand: str = Field(..., description="Brand name")
    category: str = Field(..., description="Product category")
    reason: str = Field(..., description="Why this product is recommended")
    price_range: str = Field(..., description="Estimated price range (e.g. '$15-25')")
    key_benefits: List[str] = Field(default_factory=list, description="Key benefits or features")
    similarity_score: float = Field(..., ge=0, le=100, description="Similarity to the user's preferences (0-100)")


class SuggestionAnalysis(BaseModel):
    user_preferences: List[str] = Field(default_factory=list, description="Identified user preferences")
    trending_categories: List[str] = Field(default_factory=list,
                                           description="Categories the user seems interested in")
    brand_affinity: List[str] = Field(default_factory=list, description="Brands the user prefers")


class SuggestionResponse(BaseModel):
    """Shape the model must answer with."""
    suggestions: List[ProductSuggestion]
    analysis: SuggestionAnalysis


class SuggestionResult(BaseModel):
    suggestions: List[ProductSuggestion] = Field(default_factory=list)
    analysis: SuggestionAnalysis = Field(default_factory=SuggestionAnalysis)
    success: bool
    error: Optional[str] = None
    needs_api_key: bool = False


class ProductStats(BaseModel):
    total_products: int
    repurchase_products: int
    high_rated_products: int
    top_categories: List[str]
    top_brands: List[str]


class Availability(BaseModel):
    available: bool
