"""
AI product suggestions based on the products a user wants to repurchase or
rated highly, plus simple stats about the user's shelf.
"""
from __future__ import annotations
import logging
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Optional

import openai
from starlette.concurrency import run_in_threadpool

from beautyshelf.api.schemas.suggestions import ProductStats, SuggestionResponse, SuggestionResult
from beautyshelf.config import Settings
from beautyshelf.core.errors import NeedsCredential, RemoteOperationFailed, RepositoryError
from beautyshelf.core.filters import ProductQuery, SortOrder
from beautyshelf.db.base import ProductRepository
from beautyshelf.models.product import REPURCHASE_STATUS
from beautyshelf.services.ai_client import AIConfig, SuggestionModelClient

logger = logging.getLogger(__name__)

SUGGESTION_COUNT = 5
HIGH_RATING = 4
HIGH_RATED_LIMIT = 10
TOP_N = 3
SUGGESTION_COLUMNS = ["name", "brand", "category", "rating", "price"]

NEEDS_API_KEY_MESSAGE = (
    "AI suggestions require an OpenAI API key. Please add OPENAI_API_KEY to your "
    "environment variables to enable this feature."
)
NO_PRODUCTS_MESSAGE = (
    "No products found to base suggestions on. Add some products and mark them as "
    "'want to repurchase' or rate them highly!"
)

PROMPT_TEMPLATE = """
You are a beauty and health product expert. Based on the user's favorite products, suggest {count} similar items they might love.

USER'S FAVORITE PRODUCTS:
{products}

PREFERRED BRANDS: {brands}
PREFERRED CATEGORIES: {categories}

Please suggest {count} beauty or health products that are:
1. Similar to their favorites but not identical
2. From reputable brands (can include their preferred brands or new ones)
3. In related categories they might enjoy
4. Suitable for someone who likes the products listed above

For each suggestion, provide:
- Product name (realistic, existing product)
- Brand name
- Category
- Detailed reason for recommendation
- Estimated price range
- Key benefits/features
- Similarity score (0-100) based on user preferences

Also provide an analysis of the user's preferences, trending categories they like, and brand affinity.

Focus on products that actually exist and are currently available in the market.
"""


def dedupe_products(products: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep the first product for each (name, brand) pair."""
    seen = set()
    out = []
    for p in products:
        key = (p.get("name"), p.get("brand"))
        if key in seen:
            continue
        seen.add(key)
        out.append(p)
    return out


def _unique(values: Iterable[Optional[str]]) -> List[str]:
    out: List[str] = []
    for v in values:
        if v and v not in out:
            out.append(v)
    return out


def build_prompt(products: List[Dict[str, Any]], count: int = SUGGESTION_COUNT) -> str:
    listing = ", ".join(
        f"{p.get('name')} by {p.get('brand') or 'Unknown'} ({p.get('category') or 'Uncategorized'})"
        for p in products
    )
    return PROMPT_TEMPLATE.format(
        count=count,
        products=listing,
        brands=", ".join(_unique(p.get("brand") for p in products)),
        categories=", ".join(_unique(p.get("category") for p in products)),
    )


def top_values(values: Iterable[Optional[str]], n: int = TOP_N) -> List[str]:
    """Most frequent non-empty values; equal counts ordered alphabetically."""
    counts = Counter(v for v in values if v)
    ranked = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [value for value, _ in ranked[:n]]


def _is_api_key_error(error: Exception) -> bool:
    if isinstance(error, (openai.AuthenticationError, NeedsCredential)):
        return True
    return "api key" in str(error).lower()


class SuggestionService:

    def __init__(self, repo: ProductRepository, settings: Settings,
                 client_factory: Optional[Callable[[], Any]] = None):
        self.repo = repo
        self.settings = settings
        self.client_factory = client_factory or self._default_client

    def _default_client(self) -> SuggestionModelClient:
        return SuggestionModelClient(AIConfig(
            api_key=self.settings.OPENAI_API_KEY,
            model=self.settings.AI_MODEL,
            timeout_seconds=self.settings.AI_TIMEOUT_SECONDS,
            temperature=self.settings.AI_TEMPERATURE,
        ))

    def is_available(self) -> bool:
        return self.settings.ai_available

    def gather_favorites(self, owner_id: str) -> List[Dict[str, Any]]:
        repurchase, _ = self.repo.query(owner_id, ProductQuery(
            equals={"usage_status": REPURCHASE_STATUS},
            sort=SortOrder("rating", descending=True, nulls_last=True),
            columns=SUGGESTION_COLUMNS,
        ))
        high_rated, _ = self.repo.query(owner_id, ProductQuery(
            min_rating=HIGH_RATING,
            sort=SortOrder("rating", descending=True, nulls_last=True),
            limit=HIGH_RATED_LIMIT,
            columns=SUGGESTION_COLUMNS,
        ))
        return dedupe_products(list(repurchase) + list(high_rated))

    async def generate(self, owner_id: str) -> SuggestionResult:
        if not self.is_available():
            return SuggestionResult(success=False, needs_api_key=True, error=NEEDS_API_KEY_MESSAGE)

        try:
            products = await run_in_threadpool(self.gather_favorites, owner_id)
        except RepositoryError as e:
            logger.error("Error loading products for suggestions: %s", e)
            return SuggestionResult(success=False, error=str(e) or "Failed to generate suggestions")

        if not products:
            return SuggestionResult(success=True, error=NO_PRODUCTS_MESSAGE)

        prompt = build_prompt(products)
        try:
            client = self.client_factory()
            try:
                response: SuggestionResponse = await client.generate_structured(prompt, SuggestionResponse)
            finally:
                await client.close()
        except (openai.OpenAIError, NeedsCredential, ValueError) as e:
            logger.error("Error generating product suggestions: %s", e)
            if _is_api_key_error(e):
                return SuggestionResult(success=False, needs_api_key=True, error=NEEDS_API_KEY_MESSAGE)
            return SuggestionResult(success=False, error=str(e) or "Failed to generate suggestions")

        return SuggestionResult(
            suggestions=response.suggestions[:SUGGESTION_COUNT],
            analysis=response.analysis,
            success=True,
        )

    def get_user_product_stats(self, owner_id: str) -> ProductStats:
        try:
            rows, _ = self.repo.query(owner_id, ProductQuery(columns=["usage_status", "category", "brand", "rating"]))
        except RepositoryError as e:
            logger.error("Error getting user product stats: %s", e)
            raise RemoteOperationFailed(f"Failed to load product stats: {e}") from e
        return ProductStats(
            total_products=len(rows),
            repurchase_products=sum(1 for r in rows if r.get("usage_status") == REPURCHASE_STATUS),
            high_rated_products=sum(1 for r in rows if (r.get("rating") or 0) >= HIGH_RATING),
            top_categories=top_values(r.get("category") for r in rows),
            top_brands=top_values(r.get("brand") for r in rows),
        )
