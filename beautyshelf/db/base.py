from __future__ import annotations
from typing import Any, Dict, List, Optional, Protocol, Tuple

from beautyshelf.core.filters import ProductQuery


class ProductRepository(Protocol):
    """
    Owner-scoped access to the products table. Every method takes the owner id
    and never reads or writes another owner's rows. Backend failures raise
    RepositoryError.
    """

    def insert(self, owner_id: str, data: Dict[str, Any]) -> Dict[str, Any]: ...

    def get(self, owner_id: str, product_id: str) -> Optional[Dict[str, Any]]: ...

    def update(self, owner_id: str, product_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]: ...

    def delete(self, owner_id: str, product_id: str) -> bool: ...

    def query(self, owner_id: str, query: ProductQuery) -> Tuple[List[Dict[str, Any]], int]: ...

    def distinct_values(self, owner_id: str, column: str) -> List[str]: ...
