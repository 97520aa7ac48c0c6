"""
Usage-status board: four columns, drag a product from one to another.

A move is applied to the in-memory board first, then persisted. If the
remote update fails the whole board is restored from the snapshot taken
before the move, not just the moved card.
"""
from __future__ import annotations
import copy
import logging
from typing import Callable, Dict, List, Optional

from beautyshelf.api.schemas.kanban import MoveResult
from beautyshelf.core.errors import NotFound, RemoteOperationFailed, RepositoryError, ServiceError, ValidationFailed
from beautyshelf.core.filters import ProductQuery, SortOrder
from beautyshelf.core.state_machine import usage_state_machine, USAGE_TRANSITIONS
from beautyshelf.db.base import ProductRepository
from beautyshelf.models.product import KANBAN_COLUMNS, USAGE_STATUSES, KanbanProduct

logger = logging.getLogger(__name__)

Persist = Callable[[str, str], object]


class KanbanBoard:

    def __init__(self, products: List[KanbanProduct]):
        self.products: List[KanbanProduct] = list(products)

    def find(self, product_id: str) -> Optional[KanbanProduct]:
        for p in self.products:
            if p.id == product_id:
                return p
        return None

    def columns(self) -> Dict[str, List[KanbanProduct]]:
        out: Dict[str, List[KanbanProduct]] = {s: [] for s in USAGE_STATUSES}
        for p in self.products:
            out.get(p.usage_status, out["new"]).append(p)
        return out

    def move(self, product_id: str, target: Optional[str], persist: Persist) -> MoveResult:
        product = self.find(product_id)
        if product is None or not target:
            return MoveResult(ok=True, changed=False)
        machine = usage_state_machine(product.usage_status)
        if not machine.is_state(target) or target == machine.state:
            return MoveResult(ok=True, changed=False)

        snapshot = copy.deepcopy(self.products)
        step = machine.apply(target)
        product.usage_status = step["to"]

        try:
            persist(product_id, step["to"])
        except ServiceError as e:
            logger.error("Status update for %s failed, restoring board: %s", product_id, e.message)
            self.products = snapshot
            return MoveResult(ok=False, changed=False, message="Failed to update product status", error=e.message)
        except Exception:
            self.products = snapshot
            raise

        return MoveResult(ok=True, changed=True, from_status=step["from"], to_status=step["to"],
                          message=f'"{product.name}" moved to {step["to"]}')


class KanbanService:

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    def load_board(self, owner_id: str) -> KanbanBoard:
        query = ProductQuery(columns=KANBAN_COLUMNS, sort=SortOrder("created_at", descending=True))
        try:
            rows, _ = self.repo.query(owner_id, query)
        except RepositoryError as e:
            logger.exception("Failed to load kanban products")
            raise RemoteOperationFailed(f"Failed to load products: {e}") from e
        return KanbanBoard([KanbanProduct.from_dict(r) for r in rows])

    def update_status(self, owner_id: str, product_id: str, status: str) -> KanbanProduct:
        if status not in USAGE_TRANSITIONS:
            raise ValidationFailed(f"Invalid status: {status!r}", allowed=list(USAGE_STATUSES))
        try:
            row = self.repo.update(owner_id, product_id, {"usage_status": status})
        except RepositoryError as e:
            logger.error("Error updating product status: %s", e)
            raise RemoteOperationFailed(f"Failed to update product status: {e}") from e
        if not row:
            raise NotFound("Product not found")
        return KanbanProduct.from_dict(row)

    def move(self, owner_id: str, product_id: str, target: Optional[str]):
        board = self.load_board(owner_id)
        result = board.move(product_id, target, lambda pid, status: self.update_status(owner_id, pid, status))
        return result, board
