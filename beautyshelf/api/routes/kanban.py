# beautyshelf/api/routes/kanban.py
from dataclasses import asdict

from fastapi import APIRouter, Depends

from beautyshelf.api.deps import CurrentUser, get_current_user, get_kanban_service
from beautyshelf.api.schemas.kanban import BoardOut, KanbanProductOut, MoveOut, MoveRequest, StatusUpdate
from beautyshelf.services.kanban import KanbanBoard, KanbanService

router = APIRouter(prefix="/api/kanban", tags=["kanban"])


def _board_out(board: KanbanBoard) -> BoardOut:
    columns = {
        status: [KanbanProductOut(**asdict(p)) for p in products]
        for status, products in board.columns().items()
    }
    return BoardOut(columns=columns, total=len(board.products))


@router.get("/", response_model=BoardOut)
def get_board(user: CurrentUser = Depends(get_current_user),
              service: KanbanService = Depends(get_kanban_service)):
    return _board_out(service.load_board(user.id))


@router.patch("/{product_id}/status", response_model=KanbanProductOut)
def update_status(product_id: str, payload: StatusUpdate, user: CurrentUser = Depends(get_current_user),
                  service: KanbanService = Depends(get_kanban_service)):
    product = service.update_status(user.id, product_id, payload.usage_status)
    return KanbanProductOut(**asdict(product))


@router.post("/move", response_model=MoveOut)
def move(payload: MoveRequest, user: CurrentUser = Depends(get_current_user),
         service: KanbanService = Depends(get_kanban_service)):
    """
    Drag a card to another column. On a failed update the returned board is
    the one from before the move.
    """
    result, board = service.move(user.id, payload.product_id, payload.target_status)
    return MoveOut(result=result, board=_board_out(board))
