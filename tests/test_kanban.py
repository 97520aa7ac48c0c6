import pytest

from beautyshelf.core.errors import RemoteOperationFailed
from beautyshelf.core.state_machine import InvalidTransition, StateMachine, USAGE_TRANSITIONS, usage_state_machine
from beautyshelf.models.product import KanbanProduct
from beautyshelf.services.kanban import KanbanBoard


def _board():
    return KanbanBoard([
        KanbanProduct(id="1", name="Serum", usage_status="new"),
        KanbanProduct(id="2", name="Mascara", usage_status="in progress"),
        KanbanProduct(id="3", name="Shampoo", usage_status="finished"),
    ])


def _statuses(board):
    return [(p.id, p.usage_status) for p in board.products]


def test_usage_statuses_are_fully_connected():
    sm = usage_state_machine("finished")
    assert sm.apply("new") == {"from": "finished", "to": "new", "changed": True}
    assert sm.apply("want to repurchase")["to"] == "want to repurchase"
    assert sm.state == "want to repurchase"
    assert sm.apply("want to repurchase")["changed"] is False


def test_missing_status_starts_at_new():
    assert usage_state_machine(None).state == "new"


def test_state_machine_rejects_unknown_target():
    sm = StateMachine("new", USAGE_TRANSITIONS)
    with pytest.raises(InvalidTransition):
        sm.apply("archived")


def test_null_status_is_shown_in_new_column():
    p = KanbanProduct.from_dict({"id": "9", "name": "Old", "usage_status": None})
    board = KanbanBoard([p])
    assert [x.id for x in board.columns()["new"]] == ["9"]


def test_successful_move_persists_once():
    board = _board()
    calls = []
    result = board.move("1", "finished", lambda pid, status: calls.append((pid, status)))
    assert result.ok and result.changed
    assert (result.from_status, result.to_status) == ("new", "finished")
    assert "Serum" in result.message
    assert calls == [("1", "finished")]
    assert board.find("1").usage_status == "finished"


@pytest.mark.parametrize("product_id,target", [
    ("missing", "finished"),
    ("1", None),
    ("1", "archived"),
    ("2", "in progress"),
])
def test_noop_moves_do_not_persist(product_id, target):
    board = _board()
    before = _statuses(board)
    calls = []
    result = board.move(product_id, target, lambda pid, status: calls.append(pid))
    assert result.ok and not result.changed
    assert calls == []
    assert _statuses(board) == before


def test_failed_move_restores_whole_board():
    board = _board()
    before = _statuses(board)

    def persist(pid, status):
        # something else on the board changes while the update is in flight
        board.products[2].usage_status = "want to repurchase"
        raise RemoteOperationFailed("network down")

    result = board.move("1", "finished", persist)
    assert result.ok is False
    assert result.error == "network down"
    assert _statuses(board) == before


def test_unexpected_error_restores_then_propagates():
    board = _board()
    before = _statuses(board)

    def persist(pid, status):
        raise KeyError("boom")

    with pytest.raises(KeyError):
        board.move("2", "new", persist)
    assert _statuses(board) == before


def test_board_endpoint_groups_by_status(client, auth_header, create_product):
    create_product("Serum", usage_status="new")
    create_product("Cream")
    create_product("Oil", usage_status="finished")

    r = client.get("/api/kanban/", headers=auth_header())
    assert r.status_code == 200
    columns = r.json()["columns"]
    assert set(columns) == {"new", "in progress", "finished", "want to repurchase"}
    assert sorted(p["name"] for p in columns["new"]) == ["Cream", "Serum"]
    assert [p["name"] for p in columns["finished"]] == ["Oil"]
    assert r.json()["total"] == 3


def test_status_update_endpoint(client, auth_header, create_product):
    p = create_product("Serum", usage_status="new")
    r = client.patch(f"/api/kanban/{p['id']}/status", json={"usage_status": "want to repurchase"},
                     headers=auth_header())
    assert r.status_code == 200, r.text
    assert r.json()["usage_status"] == "want to repurchase"

    r = client.patch(f"/api/kanban/{p['id']}/status", json={"usage_status": "lost"}, headers=auth_header())
    assert r.status_code == 400

    r = client.patch(f"/api/kanban/{p['id']}/status", json={"usage_status": "new"}, headers=auth_header("other"))
    assert r.status_code == 404


def test_move_endpoint(client, auth_header, create_product):
    p = create_product("Serum", usage_status="new")
    r = client.post("/api/kanban/move", json={"product_id": p["id"], "target_status": "in progress"},
                    headers=auth_header())
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["result"]["ok"] is True and body["result"]["changed"] is True
    assert body["result"]["from_status"] == "new"
    assert [x["id"] for x in body["board"]["columns"]["in progress"]] == [p["id"]]

    stored = client.get(f"/api/products/{p['id']}", headers=auth_header()).json()
    assert stored["usage_status"] == "in progress"
