from __future__ import annotations

import pytest

from partbom.bom_engine.services.bom_service import BOMService
from partbom.bom_engine.services.bom_tree_service import (
    MAX_EXPAND_DEPTH,
    MAX_EXPAND_NODE_LIMIT,
    BOMTreeService,
    resolve_depth,
    resolve_node_limit,
)
from partbom.bom_engine.services.part_service import PartService
from partbom.exceptions import LimitExceededError, NotFoundError, ValidationError
from partbom.models import BOMLink


def _chain(session, length):
    """Build P0 -> P1 -> ... -> P(length-1) and return the parts."""
    service = PartService(session)
    bom = BOMService(session, parts=service)
    parts = [service.create_part(name=f"Level {i}") for i in range(length)]
    for parent, child in zip(parts, parts[1:]):
        bom.create_link(parent.id, child.id, 2)
    return parts


def _fan_out(session, children):
    service = PartService(session)
    bom = BOMService(session, parts=service)
    root = service.create_part(name="Root")
    kids = [service.create_part(name=f"Child {i}") for i in range(children)]
    for kid in kids:
        bom.create_link(root.id, kid.id)
    return root, kids


def test_resolve_depth():
    assert resolve_depth(None) == 1
    assert resolve_depth("") == 1
    assert resolve_depth("all") == MAX_EXPAND_DEPTH
    assert resolve_depth("ALL") == MAX_EXPAND_DEPTH
    assert resolve_depth(" 3 ") == 3
    assert resolve_depth(2) == 2
    assert resolve_depth("3abc") == 3
    assert resolve_depth("2.9") == 2
    with pytest.raises(ValidationError, match='Depth must be a number or "all".'):
        resolve_depth("deep")


def test_resolve_node_limit():
    assert resolve_node_limit(None) == MAX_EXPAND_NODE_LIMIT
    assert resolve_node_limit("10") == 10
    assert resolve_node_limit(5) == 5
    assert resolve_node_limit("10 nodes") == 10
    with pytest.raises(ValidationError, match="nodeLimit must be a number."):
        resolve_node_limit("many")


def test_tree_default_depth_is_one(session):
    parts = _chain(session, 3)

    response = BOMTreeService(session).get_tree(parts[0].id)

    assert response.root_part_id == parts[0].id
    assert response.requested_depth == 1
    assert response.node_limit == MAX_EXPAND_NODE_LIMIT
    assert response.node_count == 2

    root = response.tree
    assert root.quantity_from_parent is None
    assert root.has_children is True
    assert len(root.children) == 1

    child = root.children[0]
    assert child.part.id == parts[1].id
    assert child.quantity_from_parent == 2
    # children exist below the depth cut-off but are not expanded
    assert child.has_children is True
    assert child.children == []


def test_tree_depth_zero_returns_root_only(session):
    parts = _chain(session, 2)

    response = BOMTreeService(session).get_tree(parts[0].id, depth=0)

    assert response.node_count == 1
    assert response.tree.children == []
    assert response.tree.has_children is True


def test_tree_depth_all_expands_five_levels(session):
    parts = _chain(session, 7)

    response = BOMTreeService(session).get_tree(parts[0].id, depth="all")

    nodes = list(response.tree.iter_nodes())
    assert response.requested_depth == MAX_EXPAND_DEPTH
    assert [n.part.id for n in nodes] == [p.id for p in parts[:6]]
    assert nodes[-1].has_children is True
    assert nodes[-1].children == []


def test_tree_rejects_depth_over_maximum(session):
    parts = _chain(session, 2)

    with pytest.raises(ValidationError) as excinfo:
        BOMTreeService(session).get_tree(parts[0].id, depth=6)

    assert excinfo.value.message == "Expand limit exceeded. Maximum supported depth is 5."


@pytest.mark.parametrize(
    "depth, node_limit, message",
    [
        (-1, 10, "Depth must be an integer >= 0."),
        ("-2", 10, "Depth must be an integer >= 0."),
        (1.5, 10, "Depth must be an integer >= 0."),
        (1, 0, "Node limit must be an integer > 0."),
        (1, "-4", "Node limit must be an integer > 0."),
        (1, 81, "Node limit too large. Maximum supported node limit is 80."),
    ],
)
def test_tree_rejects_invalid_limits(session, depth, node_limit, message):
    parts = _chain(session, 1)

    with pytest.raises(ValidationError) as excinfo:
        BOMTreeService(session).get_tree(parts[0].id, depth=depth, node_limit=node_limit)

    assert excinfo.value.message == message


def test_tree_node_limit_exceeded(session):
    root, _ = _fan_out(session, 3)

    with pytest.raises(LimitExceededError) as excinfo:
        BOMTreeService(session).get_tree(root.id, depth=1, node_limit=3)

    assert excinfo.value.message == (
        "BOM expansion exceeded node limit of 3. Reduce depth or load incrementally."
    )
    assert excinfo.value.status_code == 400


def test_tree_fits_exactly_at_node_limit(session):
    root, kids = _fan_out(session, 3)

    response = BOMTreeService(session).get_tree(root.id, depth="1", node_limit="4")

    assert response.node_count == 4
    assert [c.part.id for c in response.tree.children] == [k.id for k in kids]


def test_tree_shared_subassembly_appears_under_each_parent(session):
    service = PartService(session)
    bom = BOMService(session, parts=service)
    root = service.create_part(name="Root")
    left = service.create_part(name="Left")
    right = service.create_part(name="Right")
    shared = service.create_part(name="Shared")
    bom.create_link(root.id, left.id)
    bom.create_link(root.id, right.id)
    bom.create_link(left.id, shared.id, 2)
    bom.create_link(right.id, shared.id, 3)

    response = BOMTreeService(session).get_tree(root.id, depth=2)

    assert response.node_count == 5
    shared_nodes = [n for n in response.tree.iter_nodes() if n.part.id == shared.id]
    assert sorted(n.quantity_from_parent for n in shared_nodes) == [2, 3]
    assert all(n.has_children is False for n in shared_nodes)


def test_tree_skips_stored_back_edges(session):
    parts = _chain(session, 3)
    session.add(BOMLink(parent_id=parts[2].id, child_id=parts[0].id, quantity=1))
    session.flush()

    response = BOMTreeService(session).get_tree(parts[0].id, depth="all")

    assert [n.part.id for n in response.tree.iter_nodes()] == [p.id for p in parts]
    leaf = response.tree.children[0].children[0]
    assert leaf.has_children is True
    assert leaf.children == []


def test_tree_missing_root(session):
    with pytest.raises(NotFoundError) as excinfo:
        BOMTreeService(session).get_tree("PART-0404")

    assert excinfo.value.message == "Part 'PART-0404' was not found."


def test_tree_response_uses_camel_case_keys(session):
    parts = _chain(session, 2)

    payload = BOMTreeService(session).get_tree(parts[0].id).model_dump(
        mode="json", by_alias=True
    )

    assert payload["rootPartId"] == parts[0].id
    assert payload["nodeCount"] == 2
    child = payload["tree"]["children"][0]
    assert child["quantityFromParent"] == 2
    assert child["hasChildren"] is False
    assert child["part"]["partNumber"] == parts[1].part_number
