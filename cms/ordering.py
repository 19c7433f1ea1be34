# cms/ordering.py
"""
Display ordering for reorderable collections (contemplations, intentions).

`order` is a dense-ish integer sort key: not unique, not contiguous. New rows
append after the current maximum across the WHOLE collection (inactive rows
included, so an archived row's key is never handed out again). Reassignment
of many rows happens in a single transaction.
"""

import logging
from typing import Any, Iterable, List, Tuple

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from cms.db_helpers import session_scope
from cms.entities import Contemplation, DailyIntention, id_in_range
from cms.exceptions import NotFound, ValidationFailure

logger = logging.getLogger("cms_backend")

# max(order) assumed for an empty collection: first contemplation gets 0,
# first intention gets 1
EMPTY_COLLECTION_MAX = {
    Contemplation: -1,
    DailyIntention: 0,
}

COLLECTION_LABELS = {
    Contemplation: "Contemplation",
    DailyIntention: "Intention",
}


def next_order(session: Session, model) -> int:
    current_max = session.scalar(select(func.max(model.order)))
    if current_max is None:
        current_max = EMPTY_COLLECTION_MAX.get(model, -1)
    return current_max + 1


def list_ordered(session: Session, model, include_inactive: bool = False) -> list:
    stmt = select(model)
    if not include_inactive:
        stmt = stmt.where(model.active.is_(True))
    stmt = stmt.order_by(model.order.asc(), model.id.asc())
    return list(session.scalars(stmt).all())


def _as_pairs(assignments: Iterable[Any]) -> List[Tuple[int, int]]:
    pairs = []
    for a in assignments:
        if isinstance(a, dict):
            item_id, order = a.get("id"), a.get("order")
        else:
            item_id, order = getattr(a, "id", None), getattr(a, "order", None)
        if not isinstance(item_id, int) or not isinstance(order, int):
            raise ValidationFailure(
                "Each reorder assignment needs an integer id and order",
                details={"assignment": repr(a)},
            )
        pairs.append((item_id, order))
    return pairs


def reorder(session_factory, model, assignments: Iterable[Any]) -> int:
    """
    Apply every {id, order} assignment or none of them.
    An unknown id aborts the whole batch with NotFound.
    Returns the number of assignments applied.
    """
    pairs = _as_pairs(assignments)
    if not pairs:
        return 0

    label = COLLECTION_LABELS.get(model, model.__name__)

    with session_scope(session_factory) as session:
        wanted = {item_id for item_id, _ in pairs}
        storable = {item_id for item_id in wanted if id_in_range(item_id)}
        found = set(session.scalars(select(model.id).where(model.id.in_(storable))))
        missing = sorted(wanted - found)
        if missing:
            raise NotFound(f"{label} not found", details={"ids": missing})

        for item_id, order in pairs:
            session.execute(
                update(model).where(model.id == item_id).values(order=order)
            )

    logger.info(f"[ordering] {label}: applied {len(pairs)} order assignments")
    return len(pairs)
