# cms/integrity.py
"""
Weak back-references from sticky notes (answers) to contemplations.

Deleting a contemplation never deletes its answers: they are unlinked
(contemplation_id -> NULL) first, then the contemplation row is removed, all
inside one transaction. The FK also carries ON DELETE SET NULL, but the
unlink always runs first.
"""

import logging

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from cms.db_helpers import session_scope
from cms.entities import Contemplation, StickyNote, id_in_range
from cms.exceptions import NotFound

logger = logging.getLogger("cms_backend")


def unlink_answers(session: Session, contemplation_id: int) -> int:
    result = session.execute(
        update(StickyNote)
        .where(StickyNote.contemplation_id == contemplation_id)
        .values(contemplation_id=None)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount or 0


def ensure_contemplation_exists(session: Session, contemplation_id: int | None) -> None:
    """A non-null reference must resolve at write time."""
    if contemplation_id is None:
        return
    found = None
    if id_in_range(contemplation_id):
        found = session.scalar(select(Contemplation.id).where(Contemplation.id == contemplation_id))
    if found is None:
        raise NotFound("Contemplation not found", details={"id": contemplation_id})


def delete_contemplation(session_factory, contemplation_id: int) -> int:
    """
    Unlink every answer, then delete the contemplation, as one unit.
    Returns how many answers were unlinked.
    """
    with session_scope(session_factory) as session:
        contemplation = session.get(Contemplation, contemplation_id)
        if contemplation is None:
            raise NotFound("Contemplation not found", details={"id": contemplation_id})

        # unlink must precede the delete
        unlinked = unlink_answers(session, contemplation_id)
        session.flush()
        session.delete(contemplation)

    logger.info(
        f"[integrity] deleted contemplation {contemplation_id}, unlinked {unlinked} answers"
    )
    return unlinked
