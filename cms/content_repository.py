# cms/content_repository.py
"""
CRUD over every content entity.

All reads return plain JSON-ready dicts with camelCase keys and flexible
fields already decoded. All writes run inside one session_scope, so a failure
anywhere in an operation rolls the whole operation back.
"""

import logging
import random
import re
from datetime import datetime
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from cms import flex_codec, integrity, ordering
from cms.db_helpers import session_scope
from cms.entities import (
    MAX_ID,
    Article,
    Contemplation,
    DailyIntention,
    Profile,
    Project,
    Quote,
    StickyNote,
    id_in_range,
)
from cms.exceptions import NotFound, StorageFailure, ValidationFailure
from cms.schemas import (
    AnswerModeration,
    AnswerSubmission,
    ArticleCreate,
    ArticleUpdate,
    ContemplationCreate,
    ContemplationUpdate,
    IntentionCreate,
    IntentionUpdate,
    NoteCreate,
    NoteUpdate,
    ProfileUpdate,
    ProjectCreate,
    ProjectUpdate,
    QuoteCreate,
    QuoteUpdate,
)

logger = logging.getLogger("cms_backend")

PROFILE_ID = 1

DEFAULT_PROFILE = {
    "name": "Juan Rizky Maulana",
    "title": "Developer & Stoic Practitioner",
    "bio": "Building thoughtful software guided by ancient wisdom.",
    "location": "Indonesia",
    "email": "hello@juanrizky.dev",
    "social": {
        "github": "https://github.com/juanrizky",
        "twitter": "https://twitter.com/juanrizky",
        "linkedin": "https://linkedin.com/in/juanrizky",
    },
}

NOTE_COLORS = ("gold", "sage", "stone", "amber", "bronze")
DEFAULT_NOTE_COLOR = "gold"
DEFAULT_NOTE_POSITION = 20
DEFAULT_ANSWER_QUESTION = "A personal reflection"
ANSWER_SUBMITTED_MESSAGE = "Your reflection has been submitted and is pending approval."

# newest answers attached to each contemplation in list reads
CONTEMPLATION_PREVIEW_ANSWERS = 5

_INT_ID = re.compile(r"-?\d+", re.ASCII)
_MAX_ID_DIGITS = len(str(MAX_ID))


# -----------------------
# Identifiers
# -----------------------

def _as_int(identifier: Any) -> Optional[int]:
    if isinstance(identifier, bool):
        return None
    if isinstance(identifier, int):
        value = identifier
    else:
        text = str(identifier).strip()
        # longer than any 64-bit id; int() would also refuse past 4300 digits
        if len(text.lstrip("-")) > _MAX_ID_DIGITS or not _INT_ID.fullmatch(text):
            return None
        value = int(text)
    if not id_in_range(value):
        return None
    return value


def parse_id(identifier: Any, label: str) -> int:
    """Anything that is not a plain integer id is reported as NotFound."""
    value = _as_int(identifier)
    if value is None:
        raise NotFound(f"{label} not found", details={"id": str(identifier)})
    return value


def _coerce(model_cls: type[BaseModel], payload: Any) -> BaseModel:
    if isinstance(payload, model_cls):
        return payload
    try:
        return model_cls.model_validate(payload or {})
    except ValidationError as e:
        raise ValidationFailure(
            f"Invalid {model_cls.__name__} payload",
            details={"errors": e.errors(include_url=False)},
        ) from e


# -----------------------
# Serializers
# -----------------------

def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def article_to_dict(a: Article) -> dict:
    return {
        "id": a.id,
        "slug": a.slug,
        "title": a.title,
        "excerpt": a.excerpt,
        "date": a.date,
        "readTime": a.read_time,
        "tags": flex_codec.ARTICLE_TAGS.decode(a.tags),
        "featured": a.featured,
        "epigraph": flex_codec.ARTICLE_EPIGRAPH.decode(a.epigraph),
        "content": flex_codec.ARTICLE_CONTENT.decode(a.content),
        "createdAt": _iso(a.created_at),
        "updatedAt": _iso(a.updated_at),
    }


def project_to_dict(p: Project) -> dict:
    return {
        "id": p.id,
        "slug": p.slug,
        "title": p.title,
        "description": p.description,
        "tech": flex_codec.PROJECT_TECH.decode(p.tech),
        "year": p.year,
        "status": p.status,
        "featured": p.featured,
        "role": p.role,
        "tagline": p.tagline,
        "links": flex_codec.PROJECT_LINKS.decode(p.links),
        "philosophy": flex_codec.PROJECT_PHILOSOPHY.decode(p.philosophy),
        "sections": flex_codec.PROJECT_SECTIONS.decode(p.sections),
        "gallery": flex_codec.PROJECT_GALLERY.decode(p.gallery),
        "createdAt": _iso(p.created_at),
        "updatedAt": _iso(p.updated_at),
    }


def quote_to_dict(q: Quote) -> dict:
    return {
        "id": q.id,
        "text": q.text,
        "author": q.author,
        "source": q.source,
        "category": q.category,
    }


def intention_to_dict(i: DailyIntention) -> dict:
    return {
        "id": i.id,
        "text": i.text,
        "active": i.active,
        "order": i.order,
        "createdAt": _iso(i.created_at),
    }


def note_to_dict(n: StickyNote, date_only: bool = False) -> dict:
    created = n.created_at
    if created is not None and date_only:
        created_at = created.date().isoformat()
    else:
        created_at = _iso(created)
    return {
        "id": n.id,
        "question": n.question,
        "answer": n.answer,
        "author": n.author,
        "color": n.color,
        "position": {"x": n.position_x, "y": n.position_y},
        "rotation": n.rotation,
        "approved": n.approved,
        "contemplationId": n.contemplation_id,
        "createdAt": created_at,
    }


def answer_to_dict(n: StickyNote) -> dict:
    data = note_to_dict(n)
    data["contemplation"] = {"question": n.contemplation.question} if n.contemplation else None
    return data


def contemplation_to_dict(c: Contemplation, answers: list[StickyNote]) -> dict:
    return {
        "id": c.id,
        "question": c.question,
        "active": c.active,
        "featured": c.featured,
        "order": c.order,
        "createdAt": _iso(c.created_at),
        "answers": [note_to_dict(n) for n in answers],
    }


def profile_to_dict(p: Profile) -> dict:
    return {
        "id": p.id,
        "name": p.name,
        "title": p.title,
        "bio": p.bio,
        "avatar": p.avatar,
        "location": p.location,
        "email": p.email,
        "social": flex_codec.PROFILE_SOCIAL.decode(p.social),
    }


# -----------------------
# Repository
# -----------------------

class ContentRepository:
    def __init__(self, session_factory: Callable[[], Session], rng: Optional[random.Random] = None):
        self.SessionFactory = session_factory
        self.rng = rng or random.Random()

    # ---- shared helpers ----

    def _require(self, session: Session, model, item_id: int, label: str):
        obj = session.get(model, item_id)
        if obj is None:
            raise NotFound(f"{label} not found", details={"id": item_id})
        return obj

    def _lookup_id_or_slug(self, session: Session, model, identifier: Any, label: str):
        """
        Numeric-looking identifiers are tried as an id first, then as a slug.
        """
        numeric = _as_int(identifier)
        if numeric is not None:
            obj = session.get(model, numeric)
            if obj is not None:
                return obj
            logger.debug(f"[DB] {label} id {numeric} missing, trying slug")

        obj = session.scalar(select(model).where(model.slug == str(identifier)))
        if obj is None:
            raise NotFound(f"{label} not found", details={"id": str(identifier)})
        return obj

    def _delete(self, model, identifier: Any, label: str) -> None:
        item_id = parse_id(identifier, label)
        with session_scope(self.SessionFactory) as session:
            session.delete(self._require(session, model, item_id, label))
        logger.info(f"[DB] {label} {item_id} deleted")

    # -----------------------
    # Articles
    # -----------------------

    def list_articles(self) -> list[dict]:
        with session_scope(self.SessionFactory) as session:
            rows = session.scalars(
                select(Article).order_by(Article.date.desc(), Article.id.desc())
            ).all()
            return [article_to_dict(a) for a in rows]

    def get_article(self, identifier: Any) -> dict:
        with session_scope(self.SessionFactory) as session:
            return article_to_dict(self._lookup_id_or_slug(session, Article, identifier, "Article"))

    def create_article(self, payload: Any) -> dict:
        body = _coerce(ArticleCreate, payload)
        with session_scope(self.SessionFactory) as session:
            article = Article(
                slug=body.slug,
                title=body.title,
                excerpt=body.excerpt,
                date=body.date,
                read_time=body.read_time,
                featured=bool(body.featured),
                tags=flex_codec.ARTICLE_TAGS.encode(body.tags if body.tags is not None else []),
                epigraph=flex_codec.ARTICLE_EPIGRAPH.encode(body.epigraph),
                content=flex_codec.ARTICLE_CONTENT.encode(body.content if body.content is not None else []),
            )
            session.add(article)
            session.flush()
            logger.info(f"[DB] Article {article.id} created ({article.slug})")
            return article_to_dict(article)

    def update_article(self, identifier: Any, payload: Any) -> dict:
        """
        Full replace: omitted optional fields are cleared,
        omitted required fields keep their stored value.
        """
        item_id = parse_id(identifier, "Article")
        body = _coerce(ArticleUpdate, payload)
        with session_scope(self.SessionFactory) as session:
            article = self._require(session, Article, item_id, "Article")
            for field in ("slug", "title", "excerpt", "date", "read_time"):
                value = getattr(body, field)
                if value is not None:
                    setattr(article, field, value)
            article.featured = bool(body.featured)
            article.tags = flex_codec.ARTICLE_TAGS.encode(body.tags if body.tags is not None else [])
            article.epigraph = flex_codec.ARTICLE_EPIGRAPH.encode(body.epigraph)
            article.content = flex_codec.ARTICLE_CONTENT.encode(body.content if body.content is not None else [])
            session.flush()
            return article_to_dict(article)

    def delete_article(self, identifier: Any) -> None:
        self._delete(Article, identifier, "Article")

    # -----------------------
    # Projects
    # -----------------------

    def list_projects(self) -> list[dict]:
        with session_scope(self.SessionFactory) as session:
            rows = session.scalars(
                select(Project).order_by(Project.year.desc(), Project.id.desc())
            ).all()
            return [project_to_dict(p) for p in rows]

    def get_project(self, identifier: Any) -> dict:
        with session_scope(self.SessionFactory) as session:
            return project_to_dict(self._lookup_id_or_slug(session, Project, identifier, "Project"))

    def _apply_project_document(self, project: Project, body: ProjectUpdate) -> None:
        project.status = body.status or "Active"
        project.featured = bool(body.featured)
        project.role = body.role
        project.tagline = body.tagline
        project.tech = flex_codec.PROJECT_TECH.encode(body.tech if body.tech is not None else [])
        project.links = flex_codec.PROJECT_LINKS.encode(body.links)
        project.philosophy = flex_codec.PROJECT_PHILOSOPHY.encode(body.philosophy)
        project.sections = flex_codec.PROJECT_SECTIONS.encode(body.sections)
        project.gallery = flex_codec.PROJECT_GALLERY.encode(body.gallery)

    def create_project(self, payload: Any) -> dict:
        body = _coerce(ProjectCreate, payload)
        with session_scope(self.SessionFactory) as session:
            project = Project(
                slug=body.slug,
                title=body.title,
                description=body.description,
                year=body.year,
            )
            self._apply_project_document(project, body)
            session.add(project)
            session.flush()
            logger.info(f"[DB] Project {project.id} created ({project.slug})")
            return project_to_dict(project)

    def update_project(self, identifier: Any, payload: Any) -> dict:
        item_id = parse_id(identifier, "Project")
        body = _coerce(ProjectUpdate, payload)
        with session_scope(self.SessionFactory) as session:
            project = self._require(session, Project, item_id, "Project")
            for field in ("slug", "title", "description", "year"):
                value = getattr(body, field)
                if value is not None:
                    setattr(project, field, value)
            self._apply_project_document(project, body)
            session.flush()
            return project_to_dict(project)

    def delete_project(self, identifier: Any) -> None:
        self._delete(Project, identifier, "Project")

    # -----------------------
    # Quotes
    # -----------------------

    def list_quotes(self) -> list[dict]:
        with session_scope(self.SessionFactory) as session:
            rows = session.scalars(select(Quote).order_by(Quote.id.asc())).all()
            return [quote_to_dict(q) for q in rows]

    def get_quote(self, identifier: Any) -> dict:
        item_id = parse_id(identifier, "Quote")
        with session_scope(self.SessionFactory) as session:
            return quote_to_dict(self._require(session, Quote, item_id, "Quote"))

    def create_quote(self, payload: Any) -> dict:
        body = _coerce(QuoteCreate, payload)
        with session_scope(self.SessionFactory) as session:
            quote = Quote(text=body.text, author=body.author, source=body.source, category=body.category)
            session.add(quote)
            session.flush()
            logger.info(f"[DB] Quote {quote.id} created")
            return quote_to_dict(quote)

    def update_quote(self, identifier: Any, payload: Any) -> dict:
        item_id = parse_id(identifier, "Quote")
        body = _coerce(QuoteUpdate, payload)
        with session_scope(self.SessionFactory) as session:
            quote = self._require(session, Quote, item_id, "Quote")
            for field in ("text", "author", "source"):
                value = getattr(body, field)
                if value is not None:
                    setattr(quote, field, value)
            quote.category = body.category
            session.flush()
            return quote_to_dict(quote)

    def delete_quote(self, identifier: Any) -> None:
        self._delete(Quote, identifier, "Quote")

    # -----------------------
    # Daily intentions
    # -----------------------

    def list_intentions(self, include_inactive: bool = False) -> list[dict]:
        with session_scope(self.SessionFactory) as session:
            rows = ordering.list_ordered(session, DailyIntention, include_inactive=include_inactive)
            return [intention_to_dict(i) for i in rows]

    def get_intention(self, identifier: Any) -> dict:
        item_id = parse_id(identifier, "Intention")
        with session_scope(self.SessionFactory) as session:
            return intention_to_dict(self._require(session, DailyIntention, item_id, "Intention"))

    def create_intention(self, payload: Any) -> dict:
        body = _coerce(IntentionCreate, payload)
        with session_scope(self.SessionFactory) as session:
            order = body.order if body.order is not None else ordering.next_order(session, DailyIntention)
            intention = DailyIntention(
                text=body.text,
                active=body.active if body.active is not None else True,
                order=order,
            )
            session.add(intention)
            session.flush()
            logger.info(f"[DB] Intention {intention.id} created at order {order}")
            return intention_to_dict(intention)

    def update_intention(self, identifier: Any, payload: Any) -> dict:
        item_id = parse_id(identifier, "Intention")
        body = _coerce(IntentionUpdate, payload)
        with session_scope(self.SessionFactory) as session:
            intention = self._require(session, DailyIntention, item_id, "Intention")
            for field, value in body.model_dump(exclude_none=True).items():
                setattr(intention, field, value)
            session.flush()
            return intention_to_dict(intention)

    def delete_intention(self, identifier: Any) -> None:
        self._delete(DailyIntention, identifier, "Intention")

    def reorder_intentions(self, assignments) -> int:
        return ordering.reorder(self.SessionFactory, DailyIntention, assignments)

    # -----------------------
    # Contemplations
    # -----------------------

    def _answers_for(
        self,
        session: Session,
        contemplation_id: int,
        limit: Optional[int] = None,
        approved_only: bool = False,
    ) -> list[StickyNote]:
        stmt = select(StickyNote).where(StickyNote.contemplation_id == contemplation_id)
        if approved_only:
            stmt = stmt.where(StickyNote.approved.is_(True))
        stmt = stmt.order_by(StickyNote.created_at.desc(), StickyNote.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        return list(session.scalars(stmt).all())

    def list_contemplations(self, include_inactive: bool = False) -> list[dict]:
        """
        Public reads (active only) preview approved answers;
        admin reads (include_inactive) preview pending ones too.
        """
        with session_scope(self.SessionFactory) as session:
            rows = ordering.list_ordered(session, Contemplation, include_inactive=include_inactive)
            return [
                contemplation_to_dict(
                    c,
                    self._answers_for(
                        session,
                        c.id,
                        CONTEMPLATION_PREVIEW_ANSWERS,
                        approved_only=not include_inactive,
                    ),
                )
                for c in rows
            ]

    def get_contemplation(self, identifier: Any) -> dict:
        item_id = parse_id(identifier, "Contemplation")
        with session_scope(self.SessionFactory) as session:
            contemplation = self._require(session, Contemplation, item_id, "Contemplation")
            return contemplation_to_dict(contemplation, self._answers_for(session, item_id))

    def create_contemplation(self, payload: Any) -> dict:
        body = _coerce(ContemplationCreate, payload)
        with session_scope(self.SessionFactory) as session:
            order = body.order if body.order is not None else ordering.next_order(session, Contemplation)
            contemplation = Contemplation(
                question=body.question,
                active=body.active if body.active is not None else True,
                featured=bool(body.featured),
                order=order,
            )
            session.add(contemplation)
            session.flush()
            logger.info(f"[DB] Contemplation {contemplation.id} created at order {order}")
            return contemplation_to_dict(contemplation, [])

    def update_contemplation(self, identifier: Any, payload: Any) -> dict:
        item_id = parse_id(identifier, "Contemplation")
        body = _coerce(ContemplationUpdate, payload)
        with session_scope(self.SessionFactory) as session:
            contemplation = self._require(session, Contemplation, item_id, "Contemplation")
            for field, value in body.model_dump(exclude_none=True).items():
                setattr(contemplation, field, value)
            session.flush()
            return contemplation_to_dict(contemplation, self._answers_for(session, item_id))

    def delete_contemplation(self, identifier: Any) -> int:
        return integrity.delete_contemplation(self.SessionFactory, parse_id(identifier, "Contemplation"))

    def reorder_contemplations(self, assignments) -> int:
        return ordering.reorder(self.SessionFactory, Contemplation, assignments)

    # -----------------------
    # Sticky notes (admin board)
    # -----------------------

    def _newest_notes(self, session: Session, approved: Optional[bool] = None) -> list[StickyNote]:
        stmt = select(StickyNote)
        if approved is not None:
            stmt = stmt.where(StickyNote.approved.is_(approved))
        stmt = stmt.order_by(StickyNote.created_at.desc(), StickyNote.id.desc())
        return list(session.scalars(stmt).all())

    def list_notes(self) -> list[dict]:
        with session_scope(self.SessionFactory) as session:
            return [note_to_dict(n, date_only=True) for n in self._newest_notes(session)]

    def get_note(self, identifier: Any) -> dict:
        item_id = parse_id(identifier, "Note")
        with session_scope(self.SessionFactory) as session:
            return note_to_dict(self._require(session, StickyNote, item_id, "Note"), date_only=True)

    def create_note(self, payload: Any) -> dict:
        body = _coerce(NoteCreate, payload)
        with session_scope(self.SessionFactory) as session:
            integrity.ensure_contemplation_exists(session, body.contemplation_id)
            note = StickyNote(
                question=body.question,
                answer=body.answer,
                author=body.author,
                contemplation_id=body.contemplation_id,
            )
            self._place_note(note, body)
            session.add(note)
            session.flush()
            logger.info(f"[DB] Note {note.id} created")
            return note_to_dict(note, date_only=True)

    def _place_note(self, note: StickyNote, body: NoteUpdate) -> None:
        note.color = body.color or DEFAULT_NOTE_COLOR
        if body.position is not None:
            note.position_x, note.position_y = body.position.x, body.position.y
        else:
            note.position_x = note.position_y = DEFAULT_NOTE_POSITION
        note.rotation = body.rotation if body.rotation is not None else 0.0

    def update_note(self, identifier: Any, payload: Any) -> dict:
        """
        Replaces text, colour and placement; the contemplation link only
        changes when the caller sends contemplationId (null unlinks).
        """
        item_id = parse_id(identifier, "Note")
        body = _coerce(NoteUpdate, payload)
        with session_scope(self.SessionFactory) as session:
            note = self._require(session, StickyNote, item_id, "Note")
            for field in ("question", "answer", "author"):
                value = getattr(body, field)
                if value is not None:
                    setattr(note, field, value)
            self._place_note(note, body)
            if "contemplation_id" in body.model_fields_set:
                integrity.ensure_contemplation_exists(session, body.contemplation_id)
                note.contemplation_id = body.contemplation_id
            session.flush()
            return note_to_dict(note, date_only=True)

    def delete_note(self, identifier: Any) -> None:
        self._delete(StickyNote, identifier, "Note")

    # -----------------------
    # Public answers + moderation
    # -----------------------

    def submit_answer(self, payload: Any) -> dict:
        body = _coerce(AnswerSubmission, payload)
        if not body.answer or not body.author:
            raise ValidationFailure("Answer and author are required")

        with session_scope(self.SessionFactory) as session:
            contemplation = None
            if body.contemplation_id is not None:
                if id_in_range(body.contemplation_id):
                    contemplation = session.get(Contemplation, body.contemplation_id)
                if contemplation is None:
                    logger.info(
                        f"[DB] answer references missing contemplation {body.contemplation_id}, stored unlinked"
                    )

            if contemplation is not None:
                question = contemplation.question
            else:
                question = body.question or DEFAULT_ANSWER_QUESTION

            note = StickyNote(
                question=question,
                answer=body.answer,
                author=body.author,
                contemplation_id=contemplation.id if contemplation is not None else None,
                color=self.rng.choice(NOTE_COLORS),
                position_x=self.rng.randrange(10, 70),
                position_y=self.rng.randrange(10, 60),
                rotation=self.rng.random() * 10 - 5,
                approved=False,
            )
            session.add(note)
            session.flush()
            logger.info(f"[DB] Answer {note.id} submitted, pending approval")

            data = answer_to_dict(note)
            data["message"] = ANSWER_SUBMITTED_MESSAGE
            return data

    def list_answers(self, pending: bool = False, include_all: bool = False) -> list[dict]:
        if include_all:
            approved = None
        else:
            approved = not pending
        with session_scope(self.SessionFactory) as session:
            return [answer_to_dict(n) for n in self._newest_notes(session, approved=approved)]

    def get_answer(self, identifier: Any) -> dict:
        item_id = parse_id(identifier, "Answer")
        with session_scope(self.SessionFactory) as session:
            return answer_to_dict(self._require(session, StickyNote, item_id, "Answer"))

    def moderate_answer(self, identifier: Any, payload: Any) -> dict:
        item_id = parse_id(identifier, "Answer")
        body = _coerce(AnswerModeration, payload)
        with session_scope(self.SessionFactory) as session:
            note = self._require(session, StickyNote, item_id, "Answer")
            for field, value in body.model_dump(exclude_none=True).items():
                setattr(note, field, value)
            session.flush()
            logger.info(f"[DB] Answer {item_id} moderated (approved={note.approved})")
            return answer_to_dict(note)

    def delete_answer(self, identifier: Any) -> None:
        self._delete(StickyNote, identifier, "Answer")

    # -----------------------
    # Profile (singleton)
    # -----------------------

    def get_profile(self) -> dict:
        """
        First read on an empty store creates the default row under a fixed id;
        a concurrent first read that loses the insert race re-reads the winner.
        """
        session = self.SessionFactory()
        try:
            profile = session.get(Profile, PROFILE_ID)
            if profile is None:
                defaults = dict(DEFAULT_PROFILE)
                social = defaults.pop("social")
                profile = Profile(
                    id=PROFILE_ID,
                    social=flex_codec.PROFILE_SOCIAL.encode(social),
                    **defaults,
                )
                session.add(profile)
                try:
                    session.commit()
                    logger.info("[DB] Default profile created")
                except IntegrityError:
                    session.rollback()
                    logger.info("[DB] Default profile already created elsewhere, re-reading")
                    profile = session.get(Profile, PROFILE_ID)
            return profile_to_dict(profile)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"[DB] profile read failed: {e}", exc_info=True)
            raise StorageFailure(f"Storage operation failed: {e.__class__.__name__}") from e
        finally:
            session.close()

    def save_profile(self, payload: Any) -> dict:
        body = _coerce(ProfileUpdate, payload)
        with session_scope(self.SessionFactory) as session:
            profile = session.get(Profile, PROFILE_ID)
            if profile is None:
                missing = [f for f in ("name", "title", "bio") if not getattr(body, f)]
                if missing:
                    raise ValidationFailure(
                        "Profile requires name, title and bio",
                        details={"missing": missing},
                    )
                profile = Profile(id=PROFILE_ID, name=body.name, title=body.title, bio=body.bio)
                session.add(profile)
                logger.info("[DB] Profile created on write")
            else:
                for field in ("name", "title", "bio"):
                    value = getattr(body, field)
                    if value is not None:
                        setattr(profile, field, value)
            profile.avatar = body.avatar
            profile.location = body.location
            profile.email = body.email
            profile.social = flex_codec.PROFILE_SOCIAL.encode(body.social)
            session.flush()
            return profile_to_dict(profile)
