"""Tests for ContentRepository CRUD policies."""

import pytest
from sqlalchemy import func, select, update

from cms.content_repository import ANSWER_SUBMITTED_MESSAGE, NOTE_COLORS, parse_id
from cms.entities import Profile, Project
from cms.exceptions import DecodeError, NotFound, ValidationFailure


PROJECT = {
    "slug": "lantern",
    "title": "Lantern",
    "description": "A quiet journaling tool",
    "year": "2024",
    "tech": ["Python", "SQLite"],
    "links": {"github": "https://github.com/me/lantern"},
    "philosophy": {"quote": "Know thyself", "author": "Socrates"},
    "sections": [{"title": "Why", "content": "Because."}],
    "gallery": [{"type": "screenshot", "label": "Home"}],
}

ARTICLE = {
    "slug": "on-time",
    "title": "On Time",
    "excerpt": "Seneca on time",
    "date": "2024-03-01",
    "readTime": "4 min",
    "tags": ["stoicism"],
    "epigraph": {"text": "Hold every hour in your grasp.", "author": "Seneca", "source": "Letters"},
    "content": [{"type": "paragraph", "text": "Time is all we own."}],
}


class TestIdentifiers:
    """Id parsing and id-or-slug lookup."""

    def test_parse_id_rejects_garbage(self):
        """Unparseable ids are NotFound."""
        for bad in ("abc", "1.5", "", "12abc", True):
            with pytest.raises(NotFound):
                parse_id(bad, "Quote")

    def test_parse_id_accepts_numeric_text(self):
        """Numeric strings become ints."""
        assert parse_id("42", "Quote") == 42
        assert parse_id(7, "Quote") == 7

    def test_numeric_slug_fallback(self, repo):
        """'42' resolves by slug when no project has id 42."""
        created = repo.create_project(dict(PROJECT, slug="42"))
        assert created["id"] != 42
        assert repo.get_project("42")["id"] == created["id"]

    def test_id_wins_over_slug(self, repo):
        """A numeric identifier matching an id returns that row."""
        first = repo.create_project(PROJECT)
        repo.create_project(dict(PROJECT, slug=str(first["id"]), title="Other"))
        assert repo.get_project(str(first["id"]))["title"] == "Lantern"

    def test_non_numeric_resolves_by_slug(self, repo):
        """A non-numeric identifier is a slug lookup."""
        repo.create_project(PROJECT)
        assert repo.get_project("lantern")["title"] == "Lantern"

    def test_miss_on_both(self, repo):
        """No id and no slug match is NotFound."""
        with pytest.raises(NotFound):
            repo.get_project("not-a-number")

    def test_article_lookup_by_slug(self, repo):
        """Articles use the same fallback."""
        created = repo.create_article(ARTICLE)
        assert repo.get_article("on-time")["id"] == created["id"]
        assert repo.get_article(created["id"])["slug"] == "on-time"

    def test_oversized_numeric_id_is_not_found(self, repo):
        """Digit strings too long for an id (or for int()) are NotFound."""
        for huge in ("9" * 5000, "9" * 20, str(2 ** 63), -(2 ** 70)):
            with pytest.raises(NotFound):
                parse_id(huge, "Quote")
        with pytest.raises(NotFound):
            repo.get_quote("9" * 5000)

    def test_oversized_numeric_slug_still_resolves(self, repo):
        """A long digit-only slug falls back to slug lookup."""
        slug = "9" * 5000
        created = repo.create_project(dict(PROJECT, slug=slug))
        assert repo.get_project(slug)["id"] == created["id"]
        with pytest.raises(NotFound):
            repo.get_article("9" * 5000)


class TestProjects:
    """Project documents with flexible fields."""

    def test_create_decodes_flexible_fields(self, repo):
        """Responses carry structures, never encoded text."""
        p = repo.create_project(PROJECT)
        assert p["tech"] == ["Python", "SQLite"]
        assert p["links"] == {"github": "https://github.com/me/lantern"}
        assert p["philosophy"] == {"quote": "Know thyself", "author": "Socrates"}
        assert p["sections"] == [{"title": "Why", "content": "Because."}]
        assert p["gallery"] == [{"type": "screenshot", "label": "Home"}]
        assert p["status"] == "Active"
        assert p["featured"] is False

    def test_update_is_full_replace(self, repo):
        """Omitted optional fields are cleared, omitted required ones kept."""
        p = repo.create_project(dict(PROJECT, role="Author", featured=True))
        updated = repo.update_project(p["id"], {"title": "Lantern 2", "status": "Maintained"})

        assert updated["title"] == "Lantern 2"
        assert updated["slug"] == "lantern"
        assert updated["description"] == "A quiet journaling tool"
        assert updated["status"] == "Maintained"
        assert updated["featured"] is False
        assert updated["role"] is None
        assert updated["tech"] == []
        assert updated["links"] is None
        assert updated["philosophy"] is None
        assert updated["sections"] is None
        assert updated["gallery"] == []

    def test_list_sorted_by_year_desc(self, repo):
        """Newest year first."""
        repo.create_project(dict(PROJECT, slug="old", year="2019"))
        repo.create_project(dict(PROJECT, slug="new", year="2025"))
        assert [p["slug"] for p in repo.list_projects()] == ["new", "old"]

    def test_corrupt_stored_field_raises(self, repo, session_factory):
        """Corrupt stored JSON surfaces as DecodeError on read."""
        p = repo.create_project(PROJECT)
        session = session_factory()
        try:
            session.execute(update(Project).where(Project.id == p["id"]).values(tech="{broken"))
            session.commit()
        finally:
            session.close()
        with pytest.raises(DecodeError):
            repo.get_project(p["id"])

    def test_invalid_status_rejected(self, repo):
        """Status is one of Active, Maintained, Archived."""
        with pytest.raises(ValidationFailure):
            repo.create_project(dict(PROJECT, status="Abandoned"))

    def test_delete(self, repo):
        """Deleted projects are gone."""
        p = repo.create_project(PROJECT)
        repo.delete_project(p["id"])
        with pytest.raises(NotFound):
            repo.get_project(p["id"])


class TestArticles:
    """Articles."""

    def test_create_defaults(self, repo):
        """Tags and content default to empty lists."""
        a = repo.create_article({k: ARTICLE[k] for k in ("slug", "title", "excerpt", "date", "readTime")})
        assert a["tags"] == []
        assert a["content"] == []
        assert a["epigraph"] is None
        assert a["readTime"] == "4 min"

    def test_update_clears_epigraph(self, repo):
        """A full replace without epigraph clears it."""
        a = repo.create_article(ARTICLE)
        updated = repo.update_article(a["id"], {"content": "# Markdown now"})
        assert updated["epigraph"] is None
        assert updated["tags"] == []
        assert updated["content"] == "# Markdown now"
        assert updated["title"] == "On Time"

    def test_list_sorted_by_date_desc(self, repo):
        """Most recent date first."""
        repo.create_article(dict(ARTICLE, slug="a", date="2023-01-01"))
        repo.create_article(dict(ARTICLE, slug="b", date="2024-06-01"))
        assert [a["slug"] for a in repo.list_articles()] == ["b", "a"]


class TestQuotes:
    """Quotes."""

    def test_category_defaults_to_null(self, repo):
        """An omitted category reads back as None."""
        q = repo.create_quote({"text": "X", "author": "Y", "source": "Z"})
        assert isinstance(q["id"], int)
        assert q["category"] is None
        assert repo.get_quote(q["id"]) == q

    def test_missing_required_field(self, repo):
        """Text, author and source are required on create."""
        with pytest.raises(ValidationFailure):
            repo.create_quote({"text": "X", "author": "Y"})

    def test_update_missing_quote(self, repo):
        """Updating an unknown id is NotFound."""
        with pytest.raises(NotFound):
            repo.update_quote(99, {"text": "nope"})


class TestContemplations:
    """Contemplations with attached answers."""

    def test_update_merges_fields(self, repo):
        """Omitted fields keep their stored value."""
        c = repo.create_contemplation({"question": "Q", "featured": True})
        updated = repo.update_contemplation(c["id"], {"active": False})
        assert updated["question"] == "Q"
        assert updated["featured"] is True
        assert updated["active"] is False

    def test_list_attaches_five_newest_answers(self, repo):
        """Lists carry at most five answers, newest first."""
        c = repo.create_contemplation({"question": "Q"})
        notes = [
            repo.create_note({"question": "Q", "answer": f"a{i}", "author": "me", "contemplationId": c["id"]})
            for i in range(7)
        ]
        listed = repo.list_contemplations(include_inactive=True)[0]
        assert [a["id"] for a in listed["answers"]] == [n["id"] for n in reversed(notes)][:5]
        assert len(repo.get_contemplation(c["id"])["answers"]) == 7

    def test_public_list_hides_pending_answers(self, repo):
        """Unapproved answers only show up in admin reads."""
        c = repo.create_contemplation({"question": "Q"})
        pending = repo.submit_answer({"answer": "secret", "author": "x", "contemplationId": c["id"]})
        shown = repo.submit_answer({"answer": "public", "author": "y", "contemplationId": c["id"]})
        repo.moderate_answer(shown["id"], {"approved": True})

        public = repo.list_contemplations()[0]["answers"]
        admin = repo.list_contemplations(include_inactive=True)[0]["answers"]
        assert [a["id"] for a in public] == [shown["id"]]
        assert {a["id"] for a in admin} == {pending["id"], shown["id"]}


class TestNotes:
    """Admin sticky-note board."""

    def test_defaults(self, repo):
        """Colour, position and rotation get their defaults."""
        n = repo.create_note({"question": "q", "answer": "a", "author": "me"})
        assert n["color"] == "gold"
        assert n["position"] == {"x": 20, "y": 20}
        assert n["rotation"] == 0.0
        assert len(n["createdAt"]) == 10

    def test_update_preserves_link_unless_given(self, repo):
        """contemplationId only changes when sent."""
        c = repo.create_contemplation({"question": "Q"})
        n = repo.create_note({"question": "q", "answer": "a", "author": "me", "contemplationId": c["id"]})

        moved = repo.update_note(n["id"], {"position": {"x": 40, "y": 55}, "color": "sage"})
        assert moved["contemplationId"] == c["id"]
        assert moved["position"] == {"x": 40, "y": 55}

        unlinked = repo.update_note(n["id"], {"contemplationId": None})
        assert unlinked["contemplationId"] is None
        assert unlinked["color"] == "gold"


class TestAnswers:
    """Public submission and moderation."""

    def test_submit_requires_answer_and_author(self, repo):
        """Both fields are mandatory."""
        with pytest.raises(ValidationFailure):
            repo.submit_answer({"answer": "only this"})

    def test_submit_copies_contemplation_question(self, repo):
        """The question comes from the referenced contemplation."""
        c = repo.create_contemplation({"question": "What do I fear?"})
        a = repo.submit_answer({"answer": "Nothing", "author": "me", "contemplationId": c["id"], "question": "ignored"})

        assert a["question"] == "What do I fear?"
        assert a["contemplation"] == {"question": "What do I fear?"}
        assert a["approved"] is False
        assert a["message"] == ANSWER_SUBMITTED_MESSAGE
        assert a["color"] in NOTE_COLORS
        assert 10 <= a["position"]["x"] < 70
        assert 10 <= a["position"]["y"] < 60
        assert -5 <= a["rotation"] < 5

    def test_submit_without_contemplation(self, repo):
        """Free answers use the supplied question or a default one."""
        assert repo.submit_answer({"answer": "a", "author": "b"})["question"] == "A personal reflection"
        assert repo.submit_answer({"answer": "a", "author": "b", "question": "Mine"})["question"] == "Mine"

    def test_submit_unknown_contemplation_stored_unlinked(self, repo):
        """A reference that does not resolve is dropped."""
        a = repo.submit_answer({"answer": "a", "author": "b", "contemplationId": 999})
        assert a["contemplationId"] is None
        assert a["contemplation"] is None

    def test_submit_out_of_range_contemplation_stored_unlinked(self, repo):
        """An id beyond the key range is treated like any missing one."""
        a = repo.submit_answer({"answer": "a", "author": "b", "contemplationId": 2 ** 70})
        assert a["contemplationId"] is None

    def test_moderation_filters(self, repo):
        """Default lists approved only; pending and all widen it."""
        first = repo.submit_answer({"answer": "1", "author": "x"})
        second = repo.submit_answer({"answer": "2", "author": "y"})

        assert repo.list_answers() == []
        approved = repo.moderate_answer(first["id"], {"approved": True})
        assert approved["approved"] is True
        assert approved["answer"] == "1"

        assert [a["id"] for a in repo.list_answers()] == [first["id"]]
        assert [a["id"] for a in repo.list_answers(pending=True)] == [second["id"]]
        assert [a["id"] for a in repo.list_answers(include_all=True)] == [second["id"], first["id"]]


class TestProfile:
    """Singleton profile."""

    def _count(self, session_factory):
        session = session_factory()
        try:
            return session.scalar(select(func.count()).select_from(Profile))
        finally:
            session.close()

    def test_two_reads_create_one_row(self, repo, session_factory):
        """The default row is created once."""
        first = repo.get_profile()
        second = repo.get_profile()
        assert first == second
        assert first["name"] == "Juan Rizky Maulana"
        assert first["social"]["github"] == "https://github.com/juanrizky"
        assert self._count(session_factory) == 1

    def test_save_updates_existing_row(self, repo, session_factory):
        """Writes replace the singleton in place."""
        repo.get_profile()
        saved = repo.save_profile({"bio": "New bio", "social": {"twitter": "https://twitter.com/me"}})
        assert saved["bio"] == "New bio"
        assert saved["name"] == "Juan Rizky Maulana"
        assert saved["email"] is None
        assert saved["social"] == {"twitter": "https://twitter.com/me"}
        assert self._count(session_factory) == 1

    def test_save_on_empty_store_requires_core_fields(self, repo, session_factory):
        """Creating through a write needs name, title and bio."""
        with pytest.raises(ValidationFailure):
            repo.save_profile({"name": "Only name"})
        created = repo.save_profile({"name": "N", "title": "T", "bio": "B"})
        assert created["id"] == 1
        assert self._count(session_factory) == 1
