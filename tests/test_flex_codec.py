"""Tests for encoding/decoding flexible (JSON-in-text) fields."""

import pytest

from cms import flex_codec
from cms.exceptions import DecodeError, ValidationFailure
from cms.schemas import Epigraph


class TestPlainCodec:
    """encode()/decode() without a shape."""

    def test_encode_none_stays_none(self):
        """None is stored as NULL, not the text 'null'."""
        assert flex_codec.encode(None) is None

    def test_decode_none_gives_fallback(self):
        """Missing text decodes to the caller's fallback."""
        assert flex_codec.decode(None, fallback=[]) == []
        assert flex_codec.decode(None) is None

    def test_round_trip_nested(self):
        """Nested structures survive encode then decode."""
        value = {"github": "https://github.com/x", "items": [1, "two", {"three": None}]}
        assert flex_codec.decode(flex_codec.encode(value)) == value

    def test_encode_accepts_models(self):
        """Request models are dumped without their None keys."""
        text = flex_codec.encode(Epigraph(text="t", author="a", source="s"))
        assert flex_codec.decode(text) == {"text": "t", "author": "a", "source": "s"}

    def test_malformed_text_raises(self):
        """Corrupt stored text is an error, never a silent default."""
        with pytest.raises(DecodeError) as exc:
            flex_codec.decode("{not json", fallback=[], field="tech")
        assert exc.value.field == "tech"


class TestFlexField:
    """Shaped fields validate on both sides."""

    def test_social_round_trip_drops_missing_keys(self):
        """Optional keys left unset are not stored."""
        text = flex_codec.PROFILE_SOCIAL.encode({"github": "https://github.com/me"})
        assert flex_codec.PROFILE_SOCIAL.decode(text) == {"github": "https://github.com/me"}

    def test_list_fallback_is_fresh_copy(self):
        """Mutating one decoded fallback does not leak into the next."""
        first = flex_codec.PROJECT_TECH.decode(None)
        first.append("Rust")
        assert flex_codec.PROJECT_TECH.decode(None) == []

    def test_optional_field_fallback_is_none(self):
        """Links, philosophy and sections decode to None when absent."""
        assert flex_codec.PROJECT_LINKS.decode(None) is None
        assert flex_codec.PROJECT_PHILOSOPHY.decode(None) is None
        assert flex_codec.PROJECT_SECTIONS.decode(None) is None

    def test_content_blocks_round_trip(self):
        """Typed content blocks keep their order and author."""
        blocks = [
            {"type": "heading", "text": "On time"},
            {"type": "paragraph", "text": "Begin at once to live."},
            {"type": "quote", "text": "Waste no more time.", "author": "Marcus Aurelius"},
        ]
        text = flex_codec.ARTICLE_CONTENT.encode(blocks)
        assert flex_codec.ARTICLE_CONTENT.decode(text) == blocks

    def test_markdown_content_round_trip(self):
        """A markdown body is stored as a plain string."""
        text = flex_codec.ARTICLE_CONTENT.encode("# Title\n\nBody")
        assert flex_codec.ARTICLE_CONTENT.decode(text) == "# Title\n\nBody"

    def test_unknown_block_type_rejected_on_write(self):
        """Only paragraph, heading and quote blocks are accepted."""
        with pytest.raises(ValidationFailure):
            flex_codec.ARTICLE_CONTENT.encode([{"type": "video", "text": "x"}])

    def test_shape_mismatch_on_read_is_decode_error(self):
        """Valid JSON with the wrong shape is treated as corruption."""
        with pytest.raises(DecodeError):
            flex_codec.PROJECT_GALLERY.decode('[{"type": "screenshot"}]')

    def test_philosophy_accepts_text_or_quote(self):
        """Philosophy may carry either a quote or a text body."""
        for value in ({"quote": "Q", "author": "A"}, {"text": "T", "author": "A"}):
            text = flex_codec.PROJECT_PHILOSOPHY.encode(value)
            assert flex_codec.PROJECT_PHILOSOPHY.decode(text) == value

    def test_encode_none_leaves_column_null(self):
        """A cleared optional field is NULL in storage."""
        assert flex_codec.PROJECT_LINKS.encode(None) is None

    def test_explicit_null_keys_read_back_canonical(self):
        """Stored null keys are dropped on read; meaning is unchanged."""
        stored = '{"live": null, "github": "https://github.com/me/x"}'
        assert flex_codec.PROJECT_LINKS.decode(stored) == {"github": "https://github.com/me/x"}
