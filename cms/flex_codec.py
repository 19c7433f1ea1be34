# cms/flex_codec.py

import copy
import json
import logging
from typing import Any, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from cms.exceptions import DecodeError, ValidationFailure
from cms.schemas import (
    ArticleContent,
    Epigraph,
    GalleryItem,
    Philosophy,
    ProjectLinks,
    ProjectSection,
    SocialLinks,
)

logger = logging.getLogger("cms_backend")


def _plain(value: Any) -> Any:
    # request models (and lists of them) down to dicts/lists
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def encode(value: Any) -> Optional[str]:
    """
    Encode a structured value for a text column.
    None stays None (column left NULL, never the literal "null").
    """
    if value is None:
        return None
    return json.dumps(_plain(value), ensure_ascii=False)


def decode(text: Optional[str], fallback: Any = None, field: str = "value") -> Any:
    """
    Decode a text column written by encode().
    Missing input gives the fallback; malformed input raises DecodeError.
    """
    if text is None:
        return fallback
    try:
        return json.loads(text)
    except (TypeError, ValueError) as e:
        raise DecodeError(field, str(e)) from e


class FlexField:
    """
    A named flexible field with an explicit shape.

    Values are validated against the shape on the way in and on the way out,
    and canonicalised so that decode(encode(v)) == v for every canonical v.

    Canonical form has no None-valued keys: an explicit null and a missing
    key mean the same thing, so {"live": None, "github": g} reads back as
    {"github": g}. Values that still carry null keys round-trip to that
    canonical form, not to themselves.
    """

    def __init__(self, name: str, shape: Any, fallback: Any = None):
        self.name = name
        self.fallback = fallback
        self._adapter = TypeAdapter(shape)

    def _canonical(self, validated: Any) -> Any:
        return self._adapter.dump_python(validated, mode="json", exclude_none=True)

    def encode(self, value: Any) -> Optional[str]:
        if value is None:
            return None
        try:
            validated = self._adapter.validate_python(_plain(value))
        except ValidationError as e:
            raise ValidationFailure(
                f"Invalid value for '{self.name}'",
                details={"field": self.name, "errors": e.errors(include_url=False)},
            ) from e
        return json.dumps(self._canonical(validated), ensure_ascii=False)

    def decode(self, text: Optional[str]) -> Any:
        if text is None:
            return copy.deepcopy(self.fallback)
        try:
            raw = json.loads(text)
        except (TypeError, ValueError) as e:
            logger.error(f"[codec] corrupt JSON in field '{self.name}': {e}")
            raise DecodeError(self.name, str(e)) from e
        try:
            validated = self._adapter.validate_python(raw)
        except ValidationError as e:
            logger.error(f"[codec] field '{self.name}' does not match its shape: {e}")
            raise DecodeError(self.name, "stored value does not match its shape") from e
        return self._canonical(validated)


# Article
ARTICLE_TAGS = FlexField("tags", List[str], fallback=[])
ARTICLE_EPIGRAPH = FlexField("epigraph", Epigraph)
ARTICLE_CONTENT = FlexField("content", ArticleContent, fallback=[])

# Project
PROJECT_TECH = FlexField("tech", List[str], fallback=[])
PROJECT_LINKS = FlexField("links", ProjectLinks)
PROJECT_PHILOSOPHY = FlexField("philosophy", Philosophy)
PROJECT_SECTIONS = FlexField("sections", List[ProjectSection])
PROJECT_GALLERY = FlexField("gallery", List[GalleryItem], fallback=[])

# Profile
PROFILE_SOCIAL = FlexField("social", SocialLinks)
