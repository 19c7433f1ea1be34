# cms/schemas.py
"""
Request bodies and flexible-field shapes.

Flexible fields are persisted as encoded JSON text (see cms.flex_codec); the
shapes below are what that text must decode to. Request bodies accept either
camelCase (wire format) or snake_case keys.
"""

from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# -----------------------
# Flexible-field shapes
# -----------------------

class Epigraph(BaseModel):
    text: str
    author: str
    source: str


class ParagraphBlock(BaseModel):
    type: Literal["paragraph"]
    text: str
    author: Optional[str] = None


class HeadingBlock(BaseModel):
    type: Literal["heading"]
    text: str
    author: Optional[str] = None


class QuoteBlock(BaseModel):
    type: Literal["quote"]
    text: str
    author: Optional[str] = None


ContentBlock = Annotated[
    Union[ParagraphBlock, HeadingBlock, QuoteBlock],
    Field(discriminator="type"),
]

# Legacy articles store typed blocks, newer ones a single markdown body
ArticleContent = Union[List[ContentBlock], str]


class ProjectLinks(BaseModel):
    live: Optional[str] = None
    github: Optional[str] = None


class Philosophy(BaseModel):
    quote: Optional[str] = None
    text: Optional[str] = None
    author: str


class ProjectSection(BaseModel):
    id: Optional[str] = None
    title: str
    content: str


class GalleryItem(BaseModel):
    type: str
    label: str


class SocialLinks(BaseModel):
    github: Optional[str] = None
    twitter: Optional[str] = None
    linkedin: Optional[str] = None


ProjectStatus = Literal["Active", "Maintained", "Archived"]


# -----------------------
# Request bodies
# -----------------------

class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ArticleUpdate(ApiModel):
    slug: Optional[str] = None
    title: Optional[str] = None
    excerpt: Optional[str] = None
    date: Optional[str] = None
    read_time: Optional[str] = None
    tags: Optional[List[str]] = None
    featured: Optional[bool] = None
    epigraph: Optional[Epigraph] = None
    content: Optional[ArticleContent] = None


class ArticleCreate(ArticleUpdate):
    slug: str
    title: str
    excerpt: str
    date: str
    read_time: str


class ProjectUpdate(ApiModel):
    slug: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    tech: Optional[List[str]] = None
    year: Optional[str] = None
    status: Optional[ProjectStatus] = None
    featured: Optional[bool] = None
    role: Optional[str] = None
    tagline: Optional[str] = None
    links: Optional[ProjectLinks] = None
    philosophy: Optional[Philosophy] = None
    sections: Optional[List[ProjectSection]] = None
    gallery: Optional[List[GalleryItem]] = None


class ProjectCreate(ProjectUpdate):
    slug: str
    title: str
    description: str
    year: str


class QuoteUpdate(ApiModel):
    text: Optional[str] = None
    author: Optional[str] = None
    source: Optional[str] = None
    category: Optional[str] = None


class QuoteCreate(QuoteUpdate):
    text: str
    author: str
    source: str


class IntentionUpdate(ApiModel):
    text: Optional[str] = None
    active: Optional[bool] = None
    order: Optional[int] = None


class IntentionCreate(IntentionUpdate):
    text: str


class ContemplationUpdate(ApiModel):
    question: Optional[str] = None
    active: Optional[bool] = None
    featured: Optional[bool] = None
    order: Optional[int] = None


class ContemplationCreate(ContemplationUpdate):
    question: str


class OrderAssignment(ApiModel):
    id: int
    order: int


class ContemplationReorder(ApiModel):
    contemplations: List[OrderAssignment]


class IntentionReorder(ApiModel):
    intentions: List[OrderAssignment]


class Position(BaseModel):
    x: int
    y: int


class NoteUpdate(ApiModel):
    question: Optional[str] = None
    answer: Optional[str] = None
    author: Optional[str] = None
    color: Optional[str] = None
    position: Optional[Position] = None
    rotation: Optional[float] = None
    contemplation_id: Optional[int] = None


class NoteCreate(NoteUpdate):
    question: str
    answer: str
    author: str


class AnswerSubmission(ApiModel):
    answer: Optional[str] = None
    author: Optional[str] = None
    question: Optional[str] = None
    contemplation_id: Optional[int] = None


class AnswerModeration(ApiModel):
    approved: Optional[bool] = None
    answer: Optional[str] = None
    author: Optional[str] = None
    color: Optional[str] = None


class ProfileUpdate(ApiModel):
    name: Optional[str] = None
    title: Optional[str] = None
    bio: Optional[str] = None
    avatar: Optional[str] = None
    location: Optional[str] = None
    email: Optional[str] = None
    social: Optional[SocialLinks] = None
