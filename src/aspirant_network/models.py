"""
Pydantic models for the Aspirant Network client.

These mirror the JSON the backend sends. Field names are snake_case in Python
and camelCase on the wire; unknown fields are kept so that a user profile can
round-trip through the session store without losing data.
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Exam(str, Enum):
    """Exams supported by the platform."""
    CAT = "CAT"
    UPSC = "UPSC"
    JEE = "JEE"
    NEET = "NEET"
    GATE = "GATE"
    SSC = "SSC"
    IBPS = "IBPS"
    GMAT = "GMAT"
    GRE = "GRE"
    IELTS = "IELTS"


class Level(str, Enum):
    """Preparation levels a user can pick."""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class VoteType(str, Enum):
    UP = "upvote"
    DOWN = "downvote"
    REMOVE = "remove"


class WireModel(BaseModel):
    """Base model: camelCase aliases, populate by name, keep unknown fields."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        coerce_numbers_to_str=True,
    )

    def to_wire(self) -> Dict[str, Any]:
        """Dump using the backend's field names."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class UserSummary(WireModel):
    """The signed-in user's profile as kept in the session."""

    id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("_id", "id"),
        serialization_alias="_id",
    )
    name: str = ""
    username: str = ""
    primary_exam: Optional[str] = None
    secondary_exam: Optional[str] = None
    level: Optional[str] = None
    attempt_year: Optional[int] = None
    credibility_score: int = 0
    badges: List[Any] = Field(default_factory=list)


class Pagination(WireModel):
    """
    Paging block of a list response.

    List endpoints send ``currentPage`` and ``totalPages``; the total is
    ``total``, ``totalQuestions`` or ``totalResults`` depending on the route.
    """

    page: int = Field(default=1, validation_alias=AliasChoices("currentPage", "page"))
    limit: int = 20
    total: Optional[int] = Field(
        default=None,
        validation_alias=AliasChoices("total", "totalQuestions", "totalResults"),
    )
    pages: Optional[int] = Field(default=None, validation_alias=AliasChoices("totalPages", "pages"))
    has_next_page: Optional[bool] = None

    @property
    def has_next(self) -> bool:
        if self.has_next_page is not None:
            return self.has_next_page
        if self.pages is None:
            return False
        return self.page < self.pages


class Ref(WireModel):
    """A populated reference such as a question's subject or topic."""

    id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("_id", "id"),
        serialization_alias="_id",
    )
    name: str = ""
    slug: Optional[str] = None


def ref_name(ref: Union[str, Ref, None]) -> Optional[str]:
    if isinstance(ref, Ref):
        return ref.name or ref.id
    return ref


class Activity(WireModel):
    """A notification in the user's activity feed."""

    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    type: str = "other"
    is_read: bool = False
    actor: Optional[Any] = None
    question: Optional[Any] = None
    message: Optional[str] = None
    created_at: Optional[datetime] = None


class ResourceRating(WireModel):
    average: float = 0.0
    total: float = 0.0
    count: int = 0


class _Votable(WireModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    title: str = ""
    exam: Optional[str] = None
    upvotes: int = 0
    downvotes: int = 0
    user_vote: Optional[str] = None
    has_saved: bool = False
    created_at: Optional[datetime] = None

    @property
    def score(self) -> int:
        return self.upvotes - self.downvotes


class Question(_Votable):
    post_type: Literal["question"] = "question"
    description: str = ""
    subject: Optional[Union[str, Ref]] = None
    topic: Optional[Union[str, Ref]] = None
    difficulty: Optional[str] = None
    is_solved: bool = False
    solved_at: Optional[datetime] = None
    answer_count: int = 0


class Answer(_Votable):
    post_type: Literal["answer"] = "answer"
    content: str = ""
    is_accepted: bool = False


class Story(_Votable):
    post_type: Literal["story"] = "story"
    content: str = ""
    excerpt: Optional[str] = None
    story_type: Optional[str] = None
    views: int = 0


class Resource(WireModel):
    id: str = Field(validation_alias=AliasChoices("_id", "id"), serialization_alias="_id")
    post_type: Literal["resource"] = "resource"
    title: str = ""
    exam: Optional[str] = None
    type: Optional[str] = None
    description: str = ""
    subject: Optional[Union[str, Ref]] = None
    topic: Optional[Union[str, Ref]] = None
    rating: ResourceRating = Field(default_factory=ResourceRating)
    user_rating: Optional[int] = None
    has_saved: bool = False
    downloads: int = 0
    created_at: Optional[datetime] = None


FeedItem = Annotated[Union[Question, Resource, Story], Field(discriminator="post_type")]
