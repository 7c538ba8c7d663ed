"""Comment entity.

Comments are attached to a video and optionally anchored to a playback
timestamp. Threading is one level deep: a top-level comment owns its replies,
and replies never own replies of their own.
"""

from datetime import datetime
from typing import Optional

from pydantic import Field, computed_field, field_validator, model_validator

from reel.domain.model.common import DomainModel
from reel.domain.value import CommentId, ReactionType, UserId, VideoId


class Author(DomainModel):
    """Snapshot of the comment author at the time the comment was served."""

    id: UserId = Field(alias="_id")
    name: str
    email: str
    avatar: Optional[str] = None


class Reaction(DomainModel):
    """A typed endorsement by one author on one comment."""

    user_id: UserId
    type: ReactionType


def one_reaction_per_author(reactions: list[Reaction]) -> list[Reaction]:
    """Collapse reactions so each author appears once, keeping the latest."""
    latest: dict[UserId, Reaction] = {}
    for reaction in reactions:
        latest.pop(reaction.user_id, None)
        latest[reaction.user_id] = reaction
    return list(latest.values())


class Comment(DomainModel):
    """Comment entity.

    Wire format follows the backend (``_id``, ``userId`` holding the populated
    author, camelCase elsewhere).

    Business rules:
    - id is server-assigned and never changes
    - at most one reaction per author
    - a reply (parent_id set) carries no replies
    """

    id: CommentId = Field(alias="_id")
    video_id: Optional[VideoId] = None
    author: Author = Field(alias="userId")
    content: str = Field(min_length=1)
    timestamp: Optional[float] = Field(default=None, ge=0)  # Seconds into the video
    parent_id: Optional[CommentId] = None
    mentions: list[UserId] = Field(default_factory=list)
    reactions: list[Reaction] = Field(default_factory=list)
    is_edited: bool = False
    edited_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    replies: list["Comment"] = Field(default_factory=list)

    @field_validator("reactions")
    @classmethod
    def validate_reactions(cls, v: list[Reaction]) -> list[Reaction]:
        """Enforce a single reaction per author."""
        return one_reaction_per_author(v)

    @model_validator(mode="after")
    def validate_nesting(self) -> "Comment":
        """Replies are one level deep."""
        if self.parent_id is not None and self.replies:
            raise ValueError("A reply cannot have replies")
        return self

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None

    @property
    def carries_replies(self) -> bool:
        """Whether the payload this comment was built from included replies."""
        return "replies" in self.model_fields_set

    def reaction_of(self, user_id: UserId) -> Optional[ReactionType]:
        """Reaction type the given user left on this comment, if any."""
        for reaction in self.reactions:
            if reaction.user_id == user_id:
                return reaction.type
        return None

    def reaction_count(self, reaction_type: ReactionType) -> int:
        return sum(1 for reaction in self.reactions if reaction.type == reaction_type)

    def with_replies(self, replies: list["Comment"]) -> "Comment":
        return self.model_copy(update={"replies": replies})

    def with_reactions(self, reactions: list[Reaction]) -> "Comment":
        return self.model_copy(
            update={"reactions": one_reaction_per_author(reactions)}
        )


class Pagination(DomainModel):
    """Loaded window of top-level comments for a video.

    ``has_more`` is derived rather than trusted from the wire so that it can
    never disagree with page/pages/total.
    """

    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    pages: int = Field(ge=0)

    @computed_field
    @property
    def has_more(self) -> bool:
        return self.page < self.pages and self.page * self.limit < self.total

    def with_total(self, total: int) -> "Pagination":
        return self.model_copy(update={"total": max(total, 0)})


class CommentPage(DomainModel):
    """One page of top-level comments as served by the backend."""

    comments: list[Comment]
    pagination: Pagination
