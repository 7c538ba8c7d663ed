"""Payloads received on the push channel."""

from pydantic import Field, field_validator

from reel.domain.model.comment import Reaction, one_reaction_per_author
from reel.domain.model.common import DomainModel
from reel.domain.value import CommentId, UserId


class ReactionUpdate(DomainModel):
    """Authoritative reaction set of one comment after someone reacted."""

    comment_id: CommentId
    reactions: list[Reaction] = Field(default_factory=list)

    @field_validator("reactions")
    @classmethod
    def validate_reactions(cls, v: list[Reaction]) -> list[Reaction]:
        return one_reaction_per_author(v)


class TypingEvent(DomainModel):
    """Another viewer of the room started or stopped typing."""

    user_id: UserId
    user_name: str
    is_typing: bool
