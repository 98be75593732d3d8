"""
Request Context

The execution environment authenticates the caller and hands the tracker a
CallerContext. Every storage key is built from context.owner, never from an
operation argument, which is what keeps one owner's records invisible to
another.
"""

from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class CallerContext(BaseModel):
    """Authenticated caller for one request."""
    model_config = ConfigDict(frozen=True)

    owner: str = Field(
        ...,
        min_length=1,
        description="Authenticated principal identity"
    )
    correlation_id: UUID = Field(
        default_factory=uuid4,
        description="Ties together the audit events of one request"
    )
