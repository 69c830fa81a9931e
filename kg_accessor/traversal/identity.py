"""Node identity."""

from typing import Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

NodeId = Union[str, int]


class NodeRef(BaseModel):
    """Stable handle of a graph node: its identifier plus its kind name.

    The id is passed to the backend exactly as stored, so an integer id stays
    an integer in query parameters.
    """

    model_config = ConfigDict(frozen=True)

    id: NodeId = Field(..., description="Node identifier as stored in the graph")
    kind: str = Field(..., description="Registered entity kind name")

    @field_validator("id", mode="before")
    @classmethod
    def validate_id(cls, v):
        """Accept non-empty strings and integers (not booleans) unchanged."""
        if isinstance(v, bool) or not isinstance(v, (str, int)) or v == "":
            raise ValueError(f"Node id must be a non-empty string or an integer, got {v!r}")
        return v

    @field_validator("kind", mode="before")
    @classmethod
    def validate_kind(cls, v):
        if not isinstance(v, str) or not v:
            raise ValueError(f"Node kind must be a non-empty string, got {v!r}")
        return v

    def __str__(self) -> str:
        return f"{self.kind}:{self.id}"
