from collections.abc import Iterable, Mapping
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class Condition(BaseModel):
    """One named, weighted field condition of a query.

    bias -1.0 includes only matching items, 0.0 excludes them, a value in (0, 1)
    deboosts and a value above 1 boosts.
    """
    name: str = Field(..., description="Property name on the item")
    values: List[str] = Field(..., description="Property values, any of which matches")
    bias: float

    @field_validator('name', mode='before')
    @classmethod
    def _name_to_str(cls, v: Any) -> str:
        return str(v)

    @field_validator('values', mode='before')
    @classmethod
    def _values_to_str(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, Iterable) and not isinstance(v, (str, bytes, Mapping)):
            return [str(value) for value in v]
        return [str(v)]


class QueryPayload(BaseModel):
    """Body sent to the engine's queries endpoint."""
    user: Optional[str] = None
    item: Optional[str] = None
    num: Optional[int] = None
    fields: List[Condition] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

