"""Reference dataset schema: conditions, keywords, advice and medicines."""

from pydantic import BaseModel, Field
from typing import List, Optional


class Medicine(BaseModel):
    """An over-the-counter medicine entry attached to a condition."""

    name: str
    dose: str = ""
    frequency: str = ""
    timing: Optional[str] = None

    class Config:
        frozen = True


class ReferenceCondition(BaseModel):
    """A catalog condition. Identity is the name, compared case-insensitively."""

    name: str
    keywords: List[str] = Field(default_factory=list)
    advice: str = ""
    medicines: List[Medicine] = Field(default_factory=list)

    class Config:
        frozen = True

    def same_condition(self, name: str) -> bool:
        return self.name.lower() == (name or "").lower()


class MedicineSuggestion(BaseModel):
    """Simplified medicine match surfaced to clients."""

    condition: str
    medicines: List[Medicine] = Field(default_factory=list)
