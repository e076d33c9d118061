"""Pydantic schema for the AI-generated commit summary.

Validates Claude's JSON response and doubles as the API contract for the
summary document. Field names are snake_case in Python and camelCase on the
wire (the model is asked to answer in camelCase too).
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _SummaryModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TechnicalArea(_SummaryModel):
    name: str = Field(description="Area of the codebase, e.g. 'Authentication'")
    count: int = Field(ge=0, description="Commits touching this area")


class CommitTypeCount(_SummaryModel):
    type: str = Field(description="Conventional type: feature, fix, refactor, docs, ...")
    count: int = Field(ge=0)
    description: str = ""


class TimelineHighlight(_SummaryModel):
    date: str = Field(description="YYYY-MM-DD")
    description: str


class CommitSummary(_SummaryModel):
    """Structured summary of a set of commits."""

    key_themes: list[str] = Field(default_factory=list)
    technical_areas: list[TechnicalArea] = Field(default_factory=list)
    accomplishments: list[str] = Field(default_factory=list)
    commits_by_type: list[CommitTypeCount] = Field(default_factory=list)
    timeline_highlights: list[TimelineHighlight] = Field(default_factory=list)
    overall_summary: str = ""

    @classmethod
    def empty(cls) -> "CommitSummary":
        """Summary returned when there is nothing to summarize."""
        return cls(
            overall_summary="No commits were found in the selected date range.",
        )
