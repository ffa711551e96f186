"""Models for coaching decisions returned by the reasoning service."""

from enum import StrEnum

from pydantic import BaseModel, Field


class DecisionStatus(StrEnum):
    """Ordinal status of the day's intake."""

    OPTIMAL = "OPTIMAL"
    WARNING = "WARNING"
    CRITICAL = "CRITICAL"


class Reference(BaseModel):
    """Reference link cited alongside a suggestion."""

    title: str
    uri: str


class AgentDecision(BaseModel):
    """Status, reasoning and suggestion for the current ledger."""

    status: DecisionStatus = DecisionStatus.OPTIMAL
    reasoning: str
    suggestion: str
    references: list[Reference] = Field(default_factory=list, max_length=3)
