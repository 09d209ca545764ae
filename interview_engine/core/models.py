"""
Data models for interview sessions and LLM-derived analysis.

Fields carry camelCase aliases because that is the key style the LLM is asked
to answer in; Python code populates them by field name.
"""

from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field


class InterviewPhase(str, Enum):
    """Interview state machine states."""

    IDLE = "idle"
    PREPARING = "preparing"
    ACTIVE = "active"
    PROCESSING = "processing"
    COMPLETE = "complete"


class Question(BaseModel):
    """An interview question as issued to the participant."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str = Field(min_length=1)
    followup: str = ""
    category: str = "general"
    expected_insight: str = Field(default="", alias="expectedInsight")
    adaptability: float = Field(default=0.5, ge=0.0, le=1.0)


class Answer(BaseModel):
    """A participant's answer to one question."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    question: str
    answer_text: str = Field(alias="answerText")


class SentimentAnalysis(BaseModel):
    """Sentiment and engagement read from a single answer."""

    model_config = ConfigDict(populate_by_name=True)

    sentiment: Literal["positive", "neutral", "negative"]
    engagement_level: Literal["high", "medium", "low"] = Field(alias="engagementLevel")
    engagement_score: int = Field(ge=1, le=10, alias="engagementScore")
    characteristics: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


class EngagementAnalytics(BaseModel):
    """Sentiment aggregated over every answer in a session."""

    model_config = ConfigDict(populate_by_name=True)

    average_engagement_score: float = Field(default=0.0, alias="averageEngagementScore")
    dominant_sentiment: str = Field(default="neutral", alias="dominantSentiment")
    sentiment_distribution: dict[str, int] = Field(
        default_factory=dict, alias="sentimentDistribution"
    )
    engagement_levels: list[str] = Field(default_factory=list, alias="engagementLevels")
    per_answer: list[SentimentAnalysis] = Field(default_factory=list, alias="perAnswer")


class InterviewSummary(BaseModel):
    """End-of-interview summary."""

    model_config = ConfigDict(populate_by_name=True)

    conclusion: str
    key_points: list[str] = Field(default_factory=list)
    insights: list[str] = Field(default_factory=list)
    next_steps: list[str] = Field(default_factory=list)
    engagement_analytics: EngagementAnalytics = Field(
        default_factory=EngagementAnalytics, alias="engagementAnalytics"
    )
    is_fallback: bool = False


class InterviewSession(BaseModel):
    """Persisted interview state for one session id."""

    session_id: str
    questions: list[Question] = Field(default_factory=list)
    answers: list[Answer] = Field(default_factory=list)
    summary: InterviewSummary | None = None
    state: InterviewPhase = InterviewPhase.IDLE
    updated_at: datetime = Field(default_factory=datetime.now)

    @computed_field
    @property
    def transcript(self) -> str:
        """Question/answer pairs rendered as plain text."""
        return "\n\n".join(f"Q: {a.question}\nA: {a.answer_text}" for a in self.answers)

    @property
    def is_fully_answered(self) -> bool:
        return bool(self.questions) and len(self.answers) >= len(self.questions)
