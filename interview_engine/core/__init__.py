"""
Core data structures for the interview engine.
"""

from interview_engine.core.models import (
    Answer,
    EngagementAnalytics,
    InterviewPhase,
    InterviewSession,
    InterviewSummary,
    Question,
    SentimentAnalysis,
)

__all__ = [
    "Answer",
    "EngagementAnalytics",
    "InterviewPhase",
    "InterviewSession",
    "InterviewSummary",
    "Question",
    "SentimentAnalysis",
]
