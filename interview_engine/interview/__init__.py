"""Interview state machine and turn-taking orchestration."""

from interview_engine.interview.flow import InterviewFlow
from interview_engine.interview.orchestrator import COMPLETION_MESSAGE, InterviewOrchestrator

__all__ = ["COMPLETION_MESSAGE", "InterviewFlow", "InterviewOrchestrator"]
