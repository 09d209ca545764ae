"""
Prompt templates for interview LLM tasks.
"""

import json
from typing import Any

from interview_engine.core.models import Answer, EngagementAnalytics, SentimentAnalysis

QUESTION_SYSTEM_PROMPT = (
    "You are an experienced interviewer helping builders reflect on the project they "
    "created during a workshop. Ask open, specific questions that draw out their "
    "reasoning, the problems they hit and what they learned. Respond only with JSON."
)

SENTIMENT_SYSTEM_PROMPT = (
    "You analyze interview answers for sentiment and engagement. Judge how detailed, "
    "enthusiastic and reflective the answer is. Respond only with JSON."
)

ADAPT_SYSTEM_PROMPT = (
    "You are a warm, attentive interviewer. Rephrase the next question so it follows "
    "naturally from the participant's previous answer. Keep the intent of the question. "
    "Reply with the rephrased question only."
)

SUMMARY_SYSTEM_PROMPT = (
    "You write concise, encouraging interview summaries for workshop participants. "
    "Respond only with JSON."
)


def build_question_prompt(context: dict[str, Any], count: int = 5) -> str:
    """
    Build the question generation prompt from prior workshop sections.

    Args:
        context: Mapping of section name to the participant's input for that section
        count: Number of questions to request

    Returns:
        User prompt text
    """
    sections = "\n\n".join(
        f"## {name}\n{json.dumps(data, indent=2, default=str)}" for name, data in context.items()
    )

    return f"""Based on the participant's work so far, write {count} interview questions.

Participant data:
{sections}

Return a JSON object with this structure:
{{
  "questions": [
    {{
      "text": "the question to ask",
      "followup": "a follow-up to use if the answer is brief",
      "category": "problem | solution | technology | challenges | feedback | reflection",
      "expectedInsight": "what the answer should reveal",
      "adaptability": 0.0
    }}
  ]
}}

"adaptability" is between 0 and 1 and says how freely the question may be rephrased."""


def build_sentiment_prompt(text: str) -> str:
    """Build the sentiment analysis prompt for one answer."""
    return f"""Analyze this interview answer:

\"\"\"{text}\"\"\"

Return a JSON object with this structure:
{{
  "sentiment": "positive | neutral | negative",
  "engagementLevel": "high | medium | low",
  "engagementScore": 1,
  "characteristics": ["short observations about the answer"],
  "recommendations": ["how the interviewer should follow up"]
}}

"engagementScore" is an integer from 1 (disengaged) to 10 (highly engaged)."""


def build_adapt_prompt(question: str, previous_answer: str, sentiment: SentimentAnalysis) -> str:
    """Build the prompt that rephrases a question around the previous answer."""
    return f"""Previous answer:
\"\"\"{previous_answer}\"\"\"

Detected sentiment: {sentiment.sentiment}
Engagement: {sentiment.engagement_level} ({sentiment.engagement_score}/10)

Next question:
{question}

If engagement is low, make the question more inviting and concrete.
If engagement is high, build on what the participant just said."""


def build_summary_prompt(answers: list[Answer], analytics: EngagementAnalytics) -> str:
    """Build the end-of-interview summary prompt seeded with engagement analytics."""
    transcript = "\n\n".join(f"Q: {a.question}\nA: {a.answer_text}" for a in answers)
    analytics_block = analytics.model_dump_json(
        by_alias=True, exclude={"per_answer"}, indent=2
    )

    return f"""Summarize this interview.

Transcript:
{transcript}

Engagement analytics:
{analytics_block}

Return a JSON object with this structure:
{{
  "conclusion": "two or three sentences addressed to the participant",
  "key_points": ["main points the participant made"],
  "insights": ["observations about the project and the participant's approach"],
  "next_steps": ["concrete suggestions"]
}}"""
