"""
LLM gateway for interview tasks.

Question generation, sentiment analysis, question adaptation, summaries and
audio transcription all go through one RequestQueue. No public method raises:
every provider or parse failure ends in a documented default value.
"""

import asyncio
import logging
from collections import Counter
from typing import Any

from pydantic import ValidationError

from interview_engine.core.models import (
    Answer,
    EngagementAnalytics,
    InterviewSummary,
    Question,
    SentimentAnalysis,
)
from interview_engine.llm import prompts
from interview_engine.llm.base_client import BaseLLMClient, LLMResponse
from interview_engine.llm.exceptions import LLMParseError
from interview_engine.llm.parsing import clean_question_text, extract_json_object, salvage_questions
from interview_engine.llm.request_queue import RequestQueue
from interview_engine.llm.transcription import TranscriptionClient

logger = logging.getLogger(__name__)

QUESTION_COUNT = 5
SHORT_ANSWER_LENGTH = 10
KEY_POINT_LENGTH = 100

DEFAULT_QUESTIONS = [
    Question(
        text="Tell me about your project idea and what problem it solves.",
        followup="Who feels that problem most?",
        category="problem",
        expected_insight="Problem understanding and target users",
        adaptability=0.3,
    ),
    Question(
        text="How does your solution use AI technology?",
        followup="What would the solution look like without AI?",
        category="technology",
        expected_insight="Depth of technical understanding",
        adaptability=0.5,
    ),
    Question(
        text="What were the biggest challenges you faced during development?",
        followup="How did you work through the hardest one?",
        category="challenges",
        expected_insight="Problem-solving approach",
        adaptability=0.6,
    ),
    Question(
        text="How did you incorporate feedback to improve your solution?",
        followup="Which piece of feedback changed your plans the most?",
        category="feedback",
        expected_insight="Openness to iteration",
        adaptability=0.6,
    ),
    Question(
        text="What would you do differently if you were to start over?",
        followup="What is the first thing you would change?",
        category="reflection",
        expected_insight="Self-reflection and learning",
        adaptability=0.7,
    ),
]

SHORT_ANSWER_SENTIMENT = SentimentAnalysis(
    sentiment="neutral",
    engagement_level="low",
    engagement_score=2,
    characteristics=["brief response"],
    recommendations=["Ask an open-ended follow-up question to encourage elaboration"],
)

NEUTRAL_SENTIMENT = SentimentAnalysis(
    sentiment="neutral",
    engagement_level="medium",
    engagement_score=5,
    characteristics=[],
    recommendations=[],
)

DEFAULT_CONCLUSION = "Thank you for completing the interview. Your responses have been recorded."
DEFAULT_INSIGHTS = [
    "Your project demonstrates creative problem-solving.",
    "Consider further user testing to refine your solution.",
]
DEFAULT_NEXT_STEPS = [
    "Review your project goals",
    "Implement the feedback received",
    "Continue iterating on your solution",
]


def aggregate_engagement(analyses: list[SentimentAnalysis]) -> EngagementAnalytics:
    """
    Combine per-answer sentiment into session analytics.

    The dominant sentiment is the most frequent label; on a tie the label that
    appeared first in answer order wins.

    Args:
        analyses: One analysis per answer, in answer order

    Returns:
        EngagementAnalytics
    """
    if not analyses:
        return EngagementAnalytics()

    distribution = Counter(a.sentiment for a in analyses)
    # Counter preserves insertion order and max() keeps the first maximum
    dominant = max(distribution, key=distribution.get)
    average = sum(a.engagement_score for a in analyses) / len(analyses)

    return EngagementAnalytics(
        average_engagement_score=round(average, 1),
        dominant_sentiment=dominant,
        sentiment_distribution=dict(distribution),
        engagement_levels=[a.engagement_level for a in analyses],
        per_answer=analyses,
    )


def default_summary(answers: list[Answer], analytics: EngagementAnalytics) -> InterviewSummary:
    """Templated summary used when the provider cannot produce one."""
    return InterviewSummary(
        conclusion=DEFAULT_CONCLUSION,
        key_points=[a.answer_text[:KEY_POINT_LENGTH] + "..." for a in answers],
        insights=list(DEFAULT_INSIGHTS),
        next_steps=list(DEFAULT_NEXT_STEPS),
        engagement_analytics=analytics,
        is_fallback=True,
    )


class LLMGateway:
    """Interview-specific LLM operations with deterministic fallbacks."""

    def __init__(
        self,
        client: BaseLLMClient,
        queue: RequestQueue,
        transcription_client: TranscriptionClient | None = None,
        question_count: int = QUESTION_COUNT,
    ):
        """
        Initialize gateway.

        Args:
            client: Chat-completion client
            queue: Rate-limited queue shared by every call this gateway makes
            transcription_client: Optional speech-to-text provider
            question_count: Number of questions per interview
        """
        self.client = client
        self.queue = queue
        self.transcription_client = transcription_client
        self.question_count = question_count

    async def _complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float | None = None,
        max_tokens: int | None = None,
    ) -> LLMResponse:
        return await self.queue.enqueue(
            lambda: self.client.complete(system_prompt, user_prompt, temperature, max_tokens)
        )

    def default_questions(self) -> list[Question]:
        return self._fill_questions([])

    async def generate_interview_questions(self, context: dict[str, Any] | None) -> list[Question]:
        """
        Generate interview questions from earlier workshop sections.

        Args:
            context: Section name -> participant input

        Returns:
            Exactly ``question_count`` questions
        """
        if not context:
            logger.info("No participant data, using default questions")
            return self.default_questions()

        try:
            response = await self._complete(
                prompts.QUESTION_SYSTEM_PROMPT,
                prompts.build_question_prompt(context, self.question_count),
                temperature=0.7,
                max_tokens=1500,
            )
        except Exception as e:
            logger.error(f"Question generation failed, using defaults: {e}")
            return self.default_questions()

        try:
            questions = self._parse_questions(response.content)
        except LLMParseError as e:
            salvaged = salvage_questions(response.content)
            if not salvaged:
                logger.warning(f"Could not parse questions, using defaults: {e}")
                return self.default_questions()
            logger.warning(f"Salvaged {len(salvaged)} questions from malformed reply: {e}")
            questions = [Question(text=text) for text in salvaged]

        logger.info(f"Generated {len(questions)} interview questions")
        return self._fill_questions(questions)

    def _parse_questions(self, content: str) -> list[Question]:
        data = extract_json_object(content)
        items = data.get("questions")
        if not isinstance(items, list) or not items:
            raise LLMParseError("Reply has no 'questions' array")

        questions = []
        for item in items:
            try:
                if isinstance(item, str):
                    questions.append(Question(text=item))
                else:
                    questions.append(Question.model_validate(item))
            except ValidationError as e:
                logger.debug(f"Skipping invalid question entry: {e}")

        if not questions:
            raise LLMParseError("No valid entries in 'questions' array")
        return questions

    def _fill_questions(self, questions: list[Question]) -> list[Question]:
        """Truncate or pad from the defaults to exactly ``question_count``."""
        result = list(questions[: self.question_count])
        seen = {q.text for q in result}
        for default in DEFAULT_QUESTIONS:
            if len(result) >= self.question_count:
                break
            if default.text not in seen:
                result.append(default)
                seen.add(default.text)
        return result

    async def analyze_sentiment(self, text: str) -> SentimentAnalysis:
        """
        Analyze sentiment and engagement of one answer.

        Args:
            text: Answer text

        Returns:
            SentimentAnalysis; the low-engagement default for text under 10
            characters, the neutral default on any failure
        """
        text = text or ""
        if len(text) < SHORT_ANSWER_LENGTH:
            return SHORT_ANSWER_SENTIMENT.model_copy(deep=True)

        try:
            response = await self._complete(
                prompts.SENTIMENT_SYSTEM_PROMPT,
                prompts.build_sentiment_prompt(text),
                temperature=0.3,
                max_tokens=500,
            )
            data = extract_json_object(response.content)
            return SentimentAnalysis.model_validate(data)
        except Exception as e:
            logger.warning(f"Sentiment analysis failed, using neutral default: {e}")
            return NEUTRAL_SENTIMENT.model_copy(deep=True)

    async def adapt_question(self, question: str, previous_answer: str | None) -> str:
        """
        Rephrase the next question around the previous answer.

        Args:
            question: Question to ask next
            previous_answer: Participant's last answer

        Returns:
            Adapted question, or ``question`` unchanged on any failure
        """
        if not previous_answer:
            return question

        try:
            sentiment = await self.analyze_sentiment(previous_answer)
            response = await self._complete(
                prompts.ADAPT_SYSTEM_PROMPT,
                prompts.build_adapt_prompt(question, previous_answer, sentiment),
                temperature=0.7,
                max_tokens=200,
            )
        except Exception as e:
            logger.warning(f"Question adaptation failed, keeping original: {e}")
            return question

        adapted = clean_question_text(response.content)
        if not adapted:
            return question

        logger.debug(f"Adapted question: {question!r} -> {adapted!r}")
        return adapted

    async def generate_interview_summary(self, answers: list[Answer]) -> InterviewSummary:
        """
        Summarize the interview with engagement analytics.

        Args:
            answers: All answers in order

        Returns:
            InterviewSummary; the templated fallback on any failure
        """
        analyses = await asyncio.gather(*(self.analyze_sentiment(a.answer_text) for a in answers))
        analytics = aggregate_engagement(list(analyses))

        try:
            response = await self._complete(
                prompts.SUMMARY_SYSTEM_PROMPT,
                prompts.build_summary_prompt(answers, analytics),
                temperature=0.7,
                max_tokens=1500,
            )
            data = extract_json_object(response.content)
            data.pop("engagement_analytics", None)
            data.pop("engagementAnalytics", None)
            data.pop("is_fallback", None)
            summary = InterviewSummary.model_validate({**data, "engagement_analytics": analytics})
        except Exception as e:
            logger.error(f"Summary generation failed, using template: {e}")
            return default_summary(answers, analytics)

        logger.info(
            f"Generated summary: dominant sentiment {analytics.dominant_sentiment}, "
            f"average engagement {analytics.average_engagement_score}"
        )
        return summary

    async def transcribe_audio(self, audio: bytes, filename: str = "answer.webm") -> str:
        """
        Transcribe recorded audio.

        Args:
            audio: Encoded audio bytes
            filename: Name hinting the container format

        Returns:
            Transcript, or an empty string when unavailable or on failure
        """
        if self.transcription_client is None:
            logger.warning("Transcription requested but no transcription client is configured")
            return ""

        try:
            text = await self.queue.enqueue(
                lambda: self.transcription_client.transcribe(audio, filename)
            )
        except Exception as e:
            logger.error(f"Transcription failed: {e}")
            return ""

        return (text or "").strip()
