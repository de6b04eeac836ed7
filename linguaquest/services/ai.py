"""
AI Service - wrapper over the Claude API (Anthropic) with OpenAI fallback.
Implements both collaborators of the core: the exercise content generator
and the coaching analysis generator.

AICODE-NOTE: The core never depends on this service. Recording progress
and building stats work with the AI provider down.
"""

import json
import logging
import time
from functools import lru_cache
from typing import Any

from anthropic import (
    APIConnectionError as AnthropicAPIConnectionError,
)
from anthropic import (
    APIError as AnthropicAPIError,
)
from anthropic import (
    AsyncAnthropic,
)
from anthropic import (
    RateLimitError as AnthropicRateLimitError,
)
from openai import APIConnectionError, APIError, AsyncOpenAI, RateLimitError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from linguaquest.config import config

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """Provider failed after retries, or answered with unusable output."""


# === PROMPTS ===

SYSTEM_PROMPT = """You are an expert Business English teacher and course creator.
Respond with valid JSON only: no markdown fences, no text outside the JSON."""

CONTENT_SCHEMA: dict[str, str] = {
    "grammar": """{
  "questions": [
    {"id": "1", "sentence": "The client ___ the contract yesterday.",
     "options": ["sign", "signed", "has signed", "was signing"],
     "correctAnswer": "signed",
     "explanation": "Past simple is used for completed actions at a specific time."}
  ]
}
3-5 questions. The blank is always ___. 4 distinct options; correctAnswer must match one.""",
    "vocabulary": """{
  "cards": [
    {"id": "1", "word": "Leverage", "definition": "Advantage used to achieve a goal",
     "example": "Our pipeline gives us leverage in the negotiation.",
     "businessContext": "Negotiation and strategy discussions."}
  ]
}
4-6 cards.""",
    "reading": """{
  "passage": {"title": "Q2 Performance Update", "type": "email",
              "content": "Business document, 150-250 words.", "wordCount": 180},
  "questions": [
    {"id": "1", "question": "What is the main purpose of this document?",
     "type": "multiple-choice", "options": ["A", "B", "C", "D"],
     "correctAnswer": "B", "explanation": "The document states..."}
  ]
}
3 questions, mix multiple-choice and true-false. passage.type: email | article | report | memo.""",
    "writing": """{
  "prompt": {"id": "1", "title": "Complaint Email", "scenario": "Scenario for the student",
             "context": "email", "targetAudience": "client", "desiredTone": "professional",
             "wordCountMin": 100, "wordCountMax": 200}
}
context: email | presentation | report | meeting. targetAudience: colleague | manager | client | team.""",
    "speaking": """{
  "prompt": {"id": "1", "question": "Present the Q3 results to the board in 2 minutes.",
             "sampleAnswer": "Example answer of 60-80 words",
             "tips": ["Be concise", "Lead with the headline number"],
             "maxDurationSeconds": 60}
}""",
}

DIFFICULTY_GUIDANCE: dict[str, str] = {
    "easy": "Beginner level. Simple, common vocabulary. Short sentences. Clear context.",
    "medium": "Intermediate. Business terminology expected. Realistic scenarios.",
    "hard": "Advanced. Complex grammar, nuanced vocabulary, multi-step scenarios.",
}

EXERCISE_PROMPT = """Generate ONE fresh {exercise_type} exercise.

STUDENT PROFILE:
- Overall level: {overall_level} | {exercise_type} skill level: {skill_level}/10
- Average accuracy: {avg_accuracy}% -> target difficulty: {difficulty}
- {guidance}

RECENTLY COMPLETED (DO NOT REPEAT THESE TOPICS):
{avoid_topics}

Business English focus (workplace, professional communication).
Return ONLY JSON matching this schema:
{schema}"""

COACH_PROMPT = """STUDENT DATA:
- Overall level: {overall_level} | Total XP: {total_xp} | Streak: {current_streak} days
- Skills: {skills}
- Exercise history by type: {history}
- Last exercises: {recent}

{instruction}

Return ONLY a compact JSON object:
{{"overallAssessment": "max 2 sentences",
 "strengths": [{{"skill": "name", "insight": "max 15 words"}}],
 "weaknesses": [{{"skill": "name", "insight": "max 15 words", "priority": "high|medium|low"}}],
 "recommendations": [{{"title": "max 5 words", "description": "max 20 words",
   "exerciseType": "grammar|vocabulary|reading|writing|speaking",
   "focusArea": "max 8 words", "why": "max 15 words"}}],
 "nextSession": {{"suggestedTypes": ["type"], "suggestedDifficulty": "easy|medium|hard",
   "focus": "max 15 words"}},
 "motivationalNote": "max 20 words"}}
Max 2 strengths, 2 weaknesses, 2 recommendations."""

COACH_NEW_STUDENT = (
    "The student has no history yet: give a welcoming onboarding analysis, "
    "suggest where to start and which skills to prioritise first."
)
COACH_WITH_HISTORY = "Analyse the data and give specific, data-driven feedback."


def parse_json_response(response: str) -> Any:
    """
    Extract JSON from a model answer, tolerating ``` fences.

    Raises:
        json.JSONDecodeError if nothing parseable is left
    """
    response = response.strip()
    if response.startswith("```"):
        response = response.split("```")[1].strip()
        if response.startswith("json"):
            response = response[4:].strip()
    return json.loads(response)


class AIService:
    def __init__(self):
        """
        Init the AI client from config.AI_PROVIDER.

        Providers:
        - "anthropic" (default): Claude
        - "openai": OpenAI (fallback)
        """
        self.provider = config.AI_PROVIDER.lower()

        if self.provider == "anthropic":
            if not config.ANTHROPIC_KEY:
                raise ValueError("ANTHROPIC_KEY required for AI_PROVIDER=anthropic")
            self.client = AsyncAnthropic(
                api_key=config.ANTHROPIC_KEY.get_secret_value(),
                timeout=60.0,
            )
            self.model = config.ANTHROPIC_MODEL
        else:
            if not config.OPENAI_KEY:
                raise ValueError("OPENAI_KEY required for AI_PROVIDER=openai")
            self.client = AsyncOpenAI(
                api_key=config.OPENAI_KEY.get_secret_value(),
                timeout=60.0,
            )
            self.model = config.OPENAI_MODEL
            self.provider = "openai"

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=4, max=10),
        retry=retry_if_exception_type(
            (
                APIError,
                APIConnectionError,
                RateLimitError,
                AnthropicAPIError,
                AnthropicAPIConnectionError,
                AnthropicRateLimitError,
                ConnectionError,
            )
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _make_request(self, messages: list[dict[str, Any]], **kwargs) -> str:
        """
        Request to the provider API, with retries.

        AICODE-NOTE: Claude requires max_tokens and takes the system prompt
        separately; OpenAI takes it as a message.
        """
        start_time = time.time()
        try:
            if self.provider == "anthropic":
                max_tokens = kwargs.pop("max_tokens", 2048)

                system_content = ""
                user_messages = []
                for msg in messages:
                    if msg["role"] == "system":
                        system_content = msg["content"]
                    else:
                        user_messages.append(msg)

                response = await self.client.messages.create(
                    model=self.model,
                    max_tokens=max_tokens,
                    system=system_content,
                    messages=user_messages,
                    **kwargs,
                )
                latency = time.time() - start_time
                logger.info(f"Claude Request OK. Latency: {latency:.2f}s")
                return response.content[0].text
            else:
                response = await self.client.chat.completions.create(
                    model=self.model, messages=messages, **kwargs
                )
                latency = time.time() - start_time
                logger.info(f"OpenAI Request OK. Latency: {latency:.2f}s")
                return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"AI Request failed ({self.provider}): {e}")
            raise

    async def complete_json(self, prompt: str, **kwargs) -> Any:
        """
        Ask for a JSON answer.

        Raises:
            AIServiceError when the provider keeps failing or the answer
            is not JSON
        """
        messages = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": prompt},
        ]
        try:
            response = await self._make_request(messages, **kwargs)
        except Exception as e:
            raise AIServiceError(f"AI provider unavailable: {e}") from e

        try:
            return parse_json_response(response)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse AI response: {response[:500]}")
            raise AIServiceError("AI response is not valid JSON") from e

    async def generate_exercise_content(
        self,
        exercise_type: str,
        difficulty: str,
        overall_level: int,
        skill_level: int,
        avg_accuracy: float,
        avoid_titles: list[str],
    ) -> dict[str, Any]:
        """
        Generate the content payload of a new exercise.

        Returns:
            Raw payload (validated by the caller against its type schema)
        """
        if exercise_type not in CONTENT_SCHEMA:
            raise AIServiceError(f"No content template for {exercise_type}")

        prompt = EXERCISE_PROMPT.format(
            exercise_type=exercise_type,
            overall_level=overall_level,
            skill_level=skill_level,
            avg_accuracy=round(avg_accuracy),
            difficulty=difficulty,
            guidance=DIFFICULTY_GUIDANCE[difficulty],
            avoid_topics=", ".join(avoid_titles) or "None yet - this is the first exercise.",
            schema=CONTENT_SCHEMA[exercise_type],
        )
        payload = await self.complete_json(prompt, max_tokens=1500, temperature=0.9)
        if not isinstance(payload, dict):
            raise AIServiceError("Exercise content must be a JSON object")
        return payload

    async def generate_coach_analysis(self, context: dict[str, Any]) -> dict[str, Any]:
        """
        Generate coaching feedback from the learner's stats.

        Args:
            context: overall_level, total_xp, current_streak, skills,
                history (per type), recent (last exercises)
        """
        prompt = COACH_PROMPT.format(
            overall_level=context["overall_level"],
            total_xp=context["total_xp"],
            current_streak=context["current_streak"],
            skills=json.dumps(context["skills"]),
            history=json.dumps(context["history"]) if context["history"] else "None yet.",
            recent=json.dumps(context["recent"]) if context["recent"] else "None yet.",
            instruction=COACH_WITH_HISTORY if context["history"] else COACH_NEW_STUDENT,
        )
        analysis = await self.complete_json(prompt, max_tokens=4096)
        if not isinstance(analysis, dict):
            raise AIServiceError("Coach analysis must be a JSON object")
        return analysis


@lru_cache
def get_ai_service() -> AIService:
    """Shared AIService, created on first use."""
    return AIService()
