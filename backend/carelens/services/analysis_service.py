"""
AI analysis client.

Turns symptoms and profile data into chat instructions for the external
text-generation service and parses its JSON reply. There is no local rules
engine: the instruction text is the only place domain knowledge enters.
Every failure (transport, empty reply, malformed or mis-shaped JSON) is
raised as AnalysisError. Nothing is retried.
"""

import json
import logging
from datetime import date
from functools import lru_cache
from typing import List, Optional, Protocol, Type, TypeVar

from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError

from ..config import Settings, get_settings
from ..errors import AnalysisError
from ..models.analysis import ProfileContext, RiskAssessment, SymptomAnalysis
from ..models.user import Profile

logger = logging.getLogger(__name__)

ResultT = TypeVar("ResultT", bound=BaseModel)


SYMPTOM_SYSTEM_PROMPT = (
    "You are a medical assistant. Analyze symptoms and provide potential conditions "
    "and recommendations in JSON format with the following structure: "
    "{ conditions: [{ name: string, confidence: number between 0 and 1, "
    "severity: 'low' | 'medium' | 'high' }], recommendations: string[], "
    "emergencyWarning?: string }. "
    "Only include emergencyWarning when the symptoms may need urgent care."
)

RISK_SYSTEM_PROMPT = (
    "You are a health risk assessment expert. Analyze the health profile and provide "
    "risk assessment in JSON format with the following structure: "
    "{ riskFactors: [{ condition: string, risk: integer 0-100, factors: string[], "
    "recommendations: string[] }], overallHealth: { score: integer 0-100, summary: string } }"
)

SYMPTOM_FAILURE = "Failed to analyze symptoms"
RISK_FAILURE = "Failed to assess health risks"


class ChatCompletionPort(Protocol):
    async def complete_json(self, model: str, messages: List[dict]) -> Optional[str]:
        """
        Send chat-style messages, asking for a JSON object reply.
        Returns the raw reply text.
        """
        ...


class OpenAIChatAdapter(ChatCompletionPort):
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()
        self._client: Optional[AsyncOpenAI] = None
        self._init_client()

    def _init_client(self):
        api_key = self.settings.OPENAI_API_KEY
        if not api_key:
            logger.warning("OpenAI API key is missing; AI analysis is unavailable.")
            return
        self._client = AsyncOpenAI(api_key=api_key)

    async def complete_json(self, model: str, messages: List[dict]) -> Optional[str]:
        if not self._client:
            raise RuntimeError("OpenAI client not initialized (missing API key)")
        response = await self._client.chat.completions.create(
            model=model,
            messages=messages,
            response_format={"type": "json_object"},
        )
        if not response.choices:
            return None
        return response.choices[0].message.content


def compute_age(birth_date: date, today: Optional[date] = None) -> int:
    """Whole years elapsed since `birth_date`."""
    today = today or date.today()
    years = today.year - birth_date.year
    if (today.month, today.day) < (birth_date.month, birth_date.day):
        years -= 1
    return years


def build_profile_context(profile: Profile, today: Optional[date] = None) -> ProfileContext:
    """Derive the prompt context from a stored profile."""
    return ProfileContext(
        age=compute_age(profile.date_of_birth, today) if profile.date_of_birth else None,
        gender=profile.gender or None,
        medical_history=list(profile.medical_history),
        family_history=list(profile.family_history),
        # lifestyle flags are only answers once the profile has been filled in
        lifestyle=profile.lifestyle if profile.date_of_birth else None,
    )


def _yes_no(flag: bool) -> str:
    return "yes" if flag else "no"


def format_profile_context(context: ProfileContext) -> str:
    lines = ["Patient context:"]
    if context.age is not None:
        lines.append(f"- Age: {context.age}")
    if context.gender:
        lines.append(f"- Gender: {context.gender}")
    if context.medical_history:
        lines.append("- Medical history: " + ", ".join(context.medical_history))
    if context.family_history:
        lines.append("- Family history: " + ", ".join(context.family_history))
    if context.lifestyle:
        lifestyle = context.lifestyle
        lines.append(f"- Smoking: {_yes_no(lifestyle.smoking)}")
        lines.append(f"- Alcohol: {_yes_no(lifestyle.alcohol)}")
        if lifestyle.diet:
            lines.append("- Diet: " + ", ".join(lifestyle.diet))
        exercise = [p for p in (lifestyle.exercise.type, lifestyle.exercise.frequency, lifestyle.exercise.duration) if p]
        if exercise:
            lines.append("- Exercise: " + ", ".join(exercise))
    return "\n".join(lines)


def build_symptom_prompt(symptoms: List[str], context: Optional[ProfileContext] = None) -> str:
    prompt = "Analyze these symptoms: " + ", ".join(symptoms)
    if context is not None:
        prompt += "\n\n" + format_profile_context(context)
    return prompt


def build_risk_prompt(profile: Profile) -> str:
    return "Analyze this health profile: " + profile.model_dump_json(by_alias=True)


def _extract_json_object(raw: str) -> str:
    raw = raw.strip()
    if not raw.startswith("{"):
        start_idx = raw.find("{")
        if start_idx != -1:
            raw = raw[start_idx:]
    if not raw.endswith("}"):
        end_idx = raw.rfind("}")
        if end_idx != -1:
            raw = raw[:end_idx + 1]
    return raw


def parse_reply(raw: Optional[str], result_model: Type[ResultT], failure: str) -> ResultT:
    """Parse the raw reply text into `result_model` or raise AnalysisError."""
    if raw is None or not raw.strip():
        raise AnalysisError(failure, "empty response from AI service")

    try:
        data = json.loads(_extract_json_object(raw))
    except json.JSONDecodeError as e:
        raise AnalysisError(failure, f"malformed JSON: {e}") from e

    if not isinstance(data, dict):
        raise AnalysisError(failure, f"expected a JSON object, got {type(data).__name__}")

    try:
        return result_model.model_validate(data)
    except ValidationError as e:
        raise AnalysisError(failure, f"unexpected reply shape: {e}") from e


class AnalysisService:
    """Symptom analysis and risk assessment against an external chat model."""

    def __init__(self, llm: ChatCompletionPort, model: str = "gpt-4o"):
        self.llm = llm
        self.model = model

    async def _request(self, messages: List[dict], result_model: Type[ResultT], failure: str) -> ResultT:
        try:
            raw = await self.llm.complete_json(self.model, messages)
        except Exception as e:
            raise AnalysisError(failure, f"{type(e).__name__}: {e}") from e
        return parse_reply(raw, result_model, failure)

    async def analyze_symptoms(
        self,
        symptoms: List[str],
        profile: Optional[ProfileContext] = None
    ) -> SymptomAnalysis:
        messages = [
            {"role": "system", "content": SYMPTOM_SYSTEM_PROMPT},
            {"role": "user", "content": build_symptom_prompt(symptoms, profile)},
        ]
        return await self._request(messages, SymptomAnalysis, SYMPTOM_FAILURE)

    async def assess_health_risks(self, profile: Profile) -> RiskAssessment:
        messages = [
            {"role": "system", "content": RISK_SYSTEM_PROMPT},
            {"role": "user", "content": build_risk_prompt(profile)},
        ]
        return await self._request(messages, RiskAssessment, RISK_FAILURE)


@lru_cache()
def get_analysis_service() -> AnalysisService:
    """FastAPI dependency for the AI analysis client."""
    settings = get_settings()
    return AnalysisService(OpenAIChatAdapter(settings), settings.OPENAI_MODEL)
