import json
import logging
from typing import Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError, field_validator

from app.settings import Settings
from domain.errors import ModelClientError
from infra.llm.prompts import (
    CV_EVAL_PROMPT,
    FINAL_SUMMARY_PROMPT,
    PROJECT_EVAL_PROMPT,
)

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

OPENAI_CHAT_URL = "https://api.openai.com/v1/chat/completions"
OPENROUTER_CHAT_URL = "https://openrouter.ai/api/v1/chat/completions"

# fragments that only show up when the model echoes the prompt template
PLACEHOLDER_MARKERS = (
    "Your detailed feedback here",
    "Provide your actual",
    "<3-5 sentences",
    "<4-6 sentences",
    "<text>",
)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


def _feedback_text(value) -> str:
    if isinstance(value, str):
        text = value
    elif isinstance(value, list):
        text = "\n".join(f"- {str(item)}" for item in value if item is not None)
    else:
        raise ValueError("feedback must be a string or list of strings")
    text = text.strip()
    if not text:
        raise ValueError("feedback is empty")
    if any(marker in text for marker in PLACEHOLDER_MARKERS):
        raise ValueError("model returned placeholder text instead of actual feedback")
    return text


class CVEvaluation(BaseModel):
    cv_match_rate: float
    cv_feedback: str

    @field_validator("cv_match_rate")
    @classmethod
    def _clamp_rate(cls, value: float) -> float:
        return _clamp(value, 0.0, 1.0)

    @field_validator("cv_feedback", mode="before")
    @classmethod
    def _ensure_text(cls, value):
        return _feedback_text(value)


class ProjectEvaluation(BaseModel):
    project_score: float
    project_feedback: str

    @field_validator("project_score")
    @classmethod
    def _clamp_score(cls, value: float) -> float:
        return _clamp(value, 1.0, 5.0)

    @field_validator("project_feedback", mode="before")
    @classmethod
    def _ensure_text(cls, value):
        return _feedback_text(value)


class SummaryPayload(BaseModel):
    overall_summary: str

    @field_validator("overall_summary", mode="before")
    @classmethod
    def _ensure_text(cls, value):
        return _feedback_text(value)


def _validate_llm_response(raw_text: str, model: Type[T]) -> T:
    try:
        return model.model_validate_json(raw_text)
    except ValidationError as exc:
        # pydantic reports malformed JSON as a ValidationError too
        raise ModelClientError(f"LLM response failed validation: {exc}") from exc


class EvaluationModelClient:
    """Chat-completions calls for the three evaluation steps.

    One request per call, bounded by that call's timeout. Nothing is retried
    here; any transport, HTTP or parse failure surfaces as ModelClientError.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self._settings = settings
        self._transport = transport

    @property
    def provider(self) -> Optional[str]:
        if self._settings.OPENAI_API_KEY:
            return "openai"
        if self._settings.OPENROUTER_API_KEY:
            return "openrouter"
        return None

    def _endpoint(self):
        s = self._settings
        if s.OPENAI_API_KEY:
            headers = {"Authorization": f"Bearer {s.OPENAI_API_KEY}"}
            return OPENAI_CHAT_URL, headers, s.OPENAI_MODEL
        if s.OPENROUTER_API_KEY:
            headers = {
                "Authorization": f"Bearer {s.OPENROUTER_API_KEY}",
                "HTTP-Referer": "http://localhost",
                "X-Title": s.APP_NAME,
            }
            return OPENROUTER_CHAT_URL, headers, s.OPENROUTER_MODEL
        raise ModelClientError("No LLM provider configured")

    async def _chat(self, messages: List[Dict], *, timeout: float, temperature: float) -> str:
        url, headers, model = self._endpoint()
        payload = {
            "model": model,
            "messages": messages,
            "temperature": temperature,
            "response_format": {"type": "json_object"},
        }
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.post(url, headers=headers, json=payload)
            response.raise_for_status()
            data = response.json()
        except httpx.TimeoutException as exc:
            raise ModelClientError(f"LLM call timed out after {timeout:g}s") from exc
        except httpx.HTTPStatusError as exc:
            raise ModelClientError(
                f"LLM call failed with status {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise ModelClientError(f"LLM call failed: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise ModelClientError("LLM provider returned a non-JSON body") from exc

        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise ModelClientError("no response content from LLM provider") from exc
        if not content:
            raise ModelClientError("no response content from LLM provider")
        return content

    async def evaluate_cv(self, cv_text: str, context: str) -> CVEvaluation:
        limit = self._settings.LLM_MAX_INPUT_CHARS
        content = f"{CV_EVAL_PROMPT}\n\nReferences:\n{context}\n\nCV:\n{cv_text[:limit]}"
        messages = [
            {"role": "system", "content": "You are a technical recruiter. Always respond with valid JSON only, no markdown or extra text."},
            {"role": "user", "content": content},
        ]
        resp = await self._chat(messages, timeout=self._settings.CV_EVAL_TIMEOUT, temperature=0.3)
        logger.debug("CV evaluation raw response: %s", resp)
        return _validate_llm_response(resp, CVEvaluation)

    async def evaluate_project(self, report_text: str, context: str) -> ProjectEvaluation:
        limit = self._settings.LLM_MAX_INPUT_CHARS
        content = f"{PROJECT_EVAL_PROMPT}\n\nReferences:\n{context}\n\nReport:\n{report_text[:limit]}"
        messages = [
            {"role": "system", "content": "You are a technical evaluator. Always respond with valid JSON only, no markdown or extra text."},
            {"role": "user", "content": content},
        ]
        resp = await self._chat(messages, timeout=self._settings.PROJECT_EVAL_TIMEOUT, temperature=0.3)
        logger.debug("Project evaluation raw response: %s", resp)
        return _validate_llm_response(resp, ProjectEvaluation)

    async def generate_summary(self, cv_feedback: str, project_feedback: str,
                               cv_match_rate: float, project_score: float) -> str:
        content = (
            f"{FINAL_SUMMARY_PROMPT}\n\n"
            f"CV Evaluation:\n- Match Rate: {cv_match_rate:.2f}\n- Feedback: {cv_feedback}\n\n"
            f"Project Evaluation:\n- Score: {project_score:.1f}/5.0\n- Feedback: {project_feedback}"
        )
        messages = [
            {"role": "system", "content": "You are a hiring manager providing concise, actionable recommendations. Return only valid JSON."},
            {"role": "user", "content": content},
        ]
        resp = await self._chat(messages, timeout=self._settings.SUMMARY_TIMEOUT, temperature=0.4)
        return _validate_llm_response(resp, SummaryPayload).overall_summary
