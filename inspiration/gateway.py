"""
AI gateway: one interface, two interchangeable backends.

- ``ProxyGateway`` posts OpenAI-style chat completions to an HTTP endpoint
  (DeepSeek by default) and asks for the JSON shape in the prompt itself.
- ``GenAIGateway`` calls Gemini through the Google Gen AI SDK and declares a
  response schema for note analysis.

``build_gateway`` picks one from settings; callers only see ``AIGateway``.
Every call is recorded in the ``DebugLog`` (request, then response or error).
"""
from __future__ import annotations
from abc import ABC, abstractmethod
import json
import logging
import re
from typing import Literal, Optional

import httpx
import requests
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import ValidationError as PydanticValidationError

from .config import Settings
from .debuglog import DebugLog
from .errors import InspirationError, ParseError, UpstreamError, ValidationError
from .prompts import analysis_prompt, chat_prompt, document_prompt
from .schemas import CATEGORIES, DOCUMENT_ACTIONS, AIAnalysis

log = logging.getLogger("inspiration.ai")

Task = Literal["analysis", "document", "chat"]

_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*\n?(.*?)\n?```$", re.DOTALL)


def strip_code_fence(text: str) -> str:
    """Models like to wrap JSON in ```json fences even when told not to."""
    text = text.strip()
    m = _FENCE_RE.match(text)
    return m.group(1).strip() if m else text


def parse_json(text: str) -> object:
    try:
        return json.loads(strip_code_fence(text))
    except json.JSONDecodeError as e:
        raise ParseError(f"AI response is not valid JSON: {e.msg}") from e


def parse_analysis(text: str) -> AIAnalysis:
    data = parse_json(text)
    try:
        return AIAnalysis.model_validate(data)
    except PydanticValidationError as e:
        raise ParseError(f"AI analysis has the wrong shape: {e.error_count()} problem(s)") from e


class AIGateway(ABC):
    # When False the backend enforces the analysis shape with a declared schema
    describe_shape_in_prompt = True

    def __init__(self, debug_log: DebugLog):
        self.debug_log = debug_log

    @abstractmethod
    def model_for(self, task: Task) -> str:
        ...

    @abstractmethod
    def _complete(self, prompt: str, task: Task) -> str:
        """Send one prompt; return the text. Raise UpstreamError on failure."""

    def _call(self, prompt: str, task: Task) -> str:
        model = self.model_for(task)
        self.debug_log.add("request", model, prompt, {"json_mode": task == "analysis"})
        try:
            text = self._complete(prompt, task)
            if not isinstance(text, str):
                raise UpstreamError(f"reply is {type(text).__name__}, not text")
        except UpstreamError as e:
            self.debug_log.add("error", model, e.message, {"status": e.status})
            log.warning("AI call to %s failed: %s", model, e)
            raise
        except InspirationError as e:
            self.debug_log.add("error", model, str(e))
            raise
        except Exception as e:
            # anything else from a backend is still an upstream fault, not a 500
            err = UpstreamError(str(e) or repr(e))
            self.debug_log.add("error", model, err.message)
            log.exception("AI call to %s failed unexpectedly", model)
            raise err from e
        self.debug_log.add(
            "response",
            model,
            text,
            {"prompt_length": len(prompt), "response_length": len(text)},
        )
        return text

    # ---------- operations ----------
    def analyze_note(self, content: str) -> AIAnalysis:
        prompt = analysis_prompt(content, describe_shape=self.describe_shape_in_prompt)
        return parse_analysis(self._call(prompt, "analysis"))

    def process_document(self, content: str, action: str) -> str:
        if action not in DOCUMENT_ACTIONS:
            raise ValidationError(f"Unknown document action: {action!r}")
        return self._call(document_prompt(content, action), "document")

    def chat_with_context(self, content: str, context: str, message: str) -> str:
        return self._call(chat_prompt(content, context, message), "chat")


class ProxyGateway(AIGateway):
    def __init__(
        self,
        debug_log: DebugLog,
        url: str,
        model: str = "deepseek-chat",
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        super().__init__(debug_log)
        self.url = url
        self.model = model
        self.api_key = api_key
        self.timeout = timeout

    def model_for(self, task: Task) -> str:
        return self.model

    def _complete(self, prompt: str, task: Task) -> str:
        payload = {
            "model": self.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if task == "analysis":
            payload["response_format"] = {"type": "json_object"}
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            r = requests.post(self.url, json=payload, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise UpstreamError(str(e)) from e
        if not r.ok:
            raise UpstreamError(_error_message(r), status=r.status_code)
        try:
            data = r.json()
        except ValueError as e:
            raise UpstreamError("response body is not JSON", status=r.status_code) from e

        if not isinstance(data, dict):
            raise UpstreamError("response body is not a JSON object", status=r.status_code)
        choices = data.get("choices") or []
        if not choices:
            return ""
        first = choices[0] if isinstance(choices, list) else None
        message = first.get("message") if isinstance(first, dict) else None
        if not isinstance(first, dict) or not isinstance(message, (dict, type(None))):
            raise UpstreamError("malformed choices in response", status=r.status_code)
        content = (message or {}).get("content")
        if content is None:
            return ""
        if not isinstance(content, str):
            raise UpstreamError("message content is not text", status=r.status_code)
        return content


def _error_message(r: requests.Response) -> str:
    try:
        err = r.json().get("error")
    except (ValueError, AttributeError):
        err = None
    if isinstance(err, dict):
        err = err.get("message")
    return str(err) if err else f"HTTP {r.status_code}"


ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "topic": types.Schema(type=types.Type.STRING, description="笔记讨论的核心话题"),
        "people": types.Schema(
            type=types.Type.ARRAY,
            items=types.Schema(type=types.Type.STRING),
            description="提到的人名或称呼",
        ),
        "category": types.Schema(
            type=types.Type.STRING,
            enum=list(CATEGORIES),
            description="所属类别",
        ),
        "summary": types.Schema(type=types.Type.STRING, description="一句话摘要"),
    },
    required=["topic", "people", "category", "summary"],
)


class GenAIGateway(AIGateway):
    describe_shape_in_prompt = False

    def __init__(
        self,
        debug_log: DebugLog,
        api_key: Optional[str],
        analysis_model: str = "gemini-3-flash-preview",
        document_model: str = "gemini-3.1-pro-preview",
        client: Optional[genai.Client] = None,
    ):
        super().__init__(debug_log)
        self.api_key = api_key
        self.analysis_model = analysis_model
        self.document_model = document_model
        self._client = client

    def model_for(self, task: Task) -> str:
        return self.analysis_model if task == "analysis" else self.document_model

    def _get_client(self) -> genai.Client:
        if self._client is None:
            if not self.api_key:
                raise UpstreamError("GEMINI_API_KEY is not set")
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    def _complete(self, prompt: str, task: Task) -> str:
        config = None
        if task == "analysis":
            config = types.GenerateContentConfig(
                response_mime_type="application/json",
                response_schema=ANALYSIS_SCHEMA,
            )
        client = self._get_client()
        try:
            resp = client.models.generate_content(
                model=self.model_for(task),
                contents=prompt,
                config=config,
            )
        except genai_errors.APIError as e:
            raise UpstreamError(e.message or str(e), status=e.code) from e
        except httpx.HTTPError as e:
            raise UpstreamError(str(e)) from e
        return resp.text or ""


def build_gateway(settings: Settings, debug_log: DebugLog) -> AIGateway:
    if settings.ai_provider == "genai":
        return GenAIGateway(
            debug_log,
            api_key=settings.gemini_api_key,
            analysis_model=settings.genai_analysis_model,
            document_model=settings.genai_document_model,
        )
    return ProxyGateway(
        debug_log,
        url=settings.proxy_url,
        model=settings.proxy_model,
        api_key=settings.proxy_api_key,
        timeout=settings.ai_timeout_seconds,
    )
