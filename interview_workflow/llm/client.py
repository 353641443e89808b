"""
HTTP client for a llama.cpp-style /completion server.
Transport failures are retried here with linear backoff and then raised as
ConnectionError; nothing above this layer retries.
"""
import json
import time
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import requests

from interview_workflow.utils.config import LLMConfig, config
from interview_workflow.utils.cleaning import ResponseCleaner

logger = logging.getLogger(__name__)

RETRY_BACKOFF_SECONDS = 0.5

QUESTION_STOPS = ["Candidate:", "Answer:", "Q:", "A:"]
JSON_STOPS = ["\n\n\n"]


@dataclass
class Completion:
    """One completion returned by the server."""
    text: str
    tokens: int = 0
    raw: Dict[str, Any] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return not self.text.strip()


class LLMClient:
    def __init__(self, llm_config: Optional[LLMConfig] = None, session: Optional[requests.Session] = None):
        self.settings = llm_config or config.llm
        if not self.settings.base_url:
            raise ValueError("LLM base URL is not configured (set LLM_URL)")
        self.url = self.settings.completion_url
        self.http = session or requests.Session()
        logger.info(f"LLM client ready at {self.url} (timeout={self.settings.timeout}s, retries={self.settings.max_retries})")

    def _post(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        attempts = self.settings.max_retries + 1
        error: Optional[Exception] = None

        for attempt in range(1, attempts + 1):
            try:
                reply = self.http.post(self.url, json=payload, timeout=self.settings.timeout)
                reply.raise_for_status()
                return reply.json()
            except requests.exceptions.RequestException as e:
                error = e
                logger.warning(f"LLM request attempt {attempt}/{attempts} failed: {e}")
                if attempt < attempts:
                    time.sleep(RETRY_BACKOFF_SECONDS * attempt)

        raise ConnectionError(f"LLM server unreachable after {attempts} attempts: {error}")

    def complete(
        self,
        prompt: str,
        max_tokens: int = 200,
        temperature: Optional[float] = None,
        stop: Optional[List[str]] = None,
    ) -> Completion:
        """
        Run one completion.

        Args:
            prompt: Full prompt text
            max_tokens: Sent as n_predict
            temperature: None means the configured default
            stop: Stop sequences

        Raises:
            ConnectionError: if the server stays unreachable after retries
        """
        payload: Dict[str, Any] = {
            "prompt": prompt,
            "n_predict": max_tokens,
            "temperature": self.settings.default_temperature if temperature is None else temperature,
            "top_p": self.settings.default_top_p,
            "repeat_penalty": self.settings.default_repeat_penalty,
        }
        if stop:
            payload["stop"] = stop

        body = self._post(payload)
        return Completion(
            text=body.get("content", ""),
            tokens=body.get("tokens_predicted", 0),
            raw=body,
        )

    def ask_text(self, prompt: str, max_tokens: int = 400) -> str:
        """Free text with reasoning blocks removed."""
        return ResponseCleaner.strip_reasoning(self.complete(prompt, max_tokens=max_tokens).text)

    def ask_question(self, prompt: str, max_tokens: int = 200) -> Tuple[str, bool]:
        """
        Returns:
            (question, usable) after cleaning
        """
        completion = self.complete(prompt, max_tokens=max_tokens, temperature=0.7, stop=QUESTION_STOPS)
        if completion.empty:
            logger.warning(f"Empty question completion: {completion.raw}")
            return "", False

        question, usable = ResponseCleaner.clean_question(completion.text)
        logger.debug(f"Question usable={usable}: {question[:100]}")
        return question, usable

    def ask_json(self, prompt: str, max_tokens: int = 400) -> Optional[Dict[str, Any]]:
        """The completion's JSON object, or None when there is none."""
        completion = self.complete(prompt, max_tokens=max_tokens, temperature=0.0, stop=JSON_STOPS)
        if completion.empty:
            return None

        candidate = ResponseCleaner.clean_json_response(completion.text)
        for text in (candidate, candidate.replace(",}", "}").replace(",]", "]")):
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                continue
            return parsed if isinstance(parsed, dict) else None

        logger.warning(f"Completion was not JSON: {completion.text[:200]}")
        return None
