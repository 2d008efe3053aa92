"""HTTP client for the DashScope OpenAI-compatible chat-completions API.

Uses httpx with configurable timeouts and tenacity for retry with
exponential backoff on 5xx responses, connection errors and read timeouts.
"""

import logging

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from config import settings
from prompts import SYSTEM_PROMPT, agent_json_schema

logger = logging.getLogger(__name__)


class LLMServiceUnavailable(Exception):
    """LLM service is temporarily unavailable (retryable — 5xx, connection error)."""


class LLMServiceTimeout(LLMServiceUnavailable):
    """LLM service did not answer within the read timeout."""


class LLMServiceError(Exception):
    """LLM service returned a non-retryable error (4xx, malformed body)."""


class DashScopeClient:
    """Chat-completions client with JSON Schema constrained output."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: int | None = None,
        connect_timeout: int | None = None,
        retry_attempts: int | None = None,
        retry_delay: float | None = None,
        retry_backoff: float | None = None,
        timeout_enabled: bool | None = None,
    ):
        self._endpoint = base_url or settings.DASHSCOPE_ENDPOINT
        self._model = model or settings.DASHSCOPE_MODEL
        self._retry_attempts = retry_attempts if retry_attempts is not None else settings.LLM_RETRY_ATTEMPTS
        self._retry_delay = retry_delay if retry_delay is not None else settings.LLM_RETRY_DELAY
        self._retry_backoff = retry_backoff if retry_backoff is not None else settings.LLM_RETRY_BACKOFF

        key = api_key if api_key is not None else settings.DASHSCOPE_API_KEY
        enabled = timeout_enabled if timeout_enabled is not None else settings.LLM_TIMEOUT_ENABLED
        read_timeout = timeout if timeout is not None else settings.LLM_TIMEOUT_SECONDS
        conn_timeout = connect_timeout if connect_timeout is not None else settings.LLM_CONNECT_TIMEOUT

        self._client = httpx.Client(
            headers={"Authorization": f"Bearer {key}"},
            timeout=httpx.Timeout(
                connect=float(conn_timeout),
                read=float(read_timeout) if enabled else None,
                write=30.0,
                pool=30.0,
            ),
        )

    @property
    def model(self) -> str:
        return self._model

    def close(self):
        self._client.close()

    def chat(self, prompt: str) -> dict:
        """Send the user prompt and return the decoded chat-completions response.

        Raises LLMServiceUnavailable / LLMServiceTimeout (retryable) or
        LLMServiceError (non-retryable).
        """
        payload = {
            "model": self._model,
            "response_format": {
                "type": "json_schema",
                "json_schema": {
                    "name": "agent_extract_schema",
                    "schema": agent_json_schema(),
                    "strict": True,
                },
            },
            "messages": [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
        }
        return self._chat_with_retry(payload)

    def _chat_with_retry(self, payload: dict) -> dict:
        """Retry wrapper — configured dynamically based on settings."""

        @retry(
            retry=retry_if_exception_type(LLMServiceUnavailable),
            stop=stop_after_attempt(self._retry_attempts),
            wait=wait_exponential(
                multiplier=self._retry_delay,
                exp_base=self._retry_backoff,
                max=30,
            ),
            reraise=True,
            before_sleep=lambda state: logger.warning(
                "LLM service unavailable, retrying in %.1fs (attempt %d/%d)",
                state.next_action.sleep,  # type: ignore[union-attr]
                state.attempt_number,
                self._retry_attempts,
            ),
        )
        def _do_chat() -> dict:
            return self._send_chat(payload)

        return _do_chat()

    def _send_chat(self, payload: dict) -> dict:
        """Send a single chat-completions request."""
        try:
            resp = self._client.post(self._endpoint, json=payload)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            logger.warning("LLM service connection failed: %s", e)
            raise LLMServiceUnavailable(f"Cannot connect to LLM service: {e}") from e
        except httpx.ReadTimeout as e:
            logger.warning("LLM service read timeout: %s", e)
            raise LLMServiceTimeout(f"LLM service read timeout: {e}") from e
        except httpx.HTTPError as e:
            logger.error("LLM service HTTP error: %s", e)
            raise LLMServiceError(f"LLM service HTTP error: {e}") from e

        if resp.status_code >= 500:
            logger.warning("LLM service returned %d: %s", resp.status_code, resp.text[:200])
            raise LLMServiceUnavailable(f"LLM service returned HTTP {resp.status_code}")

        if resp.status_code != 200:
            logger.error("LLM service error %d: %s", resp.status_code, resp.text[:200])
            raise LLMServiceError(f"LLM call failed: HTTP {resp.status_code} {resp.text[:200]}")

        try:
            data = resp.json()
        except ValueError as e:
            raise LLMServiceError(f"LLM service returned a non-JSON body: {e}") from e

        if not isinstance(data, dict):
            raise LLMServiceError("LLM service returned an unexpected response shape")
        return data
