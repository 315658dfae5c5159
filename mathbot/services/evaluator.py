"""Client for the remote Math.js expression evaluator."""

from __future__ import annotations

from urllib.parse import quote

import httpx

from mathbot.config import EvaluatorSettings
from mathbot.domain.models import Evaluation
from mathbot.logging import logger
from mathbot.services.exceptions import EvaluationError

FALLBACK_ERROR_MESSAGE = "Could not evaluate the expression."
TEXTUAL_CONTENT_TYPES = ("text/", "application/json")


class MathJsEvaluator:
    """Send one expression per call to the evaluator and report its reply.

    The remote service is the only source of mathematical truth: a 2xx body is
    returned verbatim as the answer, and nothing is cached or retried.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: EvaluatorSettings | None = None,
    ) -> None:
        self._client = http_client
        self._settings = settings or EvaluatorSettings()

    async def evaluate(self, query: str) -> Evaluation:
        logger.info("evaluation_started", query=query)
        try:
            answer = await self._request(query)
        except EvaluationError as exc:
            logger.info(
                "evaluation_failed",
                query=query,
                status_code=exc.status_code,
                error=exc.message,
            )
            return Evaluation.failure(exc.message)
        logger.info("evaluation_succeeded", query=query)
        return Evaluation.success(answer)

    def build_url(self, query: str) -> str:
        base = str(self._settings.base_url)
        separator = "&" if "?" in base else "?"
        return f"{base}{separator}expr={quote(query, safe='')}"

    async def _request(self, query: str) -> str:
        url = self.build_url(query)
        try:
            response = await self._client.get(
                url,
                timeout=self._settings.request_timeout_seconds,
            )
        except httpx.TimeoutException as exc:
            logger.warning("evaluation_timeout", url=url, error=str(exc))
            raise EvaluationError(FALLBACK_ERROR_MESSAGE) from exc
        except httpx.RequestError as exc:
            logger.warning("evaluation_transport_error", url=url, error=str(exc))
            raise EvaluationError(FALLBACK_ERROR_MESSAGE) from exc

        if 200 <= response.status_code < 300:
            return response.text
        message = _error_text(response) or FALLBACK_ERROR_MESSAGE
        raise EvaluationError(message, status_code=response.status_code)


def _error_text(response: httpx.Response) -> str | None:
    content_type = (response.headers.get("content-type") or "").lower()
    if content_type and not content_type.startswith(TEXTUAL_CONTENT_TYPES):
        return None
    text = response.text
    if not text or not text.strip():
        return None
    return text


__all__ = ["FALLBACK_ERROR_MESSAGE", "MathJsEvaluator"]
