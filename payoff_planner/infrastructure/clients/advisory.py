"""Advisory HTTP client for OpenAI-compatible chat completion endpoints"""

import json
import re
import httpx
from typing import Any, Dict
from payoff_planner.domain.exceptions import AdvisoryAPIError
from payoff_planner.config import settings
from payoff_planner.infrastructure.observability.metrics import advisory_latency_histogram, advisory_failure_counter

# Models often wrap JSON answers in ```json ... ``` fences
CODE_FENCE_PATTERN = re.compile(r"```json\n?|```")


def strip_code_fences(content: str) -> str:
    """Remove markdown code fences around a JSON answer"""
    return CODE_FENCE_PATTERN.sub("", content).strip()


class AdvisoryClient:
    """Client for the external advisory process"""

    def __init__(
        self,
        endpoint: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.endpoint = endpoint or settings.advisory_endpoint
        self.model = model or settings.advisory_model
        self.temperature = settings.advisory_temperature if temperature is None else temperature
        self.api_key = api_key or settings.advisory_api_key
        self.timeout = timeout or settings.advisory_timeout_seconds
        self.transport = transport

    async def request_plan(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        """
        Send one chat completion request and return the parsed JSON answer.

        Makes exactly one attempt; no retries.

        Raises:
            AdvisoryAPIError: On network errors, non-2xx responses, a malformed
                envelope, or content that is not a JSON object
        """
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.temperature,
            "stream": False,
        }

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                with advisory_latency_histogram.time():
                    response = await client.post(self.endpoint, json=body, headers=headers)
                response.raise_for_status()

                content = response.json()["choices"][0]["message"]["content"]
                result = json.loads(strip_code_fences(content))

            except httpx.HTTPStatusError as e:
                advisory_failure_counter.inc()
                raise AdvisoryAPIError(f"Advisory API error: {e.response.status_code}") from e
            except httpx.HTTPError as e:
                advisory_failure_counter.inc()
                raise AdvisoryAPIError(f"Advisory API unreachable: {e}") from e
            except httpx.InvalidURL as e:
                advisory_failure_counter.inc()
                raise AdvisoryAPIError(f"Advisory endpoint is not a valid URL: {e}") from e
            except (KeyError, IndexError, TypeError, ValueError) as e:
                advisory_failure_counter.inc()
                raise AdvisoryAPIError(f"Invalid advisory response: {e}") from e

        if not isinstance(result, dict):
            advisory_failure_counter.inc()
            raise AdvisoryAPIError("Advisory response is not a JSON object")

        return result
