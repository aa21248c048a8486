"""Test doubles shared across test suites"""

from typing import Any, Dict, List, Optional


class FakeAdvisoryClient:
    """Stands in for AdvisoryClient: returns a canned answer or raises"""

    def __init__(self, response: Optional[Dict[str, Any]] = None, error: Optional[Exception] = None):
        self.response = response
        self.error = error
        self.calls: List[Dict[str, str]] = []

    async def request_plan(self, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
        self.calls.append({"system_prompt": system_prompt, "user_prompt": user_prompt})
        if self.error is not None:
            raise self.error
        return self.response
