"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from payoff_planner.infrastructure.clients.advisory import AdvisoryClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_advisory_client() -> AdvisoryClient:
    """Provide advisory process client instance"""
    return AdvisoryClient()
