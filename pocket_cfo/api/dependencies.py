"""Dependency injection for FastAPI endpoints"""

from fastapi import Request
from pocket_cfo.infrastructure.clients.records import RecordStoreClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_records_client() -> RecordStoreClient:
    """Provide record store client instance"""
    return RecordStoreClient()
