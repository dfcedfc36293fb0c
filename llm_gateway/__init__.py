from __future__ import annotations  # Re-export llm_gateway public API

from .failover import AllCredentialsFailedError, CredentialPool, dispatch, is_quota_error
from .llm_gateway import HttpClient, HttpResponse, LlmGatewayError, LlmStatusError, call, chat

__all__ = [
    "AllCredentialsFailedError",
    "CredentialPool",
    "HttpClient",
    "HttpResponse",
    "LlmGatewayError",
    "LlmStatusError",
    "call",
    "chat",
    "dispatch",
    "is_quota_error",
]
