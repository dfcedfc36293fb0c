"""Ordered credential pool with immediate failover on quota/availability errors."""
from __future__ import annotations

import logging
import os
from typing import Awaitable, Callable, Iterable, Iterator, Optional, Sequence, Tuple, TypeVar

from .llm_gateway import LlmGatewayError, LlmStatusError

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 503})

T = TypeVar("T")


class AllCredentialsFailedError(LlmGatewayError):
    """Every credential in the pool hit a retryable error."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]) -> None:
        super().__init__(f"All {attempts} credentials failed")
        self.attempts = attempts
        self.last_error = last_error


class CredentialPool:
    """Immutable, ordered set of interchangeable API credentials."""

    def __init__(self, credentials: Iterable[str]) -> None:
        self._credentials: Tuple[str, ...] = tuple(item for item in credentials if item)

    @classmethod
    def from_env(cls, names: Sequence[str]) -> "CredentialPool":
        """Build a pool from environment variables, skipping unset names."""
        values = []
        for name in names:
            value = os.getenv(name)
            if value:
                values.append(value)
            else:
                logger.warning("Credential env var %s is not set; skipping", name)
        return cls(values)

    def __iter__(self) -> Iterator[str]:
        return iter(self._credentials)

    def __len__(self) -> int:
        return len(self._credentials)

    def __repr__(self) -> str:  # never leak secrets
        return f"CredentialPool(size={len(self._credentials)})"


def is_quota_error(exc: BaseException) -> bool:
    """Rate-limit and service-unavailable responses are worth another credential."""
    return isinstance(exc, LlmStatusError) and exc.status_code in RETRYABLE_STATUS_CODES


async def dispatch(
    pool: CredentialPool,
    attempt: Callable[[str], Awaitable[T]],
    *,
    is_retryable: Callable[[BaseException], bool] = is_quota_error,
) -> T:
    """Run ``attempt`` with each credential in order until one succeeds.

    The same request is replayed unmodified. Non-retryable errors propagate
    immediately; exhausting the pool raises :class:`AllCredentialsFailedError`.
    """

    last_error: Optional[BaseException] = None
    for index, credential in enumerate(pool):
        try:
            return await attempt(credential)
        except Exception as exc:
            if not is_retryable(exc):
                raise
            logger.warning(
                "Credential %d/%d rejected (%s); failing over",
                index + 1,
                len(pool),
                exc,
            )
            last_error = exc
    raise AllCredentialsFailedError(len(pool), last_error) from last_error
