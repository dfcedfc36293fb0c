from __future__ import annotations  # LLM request gateway module

import json
import logging
from typing import Any, Dict, List, Optional, Protocol, Sequence, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


Message = Dict[str, Any]


class HttpClient(Protocol):  # Minimal async HTTP client protocol
    async def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


class LlmStatusError(LlmGatewayError):  # Non-success HTTP status from the LLM endpoint
    def __init__(self, status_code: int, detail: str = "") -> None:
        super().__init__(f"LLM returned status {status_code}")
        self.status_code = status_code
        self.detail = detail


T = TypeVar("T", bound=BaseModel)


async def call(
    task: str,
    schema: Type[T],
    *,
    cfg: LlmRoute,
    api_key: Optional[str] = None,
    images: Sequence[str] = (),
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:  # Invoke configured LLM route with a single user task and validate output
    content: Any = task
    if images:
        content = [{"type": "text", "text": task}]
        content.extend({"type": "image_url", "image_url": {"url": uri}} for uri in images)
    return await chat(
        [{"role": "user", "content": content}],
        schema,
        cfg=cfg,
        api_key=api_key,
        client=client,
        options=options,
    )


async def chat(
    messages: Sequence[Message],
    schema: Type[T],
    *,
    cfg: LlmRoute,
    api_key: Optional[str] = None,
    client: Optional[HttpClient] = None,
    options: Optional[Dict[str, Any]] = None,
) -> T:
    input_messages = _normalize_messages(messages)
    base_messages: List[Message] = []
    if cfg.enforce_json:
        schema_json = json.dumps(schema.model_json_schema(), indent=2)
        system_prompt = "Reply with a single JSON object matching this schema:\n" + schema_json
        base_messages.append({"role": "system", "content": system_prompt})
    base_messages.extend(input_messages)
    attempts = cfg.max_retries + 1
    last_error: Optional[Exception] = None
    last_error_text: Optional[str] = None
    preview = _preview(base_messages)
    if len(preview) > 120:
        preview = preview[:117] + "..."
    logger.info(
        "LLM request start route=%s model=%s attempts=%d preview=%s",
        cfg.name,
        cfg.model,
        attempts,
        preview,
    )
    for attempt in range(attempts):
        attempt_messages = list(base_messages)
        if attempt > 0:
            attempt_messages.append(
                {
                    "role": "system",
                    "content": _retry_hint(last_error_text, cfg.enforce_json),
                }
            )
        payload: Dict[str, Any] = {"model": cfg.model, "messages": attempt_messages}
        if options:
            payload.update(options)
        if cfg.response_format:
            payload["response_format"] = {"type": cfg.response_format}
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        headers.update(cfg.extra_headers)
        logger.info(
            "LLM request send route=%s model=%s attempt=%d/%d",
            cfg.name,
            cfg.model,
            attempt + 1,
            attempts,
        )
        try:
            response = await _post(f"{cfg.base_url}{cfg.endpoint}", payload, headers, cfg.timeout_s, client)
        except Exception as exc:  # noqa: BLE001
            logger.error("LLM transport failure: %s", exc)
            raise LlmGatewayError("LLM transport failed") from exc
        if response.status_code >= 400:
            logger.error("LLM error status: %s", response.status_code)
            raise LlmStatusError(response.status_code, _safe_text(response))
        try:
            data = response.json()
        except Exception as exc:  # noqa: BLE001
            logger.error("Invalid JSON payload from LLM: %s", exc)
            raise LlmGatewayError("LLM payload was not JSON") from exc
        content = _extract_content(data)
        try:
            parsed = _validate(schema, content)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.warning("LLM output validation failed: %s", exc)
            last_error = exc
            last_error_text = str(exc)
            continue
        logger.info(
            "LLM request done route=%s model=%s attempt=%d",
            cfg.name,
            cfg.model,
            attempt + 1,
        )
        return parsed
    raise LlmGatewayError("LLM output validation failed") from last_error


async def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> HttpResponse:  # Dispatch HTTP request
    if client is not None:
        return await client.post(url, json=payload, headers=headers, timeout=timeout)
    async with httpx.AsyncClient(timeout=timeout) as http_client:
        return await http_client.post(url, json=payload, headers=headers)


def _safe_text(response: HttpResponse) -> str:  # Short error body for diagnostics
    try:
        text = response.text
    except Exception:  # noqa: BLE001
        return ""
    return text[:200] if isinstance(text, str) else ""


def _normalize_messages(messages: Sequence[Message]) -> List[Message]:  # Ensure message payload shape
    normalized: List[Message] = []
    for item in messages:
        if not isinstance(item, dict):
            raise TypeError("Each chat message must be a dict with role/content")
        role = str(item.get("role", "")).strip()
        content = item.get("content", "")
        if not role:
            raise ValueError("Chat message missing role")
        if not isinstance(content, list):
            content = str(content)
        normalized.append({"role": role, "content": content})
    return normalized


def _preview(messages: Sequence[Message]) -> str:  # Build preview string for logging
    for message in messages:
        if message.get("role") == "system":
            continue
        content = message.get("content", "")
        if isinstance(content, list):
            content = next((part.get("text", "") for part in content if part.get("type") == "text"), "")
        text = content.strip()
        if text:
            return text.splitlines()[0]
    return ""


def _extract_content(data: Any) -> str:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _validate(schema: Type[T], content: str) -> T:  # Parse JSON content with schema
    return schema.model_validate_json(_strip_code_fences(content))


def _strip_code_fences(content: str) -> str:  # Remove common markdown fences from LLM output
    text = content.strip()
    if text.startswith("```"):
        lines = text.splitlines()
        if lines:
            lines = lines[1:]
            while lines and lines[0].strip() == "":
                lines = lines[1:]
            while lines and lines[-1].strip() == "":
                lines = lines[:-1]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            text = "\n".join(lines).strip()
    return text


def _retry_hint(error_text: Optional[str], enforce_json: bool) -> str:  # Compose retry instructions including last error
    base = "The previous reply failed validation."
    if error_text:
        truncated = error_text.splitlines()[0].strip()
        if len(truncated) > 200:
            truncated = truncated[:197] + "..."
        base += f" Reason: {truncated}."
    if enforce_json:
        return base + " Return a single JSON object that matches the schema."
    return base + " Follow the requested format precisely."
