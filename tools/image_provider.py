"""Image provider abstractions, failure taxonomy and shared classification."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from typing import Dict, List, Optional, Sequence, Tuple, Union

import httpx

from models.generation import (
    FATAL_FAILURE,
    RETRYABLE_FAILURE,
    SUCCESS,
    AttemptOutcome,
    RawImageResponse,
)
from stylegen_app.config import ProviderSettings
from tools.observability import instrument_provider

LOGGER = logging.getLogger(__name__)

MODEL_LOADING = "model_loading"
RATE_LIMITED = "rate_limited"
NETWORK = "network"
UPSTREAM = "upstream"

_ERROR_BODY_PREVIEW = 500


class ProviderError(Exception):
    """Base class for failures raised at the provider client boundary."""

    outcome: AttemptOutcome = FATAL_FAILURE

    def __init__(
        self,
        provider: str,
        detail: str,
        http_status: Optional[int] = None,
        reason: str = "api_error",
    ) -> None:
        super().__init__(f"{provider}: {detail}")
        self.provider = provider
        self.detail = detail
        self.http_status = http_status
        self.reason = reason


class RetryableProviderError(ProviderError):
    """Rate limit, cold start or transient network trouble."""

    outcome = RETRYABLE_FAILURE


class FatalProviderError(ProviderError):
    """Credentials, billing, malformed or unexpected responses."""

    outcome = FATAL_FAILURE


class ResponseTooLargeError(FatalProviderError):
    """The provider streamed more bytes than the configured cap."""

    def __init__(self, provider: str, limit: int) -> None:
        super().__init__(provider, f"response exceeded {limit} bytes", reason="response_too_large")
        self.limit = limit


class AllProvidersExhausted(Exception):
    """Every real provider failed; only ever logged, the placeholder takes over."""


def classify_status(status: int) -> Tuple[AttemptOutcome, str]:
    """Map an HTTP status code to an attempt outcome and a reason label."""

    if 200 <= status < 300:
        return SUCCESS, "ok"
    if status == 503:
        return RETRYABLE_FAILURE, MODEL_LOADING
    if status == 429:
        return RETRYABLE_FAILURE, RATE_LIMITED
    if status in (500, 502, 504):
        return RETRYABLE_FAILURE, UPSTREAM
    if status in (401, 403):
        return FATAL_FAILURE, "bad_credentials"
    if status == 402:
        return FATAL_FAILURE, "billing_required"
    return FATAL_FAILURE, "api_error"


def error_for_status(provider: str, status: int, body: str = "") -> ProviderError:
    """Build the classified exception for a non-2xx response."""

    outcome, reason = classify_status(status)
    preview = body[:_ERROR_BODY_PREVIEW]
    detail = f"HTTP {status} ({reason})" + (f": {preview}" if preview else "")
    if outcome == RETRYABLE_FAILURE:
        return RetryableProviderError(provider, detail, http_status=status, reason=reason)
    return FatalProviderError(provider, detail, http_status=status, reason=reason)


def classify_failure(exc: BaseException) -> Tuple[AttemptOutcome, str, Optional[int]]:
    """Classify any exception raised by a provider call.

    Returns ``(outcome, reason, http_status)``. Anything that is not a known
    transient failure is fatal so the caller moves on instead of retrying.
    """

    if isinstance(exc, ProviderError):
        return exc.outcome, exc.reason, exc.http_status
    if isinstance(exc, (asyncio.TimeoutError, httpx.TransportError)):
        return RETRYABLE_FAILURE, NETWORK, None
    if isinstance(exc, httpx.HTTPStatusError):
        outcome, reason = classify_status(exc.response.status_code)
        return outcome, reason, exc.response.status_code
    return FATAL_FAILURE, "unexpected_error", None


@dataclass(frozen=True)
class GenerationOptions:
    """Per-request overrides for the fixed generation parameters."""

    model_key: Optional[str] = None
    width: Optional[int] = None
    height: Optional[int] = None
    inference_steps: Optional[int] = None
    guidance_scale: Optional[float] = None


@dataclass(frozen=True)
class ModelInfo:
    """A model a provider can run."""

    key: str
    model_id: str
    description: str


@dataclass(frozen=True)
class ConnectionStatus:
    """Outcome of a provider connectivity check."""

    provider: str
    ok: bool
    message: str
    model_id: Optional[str] = None


class ImageProvider(ABC):
    """Abstract text-to-image provider client.

    Subclasses implement :meth:`_generate`; the public :meth:`generate` adds the
    hard timeout, token check and transport-error classification.
    """

    name: str = "provider"
    catalog: Dict[str, ModelInfo] = {}
    default_model_key: str = "sdxl"

    def __init__(self, settings: ProviderSettings, client: httpx.AsyncClient | None = None) -> None:
        self.settings = settings
        self._client = client
        self._owns_client = client is None

    @property
    def configured(self) -> bool:
        return self.settings.configured

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(
                    self.settings.request_timeout_seconds,
                    connect=self.settings.connect_timeout_seconds,
                ),
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def resolve_model(self, model_key: Optional[str] = None) -> ModelInfo:
        """Return the catalog entry for ``model_key``, falling back to the default."""

        key = model_key or self.settings.model_key or self.default_model_key
        if key not in self.catalog:
            LOGGER.info("Unknown model '%s' for %s, using %s", key, self.name, self.default_model_key)
            key = self.default_model_key
        return self.catalog[key]

    def list_models(self) -> List[ModelInfo]:
        return list(self.catalog.values())

    def resolve_options(self, options: GenerationOptions | None) -> GenerationOptions:
        options = options or GenerationOptions()
        return GenerationOptions(
            model_key=options.model_key or self.settings.model_key,
            width=options.width or self.settings.width,
            height=options.height or self.settings.height,
            inference_steps=options.inference_steps or self.settings.inference_steps,
            guidance_scale=options.guidance_scale or self.settings.guidance_scale,
        )

    @instrument_provider("generate")
    async def generate(self, prompt: str, options: GenerationOptions | None = None) -> RawImageResponse:
        """Generate one image for ``prompt``.

        Raises:
            RetryableProviderError: cold start, rate limit, timeout or transport failure.
            FatalProviderError: missing token, auth/billing failure, malformed or oversized response.
        """

        if not self.configured:
            raise FatalProviderError(self.name, "API token not configured", reason="not_configured")
        resolved = self.resolve_options(options)
        try:
            return await asyncio.wait_for(
                self._generate(prompt, resolved),
                timeout=self.settings.request_timeout_seconds,
            )
        except asyncio.TimeoutError as exc:
            raise RetryableProviderError(
                self.name,
                f"no response within {self.settings.request_timeout_seconds}s",
                reason=NETWORK,
            ) from exc
        except httpx.TransportError as exc:
            raise RetryableProviderError(self.name, f"transport error: {exc!r}", reason=NETWORK) from exc

    async def test_connection(self) -> ConnectionStatus:
        """Issue a small generation to verify credentials; never raises."""

        model = self.resolve_model()
        if not self.configured:
            return ConnectionStatus(self.name, False, f"{self.name} client not configured", model.model_id)
        check_options = replace(
            self.resolve_options(None), width=512, height=512, inference_steps=10, model_key=model.key
        )
        try:
            await self.generate("A simple red dress, fashion illustration", check_options)
        except ProviderError as exc:
            return ConnectionStatus(self.name, False, f"Connection test failed: {exc.detail}", model.model_id)
        except Exception as exc:
            _, reason, _ = classify_failure(exc)
            LOGGER.warning("Connection test for %s raised %s", self.name, type(exc).__name__, exc_info=True)
            return ConnectionStatus(
                self.name, False, f"Connection test failed ({reason}): {exc!r}", model.model_id
            )
        return ConnectionStatus(self.name, True, f"{self.name} connection successful", model.model_id)

    @abstractmethod
    async def _generate(self, prompt: str, options: GenerationOptions) -> RawImageResponse:
        """Provider specific request/response handling."""

    async def _read_capped(self, response: httpx.Response) -> bytes:
        """Buffer a streamed body, aborting once it grows past the cap."""

        limit = self.settings.max_response_bytes
        declared = response.headers.get("content-length")
        if declared and declared.isdigit() and int(declared) > limit:
            raise ResponseTooLargeError(self.name, limit)
        chunks: List[bytes] = []
        total = 0
        async for chunk in response.aiter_bytes():
            total += len(chunk)
            if total > limit:
                raise ResponseTooLargeError(self.name, limit)
            chunks.append(chunk)
        return b"".join(chunks)

    async def _read_image(self, response: httpx.Response, model_id: str) -> RawImageResponse:
        """Turn a streamed response into image bytes or a classified error."""

        body = await self._read_capped(response)
        if not 200 <= response.status_code < 300:
            raise error_for_status(self.name, response.status_code, body.decode("utf-8", "replace"))
        content_type = response.headers.get("content-type", "")
        if "image" not in content_type:
            raise FatalProviderError(
                self.name,
                f"expected image response, got '{content_type or 'unknown'}': "
                f"{body[:_ERROR_BODY_PREVIEW].decode('utf-8', 'replace')}",
                http_status=response.status_code,
                reason="malformed_response",
            )
        return RawImageResponse(content=body, content_type=content_type.split(";")[0].strip(), model_id=model_id)


ScriptStep = Union[RawImageResponse, BaseException]


class MockImageProvider(ImageProvider):
    """Offline provider replaying a fixed script of responses and errors.

    Each call consumes the next step; the last step repeats once the script is
    exhausted. Prompts are recorded on ``calls``.
    """

    catalog = {"sdxl": ModelInfo(key="sdxl", model_id="mock/model", description="Scripted mock model")}

    def __init__(
        self,
        name: str,
        script: Sequence[ScriptStep] | None = None,
        configured: bool = True,
    ) -> None:
        super().__init__(
            ProviderSettings(name=name, base_url="mock://", api_token="mock-token" if configured else None)
        )
        self.name = name
        self.script: List[ScriptStep] = list(script or [mock_image()])
        self.calls: List[str] = []

    async def _generate(self, prompt: str, options: GenerationOptions) -> RawImageResponse:
        self.calls.append(prompt)
        step = self.script[min(len(self.calls), len(self.script)) - 1]
        if isinstance(step, BaseException):
            raise step
        return step


def mock_image(content: bytes = b"\xff\xd8\xffmock-jpeg", model_id: str = "mock/model") -> RawImageResponse:
    return RawImageResponse(content=content, content_type="image/jpeg", model_id=model_id)


__all__ = [
    "AllProvidersExhausted",
    "ConnectionStatus",
    "FatalProviderError",
    "GenerationOptions",
    "ImageProvider",
    "MockImageProvider",
    "ModelInfo",
    "ProviderError",
    "ResponseTooLargeError",
    "RetryableProviderError",
    "ScriptStep",
    "MODEL_LOADING",
    "NETWORK",
    "RATE_LIMITED",
    "UPSTREAM",
    "classify_failure",
    "classify_status",
    "error_for_status",
    "mock_image",
]
