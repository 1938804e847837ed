"""
Core Exceptions
Standardized exception hierarchy for the pipeline.

Provider adapters translate whatever their SDK raises into one of the
``ProviderError`` subclasses below (see ``classify_provider_error``); the
orchestration code only ever switches on these types.
"""

import asyncio
from typing import Optional


class ShortMakerError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PipelineError(ShortMakerError):
    """Base exception for processing pipeline errors."""
    pass


class ScriptGenerationError(PipelineError):
    """No usable script could be produced."""
    pass


class ImageGenerationError(PipelineError):
    """Image stage produced nothing usable."""
    pass


class AudioSynthesisError(PipelineError):
    """Narration stage produced no audio at all."""
    pass


class VideoAssemblyError(PipelineError):
    """Final video could not be rendered."""

    def __init__(self, message: str, chunk_index: Optional[int] = None):
        super().__init__(message)
        self.chunk_index = chunk_index


class InfrastructureError(ShortMakerError):
    """Base exception for infrastructure errors (providers, storage, binaries)."""
    pass


class ProviderError(InfrastructureError):
    """An external generative provider call failed."""

    fatal: bool = False

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


# ---------------------------------------------------------------------------
# Fatal: configuration / access problems. Never retried.
# ---------------------------------------------------------------------------

class FatalProviderError(ProviderError):
    """Retrying cannot help; the user has to fix configuration or billing."""

    fatal = True


class ConfigurationError(FatalProviderError):
    """Missing, invalid or revoked credentials."""
    pass


class QuotaExceededError(FatalProviderError):
    """Quota or rate allowance exhausted."""
    pass


class PermissionDeniedError(FatalProviderError):
    """The credentials are valid but not allowed to call this API/model."""
    pass


class ReferrerRestrictedError(FatalProviderError):
    """The API key is restricted to HTTP referrers / origins that do not match."""
    pass


# ---------------------------------------------------------------------------
# Transient: retried with bounded backoff.
# ---------------------------------------------------------------------------

class TransientProviderError(ProviderError):
    """Timeouts, network blips, malformed output."""
    pass


class ProviderTimeoutError(TransientProviderError):
    """A provider call did not finish within its timeout."""
    pass


class MalformedOutputError(TransientProviderError):
    """Provider answered with empty or unparseable output."""
    pass


class OutputTooLongError(MalformedOutputError):
    """Provider output was cut off or too large to parse."""
    pass


# Ordered: the first matching category wins. Referrer restrictions come back as
# 403 PERMISSION_DENIED, so they are checked before plain permission errors.
_FATAL_MARKERS = (
    (
        ReferrerRestrictedError,
        ("referer", "referrer", "api_key_http_referrer_blocked", "origin is not allowed"),
        "The API key is restricted to other websites (HTTP referrer restriction). "
        "Allow this origin for the key in the Google Cloud console or use an unrestricted key.",
    ),
    (
        QuotaExceededError,
        ("resource_exhausted", "quota", "rate limit", "too many requests"),
        "Daily AI quota exceeded. Please try again later or check your billing.",
    ),
    (
        ConfigurationError,
        ("api key not valid", "api_key_invalid", "invalid api key", "api key expired",
         "unauthenticated", "missing api key", "api key is missing"),
        "The API key is missing or invalid. Add a valid key in Settings to continue.",
    ),
    (
        PermissionDeniedError,
        ("permission_denied", "permission", "forbidden"),
        "The API key does not have permission to use this model. "
        "Enable the API for the project or pick another model.",
    ),
)

_FATAL_STATUS = {
    401: ConfigurationError,
    402: QuotaExceededError,
    429: QuotaExceededError,
    403: PermissionDeniedError,
}


def _extract_status_code(exc: BaseException) -> Optional[int]:
    for attr in ("status_code", "code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def classify_provider_error(
    exc: BaseException,
    provider: Optional[str] = None,
    operation: str = "provider call",
) -> ProviderError:
    """Translate an arbitrary provider exception into the typed hierarchy.

    Only provider adapters call this. Matching is done on the message text
    and HTTP-ish status code of the original exception.

    Args:
        exc: The exception raised by an SDK / HTTP client.
        provider: Provider name recorded on the resulting error.
        operation: Human-readable operation name used in transient messages.

    Returns:
        A ``ProviderError`` subclass instance (not raised).
    """
    if isinstance(exc, ProviderError):
        return exc

    status_code = _extract_status_code(exc)
    text = f"{exc} {getattr(exc, 'message', '') or ''}".lower()

    for error_cls, markers, message in _FATAL_MARKERS:
        if any(marker in text for marker in markers):
            return error_cls(f"{message} ({provider or 'provider'}: {exc})", provider, status_code)

    status_cls = _FATAL_STATUS.get(status_code)
    if status_cls is not None:
        message = next(m for cls, _, m in _FATAL_MARKERS if cls is status_cls)
        return status_cls(f"{message} ({provider or 'provider'}: {exc})", provider, status_code)

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return ProviderTimeoutError(f"{operation} timed out", provider, status_code)

    return TransientProviderError(f"{operation} failed: {exc}", provider, status_code)


__all__ = [
    "ShortMakerError",
    "PipelineError",
    "ScriptGenerationError",
    "ImageGenerationError",
    "AudioSynthesisError",
    "VideoAssemblyError",
    "InfrastructureError",
    "ProviderError",
    "FatalProviderError",
    "ConfigurationError",
    "QuotaExceededError",
    "PermissionDeniedError",
    "ReferrerRestrictedError",
    "TransientProviderError",
    "ProviderTimeoutError",
    "MalformedOutputError",
    "OutputTooLongError",
    "classify_provider_error",
]
