"""
Core utilities: logging, exceptions and media handle helpers
"""

from .exceptions import (
    ShortMakerError,
    PipelineError,
    ScriptGenerationError,
    ImageGenerationError,
    AudioSynthesisError,
    VideoAssemblyError,
    InfrastructureError,
    ProviderError,
    FatalProviderError,
    ConfigurationError,
    QuotaExceededError,
    PermissionDeniedError,
    ReferrerRestrictedError,
    TransientProviderError,
    ProviderTimeoutError,
    MalformedOutputError,
    OutputTooLongError,
    classify_provider_error,
)
from .logging import (
    setup_logging,
    get_logger,
    set_job_id,
    clear_context,
    LogTimer,
)
from .timeouts import with_timeout
from .media import (
    encode_data_uri,
    decode_data_uri,
    is_data_uri,
    is_remote_url,
    is_placeholder_image,
    materialize_handle,
)

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
    "setup_logging",
    "get_logger",
    "set_job_id",
    "clear_context",
    "LogTimer",
    "encode_data_uri",
    "decode_data_uri",
    "is_data_uri",
    "is_remote_url",
    "is_placeholder_image",
    "materialize_handle",
    "with_timeout",
]
