"""Tools package: generation provider, retry, image client, and parsing."""

from tools.generation_client import (
    ClaudeGenerationProvider,
    GenerationProvider,
    GenerationRequest,
)
from tools.image_client import HttpImageClient, ImagePayload
from tools.response_parsing import parse_json_array, parse_json_object, parse_json_payload
from tools.retry import RetryPolicy, is_rate_limit_error, with_retry
from tools.text_utils import (
    count_words,
    error_marker,
    is_error_marker,
    translation_error_marker,
)

__all__ = [
    "ClaudeGenerationProvider",
    "GenerationProvider",
    "GenerationRequest",
    "HttpImageClient",
    "ImagePayload",
    "parse_json_array",
    "parse_json_object",
    "parse_json_payload",
    "RetryPolicy",
    "is_rate_limit_error",
    "with_retry",
    "count_words",
    "error_marker",
    "is_error_marker",
    "translation_error_marker",
]
