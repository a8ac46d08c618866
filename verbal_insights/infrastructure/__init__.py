"""Infrastructure components for Verbal Insights.

This module contains low-level technical components that provide
foundational capabilities for the coaching session.
"""

# LLM infrastructure
from .llm import VertexRestClient, extract_json_object

# Media payloads
from .media import (
    encode_data_uri, decode_data_uri, file_to_data_uri,
    is_audio_data_uri, save_data_uri
)

__all__ = [
    # LLM client
    "VertexRestClient", "extract_json_object",

    # Data URIs
    "encode_data_uri", "decode_data_uri", "file_to_data_uri",
    "is_audio_data_uri", "save_data_uri"
]
