"""Media payload helpers (data URIs)."""

from .datauri import (
    encode_data_uri, decode_data_uri, split_data_uri, file_to_data_uri, guess_mime_type,
    is_data_uri, is_audio_data_uri, save_data_uri
)

__all__ = [
    "encode_data_uri", "decode_data_uri", "split_data_uri", "file_to_data_uri", "guess_mime_type",
    "is_data_uri", "is_audio_data_uri", "save_data_uri"
]
