"""
Base64 data URI helpers.
Speech samples and resume files travel to the model as 'data:<mime>;base64,<payload>'.
"""
import base64
import binascii
import mimetypes
import os
import re
from typing import Optional, Tuple

from ...config import AUDIO_EXTENSION_TYPES, DEFAULT_UPLOAD_MIME_TYPE

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?P<params>(;[\w-]+=[^;,]+)*);base64,(?P<data>.*)$", re.DOTALL)


def encode_data_uri(data: bytes, mime_type: str) -> str:
    """Encode raw bytes as a base64 data URI."""
    payload = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{payload}"


def guess_mime_type(path: str) -> str:
    """Guess a file's MIME type from its name; known audio extensions win."""
    extension = os.path.splitext(path)[1].lower()
    if extension in AUDIO_EXTENSION_TYPES:
        return AUDIO_EXTENSION_TYPES[extension]
    mime_type, _ = mimetypes.guess_type(path)
    return mime_type or DEFAULT_UPLOAD_MIME_TYPE


def file_to_data_uri(path: str, mime_type: Optional[str] = None) -> str:
    """
    Read a file and return it as a data URI.

    Args:
        path: File to read
        mime_type: Explicit MIME type, guessed from the file name if omitted

    Returns:
        Data URI string
    """
    with open(path, "rb") as f:
        data = f.read()
    return encode_data_uri(data, mime_type or guess_mime_type(path))


def split_data_uri(uri: str) -> Tuple[str, str]:
    """Return the MIME type and the still-encoded base64 payload of a data URI."""
    match = _DATA_URI_RE.match(uri or "")
    if not match:
        raise ValueError("Not a base64 data URI")
    return match.group("mime"), match.group("data")


def decode_data_uri(uri: str) -> Tuple[str, bytes]:
    """
    Split a data URI into its MIME type and decoded bytes.

    Raises:
        ValueError: If the string is not a base64 data URI
    """
    match = _DATA_URI_RE.match(uri or "")
    if not match:
        raise ValueError("Not a base64 data URI")
    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload: {e}")
    return match.group("mime"), data


def is_data_uri(value: str) -> bool:
    return bool(value) and _DATA_URI_RE.match(value) is not None


def is_audio_data_uri(value: str) -> bool:
    return bool(value) and value.startswith("data:audio")


def save_data_uri(uri: str, path: str) -> str:
    """Decode a data URI and write its bytes to path."""
    _, data = decode_data_uri(uri)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)
    return path
