"""
Vertex AI REST client for LLM interactions.
"""
import json
import logging
import re
import threading
from typing import Optional, Dict, Any, List, Sequence

import requests
import google.auth
import google.auth.transport.requests
from google.oauth2 import service_account

from ...config import VERTEX_LOCATION, MODEL_NAME, LLM_TIMEOUT, MAX_OUTPUT_TOKENS, LLM_SCOPES
from ..media import split_data_uri

logger = logging.getLogger("llm_client")

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class VertexRestClient:
    """REST-based client for Vertex AI Gemini models."""

    def __init__(self,
                 project: str,
                 location: str = VERTEX_LOCATION,
                 model: str = MODEL_NAME,
                 credentials_json: Optional[str] = None,
                 timeout: int = LLM_TIMEOUT):
        self.project = project
        self.location = location
        self.model = model
        self.credentials_json = credentials_json
        self.base_url = f"https://{self.location}-aiplatform.googleapis.com/v1"
        self.model_resource = f"projects/{self.project}/locations/{self.location}/publishers/google/models/{self.model}"
        self._token = None
        self._token_lock = threading.Lock()
        self.timeout = timeout

    def _refresh_token(self):
        """Refresh the OAuth token for API calls."""
        if self.credentials_json:
            creds = service_account.Credentials.from_service_account_file(
                self.credentials_json,
                scopes=LLM_SCOPES,
            )
        else:
            creds, _ = google.auth.default(scopes=LLM_SCOPES)

        auth_req = google.auth.transport.requests.Request()
        creds.refresh(auth_req)
        self._token = creds.token

    def _ensure_token(self):
        """Ensure we have a valid token, refreshing if needed."""
        # Resume extraction calls in from two threads at once
        with self._token_lock:
            if not self._token:
                self._refresh_token()

    @staticmethod
    def _media_part(data_uri: str) -> Dict[str, Any]:
        """Convert a base64 data URI into an inline media part."""
        mime_type, payload = split_data_uri(data_uri)
        return {"inlineData": {"mimeType": mime_type, "data": payload}}

    def generate_content(
        self,
        prompt_text: str,
        media: Optional[Sequence[str]] = None,
        temperature: float = 0.0,
        max_output_tokens: int = MAX_OUTPUT_TOKENS,
        response_mime_type: Optional[str] = None,
        stop_sequences: Optional[List[str]] = None,
    ) -> str:
        """
        Generate content using the Vertex AI REST API.

        Args:
            prompt_text: Text part of the request
            media: Data URIs sent as inline parts after the text
            temperature: Sampling temperature
            max_output_tokens: Response token cap
            response_mime_type: Ask the model for a specific response format
            stop_sequences: Optional stop sequences

        Returns:
            Text of the first candidate
        """
        self._ensure_token()
        url = f"{self.base_url}/{self.model_resource}:generateContent"

        parts: List[Dict[str, Any]] = [{"text": prompt_text}]
        for data_uri in media or ():
            parts.append(self._media_part(data_uri))

        body: Dict[str, Any] = {
            "contents": [
                {
                    "role": "user",
                    "parts": parts,
                }
            ],
            "generationConfig": {
                "temperature": float(temperature),
                "maxOutputTokens": int(max_output_tokens),
            },
        }

        if response_mime_type:
            body["generationConfig"]["responseMimeType"] = response_mime_type
        if stop_sequences:
            body["generationConfig"]["stopSequences"] = list(stop_sequences)

        headers = {
            "Authorization": f"Bearer {self._token}",
            "Content-Type": "application/json",
        }

        resp = requests.post(url, headers=headers, json=body, timeout=self.timeout)
        if resp.status_code >= 400:
            raise RuntimeError(f"Vertex REST error {resp.status_code}: {resp.text}")

        return self._parse_response_text(resp.json())

    def _parse_response_text(self, resp_json: Dict[str, Any]) -> str:
        """
        Parse response JSON to extract text content.
        Tries Vertex schema first, then falls back to alternatives.
        """
        cands = resp_json.get("candidates", [])
        if cands:
            content = cands[0].get("content", {})
            parts = content.get("parts", [])
            if isinstance(parts, list):
                texts = [p["text"] for p in parts
                         if isinstance(p, dict) and isinstance(p.get("text"), str)]
                if texts:
                    return "".join(texts)
            if isinstance(content, dict) and isinstance(content.get("text"), str):
                return content["text"]

        if isinstance(resp_json.get("text"), str):
            return resp_json["text"]

        # Last resort: return JSON for inspection
        return json.dumps(resp_json, separators=(",", ":"))

    def generate_json(self,
                      prompt: str,
                      media: Optional[Sequence[str]] = None,
                      operation: str = "generate",
                      temperature: float = 0.0,
                      max_output_tokens: int = MAX_OUTPUT_TOKENS) -> Dict[str, Any]:
        """
        Generate a JSON object from the LLM.
        Automatically appends instruction to respond with JSON only.

        Raises:
            RuntimeError: If the HTTP call fails
            ValueError: If the response holds no JSON object
        """
        prompt_json = prompt.strip() + "\n\nRespond ONLY with minified JSON."
        logger.debug("Sending %s prompt to LLM (%d media part(s))", operation, len(media or ()))

        try:
            text = self.generate_content(
                prompt_json,
                media=media,
                temperature=temperature,
                max_output_tokens=max_output_tokens,
                response_mime_type="application/json",
            )
        except Exception as e:
            logger.error("LLM request for %s failed: %s", operation, e)
            raise

        logger.debug("Raw LLM output for %s: %r", operation, text[:2000])
        return extract_json_object(text)


def extract_json_object(text: str) -> Dict[str, Any]:
    """
    Parse a JSON object out of raw model text.
    Accepts bare JSON, fenced JSON, or JSON surrounded by prose.
    """
    cleaned = _FENCE_RE.sub("", (text or "").strip())
    try:
        parsed = json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.warning("json.loads failed: %s", e)
        start = cleaned.find("{")
        end = cleaned.rfind("}")
        if start == -1 or end <= start:
            raise ValueError(f"No JSON found in LLM response: {text!r}")
        try:
            parsed = json.loads(cleaned[start:end + 1])
        except json.JSONDecodeError:
            raise ValueError(f"Could not extract valid JSON from LLM response: {text!r}")

    if not isinstance(parsed, dict):
        raise ValueError(f"LLM returned {type(parsed).__name__}, expected a JSON object")
    return parsed
