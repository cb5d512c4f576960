"""
Floor-plan analysis via Gemini Vision.

Sends the uploaded plan (image or PDF) to Gemini with a quantity-surveyor
prompt and a strict response schema, and returns the raw analysis dict.

The analysis is the only non-deterministic input to the estimate. Everything
downstream (calibration, quantities, costs) is recomputed from it.
"""

import base64
import json
import logging
import threading
import urllib.error
import urllib.request

from pydantic import ValidationError

from .config import settings
from .schemas import AnalysisResult

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "webp": "image/webp",
    "pdf": "application/pdf",
}

ROOM_TYPES = ["Bedroom", "Kitchen", "Bathroom", "Living", "Dining", "Corridor", "Other"]

ANALYSIS_PROMPT = """
Analyze this construction floor plan image/PDF.
Act as a professional Quantity Surveyor.

Extract the following structural data:
1. Total Built-up Area (Sq Meters).
2. Total Wall Length (linear meters).
3. DETAILED ROOM LIST: For each room, identify its Name, Type, Area (SqM), and PERIMETER (Linear Meters).
   - Accurately estimate the perimeter if not explicitly labeled.
   - Classify type strictly as: 'Bedroom', 'Kitchen', 'Bathroom', 'Living', 'Dining', 'Corridor', or 'Other'.
4. Count visible Doors and Windows.
5. Est. Wall Thickness (usually 0.15m - 0.23m).

Return ONLY JSON matching the schema.
"""

RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "summary": {
            "type": "OBJECT",
            "properties": {
                "totalAreaSqM": {"type": "NUMBER"},
                "totalWallLengthM": {"type": "NUMBER"},
                "wallThicknessM": {"type": "NUMBER"},
            },
            "required": ["totalAreaSqM", "totalWallLengthM", "wallThicknessM"],
        },
        "rooms": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "areaSqM": {"type": "NUMBER"},
                    "perimeterM": {"type": "NUMBER"},
                    "type": {"type": "STRING", "enum": ROOM_TYPES},
                },
                "required": ["name", "areaSqM", "perimeterM", "type"],
            },
        },
        "elements": {
            "type": "OBJECT",
            "properties": {
                "doors": {"type": "NUMBER"},
                "windows": {"type": "NUMBER"},
            },
            "required": ["doors", "windows"],
        },
    },
    "required": ["summary", "rooms", "elements"],
}


class AnalysisServiceError(Exception):
    """The AI analysis failed. retryable=True for transient failures (timeouts, 429, 5xx)."""

    def __init__(self, message: str, retryable: bool = False):
        super().__init__(message)
        self.message = message
        self.retryable = retryable


class AnalysisNotConfigured(AnalysisServiceError):
    """GEMINI_API_KEY is not set."""


def mime_type_for(filename: str) -> str:
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    return MIME_TYPES.get(ext, "application/octet-stream")


def analyze_floor_plan(file_bytes: bytes, mime_type: str) -> dict:
    """
    Run the AI analysis on a plan file.

    Returns the raw analysis as a snake_case dict (see schemas.AnalysisResult).
    Raises AnalysisServiceError on any failure - never returns partial data.
    """
    text = _call_gemini_vision(ANALYSIS_PROMPT, base64.b64encode(file_bytes).decode("utf-8"), mime_type)
    return parse_analysis(text)


def parse_analysis(text: str) -> dict:
    """Validate the model's JSON text into an analysis dict."""
    try:
        parsed = json.loads(text)
    except (json.JSONDecodeError, TypeError) as e:
        raise AnalysisServiceError(f"AI returned invalid JSON: {e}")
    try:
        return AnalysisResult.model_validate(parsed).model_dump(mode="json")
    except ValidationError as e:
        raise AnalysisServiceError(f"AI analysis did not match the expected schema: {e.error_count()} errors")


def _call_gemini_vision(prompt: str, data_b64: str, mime_type: str) -> str:
    """Call Gemini generateContent with inline file data; returns the response text."""
    api_key = settings.GEMINI_API_KEY
    if not api_key:
        raise AnalysisNotConfigured("GEMINI_API_KEY not configured")

    model = settings.GEMINI_MODEL
    url = f"https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent?key={api_key}"

    payload = json.dumps({
        "contents": [{
            "parts": [
                {"inline_data": {"mime_type": mime_type, "data": data_b64}},
                {"text": prompt},
            ]
        }],
        "generationConfig": {
            "temperature": 0.1,
            "responseMimeType": "application/json",
            "responseSchema": RESPONSE_SCHEMA,
        },
    }).encode("utf-8")

    req = urllib.request.Request(
        url,
        data=payload,
        headers={"Content-Type": "application/json"},
        method="POST",
    )

    try:
        with urllib.request.urlopen(req, timeout=settings.GEMINI_TIMEOUT_SECONDS) as response:
            result = json.loads(response.read())
    except urllib.error.HTTPError as e:
        retryable = e.code == 429 or e.code >= 500
        logger.warning("Gemini analysis HTTP %s (retryable=%s)", e.code, retryable)
        raise AnalysisServiceError(f"Gemini API error {e.code}: {e.read().decode(errors='replace')}",
                                   retryable=retryable)
    except (urllib.error.URLError, TimeoutError) as e:
        logger.warning("Gemini analysis unreachable: %s", e)
        raise AnalysisServiceError(f"Gemini call failed: {e}", retryable=True)

    try:
        return result["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        raise AnalysisServiceError("No data returned from AI")


class AnalysisSession:
    """
    Current raw analysis for one user.

    Each analyze request takes a ticket from begin(); only the newest ticket
    may commit. A stale request finishing late is ignored and a failed one
    commits nothing, so the previous analysis survives intact.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._latest_ticket = 0
        self.raw_analysis = None
        self.file_name = None

    def begin(self) -> int:
        with self._lock:
            self._latest_ticket += 1
            return self._latest_ticket

    def commit(self, ticket: int, raw_analysis: dict, file_name: str = None) -> bool:
        """Replace the analysis wholesale if ticket is still the newest. Returns False if superseded."""
        with self._lock:
            if ticket != self._latest_ticket:
                logger.info("Discarding superseded analysis result (ticket %d < %d)",
                            ticket, self._latest_ticket)
                return False
            self.raw_analysis = raw_analysis
            self.file_name = file_name
            return True

    def clear(self):
        with self._lock:
            self._latest_ticket += 1
            self.raw_analysis = None
            self.file_name = None


_sessions: dict = {}
_sessions_lock = threading.Lock()


def get_session(user_key: str) -> AnalysisSession:
    """Session for user_key, created on first use. Only writers should call this."""
    with _sessions_lock:
        session = _sessions.get(user_key)
        if session is None:
            session = _sessions[user_key] = AnalysisSession()
        return session


def find_session(user_key: str):
    """Existing session for user_key, or None. Never creates one."""
    with _sessions_lock:
        return _sessions.get(user_key)


def reset_sessions():
    """Drop every user's analysis session."""
    with _sessions_lock:
        _sessions.clear()
