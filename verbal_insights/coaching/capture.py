"""
Speech sample acquisition: live transcription, microphone recording and upload.

The recognizer and the microphone are injected backends. The provider owns
whichever one the active tab uses and releases it before any new capture.
"""
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from .errors import CaptureError, SessionStateError
from .models import InputTab, SpeechSample
from ..config import (
    LANGUAGE_CODE, RECORDING_MIME_TYPE, RECORDING_FILENAME, WORKDIR,
    RECOVERABLE_RECOGNITION_ERRORS, PERMISSION_RECOGNITION_ERRORS,
)
from ..infrastructure.media import encode_data_uri, guess_mime_type, save_data_uri

logger = logging.getLogger("capture")


@dataclass(frozen=True)
class RecognitionResult:
    """One recognizer hypothesis; final ones never change again."""
    transcript: str
    is_final: bool = False


ResultHandler = Callable[[Sequence[RecognitionResult], int], None]
ErrorHandler = Callable[[str], None]
EndHandler = Callable[[], None]


class TranscriptFold:
    """
    Folds streaming recognition results into one transcript.

    Final segments are appended to an accumulator; the interim segments of
    the latest event are shown on top of it and replaced by the next event.
    """

    def __init__(self):
        self.final_text = ""
        self.interim_text = ""

    def apply(self, results: Sequence[RecognitionResult], result_index: int) -> str:
        """Consume results[result_index:] and return the combined text."""
        interim = ""
        for result in results[result_index:]:
            if result.is_final:
                self.final_text += result.transcript
            else:
                interim += result.transcript
        self.interim_text = interim
        return self.text

    @property
    def text(self) -> str:
        return self.final_text + self.interim_text

    def replace(self, text: str):
        """Overwrite the transcript with user-typed text."""
        self.final_text = text
        self.interim_text = ""

    def reset(self):
        self.final_text = ""
        self.interim_text = ""


# =============================================================================
# Backends
# =============================================================================

class RecognizerBackend(ABC):
    """Continuous speech recognizer with interim results."""

    supported = True

    def __init__(self, language_code: str = LANGUAGE_CODE):
        self.language_code = language_code

    @abstractmethod
    def start(self, on_result: ResultHandler, on_error: ErrorHandler, on_end: EndHandler) -> None:
        """Begin a recognition session; events arrive through the handlers."""

    @abstractmethod
    def stop(self) -> None:
        """End the current session. Safe to call when idle."""


class UnsupportedRecognizer(RecognizerBackend):
    """Stand-in for platforms without speech recognition."""

    supported = False

    def start(self, on_result: ResultHandler, on_error: ErrorHandler, on_end: EndHandler) -> None:
        raise CaptureError(
            "Speech Recognition Not Supported",
            "Live transcription is not available here. Type your transcript instead.",
            code="not-supported",
        )

    def stop(self) -> None:
        pass


class MicrophoneStream(ABC):
    """An acquired microphone stream producing encoded audio chunks."""

    mime_type = RECORDING_MIME_TYPE

    @abstractmethod
    def start(self, on_data: Callable[[bytes], None]) -> None:
        ...

    @abstractmethod
    def stop(self) -> None:
        """Stop producing chunks; any buffered chunk is delivered first."""

    @abstractmethod
    def release(self) -> None:
        """Give the device back."""


class MicrophoneBackend(ABC):

    @abstractmethod
    def acquire(self) -> MicrophoneStream:
        """
        Acquire a stream from the default input device.

        Raises:
            PermissionError: If access to the microphone is denied
            OSError: If no input device is available
        """


# =============================================================================
# Provider
# =============================================================================

SampleCallback = Callable[[Optional[SpeechSample]], None]
NotifyCallback = Callable[[CaptureError], None]


class SpeechSampleProvider:
    """
    Produces the current speech sample from one of three acquisition tabs.

    Synchronous failures raise CaptureError. Recognizer errors arrive
    asynchronously and are passed to ``notify`` instead.
    """

    def __init__(self,
                 on_sample: SampleCallback,
                 notify: Optional[NotifyCallback] = None,
                 recognizer: Optional[RecognizerBackend] = None,
                 microphone: Optional[MicrophoneBackend] = None,
                 tab: InputTab = InputTab.LIVE):
        self.on_sample = on_sample
        self.notify = notify
        self.recognizer = recognizer or UnsupportedRecognizer()
        self.microphone = microphone
        self.tab = tab

        self.fold = TranscriptFold()
        self.is_listening = False
        self.is_recording = False
        self.audio_data_uri: Optional[str] = None
        self.audio_file_name: Optional[str] = None
        self._stream: Optional[MicrophoneStream] = None
        self._chunks: List[bytes] = []

    @property
    def transcript(self) -> str:
        return self.fold.text

    @property
    def recognition_supported(self) -> bool:
        return self.recognizer.supported

    # -------------------------------------------------------------------------
    # Tabs
    # -------------------------------------------------------------------------

    def switch_tab(self, tab: InputTab):
        """Reset every sub-flow and activate another tab."""
        tab = InputTab(tab)
        self.clear()
        self.tab = tab
        logger.debug("Input tab switched to %s", tab.value)

    def clear(self):
        """Stop capture, release the microphone and drop any sample."""
        self.stop_listening()
        self._discard_recording()
        self.audio_data_uri = None
        self.audio_file_name = None
        self.fold.reset()
        self.on_sample(None)

    def _require_tab(self, tab: InputTab, action: str):
        if self.tab is not tab:
            raise SessionStateError(
                "Wrong input tab",
                f"Switch to the {tab.value} tab to {action}.",
            )

    # -------------------------------------------------------------------------
    # Live transcription
    # -------------------------------------------------------------------------

    def start_listening(self):
        self._require_tab(InputTab.LIVE, "listen")
        if self.is_listening:
            return
        if not self.recognizer.supported:
            raise CaptureError(
                "Speech Recognition Not Supported",
                "Live transcription is not available here. Type your transcript instead.",
                code="not-supported",
            )

        self.fold.reset()
        self.on_sample(None)
        self.recognizer.start(self._on_result, self._on_error, self._on_end)
        self.is_listening = True
        logger.info("Listening started (%s)", self.recognizer.language_code)

    def stop_listening(self):
        if not self.is_listening:
            return
        self.is_listening = False
        self.recognizer.stop()
        logger.info("Listening stopped")

    def toggle_listening(self) -> bool:
        """Start or stop listening; returns the new listening state."""
        if self.is_listening:
            self.stop_listening()
        else:
            self.start_listening()
        return self.is_listening

    def edit_transcript(self, text: str):
        """Replace the transcript with typed text."""
        self._require_tab(InputTab.LIVE, "edit the transcript")
        if self.is_listening:
            raise SessionStateError("Still listening", "Stop listening before editing the transcript.")
        self.fold.replace(text or "")
        self._publish_transcript()

    def _on_result(self, results: Sequence[RecognitionResult], result_index: int):
        if self.tab is not InputTab.LIVE:
            logger.debug("Ignoring recognition result outside the live tab")
            return
        self.fold.apply(results, result_index)
        self._publish_transcript()

    def _on_end(self):
        self.is_listening = False

    def _on_error(self, code: str):
        was_listening = self.is_listening
        self.is_listening = False
        if was_listening:
            self.recognizer.stop()

        if code in RECOVERABLE_RECOGNITION_ERRORS:
            logger.info("Recognition ended: %s", code)
            return

        if code in PERMISSION_RECOGNITION_ERRORS:
            logger.warning("Microphone access denied (%s)", code)
            error = CaptureError(
                "Microphone Access Denied",
                "Please allow microphone access in your settings to use live transcription.",
                code=code,
                permission_denied=True,
            )
        else:
            logger.error("Speech recognition error: %s", code)
            error = CaptureError("Speech Recognition Error", f"Error: {code}", code=code)

        if self.notify:
            self.notify(error)

    def _publish_transcript(self):
        text = self.fold.text
        self.on_sample(SpeechSample.text(text) if text.strip() else None)

    # -------------------------------------------------------------------------
    # Recording
    # -------------------------------------------------------------------------

    def start_recording(self):
        self._require_tab(InputTab.RECORD, "record")
        if self.is_recording:
            return
        if self.microphone is None:
            raise CaptureError("Microphone Error", "No microphone is available.")

        self._clear_audio()
        try:
            stream = self.microphone.acquire()
        except (PermissionError, OSError) as e:
            logger.error("Microphone access denied: %s", e)
            raise CaptureError(
                "Microphone Error",
                "Could not access microphone. Please check permissions.",
                permission_denied=isinstance(e, PermissionError),
            )

        self._stream = stream
        self._chunks = []
        stream.start(self._chunks.append)
        self.is_recording = True
        logger.info("Recording started (%s)", stream.mime_type)

    def stop_recording(self) -> Optional[SpeechSample]:
        """Finish recording and publish the joined audio as the sample."""
        if not self.is_recording or self._stream is None:
            return None

        stream = self._stream
        try:
            stream.stop()
        finally:
            stream.release()
            self._stream = None
            self.is_recording = False

        blob = b"".join(self._chunks)
        self._chunks = []
        logger.info("Recording stopped: %d bytes", len(blob))
        return self._set_audio(blob, stream.mime_type or RECORDING_MIME_TYPE, RECORDING_FILENAME)

    def toggle_recording(self) -> bool:
        if self.is_recording:
            self.stop_recording()
        else:
            self.start_recording()
        return self.is_recording

    def save_recording(self, path: Optional[str] = None) -> str:
        """Write the current audio to disk and return the path."""
        if not self.audio_data_uri:
            raise CaptureError("No Recording", "Record or upload audio first.")
        path = path or os.path.join(WORKDIR, self.audio_file_name or RECORDING_FILENAME)
        save_data_uri(self.audio_data_uri, path)
        logger.info("Recording saved to %s", path)
        return path

    def _discard_recording(self):
        if self._stream is not None:
            try:
                self._stream.stop()
            finally:
                self._stream.release()
                self._stream = None
        self.is_recording = False
        self._chunks = []

    # -------------------------------------------------------------------------
    # Upload
    # -------------------------------------------------------------------------

    def upload_audio(self,
                     source: Union[str, bytes],
                     mime_type: Optional[str] = None,
                     file_name: Optional[str] = None) -> SpeechSample:
        """
        Use an audio file as the sample.

        Args:
            source: Path to the file, or its raw bytes
            mime_type: MIME type, guessed from the file name if omitted
            file_name: Name used when the audio is saved again

        Raises:
            CaptureError: If the file is not audio
        """
        self._require_tab(InputTab.UPLOAD, "upload audio")

        if isinstance(source, str):
            file_name = file_name or os.path.basename(source)
            mime_type = mime_type or guess_mime_type(source)
        elif file_name and not mime_type:
            mime_type = guess_mime_type(file_name)

        if not mime_type or not mime_type.startswith("audio/"):
            raise CaptureError("Invalid File", "Please upload an audio file.")

        if isinstance(source, str):
            try:
                with open(source, "rb") as f:
                    data = f.read()
            except OSError as e:
                logger.error("Could not read audio file %s: %s", source, e)
                raise CaptureError("Invalid File", f"Could not read the audio file: {e}")
        else:
            data = source

        self._clear_audio()
        return self._set_audio(data, mime_type, file_name)

    # -------------------------------------------------------------------------
    # Audio helpers
    # -------------------------------------------------------------------------

    def _clear_audio(self):
        self._discard_recording()
        self.audio_data_uri = None
        self.audio_file_name = None
        self.on_sample(None)

    def _set_audio(self, data: bytes, mime_type: str, file_name: Optional[str]) -> SpeechSample:
        self.audio_data_uri = encode_data_uri(data, mime_type)
        self.audio_file_name = file_name
        sample = SpeechSample.audio(self.audio_data_uri)
        self.on_sample(sample)
        return sample
