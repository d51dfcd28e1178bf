"""
Speech-to-Text backends - one adapter per Google API generation
"""
import asyncio
import concurrent.futures
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as google_exceptions
from google.api_core.client_options import ClientOptions
from google.auth import exceptions as auth_exceptions
from google.cloud import speech as speech_v1
from google.cloud import speech_v2
from google.cloud.speech_v2.types import cloud_speech

from interview_analysis.core.exceptions import BackendError, BackendErrorCode, ConfigurationError
from interview_analysis.schemas.data_models import RecognitionAlternative, RecognitionConfig, TranscriptWord

logger = logging.getLogger(__name__)

# v1 ("Sync input too long", "payload size exceeds the limit") and
# v2 ("maximum of 60 seconds", "exceeds duration limit") inline refusals
TOO_LONG_MARKERS = (
    "too long",
    "exceeds the limit",
    "payload size",
    "maximum of 60 seconds",
    "duration limit",
)


class TranscriptionBackend(ABC):
    """
    Contract for one remote transcription API generation.
    The orchestrator iterates a prioritized list of these and never looks
    at vendor types.
    """
    name: str = "transcription"

    @abstractmethod
    async def recognize(self, audio: bytes, config: RecognitionConfig) -> List[RecognitionAlternative]:
        """
        Inline (synchronous) recognition of an in-memory payload.

        Returns:
            The best alternative of every result that carries a transcript,
            in utterance order. Empty list when nothing was recognized.

        Raises:
            BackendError: classified vendor failure (PAYLOAD_TOO_LONG when the
            inline path refuses the payload).
        """
        pass

    @abstractmethod
    async def recognize_staged(
        self, uri: str, config: RecognitionConfig, timeout_seconds: float
    ) -> List[RecognitionAlternative]:
        """Long-running recognition of a payload already in object storage."""
        pass

    def is_ready(self) -> bool:
        return True

    def get_status(self) -> Dict[str, Any]:
        return {"name": self.name, "configured": self.is_ready()}


def duration_to_seconds(value) -> float:
    """Convert a protobuf Duration (or its timedelta form) to seconds"""
    if value is None:
        return 0.0
    if isinstance(value, timedelta):
        return value.total_seconds()
    return float(getattr(value, "seconds", 0) or 0) + float(getattr(value, "nanos", 0) or 0) / 1e9


def classify_google_error(error: Exception, backend: str) -> BackendError:
    """Map a google-api-core failure onto a typed backend error"""
    message = str(error)
    if isinstance(error, google_exceptions.InvalidArgument):
        lowered = message.lower()
        if any(marker in lowered for marker in TOO_LONG_MARKERS):
            return BackendError(BackendErrorCode.PAYLOAD_TOO_LONG, message, backend)
        return BackendError(BackendErrorCode.INVALID_REQUEST, message, backend)
    if isinstance(error, (google_exceptions.DeadlineExceeded, concurrent.futures.TimeoutError)):
        return BackendError(BackendErrorCode.TIMEOUT, message or "operation timed out", backend)
    if isinstance(error, (google_exceptions.ServiceUnavailable, google_exceptions.ResourceExhausted,
                          google_exceptions.InternalServerError)):
        return BackendError(BackendErrorCode.UNAVAILABLE, message, backend)
    return BackendError(BackendErrorCode.UNKNOWN, message, backend)


def map_results(results, start_field: str, end_field: str) -> List[RecognitionAlternative]:
    """Keep the first alternative of each result that has a transcript"""
    alternatives = []
    for result in results:
        if not result.alternatives:
            continue
        best = result.alternatives[0]
        if not best.transcript:
            continue
        words = [
            TranscriptWord(
                text=info.word,
                start_time=duration_to_seconds(getattr(info, start_field, None)),
                end_time=duration_to_seconds(getattr(info, end_field, None)),
                confidence=float(info.confidence or 0.0),
            )
            for info in best.words
        ]
        alternatives.append(RecognitionAlternative(
            transcript=best.transcript,
            confidence=float(best.confidence or 0.0),
            words=words,
        ))
    return alternatives


class _GoogleSpeechBackend(TranscriptionBackend):
    """Shared plumbing: blocking SDK calls run on a small thread pool"""

    def __init__(self, client=None, executor: Optional[ThreadPoolExecutor] = None):
        self.client = client
        self.executor = executor or ThreadPoolExecutor(max_workers=4, thread_name_prefix=self.name)

    def is_ready(self) -> bool:
        return self.client is not None

    async def _run(self, func, *args):
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(self.executor, func, *args)
        except BackendError:
            raise
        except (google_exceptions.GoogleAPIError, concurrent.futures.TimeoutError) as e:
            raise classify_google_error(e, self.name) from e


class GoogleSpeechV2Backend(_GoogleSpeechBackend):
    """Speech-to-Text v2 (recognizers API), preferred for accuracy"""
    name = "speech-v2"

    def __init__(self, project_id: str, location: str = "global", client=None,
                 executor: Optional[ThreadPoolExecutor] = None, model: str = "long"):
        if client is None:
            if not project_id:
                raise ConfigurationError("Speech-to-Text v2 needs GOOGLE_CLOUD_PROJECT_ID")
            client_options = None
            if location != "global":
                client_options = ClientOptions(api_endpoint=f"{location}-speech.googleapis.com")
            try:
                client = speech_v2.SpeechClient(client_options=client_options)
            except auth_exceptions.DefaultCredentialsError as e:
                raise ConfigurationError(f"Speech-to-Text v2 credentials not found: {e}") from e
        super().__init__(client, executor)
        self.project_id = project_id
        self.location = location
        self.model = model
        self.recognizer = f"projects/{project_id}/locations/{location}/recognizers/_"
        logger.info(f"✅ Speech-to-Text v2 initialized ({self.recognizer})")

    def build_config(self, config: RecognitionConfig) -> cloud_speech.RecognitionConfig:
        features = cloud_speech.RecognitionFeatures(
            enable_automatic_punctuation=config.punctuation,
            enable_word_time_offsets=config.word_timestamps,
            enable_word_confidence=config.word_confidence,
        )
        kwargs = {
            "language_codes": [config.language_code],
            "model": self.model,
            "features": features,
        }
        if config.sample_rate_hertz:
            kwargs["explicit_decoding_config"] = cloud_speech.ExplicitDecodingConfig(
                encoding=cloud_speech.ExplicitDecodingConfig.AudioEncoding[config.codec.value],
                sample_rate_hertz=config.sample_rate_hertz,
                audio_channel_count=1,
            )
        else:
            # Let the service read codec and rate from the container header
            kwargs["auto_decoding_config"] = cloud_speech.AutoDetectDecodingConfig()
        if config.phrase_boosts:
            phrase_set = cloud_speech.PhraseSet(phrases=[
                cloud_speech.PhraseSet.Phrase(value=b.phrase, boost=b.boost) for b in config.phrase_boosts
            ])
            kwargs["adaptation"] = cloud_speech.SpeechAdaptation(phrase_sets=[
                cloud_speech.SpeechAdaptation.AdaptationPhraseSet(inline_phrase_set=phrase_set)
            ])
        return cloud_speech.RecognitionConfig(**kwargs)

    async def recognize(self, audio: bytes, config: RecognitionConfig) -> List[RecognitionAlternative]:
        request = cloud_speech.RecognizeRequest(
            recognizer=self.recognizer,
            config=self.build_config(config),
            content=audio,
        )
        response = await self._run(lambda: self.client.recognize(request=request))
        return map_results(response.results, "start_offset", "end_offset")

    async def recognize_staged(
        self, uri: str, config: RecognitionConfig, timeout_seconds: float
    ) -> List[RecognitionAlternative]:
        request = cloud_speech.BatchRecognizeRequest(
            recognizer=self.recognizer,
            config=self.build_config(config),
            files=[cloud_speech.BatchRecognizeFileMetadata(uri=uri)],
            recognition_output_config=cloud_speech.RecognitionOutputConfig(
                inline_response_config=cloud_speech.InlineOutputConfig(),
            ),
        )

        def run_batch():
            operation = self.client.batch_recognize(request=request)
            logger.info("⏳ Waiting for batch recognition to complete...")
            try:
                return operation.result(timeout=timeout_seconds)
            except concurrent.futures.TimeoutError:
                operation.cancel()
                raise

        response = await self._run(run_batch)
        file_result = response.results.get(uri)
        if file_result is None:
            return []
        if file_result.error and file_result.error.code:
            raise BackendError(BackendErrorCode.UNKNOWN, file_result.error.message, self.name)
        return map_results(file_result.transcript.results, "start_offset", "end_offset")

    def get_status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "configured": self.is_ready(),
            "project_id": self.project_id,
            "location": self.location,
        }


class GoogleSpeechV1Backend(_GoogleSpeechBackend):
    """Speech-to-Text v1, the conservative fallback generation"""
    name = "speech-v1"

    def __init__(self, project_id: str, credentials_path: str = "", client=None,
                 executor: Optional[ThreadPoolExecutor] = None):
        if client is None:
            if not project_id:
                raise ConfigurationError("Speech-to-Text v1 needs GOOGLE_CLOUD_PROJECT_ID")
            try:
                if credentials_path:
                    client = speech_v1.SpeechClient.from_service_account_file(credentials_path)
                else:
                    client = speech_v1.SpeechClient()
            except auth_exceptions.DefaultCredentialsError as e:
                raise ConfigurationError(f"Speech-to-Text v1 credentials not found: {e}") from e
        super().__init__(client, executor)
        self.project_id = project_id
        logger.info("✅ Speech-to-Text v1 initialized")

    def build_config(self, config: RecognitionConfig) -> speech_v1.RecognitionConfig:
        kwargs = {
            "encoding": speech_v1.RecognitionConfig.AudioEncoding[config.codec.value],
            "language_code": config.language_code,
            "enable_automatic_punctuation": config.punctuation,
            "enable_word_time_offsets": config.word_timestamps,
            "enable_word_confidence": config.word_confidence,
            "model": "default",
            "use_enhanced": True,
        }
        if config.sample_rate_hertz:
            kwargs["sample_rate_hertz"] = config.sample_rate_hertz
        if config.phrase_boosts:
            # v1 takes one boost per context, so group phrases by weight
            grouped: Dict[float, List[str]] = {}
            for b in config.phrase_boosts:
                grouped.setdefault(b.boost, []).append(b.phrase)
            kwargs["speech_contexts"] = [
                speech_v1.SpeechContext(phrases=phrases, boost=boost)
                for boost, phrases in grouped.items()
            ]
        return speech_v1.RecognitionConfig(**kwargs)

    async def recognize(self, audio: bytes, config: RecognitionConfig) -> List[RecognitionAlternative]:
        rec_config = self.build_config(config)
        rec_audio = speech_v1.RecognitionAudio(content=audio)
        response = await self._run(lambda: self.client.recognize(config=rec_config, audio=rec_audio))
        return map_results(response.results, "start_time", "end_time")

    async def recognize_staged(
        self, uri: str, config: RecognitionConfig, timeout_seconds: float
    ) -> List[RecognitionAlternative]:
        rec_config = self.build_config(config)
        rec_audio = speech_v1.RecognitionAudio(uri=uri)

        def run_long_running():
            operation = self.client.long_running_recognize(config=rec_config, audio=rec_audio)
            logger.info("⏳ Waiting for long-running recognition to complete...")
            try:
                return operation.result(timeout=timeout_seconds)
            except concurrent.futures.TimeoutError:
                operation.cancel()
                raise

        response = await self._run(run_long_running)
        return map_results(response.results, "start_time", "end_time")

    def get_status(self) -> Dict[str, Any]:
        return {"name": self.name, "configured": self.is_ready(), "project_id": self.project_id}
