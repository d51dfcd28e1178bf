"""
Video Insight Aggregator - body-language scoring from person/face detection
"""
import asyncio
import concurrent.futures
import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as google_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import videointelligence

from interview_analysis.core.exceptions import ConfigurationError, VideoAnalysisDegraded
from interview_analysis.models.cloud_storage import ObjectStorage, delete_quietly, extension_for, staging_path
from interview_analysis.models.scoring import round_half_up
from interview_analysis.models.speech_backends import classify_google_error
from interview_analysis.schemas.data_models import (
    BodyLanguageInsights,
    DetectionTrack,
    FaceDetection,
    MediaPayload,
    PersonDetection,
    RemoteVideoAnnotations,
    VideoAnalysisResult,
)

logger = logging.getLogger(__name__)

NOT_AVAILABLE = "Not Available"


class VideoAnalysisBackend(ABC):
    """Contract for the remote video annotation service"""
    name: str = "video"

    @abstractmethod
    async def annotate(self, uri: str, timeout_seconds: float) -> RemoteVideoAnnotations:
        """Run person and face detection on a staged video."""
        pass

    def is_ready(self) -> bool:
        return True

    def get_status(self) -> Dict[str, Any]:
        return {"name": self.name, "configured": self.is_ready()}


class GoogleVideoIntelligenceBackend(VideoAnalysisBackend):
    """Video Intelligence API with PERSON_DETECTION and FACE_DETECTION"""
    name = "video-intelligence"

    def __init__(self, project_id: str, client=None, executor: Optional[ThreadPoolExecutor] = None):
        if client is None:
            if not project_id:
                raise ConfigurationError("Video Intelligence needs GOOGLE_CLOUD_PROJECT_ID")
            try:
                client = videointelligence.VideoIntelligenceServiceClient()
            except auth_exceptions.DefaultCredentialsError as e:
                raise ConfigurationError(f"Video Intelligence credentials not found: {e}") from e
        self.client = client
        self.project_id = project_id
        self.executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="video")
        logger.info("✅ Video Intelligence initialized successfully")

    def is_ready(self) -> bool:
        return self.client is not None

    async def annotate(self, uri: str, timeout_seconds: float) -> RemoteVideoAnnotations:
        request = {
            "input_uri": uri,
            "features": [
                videointelligence.Feature.PERSON_DETECTION,
                videointelligence.Feature.FACE_DETECTION,
            ],
            "video_context": videointelligence.VideoContext(
                person_detection_config=videointelligence.PersonDetectionConfig(
                    include_bounding_boxes=True,
                    include_pose_landmarks=True,
                    include_attributes=True,
                ),
                face_detection_config=videointelligence.FaceDetectionConfig(
                    include_bounding_boxes=True,
                ),
            ),
        }

        def run_annotation():
            operation = self.client.annotate_video(request=request)
            logger.info("⏳ Waiting for video analysis to complete...")
            try:
                return operation.result(timeout=timeout_seconds)
            except concurrent.futures.TimeoutError:
                operation.cancel()
                raise

        loop = asyncio.get_running_loop()
        try:
            response = await loop.run_in_executor(self.executor, run_annotation)
        except (google_exceptions.GoogleAPIError, concurrent.futures.TimeoutError) as e:
            raise classify_google_error(e, self.name) from e

        if not response.annotation_results:
            return RemoteVideoAnnotations()
        return map_annotations(response.annotation_results[0])


def map_annotations(annotation_result) -> RemoteVideoAnnotations:
    """Vendor annotation result -> internal track records"""
    def tracks_of(annotations) -> List[DetectionTrack]:
        return [
            DetectionTrack(confidences=[float(track.confidence or 0.0) for track in annotation.tracks])
            for annotation in annotations
        ]

    return RemoteVideoAnnotations(
        person_tracks=tracks_of(annotation_result.person_detection_annotations),
        face_tracks=tracks_of(annotation_result.face_detection_annotations),
    )


def _average(values: List[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def summarize_person_detection(tracks: List[DetectionTrack]) -> PersonDetection:
    if not tracks:
        return PersonDetection(detected=False, confidence=0.0, track_count=0)
    return PersonDetection(
        detected=True,
        confidence=_average([t.average_confidence for t in tracks]),
        track_count=len(tracks),
    )


def summarize_face_detection(tracks: List[DetectionTrack]) -> FaceDetection:
    if not tracks:
        return FaceDetection(detected=False, confidence=0.0, track_count=0)
    return FaceDetection(
        detected=True,
        confidence=_average([t.average_confidence for t in tracks]),
        track_count=len(tracks),
    )


def score_eye_contact(face: FaceDetection):
    """Returns (score, label, recommendation)"""
    if not face.detected:
        return 0, NOT_AVAILABLE, None
    if face.confidence > 0.8:
        return 100, "Excellent", "Great eye contact maintained throughout"
    if face.confidence > 0.6:
        return 80, "Good", "Good eye contact, try to maintain it more consistently"
    if face.confidence > 0.4:
        return 60, "Fair", "Work on maintaining better eye contact with the camera"
    return 40, "Needs Improvement", "Try to look at the camera more frequently to simulate eye contact"


def score_movement(person: PersonDetection):
    """Returns (score, label, recommendation); the base score is scaled by detection confidence"""
    if not person.detected or person.track_count == 0:
        return 0.0, NOT_AVAILABLE, None
    if person.track_count > 5:
        base, label = 60, "Very Active"
        recommendation = "Consider reducing excessive movement for a more professional appearance"
    elif person.track_count > 2:
        base, label = 90, "Moderate"
        recommendation = "Good balance of movement and stillness"
    else:
        base, label = 70, "Minimal"
        recommendation = "Use natural hand gestures to emphasize key points"
    return base * person.confidence, label, recommendation


def presence_label(numeric_score: float) -> str:
    if numeric_score > 85:
        return "Strong"
    if numeric_score > 70:
        return "Good"
    if numeric_score > 50:
        return "Fair"
    return "Needs Improvement"


def aggregate(raw: Optional[RemoteVideoAnnotations]) -> VideoAnalysisResult:
    """
    Normalize remote annotations into eye-contact and movement scores.

    Never raises: missing person or face tracks give "Not Available" labels
    and contribute 0 to the numeric score.
    """
    raw = raw or RemoteVideoAnnotations()
    person = summarize_person_detection(raw.person_tracks)
    face = summarize_face_detection(raw.face_tracks)

    eye_score, eye_label, eye_tip = score_eye_contact(face)
    movement_score, movement_label, movement_tip = score_movement(person)

    numeric_score = round_half_up(eye_score * 0.6 + movement_score * 0.4)
    recommendations = [tip for tip in (eye_tip, movement_tip) if tip]

    insights = BodyLanguageInsights(
        eye_contact_label=eye_label,
        movement_label=movement_label,
        overall_presence_label=presence_label(numeric_score),
        numeric_score=numeric_score,
        eye_contact_score=float(eye_score),
        movement_score=round(movement_score, 2),
        confidence=(face.confidence + person.confidence) / 2,
        recommendations=recommendations,
    )
    return VideoAnalysisResult(person_detection=person, face_detection=face, body_language_insights=insights)


async def analyze_video_payload(
    backend: VideoAnalysisBackend,
    storage: ObjectStorage,
    media: MediaPayload,
    timeout_seconds: float,
    staging_prefix: str = "interview-recordings",
) -> VideoAnalysisResult:
    """
    Stage a recording, annotate it and aggregate the result.

    Any failure surfaces as VideoAnalysisDegraded; the staged file is removed
    whatever the outcome.
    """
    path = staging_path(staging_prefix, extension_for(media.mime_type))
    uploaded = False
    try:
        logger.info(f"🎥 Starting video analysis ({media.size_mb:.2f}MB)")
        uri = await storage.upload(media.data, path, media.mime_type)
        uploaded = True
        raw = await asyncio.wait_for(backend.annotate(uri, timeout_seconds), timeout=timeout_seconds)
        logger.info("✅ Video analysis complete")
        return aggregate(raw)
    except asyncio.TimeoutError as e:
        raise VideoAnalysisDegraded(f"Video analysis exceeded {timeout_seconds:.0f}s") from e
    except VideoAnalysisDegraded:
        raise
    except Exception as e:
        raise VideoAnalysisDegraded(f"Video analysis failed: {e}") from e
    finally:
        if uploaded:
            await delete_quietly(storage, path)
