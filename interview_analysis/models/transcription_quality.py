from typing import Optional

from interview_analysis.core.config import Settings, settings as default_settings
from interview_analysis.schemas.data_models import TranscriptionQualityAssessment, TranscriptionResult


def evaluate_transcription_quality(
    result: Optional[TranscriptionResult], settings: Settings = default_settings
) -> TranscriptionQualityAssessment:
    """Grade a transcription so callers can explain low-confidence results to the user"""
    if result is None:
        return TranscriptionQualityAssessment(
            level="error",
            warning=True,
            message="Transcription failed completely",
            suggestions=["Please try recording again", "Ensure microphone is working"],
        )

    confidence = result.overall_confidence or 0.0
    word_count = result.word_count or 0

    if confidence < settings.QUALITY_CRITICAL_BELOW:
        return TranscriptionQualityAssessment(
            level="critical",
            warning=True,
            message="Audio quality was poor. The transcription may be inaccurate.",
            suggestions=[
                "Use a quiet environment without background noise",
                "Speak clearly and at a normal pace",
                "Check that your microphone is working properly",
                "Consider re-recording for better analysis",
            ],
        )

    if confidence < settings.QUALITY_WARNING_BELOW:
        return TranscriptionQualityAssessment(
            level="warning",
            warning=True,
            message="Audio quality could be improved for better accuracy.",
            suggestions=[
                "Try to minimize background noise",
                "Speak clearly towards the microphone",
                "Maintain consistent volume throughout",
            ],
        )

    if word_count < settings.QUALITY_MIN_WORDS:
        return TranscriptionQualityAssessment(
            level="info",
            warning=True,
            message="Your response was quite brief. Longer responses provide better analysis.",
            suggestions=[
                "Try to provide more detailed explanations",
                "Include examples or context to support your answer",
                "Aim for 30-50 words minimum for better feedback",
            ],
        )

    return TranscriptionQualityAssessment(
        level="success",
        warning=False,
        message="Excellent audio quality. Transcription is highly accurate.",
        suggestions=[],
    )
