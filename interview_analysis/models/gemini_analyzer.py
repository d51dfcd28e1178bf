"""
Content analysis of interview answers using Google Gemini
"""
import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import google.generativeai as genai
from google.api_core import exceptions as google_exceptions

from interview_analysis.core.exceptions import ConfigurationError, ContentAnalysisFailure
from interview_analysis.models.interview_domains import InterviewDomain
from interview_analysis.schemas.data_models import ContentAnalysis, SpeechPatternMetrics, VideoAnalysisResult

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (
    google_exceptions.ServiceUnavailable,
    google_exceptions.ResourceExhausted,
    google_exceptions.DeadlineExceeded,
    google_exceptions.InternalServerError,
)


class ContentAnalysisBackend(ABC):
    """Contract for the generative text service"""
    name: str = "content"

    @abstractmethod
    async def generate(self, prompt: str) -> str:
        pass

    def is_ready(self) -> bool:
        return True

    def get_status(self) -> Dict[str, Any]:
        return {"name": self.name, "configured": self.is_ready()}


class GeminiContentBackend(ContentAnalysisBackend):
    """Gemini text generation with retry on transient failures"""
    name = "gemini"

    def __init__(self, api_key: str, model_name: str = "gemini-1.5-pro", max_retries: int = 3,
                 model=None, retry_delay: float = 2.0):
        if model is None:
            if not api_key:
                raise ConfigurationError("Gemini is not configured. Set GEMINI_API_KEY.")
            genai.configure(api_key=api_key)
            model = genai.GenerativeModel(
                model_name,
                generation_config={
                    "temperature": 0.7,
                    "top_k": 40,
                    "top_p": 0.95,
                    "max_output_tokens": 8192,
                },
            )
            logger.info(f"✅ Gemini configured ({model_name})")
        self.model = model
        self.model_name = model_name
        self.max_retries = max(1, max_retries)
        self.retry_delay = retry_delay

    async def generate(self, prompt: str) -> str:
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                response = await self.model.generate_content_async(prompt)
                text = self._extract_text(response)
                logger.info(f"✅ Gemini generation successful on attempt {attempt} ({len(text)} characters)")
                return text
            except RETRYABLE_ERRORS as e:
                last_error = e
                logger.error(f"❌ Gemini attempt {attempt}/{self.max_retries} failed: {e}")
                if attempt < self.max_retries:
                    wait = min(attempt * self.retry_delay, 10.0)
                    logger.info(f"⏳ Waiting {wait:.1f}s before retry...")
                    await asyncio.sleep(wait)
            except ContentAnalysisFailure:
                raise
            except Exception as e:
                raise ContentAnalysisFailure(f"Gemini generation failed: {e}") from e

        logger.error("❌ All Gemini retry attempts failed")
        raise ContentAnalysisFailure(f"Gemini generation failed after {self.max_retries} attempts: {last_error}")

    @staticmethod
    def _extract_text(response) -> str:
        candidates = getattr(response, "candidates", None)
        if not candidates:
            raise ContentAnalysisFailure("No candidates in response")

        candidate = candidates[0]
        finish_reason = getattr(candidate.finish_reason, "name", str(candidate.finish_reason))
        if finish_reason in ("SAFETY", "RECITATION"):
            logger.warning(f"⚠️ Content blocked by safety filter: {finish_reason}")
            raise ContentAnalysisFailure(f"Content blocked: {finish_reason}")

        parts = getattr(candidate.content, "parts", None) or []
        text = "".join(getattr(part, "text", "") or "" for part in parts)
        if not text.strip():
            raise ContentAnalysisFailure("Empty response from Gemini")
        if finish_reason == "MAX_TOKENS":
            logger.warning("⚠️ Response may be truncated - hit max tokens limit")
        return text

    def get_status(self) -> Dict[str, Any]:
        return {"name": self.name, "configured": self.is_ready(), "model": self.model_name}


def _parse_gemini_json(raw_text: str) -> dict:
    """
    Parse JSON from Gemini response, handling markdown code blocks.

    Raises:
        ValueError: If JSON cannot be parsed
    """
    text = raw_text.strip()

    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    # Extract JSON from markdown code blocks (```json ... ```)
    for match in re.findall(r'```(?:json)?\s*\n?(.*?)\n?```', text, re.DOTALL):
        try:
            return json.loads(match.strip())
        except json.JSONDecodeError:
            continue

    # Try to find JSON between curly braces
    for match in sorted(re.findall(r'\{.*\}', text, re.DOTALL), key=len, reverse=True):
        try:
            return json.loads(match)
        except json.JSONDecodeError:
            continue

    raise ValueError("Could not extract valid JSON from response")


SECTION_HEADERS = (
    "SCORE", "STRENGTHS", "IMPROVEMENTS", "TECHNICAL_ACCURACY",
    "CLARITY", "RELEVANCE", "DOMAIN_INSIGHTS", "OVERALL",
)
_NUMBER_FIELD = r"\*{{0,2}}{name}:?\*{{0,2}}:?\s*\[?(\d{{1,3}})\]?"
_BLOCK_FIELD = r"^[ \t]*\*{{0,2}}{name}:?\*{{0,2}}:?(.*?)(?=^[ \t]*\*{{0,2}}(?:{headers})\b|\Z)"


def _number(text: str, name: str) -> Optional[int]:
    match = re.search(_NUMBER_FIELD.format(name=name), text, re.IGNORECASE)
    if not match:
        return None
    return max(0, min(100, int(match.group(1))))


def _block(text: str, name: str) -> str:
    # Runs until the next section header at the start of a line
    pattern = _BLOCK_FIELD.format(name=name, headers="|".join(SECTION_HEADERS))
    match = re.search(pattern, text, re.IGNORECASE | re.DOTALL | re.MULTILINE)
    return match.group(1).strip().rstrip("*").strip() if match else ""


def _bullets(block: str, limit: int = 5) -> List[str]:
    items = []
    for line in block.splitlines():
        line = line.strip()
        if line.startswith(("-", "*", "•")):
            item = line.lstrip("-*• ").strip()
            if item:
                items.append(item)
    return items[:limit]


def parse_analysis_response(analysis_text: str) -> ContentAnalysis:
    """
    Parse the **SCORE:** / **STRENGTHS:** ... block format, falling back to a
    JSON object with the same keys.

    Raises:
        ContentAnalysisFailure: when no score can be found in either format
    """
    text = analysis_text or ""
    score = _number(text, "SCORE")

    if score is None:
        try:
            data = _parse_gemini_json(text)
        except ValueError as e:
            logger.error(f"Failed to parse analysis. Raw output: {text[:500]}...")
            raise ContentAnalysisFailure("Content analysis response has no score") from e
        if not isinstance(data, dict) or data.get("score") is None:
            raise ContentAnalysisFailure("Content analysis response has no score")
        try:
            return ContentAnalysis(
                score=max(0, min(100, int(data["score"]))),
                strengths=[str(s) for s in data.get("strengths", [])][:5],
                improvements=[str(s) for s in data.get("improvements", [])][:5],
                technical_accuracy=int(data.get("technical_accuracy", data.get("technicalAccuracy", 0)) or 0),
                clarity=int(data.get("clarity", 0) or 0),
                relevance=int(data.get("relevance", 0) or 0),
                domain_insights=str(data.get("domain_insights", data.get("domainInsights", ""))),
                overall=str(data.get("overall", "")),
            )
        except (TypeError, ValueError) as e:
            raise ContentAnalysisFailure(f"Content analysis JSON is malformed: {e}") from e

    return ContentAnalysis(
        score=score,
        strengths=_bullets(_block(text, "STRENGTHS")),
        improvements=_bullets(_block(text, "IMPROVEMENTS")),
        technical_accuracy=_number(text, "TECHNICAL_ACCURACY") or 0,
        clarity=_number(text, "CLARITY") or 0,
        relevance=_number(text, "RELEVANCE") or 0,
        domain_insights=_block(text, "DOMAIN_INSIGHTS"),
        overall=_block(text, "OVERALL"),
    )


def _context_lines(domain: Optional[InterviewDomain], level: Optional[str], expected_keywords) -> str:
    keywords = list(expected_keywords) if isinstance(expected_keywords, (list, tuple)) else []
    return (
        f"- Domain: {domain.name if domain else 'General'}\n"
        f"- Level: {level or 'Mid-Level'}\n"
        f"- Expected Keywords: {', '.join(keywords) if keywords else 'N/A'}"
    )


def build_standard_prompt(question: str, response_text: str, domain: Optional[InterviewDomain] = None,
                          level: Optional[str] = None, expected_keywords=None) -> str:
    specialty = domain.name if domain else "professional interviews"
    return f"""You are an expert interview coach specializing in {specialty}.

**Interview Question:** {question}

**Candidate's Response:** {response_text}

**Context:**
{_context_lines(domain, level, expected_keywords)}

**Task:** Provide a comprehensive analysis of the candidate's response. Format your response EXACTLY as follows:

**SCORE: [0-100]**

**STRENGTHS:**
- [Strength 1]
- [Strength 2]
- [Strength 3]

**IMPROVEMENTS:**
- [Improvement 1]
- [Improvement 2]
- [Improvement 3]

**TECHNICAL_ACCURACY: [0-100]**
Brief explanation of technical accuracy.

**CLARITY: [0-100]**
Brief explanation of clarity.

**RELEVANCE: [0-100]**
Brief explanation of relevance to the question.

**DOMAIN_INSIGHTS:**
Specific insights related to {domain.name if domain else 'this domain'}.

**OVERALL:**
A concise 2-3 sentence overall assessment.

Focus on:
1. Technical accuracy and depth of knowledge
2. Communication clarity and structure
3. Relevance to the question asked
4. Use of industry-specific terminology
5. Real-world applicability"""


def build_advanced_prompt(question: str, response_text: str, domain: Optional[InterviewDomain] = None,
                          level: Optional[str] = None, expected_keywords=None,
                          speech: Optional[SpeechPatternMetrics] = None,
                          video: Optional[VideoAnalysisResult] = None) -> str:
    additional_context = ""
    if speech is not None:
        additional_context += f"""
**Speech Delivery Metrics:**
- Words per minute: {speech.words_per_minute}
- Filler words: {speech.filler_word_count} ({speech.filler_word_percentage:.2f}%)
- Speech confidence: {speech.confidence_percentage:.2f}%
- Long pauses: {speech.long_pause_count}"""

    if video is not None:
        insights = video.body_language_insights
        additional_context += f"""
**Body Language Analysis:**
- Eye contact: {insights.eye_contact_label}
- Body movement: {insights.movement_label}
- Overall presence: {insights.overall_presence_label}"""

    specialty = domain.name if domain else "professional interviews"
    return f"""You are an expert interview coach specializing in {specialty}.

**Interview Question:** {question}

**Candidate's Response (Transcribed):** {response_text}

**Context:**
{_context_lines(domain, level, expected_keywords)}
{additional_context}

**Task:** Provide a comprehensive analysis considering BOTH content quality AND delivery. Format your response EXACTLY as follows:

**SCORE: [0-100]**

**STRENGTHS:**
- [Strength 1]
- [Strength 2]
- [Strength 3]
- [Strength 4]
- [Strength 5]

**IMPROVEMENTS:**
- [Improvement 1]
- [Improvement 2]
- [Improvement 3]
- [Improvement 4]
- [Improvement 5]

**TECHNICAL_ACCURACY: [0-100]**
Brief explanation of technical accuracy.

**CLARITY: [0-100]**
Brief explanation of clarity and communication effectiveness.

**RELEVANCE: [0-100]**
Brief explanation of relevance to the question.

**DOMAIN_INSIGHTS:**
Specific insights related to {domain.name if domain else 'this domain'}, considering both content and delivery.

**OVERALL:**
A concise 2-3 sentence overall assessment integrating content, delivery, and presentation."""


class GeminiAnalyzer:
    """Builds the coaching prompt, calls the content backend and parses the answer"""

    def __init__(self, backend: ContentAnalysisBackend):
        self.backend = backend

    async def analyze(self, prompt: str) -> ContentAnalysis:
        try:
            analysis_text = await self.backend.generate(prompt)
        except ContentAnalysisFailure:
            raise
        except Exception as e:
            raise ContentAnalysisFailure(f"Content analysis service failed: {e}") from e
        return parse_analysis_response(analysis_text)
