"""
Post-interview analysis: turn a transcript into scores and written feedback.

The model is asked for a JSON document shaped like AIAnalysisResult. Any
failure (missing key, provider error, unparseable output) degrades to a
neutral fallback result so the results screen always has something to show.
"""
import json
import logging
import re
from typing import Any, Dict, List, Optional

from app.llm.provider import LLMProvider, LLMProviderError
from app.llm.router import get_llm_provider
from app.schemas.interview import (
    AIAnalysisResult,
    AIFeedback,
    InterviewConfig,
    PerformanceMetrics,
    TranscriptEntry,
)

logger = logging.getLogger(__name__)

FALLBACK_SCORE = 50
FALLBACK_SUMMARY = "AI analysis failed to generate. Please check your network connection or API quota."

SCORE_LABELS = (
    (90, "Excellent"),
    (80, "Very Good"),
    (70, "Good"),
    (60, "Fair"),
)

ANALYSIS_SCHEMA: Dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "metrics": {
            "type": "OBJECT",
            "properties": {
                "communication": {"type": "NUMBER"},
                "technicalKnowledge": {"type": "NUMBER"},
                "problemSolving": {"type": "NUMBER"},
                "confidence": {"type": "NUMBER"},
                "clarity": {"type": "NUMBER"},
                "overallScore": {"type": "NUMBER"},
            },
            "required": [
                "communication", "technicalKnowledge", "problemSolving",
                "confidence", "clarity", "overallScore",
            ],
        },
        "feedback": {
            "type": "OBJECT",
            "properties": {
                "summary": {"type": "STRING"},
                "strengths": {"type": "ARRAY", "items": {"type": "STRING"}},
                "areasToImprove": {"type": "ARRAY", "items": {"type": "STRING"}},
                "tips": {"type": "ARRAY", "items": {"type": "STRING"}},
            },
            "required": ["summary", "strengths", "areasToImprove", "tips"],
        },
    },
    "required": ["metrics", "feedback"],
}


def score_label(score: Optional[int]) -> str:
    """Band an overall score for display."""
    score = score or 0
    for threshold, label in SCORE_LABELS:
        if score >= threshold:
            return label
    return "Needs Improvement"


def fallback_result() -> AIAnalysisResult:
    return AIAnalysisResult(
        metrics=PerformanceMetrics(
            communication=FALLBACK_SCORE,
            technical_knowledge=FALLBACK_SCORE,
            problem_solving=FALLBACK_SCORE,
            confidence=FALLBACK_SCORE,
            clarity=FALLBACK_SCORE,
            overall_score=FALLBACK_SCORE,
        ),
        feedback=AIFeedback(
            summary=FALLBACK_SUMMARY,
            strengths=["Unable to analyze"],
            areas_to_improve=["Unable to analyze"],
            tips=["Try again later"],
        ),
    )


def format_transcript(transcript: List[TranscriptEntry]) -> str:
    return "\n".join(
        f"{'Interviewer' if entry.speaker == 'ai' else 'Candidate'}: {entry.text}"
        for entry in transcript
    )


def build_feedback_prompt(config: InterviewConfig) -> str:
    return f"""
You are an expert {config.interview_type} interviewer analyzing a transcript of a mock interview.

Candidate: {config.candidate_name}
Role: {config.job_role}
Experience: {config.experience_level}
Context: {config.job_description or 'N/A'}

Analyze the following transcript and provide a structured assessment.
Be strict but fair. Real interview standards apply.

Output must be valid JSON matching this schema:
{{
    "metrics": {{
        "communication": number (0-100),
        "technicalKnowledge": number (0-100),
        "problemSolving": number (0-100),
        "confidence": number (0-100),
        "clarity": number (0-100),
        "overallScore": number (0-100)
    }},
    "feedback": {{
        "summary": "2-3 sentences summarizing performance",
        "strengths": ["point 1", "point 2", "point 3", "point 4"],
        "areasToImprove": ["point 1", "point 2", "point 3"],
        "tips": ["actionable tip 1", "actionable tip 2", "actionable tip 3"]
    }}
}}
"""


def _parse_json_response(text: str) -> Dict[str, Any]:
    """Parse the model's JSON, tolerating a markdown code fence around it."""
    fenced = re.search(r'```(?:json)?\s*(\{.*\})\s*```', text, re.DOTALL)
    if fenced:
        text = fenced.group(1)
    data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError("AI response is not a JSON object")
    return data


def generate_interview_feedback(
    transcript: List[TranscriptEntry],
    config: InterviewConfig,
    provider: Optional[LLMProvider] = None,
) -> AIAnalysisResult:
    """
    Score a finished interview.

    Args:
        transcript: Ordered conversation entries
        config: Interview setup (role, level, type)
        provider: LLM provider; built from LLM_PROVIDER when omitted

    Returns:
        AIAnalysisResult; the fallback result when analysis is not possible
    """
    try:
        if not transcript:
            raise ValueError("No transcript available for analysis")

        provider = provider or get_llm_provider()
        response = provider.generate(
            system_prompt=build_feedback_prompt(config),
            user_prompt=f"TRANSCRIPT:\n\n{format_transcript(transcript)}",
            json_mode=True,
            response_schema=ANALYSIS_SCHEMA,
        )
        result = AIAnalysisResult.model_validate(_parse_json_response(response.content))
        logger.info(
            f"Interview feedback generated: provider={provider.name}, "
            f"entries={len(transcript)}, overall={result.metrics.overall_score}"
        )
        return result
    except (LLMProviderError, ValueError) as e:
        # pydantic ValidationError and JSONDecodeError are both ValueErrors
        logger.warning(f"AI analysis failed, returning fallback result: {e}")
        return fallback_result()
    except Exception as e:
        logger.error(f"Unexpected AI analysis failure, returning fallback result: {e}", exc_info=True)
        return fallback_result()
