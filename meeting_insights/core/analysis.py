"""Meeting analysis: prompt construction, model call and reply parsing."""

import json
import logging
import re
from typing import Any

from meeting_insights.core.client import create_message
from meeting_insights.core.config import AnalyzerConfig
from meeting_insights.core.exceptions import InvalidResponseError, InvalidTranscriptError
from meeting_insights.core.validation import (
    TRANSCRIPT_MAX_LENGTH,
    TRANSCRIPT_MIN_LENGTH,
    AnalysisResult,
    validate_analysis_result,
)

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """\
You are a meeting analysis assistant. You must return ONLY valid JSON, with no explanation, \
code fences, or extra text. Analyze the following meeting transcript and report on: \
action items with owners and deadlines, key decisions that were made, and the overall \
meeting sentiment/tone. Return:

{{
  "action_items": [{{ "owner": "string", "task": "string", "deadline": "string | null" }}],
  "decisions": ["string"],
  "sentiment": "string"
}}
Transcript:
{transcript}

Remember: respond with **only** JSON, nothing else."""

# Greedy on purpose: spans first "{" to last "}" so prose or fences around the object are ignored.
_JSON_OBJECT_RE = re.compile(r"\{[\s\S]*\}")


def build_prompt(transcript: str) -> str:
    """Embed the transcript verbatim in the fixed analysis instructions."""
    return PROMPT_TEMPLATE.format(transcript=transcript)


def extract_text(response_json: dict[str, Any]) -> str:
    """Return the first text block of a Messages API reply."""
    content = response_json.get("content") if isinstance(response_json, dict) else None
    for block in content or []:
        if isinstance(block, dict) and block.get("type") == "text" and isinstance(block.get("text"), str):
            return block["text"]
    raise InvalidResponseError("No text content returned from the model API")


def extract_json(text: str) -> Any:
    """
    Pull the JSON object embedded in a free-form model reply.

    Best effort: if the reply holds more than one object the span between
    them is included and parsing fails.

    Raises:
        InvalidResponseError: If no object is found or it does not parse
    """
    stripped = text.strip()
    match = _JSON_OBJECT_RE.search(stripped)
    if not match:
        logger.warning(f"Model returned non-JSON response: {stripped!r}")
        raise InvalidResponseError("Model returned invalid JSON format.", raw_text=stripped)

    json_text = match.group(0).replace("```json", "").replace("```", "").strip()

    try:
        return json.loads(json_text)
    except json.JSONDecodeError as e:
        logger.error(f"JSON parse error: {e}")
        logger.error(f"Raw text from model: {json_text!r}")
        raise InvalidResponseError("Failed to parse model response as valid JSON.", raw_text=json_text) from e


def parse_analysis(text: str) -> AnalysisResult:
    """Turn the text of a model reply into a validated ``AnalysisResult``."""
    parsed = extract_json(text)

    if (
        not isinstance(parsed, dict)
        or not isinstance(parsed.get("action_items"), list)
        or not isinstance(parsed.get("decisions"), list)
        or not isinstance(parsed.get("sentiment"), str)
    ):
        logger.error(f"Parsed JSON missing expected structure: {parsed!r}")
        raise InvalidResponseError("Parsed JSON missing expected structure.", raw_text=text)

    result = validate_analysis_result(parsed)
    if not result.success:
        raise InvalidResponseError(
            f"Parsed JSON has malformed fields: {result.errors['field_errors']}",
            raw_text=text,
        )
    return result.data


async def analyze_meeting(transcript: str, config: AnalyzerConfig) -> AnalysisResult:
    """
    Analyze a meeting transcript with the model provider.

    Args:
        transcript: Meeting text, 10 to 5000 characters
        config: Analyzer configuration

    Returns:
        The validated action items, decisions and sentiment

    Raises:
        InvalidTranscriptError: If the transcript is out of bounds
        UpstreamError: If the provider call fails (subclasses for unreachable/timeout)
        InvalidResponseError: If the reply cannot be parsed into an analysis
    """
    if not isinstance(transcript, str) or len(transcript.strip()) < TRANSCRIPT_MIN_LENGTH:
        raise InvalidTranscriptError(
            f"Invalid transcript: must be a non-empty string of at least {TRANSCRIPT_MIN_LENGTH} characters."
        )
    if len(transcript) > TRANSCRIPT_MAX_LENGTH:
        raise InvalidTranscriptError(
            f"Invalid transcript: must not exceed {TRANSCRIPT_MAX_LENGTH} characters."
        )

    request_body: dict[str, Any] = {
        "model": config.model,
        "max_tokens": config.max_tokens,
        "temperature": config.temperature,
        "messages": [{"role": "user", "content": build_prompt(transcript)}],
    }

    response_json = await create_message(request_body, config)
    text = extract_text(response_json)
    analysis = parse_analysis(text)

    logger.info(
        f"Analysis complete: {len(analysis.action_items)} action items, "
        f"{len(analysis.decisions)} decisions"
    )
    return analysis
