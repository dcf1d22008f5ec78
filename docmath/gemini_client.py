# docmath/gemini_client.py
import os, logging
from pathlib import Path
from typing import Dict, List, Optional
from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types
from dotenv import load_dotenv

from docmath.utils.validators import parse_json_array_maybe_wrapped, run_validators

# Загружаем .env из корня проекта
load_dotenv()

logger = logging.getLogger(__name__)

PROMPTS_DIR = (Path(__file__).resolve().parent / "prompts")
TRANSLATE_FILE = PROMPTS_DIR / "translate.md"
SUMMARIZE_FILE = PROMPTS_DIR / "summarize.md"
QUIZ_FILE = PROMPTS_DIR / "quiz.md"
CHAT_FILE = PROMPTS_DIR / "chat.md"

SUMMARY_LENGTHS = ("short", "medium", "detailed")
DIFFICULTIES = ("easy", "medium", "hard")


class AIServiceError(RuntimeError):
    """The model could not be reached (network, DNS, timeout...)."""
    category = "transport"


class AIStatusError(AIServiceError):
    """Gemini answered with a non-success status."""
    category = "status"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class EmptyResponseError(AIServiceError):
    """The call succeeded but the model returned no text."""
    category = "empty"


class ResponseShapeError(AIServiceError):
    """The model text does not have the expected structure (quiz JSON)."""
    category = "shape"


def _read(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def _client() -> genai.Client:
    api_key = os.getenv("GEMINI_API_KEY")
    if not api_key:
        raise RuntimeError("GEMINI_API_KEY not set in .env")
    return genai.Client(api_key=api_key)


def _model() -> str:
    return os.getenv("GEMINI_MODEL", "gemini-2.0-flash")


def _config() -> genai_types.GenerateContentConfig:
    budget = os.getenv("GEMINI_THINKING_BUDGET")
    if budget is None or not budget.strip():
        return genai_types.GenerateContentConfig()
    return genai_types.GenerateContentConfig(
        thinking_config=genai_types.ThinkingConfig(thinking_budget=int(budget)),
    )


def _clip(content: str) -> str:
    """Long documents are cut to CONTENT_MAX_CHARS before they go into a prompt."""
    content = content or ""
    max_chars = int(os.getenv("CONTENT_MAX_CHARS", "60000"))
    if len(content) <= max_chars:
        return content
    logger.warning(f"Content truncated from {len(content)} to {max_chars} characters")
    return content[:max_chars] + f"\n\n(truncated to {max_chars} characters)"


def _generate(prompt: str, what: str) -> str:
    """Single call to the model; returns stripped text or raises an AIServiceError."""
    client = _client()
    config = _config()
    try:
        resp = client.models.generate_content(
            model=_model(),
            contents=[genai_types.Content(role="user", parts=[genai_types.Part.from_text(text=prompt)])],
            config=config,
        )
    except genai_errors.APIError as e:
        logger.error(f"Gemini returned {e.code} for {what}: {e.message}")
        raise AIStatusError(
            f"Gemini API error while generating {what} ({e.code}): {e.message or 'no details'}",
            status_code=e.code,
        ) from e
    except Exception as e:
        logger.error(f"Gemini call failed for {what}: {e}")
        raise AIServiceError(f"Could not reach Gemini API while generating {what}: {e}") from e

    text = (getattr(resp, "text", "") or "").strip()
    if not text:
        logger.warning(f"Gemini returned an empty {what}")
        raise EmptyResponseError(
            f"Gemini API returned an empty {what}. Please try again with different content."
        )
    return text


def translate(content: str, target_language: str) -> str:
    prompt = _read(TRANSLATE_FILE).format(content=_clip(content), target_language=target_language)
    return _generate(prompt, "translation")


def summarize(content: str, length: str = "medium") -> str:
    if length not in SUMMARY_LENGTHS:
        raise ValueError(f"length must be one of {', '.join(SUMMARY_LENGTHS)}")
    prompt = _read(SUMMARIZE_FILE).format(content=_clip(content), length=length)
    return _generate(prompt, "summary")


def generate_quiz(content: str, count: int = 5, difficulty: str = "medium") -> List[Dict]:
    """
    Ask for `count` multiple-choice questions and return them validated, with ids q1..qN.
    Raises ResponseShapeError when the text is not a usable JSON array of questions.
    """
    if difficulty not in DIFFICULTIES:
        raise ValueError(f"difficulty must be one of {', '.join(DIFFICULTIES)}")
    prompt = _read(QUIZ_FILE).format(content=_clip(content), count=count, difficulty=difficulty)
    raw = _generate(prompt, "quiz")

    items = parse_json_array_maybe_wrapped(raw)
    if items is None:
        logger.error(f"Quiz response is not JSON: {raw[:200]!r}")
        raise ResponseShapeError("Failed to parse quiz response from AI. Please try again.")

    questions, report = run_validators(items)
    if report["problems"] or not questions:
        logger.error(f"Quiz response rejected: {report}")
        details = "; ".join(report["problems"][:3]) or "no questions"
        raise ResponseShapeError(f"Quiz response from AI has an unexpected shape ({details}). Please try again.")
    return questions


def chat(content: str, message: str) -> str:
    prompt = _read(CHAT_FILE).format(content=_clip(content), message=message)
    return _generate(prompt, "chat response")
