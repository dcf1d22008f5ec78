# docmath/utils/validators.py
# -*- coding: utf-8 -*-
from __future__ import annotations
import json
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

_FENCE_OPEN = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_FENCE_CLOSE = re.compile(r"\s*```\s*$")


def parse_json_array_maybe_wrapped(payload: Any) -> Optional[List[Any]]:
    """Parse a JSON array from model text, also from '```json\\n[...]\\n```' or 'json\\n[...]'.
    A {"questions": [...]} object is unwrapped."""
    if isinstance(payload, list):
        return payload
    if not isinstance(payload, str):
        return None

    s = _FENCE_OPEN.sub("", payload.strip())
    s = _FENCE_CLOSE.sub("", s)
    if s.lower().startswith("json"):
        i = s.find("[")
        if i != -1:
            s = s[i:]

    def _as_array(obj: Any) -> Optional[List[Any]]:
        if isinstance(obj, list):
            return obj
        if isinstance(obj, dict) and isinstance(obj.get("questions"), list):
            return obj["questions"]
        return None

    # 1) direct parse
    try:
        found = _as_array(json.loads(s))
        if found is not None:
            return found
    except ValueError:
        pass

    # 2) largest [...] slice
    i = s.find("[")
    j = s.rfind("]")
    if i != -1 and j > i:
        try:
            return _as_array(json.loads(s[i:j + 1]))
        except ValueError:
            return None
    return None


# --- per-question checks: return a problem description or None ---

def v_question_text(q: Dict[str, Any]) -> Optional[str]:
    text = q.get("question")
    if not isinstance(text, str) or not text.strip():
        return "missing question text"
    return None


def v_options(q: Dict[str, Any]) -> Optional[str]:
    options = q.get("options")
    if not isinstance(options, list) or len(options) < 2:
        return "expected a list of at least 2 options"
    if any(not isinstance(o, (str, int, float)) or not str(o).strip() for o in options):
        return "options must be non-empty text"
    return None


def v_correct_answer(q: Dict[str, Any]) -> Optional[str]:
    answer = q.get("correctAnswer")
    if isinstance(answer, str) and answer.strip().isdigit():
        answer = int(answer.strip())
    if isinstance(answer, bool) or not isinstance(answer, int):
        return "correctAnswer must be an option index"
    options = q.get("options")
    count = len(options) if isinstance(options, list) else 0
    if not 0 <= answer < count:
        return f"correctAnswer {answer} out of range for {count} options"
    return None


def v_explanation(q: Dict[str, Any]) -> Optional[str]:
    explanation = q.get("explanation", "")
    if explanation is not None and not isinstance(explanation, str):
        return "explanation must be text"
    return None


QuestionValidator = Callable[[Dict[str, Any]], Optional[str]]

QUESTION_VALIDATORS: List[Tuple[str, QuestionValidator]] = [
    ("question_text", v_question_text),
    ("options", v_options),
    ("correct_answer", v_correct_answer),
    ("explanation", v_explanation),
]


def _normalize_question(q: Dict[str, Any], index: int) -> Dict[str, Any]:
    return {
        "id": f"q{index + 1}",
        "question": q["question"].strip(),
        "options": [str(o).strip() for o in q["options"]],
        "correctAnswer": int(str(q["correctAnswer"]).strip()),
        "explanation": (q.get("explanation") or "").strip(),
    }


def run_validators(items: List[Any]) -> Tuple[List[Dict[str, Any]], Dict[str, Any]]:
    """Check every question; returns (normalized questions with ids qN, report).
    report["problems"] lists "qN: <check>: <reason>" for each failure."""
    report: Dict[str, Any] = {"received": len(items), "problems": []}
    questions: List[Dict[str, Any]] = []
    for index, q in enumerate(items):
        if not isinstance(q, dict):
            report["problems"].append(f"q{index + 1}: not an object")
            continue
        failed = False
        for name, v in QUESTION_VALIDATORS:
            problem = v(q)
            if problem:
                report["problems"].append(f"q{index + 1}: {name}: {problem}")
                failed = True
        if not failed:
            questions.append(_normalize_question(q, index))
    report["valid"] = len(questions)
    return questions, report
