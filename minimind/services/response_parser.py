"""Turn raw model output into typed results.

Models are asked for bare JSON but regularly wrap it in markdown fences, add prose
around it, or get cut off mid-string. parse_generation never raises: it parses what it
can, salvages the main text field from whatever is left, and fills every required
field with a fixed default so callers can rely on the shape.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class GenerationKind(str, Enum):
    EXPLAIN = "explain"
    STORY = "story"
    BEDTIME = "bedtime"
    LEARNING = "learning"


class ExplainResult(BaseModel):
    kid: str
    parent: str
    fun: str


class StoryResult(BaseModel):
    title: str
    content: str
    moral: Optional[str] = None


class BedtimeResult(BaseModel):
    title: str
    content: str
    poem: Optional[str] = None
    sleepyMessage: str


class LearningResult(BaseModel):
    answer: str
    funFact: str
    activity: Optional[str] = None
    nextQuestions: List[str]


GenerationResult = Union[ExplainResult, StoryResult, BedtimeResult, LearningResult]


@dataclass(frozen=True)
class _Schema:
    model: Type[BaseModel]
    primary: str
    placeholder: str
    defaults: Dict[str, Any]
    optional: Tuple[str, ...] = ()
    # Filled only when the output had to be salvaged
    salvage_defaults: Dict[str, str] = field(default_factory=dict)

    @property
    def field_names(self) -> Tuple[str, ...]:
        return (self.primary, *self.defaults, *self.optional)


SCHEMAS: Dict[GenerationKind, _Schema] = {
    GenerationKind.EXPLAIN: _Schema(
        model=ExplainResult,
        primary="kid",
        placeholder="That's a great question! Let me think about how to explain this in a simple way.",
        defaults={
            "parent": "This is an interesting topic that requires some context to explain properly.",
            "fun": "Here's something fun to think about related to your question!",
        },
    ),
    GenerationKind.STORY: _Schema(
        model=StoryResult,
        primary="content",
        placeholder=(
            "Once upon a time, a story was on its way to you, but it got a little lost. "
            "Let's try telling it again!"
        ),
        defaults={"title": "A Wonderful Story"},
        optional=("moral",),
        salvage_defaults={"moral": "Every story has something to teach us!"},
    ),
    GenerationKind.BEDTIME: _Schema(
        model=BedtimeResult,
        primary="content",
        placeholder=(
            "The stars are twinkling softly tonight. Close your eyes, take a slow breath, "
            "and drift into a gentle, peaceful dream."
        ),
        defaults={"title": "A Peaceful Dream", "sleepyMessage": "Sweet dreams! 🌙"},
        optional=("poem",),
    ),
    GenerationKind.LEARNING: _Schema(
        model=LearningResult,
        primary="answer",
        placeholder="That's a wonderful question! Let's explore it together another time.",
        defaults={
            "funFact": "Learning is always an adventure!",
            "nextQuestions": (
                "What else would you like to know?",
                "Can you think of more questions about this topic?",
            ),
        },
        optional=("activity",),
    ),
}

_FENCE_OPEN = re.compile(r"^```[\w+-]*[ \t]*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")
_KEY_LINE = re.compile(r'^\s*"([^"]+)"\s*:', re.MULTILINE)
_BRACE_LINE = re.compile(r"^\s*[{}\[\]],?\s*$", re.MULTILINE)
_KEY_PREFIX = re.compile(r'^\s*"[^"]*"\s*:\s*"?', re.MULTILINE)
_TRAILING_QUOTE = re.compile(r'"\s*,?\s*$', re.MULTILINE)
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_TITLE_LINE = re.compile(r"^\s*\**\s*title\s*\**\s*[:\-]\s*(.+?)\s*$", re.IGNORECASE)
_HEADING_LINE = re.compile(r"^\s*#{1,3}\s+(.+?)\s*$")
_QUOTED = re.compile(r"[\"']([^\"']+)[\"']")


def strip_code_fence(text: str) -> str:
    """Remove a leading ``` / ```json fence and its closing fence."""
    if not text.startswith("```"):
        return text
    text = _FENCE_OPEN.sub("", text, count=1)
    text = _FENCE_CLOSE.sub("", text, count=1)
    return text.strip()


def _aliases(name: str) -> Tuple[str, ...]:
    snake = re.sub(r"(?<!^)([A-Z])", r"_\1", name).lower()
    return (name,) if snake == name else (name, snake)


def _unescape(value: str) -> str:
    try:
        return json.loads(f'"{value}"', strict=False)
    except ValueError:
        return (
            value.replace("\\n", "\n")
            .replace("\\t", "\t")
            .replace('\\"', '"')
            .replace("\\\\", "\\")
        )


def _as_text(value: Any) -> Optional[str]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _as_text_list(value: Any) -> Optional[List[str]]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return None
    items = [text for text in (_as_text(v) for v in value) if text]
    return items or None


def _fields_from_mapping(data: Dict[str, Any], schema: _Schema) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for name in schema.field_names:
        raw = next((data[a] for a in _aliases(name) if a in data), None)
        if isinstance(schema.defaults.get(name), tuple):
            value = _as_text_list(raw)
        else:
            value = _as_text(raw)
        if value is not None:
            fields[name] = value
    return fields


def _load_object(text: str) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(text, strict=False)
    except (ValueError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def _parse_strict(text: str, schema: _Schema) -> Optional[Dict[str, Any]]:
    data = _load_object(text)
    if data is None:
        # Prose around an otherwise complete object
        start, end = text.find("{"), text.rfind("}")
        if 0 <= start < end:
            data = _load_object(text[start:end + 1])
    if data is None:
        return None
    fields = _fields_from_mapping(data, schema)
    return fields if schema.primary in fields else None


def _extract_string(text: str, key: str, allow_unterminated: bool = False) -> Optional[str]:
    for name in _aliases(key):
        prefix = r'"' + re.escape(name) + r'"\s*:\s*"'
        match = re.search(prefix + r'((?:[^"\\]|\\.)*)"', text)
        if match is None and allow_unterminated:
            # Output cut off inside the value
            match = re.search(prefix + r"((?:[^\"\\]|\\.)*)\\?\Z", text)
        if match:
            value = _unescape(match.group(1)).strip()
            if value:
                return value
    return None


def _extract_string_list(text: str, key: str) -> Optional[List[str]]:
    for name in _aliases(key):
        match = re.search(r'"' + re.escape(name) + r'"\s*:\s*\[(.*?)\]', text, re.DOTALL)
        if match:
            items = [
                _unescape(v).strip()
                for v in re.findall(r'"((?:[^"\\]|\\.)*)"', match.group(1))
            ]
            items = [v for v in items if v]
            if items:
                return items
    return None


def _find_title(lines: List[str]) -> Tuple[Optional[str], Optional[int]]:
    """Look for a title in the first few non-empty lines. Returns (title, line index)."""
    candidates = [(i, line) for i, line in enumerate(lines) if line.strip()][:3]
    for i, line in candidates:
        match = _TITLE_LINE.match(line) or _HEADING_LINE.match(line)
        if match:
            title = match.group(1).strip().strip("*\"'").strip()
            if title:
                return title, i
        if "title" in line.lower():
            quoted = _QUOTED.search(line)
            if quoted:
                return quoted.group(1).strip(), i
    return None, None


def _clean_remainder(text: str, schema: _Schema) -> str:
    other_keys = {a for name in schema.field_names if name != schema.primary for a in _aliases(name)}
    lines = []
    for line in text.splitlines():
        key = _KEY_LINE.match(line)
        if key and key.group(1) in other_keys:
            continue
        lines.append(line)
    text = "\n".join(lines).strip()
    if text.lstrip().startswith("{") or _KEY_LINE.search(text):
        text = _BRACE_LINE.sub("", text)
        text = _KEY_PREFIX.sub("", text)
        text = _TRAILING_QUOTE.sub("", text)
        text = text.replace("\\n", "\n").replace('\\"', '"')
        text = text.strip().lstrip("{").rstrip("}")
    paragraphs = (p.strip() for p in _PARAGRAPH_BREAK.split(text))
    return "\n\n".join(p for p in paragraphs if p)


def _salvage(text: str, schema: _Schema) -> Dict[str, Any]:
    fields: Dict[str, Any] = {}
    for name in schema.field_names:
        if name == schema.primary:
            continue
        if isinstance(schema.defaults.get(name), tuple):
            value = _extract_string_list(text, name)
        else:
            value = _extract_string(text, name)
        if value:
            fields[name] = value

    primary = _extract_string(text, schema.primary, allow_unterminated=True)
    if primary is None:
        lines = text.splitlines()
        if "title" in schema.defaults and "title" not in fields:
            title, index = _find_title(lines)
            if title:
                fields["title"] = title
                del lines[index]
        primary = _clean_remainder("\n".join(lines), schema)
    if primary:
        fields[schema.primary] = primary

    for name, default in schema.salvage_defaults.items():
        fields.setdefault(name, default)
    return fields


def _build(fields: Dict[str, Any], schema: _Schema) -> BaseModel:
    values: Dict[str, Any] = {schema.primary: fields.get(schema.primary) or schema.placeholder}
    for name, default in schema.defaults.items():
        value = fields.get(name)
        if not value:
            value = list(default) if isinstance(default, tuple) else default
        values[name] = value
    for name in schema.optional:
        values[name] = fields.get(name)
    return schema.model(**values)


def parse_generation(raw: Optional[str], kind: Union[GenerationKind, str]) -> GenerationResult:
    """Best-effort conversion of model output into the result type for `kind`."""
    schema = SCHEMAS[GenerationKind(kind)]
    text = strip_code_fence((raw or "").strip())
    fields = _parse_strict(text, schema)
    if fields is None:
        logger.warning(
            "Model output for %s was not valid JSON; salvaging (%d chars)",
            GenerationKind(kind).value,
            len(text),
        )
        logger.debug("Unparsed model output: %r", raw)
        fields = _salvage(text, schema)
    return _build(fields, schema)
