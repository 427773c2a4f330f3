"""Recovery parsing of raw model output."""

import json

import pytest

from minimind.services.response_parser import (
    BedtimeResult,
    ExplainResult,
    GenerationKind,
    LearningResult,
    StoryResult,
    SCHEMAS,
    parse_generation,
    strip_code_fence,
)


def test_fenced_explain_json():
    raw = '```json\n{"kid":"a","parent":"b","fun":"c"}\n```'
    result = parse_generation(raw, GenerationKind.EXPLAIN)
    assert isinstance(result, ExplainResult)
    assert result.model_dump() == {"kid": "a", "parent": "b", "fun": "c"}


def test_fence_without_language_tag():
    assert strip_code_fence('```\n{"a": 1}\n```') == '{"a": 1}'
    assert strip_code_fence('{"a": 1}') == '{"a": 1}'


def test_json_surrounded_by_prose():
    raw = 'Sure! Here you go:\n{"title": "Moon", "content": "The moon smiled."}\nEnjoy!'
    result = parse_generation(raw, "story")
    assert result.title == "Moon"
    assert result.content == "The moon smiled."
    assert result.moral is None


def test_prose_story_output():
    raw = (
        "Title: The Brave Little Turtle\n\n"
        "Once upon a time, a turtle named Tim wanted to see the sea.\n\n\n\n"
        "He walked for days and finally found it."
    )
    result = parse_generation(raw, GenerationKind.STORY)
    assert isinstance(result, StoryResult)
    assert result.title == "The Brave Little Turtle"
    assert "turtle named Tim" in result.content
    assert "Title:" not in result.content
    assert "\n\n\n" not in result.content
    assert result.moral == "Every story has something to teach us!"


def test_prose_story_without_title_gets_default():
    result = parse_generation("A bunny hopped all the way home.", "story")
    assert result.title == "A Wonderful Story"
    assert result.content == "A bunny hopped all the way home."


def test_truncated_story_json():
    raw = '{"title": "Stars", "content": "Once upon a time there was a star.\\n\\nIt twinkled and'
    result = parse_generation(raw, GenerationKind.STORY)
    assert result.title == "Stars"
    assert result.content.startswith("Once upon a time there was a star.\n\nIt twinkled")


def test_malformed_json_with_unescaped_quote():
    raw = '{\n  "title": "Sam",\n  "content": "Sam said "hi" to the owl.",\n  "moral": "Be kind"\n}'
    result = parse_generation(raw, GenerationKind.STORY)
    assert result.title == "Sam"
    assert result.moral == "Be kind"
    assert "Sam said" in result.content


def test_bedtime_defaults():
    result = parse_generation('{"content": "Close your eyes, little one."}', "bedtime")
    assert isinstance(result, BedtimeResult)
    assert result.title == "A Peaceful Dream"
    assert result.sleepyMessage == "Sweet dreams! 🌙"
    assert result.poem is None


def test_learning_defaults():
    result = parse_generation('{"answer": "Plants eat sunlight."}', GenerationKind.LEARNING)
    assert isinstance(result, LearningResult)
    assert result.answer == "Plants eat sunlight."
    assert result.funFact == "Learning is always an adventure!"
    assert result.activity is None
    assert result.nextQuestions == [
        "What else would you like to know?",
        "Can you think of more questions about this topic?",
    ]


def test_learning_snake_case_keys():
    raw = '{"answer": "Yes", "fun_fact": "Bees dance", "next_questions": ["Why?", ""]}'
    result = parse_generation(raw, "learning")
    assert result.funFact == "Bees dance"
    assert result.nextQuestions == ["Why?"]


def test_empty_fields_get_defaults():
    result = parse_generation('{"kid": "Rain is water falling.", "parent": "", "fun": null}', "explain")
    assert result.kid == "Rain is water falling."
    assert result.parent == SCHEMAS[GenerationKind.EXPLAIN].defaults["parent"]
    assert result.fun == SCHEMAS[GenerationKind.EXPLAIN].defaults["fun"]


@pytest.mark.parametrize("kind", list(GenerationKind))
@pytest.mark.parametrize("raw", [None, "", "   ", "```\n```", "{}", "[1, 2]", '{"content": 5'])
def test_never_raises_and_primary_is_filled(kind, raw):
    result = parse_generation(raw, kind)
    schema = SCHEMAS[kind]
    assert getattr(result, schema.primary)


@pytest.mark.parametrize("kind", list(GenerationKind))
def test_deeply_nested_output_is_salvaged(kind):
    for raw in ("[" * 100000, '{"a":' * 50000 + "1" + "}" * 50000):
        result = parse_generation(raw, kind)
        assert getattr(result, SCHEMAS[kind].primary)


@pytest.mark.parametrize(
    "kind, raw",
    [
        (GenerationKind.EXPLAIN, '```json\n{"kid":"a","parent":"b","fun":"c"}\n```'),
        (GenerationKind.STORY, "Title: Owl\n\nThe owl hooted.\n\nThe end."),
        (GenerationKind.BEDTIME, '{"content": "Shh, sleep now.", "poem": "Twinkle"}'),
        (GenerationKind.LEARNING, '{"answer": "Because gravity", "activity": "Drop a ball'),
    ],
)
def test_idempotent_on_own_output(kind, raw):
    first = parse_generation(raw, kind)
    second = parse_generation(json.dumps(first.model_dump()), kind)
    assert second == first


def test_deterministic():
    raw = "Title: Same\n\nSame story every time."
    assert parse_generation(raw, "story") == parse_generation(raw, "story")
