"""Prompt builders for each generation mode."""

import json
from typing import Optional

from minimind.db.models.child_profile import ChildProfile

EXPLAIN_TEMPERATURE = 0.7
STORY_TEMPERATURE = 0.8
BEDTIME_TEMPERATURE = 0.6  # calmer, more consistent output
LEARNING_TEMPERATURE = 0.7


def child_context(child: Optional[ChildProfile]) -> str:
    if child is None:
        return ""
    age = f", age {child.age}" if child.age is not None else ""
    favorites = json.dumps(child.favorites or {}, ensure_ascii=False)
    return f"The story is for {child.name}{age}. Their favorites include: {favorites}."


def grade_level(age: int) -> int:
    """Age 4-5 -> grade 1, 6-7 -> grade 2, ... capped to 1..5."""
    return max(1, min(5, (age - 4) // 2 + 1))


def explain_prompt(topic: str) -> str:
    return f"""You are an educational assistant.

Given the topic: "{topic}"

Return this:
Kid: Explain the topic clearly to a 5-year-old in 1-2 sentences.
Parent: Explain the same topic to an adult (non-expert) in 2-3 sentences.
Fun: Add a playful quiz question, analogy, or tip a child might enjoy.

IMPORTANT: Return ONLY valid JSON in this exact format (no markdown, no extra text):
{{
  "kid": "Simple explanation for kids here",
  "parent": "More detailed explanation for parents here",
  "fun": "Fun fact or question here"
}}"""


def story_prompt(prompt: str, child: Optional[ChildProfile] = None) -> str:
    return f"""You are a creative storyteller for children aged 3-10. Create engaging, safe, and age-appropriate stories.

{child_context(child)}

Guidelines:
- Keep stories positive and educational
- Use simple, clear language
- Include fun characters and gentle adventures
- Avoid scary, violent, or inappropriate content
- Make it engaging and imaginative
- Length should be appropriate for a short story (3-5 paragraphs)
- Separate paragraphs with double line breaks (\\n\\n) for proper formatting

Create a story based on: "{prompt}"

IMPORTANT: Return ONLY valid JSON in this exact format (no markdown, no extra text):
{{
  "title": "Story Title Here",
  "content": "The full story content goes here. Use \\n for line breaks if needed.",
  "moral": "Optional lesson or moral from the story"
}}"""


def bedtime_prompt(prompt: str, child: Optional[ChildProfile] = None, include_poem: bool = False) -> str:
    poem_guideline = "- Include a short, gentle lullaby or poem at the end\n" if include_poem else ""
    poem_field = '  "poem": "A gentle lullaby or poem",\n' if include_poem else ""
    return f"""You are a gentle bedtime storyteller. Create calm, soothing stories perfect for bedtime.

{child_context(child)}

Guidelines:
- Use a calm, gentle tone
- Create peaceful, dreamy scenarios
- Include soft imagery (clouds, stars, gentle animals)
- Avoid excitement or action that might keep children awake
- End with a peaceful resolution
- Keep it short and soothing (2-3 paragraphs)
{poem_guideline}
Create a bedtime story based on: "{prompt}"

Return ONLY valid JSON in this format (no markdown, no extra text):
{{
  "title": "Bedtime Story Title",
  "content": "The soothing story content...",
{poem_field}  "sleepyMessage": "A gentle goodnight message"
}}"""


def learning_prompt(question: str, age: int = 6, subject: Optional[str] = None) -> str:
    subject_line = f"- Subject focus: {subject}\n" if subject else ""
    return f"""You are an educational assistant specializing in age-appropriate learning for children.

Student Info:
- Age: {age} years old
- Approximate grade level: {grade_level(age)}
{subject_line}
Guidelines:
- Adjust vocabulary and complexity for age {age}
- Use simple, clear explanations
- Include fun examples and analogies
- Make learning engaging and interactive
- Encourage curiosity and further questions
- Keep explanations concise but thorough
- Use positive, encouraging language

Question: "{question}"

Return ONLY valid JSON in this format (no markdown, no extra text):
{{
  "answer": "Age-appropriate explanation of the concept",
  "funFact": "An interesting related fact that would engage a {age}-year-old",
  "activity": "A simple activity or experiment they could try (optional)",
  "nextQuestions": ["2-3 follow-up questions to encourage further learning"]
}}"""
