from __future__ import annotations

"""Study guide generation: source text in, templated Markdown out."""

import logging
import re
from typing import Any, Dict, List

from studybot.config import STUDY_GUIDE_MAX_TOKENS, STUDY_GUIDE_MODEL, STUDY_GUIDE_TEMPERATURE
from studybot.errors import MissingCredentials
from studybot.models import StudyGuide
from studybot.remote import complete_chat, make_client


logger = logging.getLogger(__name__)

SECTIONS = ("Title", "Key Takeaways", "Terms", "Summary", "Practice Questions", "Answers")

SYSTEM_PROMPT = """
You are an expert study coach. Respond ONLY with valid GitHub-flavored Markdown. Follow this template and rules EXACTLY:

TEMPLATE:
## Title
<short descriptive title>

## Key Takeaways
- <bullet 1>
- <bullet 2>
- <bullet 3>
- <bullet 4>
- <bullet 5>

## Terms
- <term>: <short definition>
- <term>: <short definition>
- <term>: <short definition>

## Summary
<3-5 sentences summary>

## Practice Questions
1. <question>
2. <question>
3. <question>
4. <question>
5. <question>

## Answers
1. <short answer>
2. <short answer>
3. <short answer>
4. <short answer>
5. <short answer>

RULES:
- Use exactly the headings shown above (## Title, ## Key Takeaways, ## Terms, ## Summary, ## Practice Questions, ## Answers).
- Use hyphen bullets "- " for lists. For nested bullets, indent by two spaces then "- ".
- Insert a blank line between paragraphs and before/after lists.
- Do NOT add any text before or after the template.
- Keep the tone clear, encouraging, and appropriate for kids aged 8-14.
""".strip()

EXAMPLE_INPUT = "Example input: A short paragraph about photosynthesis for kids."

EXAMPLE_OUTPUT = """
## Title
Photosynthesis Basics

## Key Takeaways
- Plants use sunlight to convert water and carbon dioxide into glucose (sugar).
- Chlorophyll in leaves absorbs light energy.
- Oxygen is released as a by-product of photosynthesis.
- Photosynthesis mostly happens in the chloroplasts of plant cells.
- Glucose provides energy for growth and repair.

## Terms
- Chlorophyll: Green pigment that captures light energy.
- Chloroplast: Cell part where photosynthesis happens.
- Glucose: A simple sugar that stores energy for the plant.

## Summary
Photosynthesis is how plants make their own food. Using sunlight, plants change water and carbon dioxide into glucose, which gives them energy. The process takes place in chloroplasts and uses chlorophyll to capture light. Oxygen is made and released into the air. This helps plants grow and also supplies animals and people with oxygen.

## Practice Questions
1. What does chlorophyll do?
2. Where does photosynthesis happen inside plant cells?
3. What gas do plants release during photosynthesis?
4. What two ingredients do plants need to make glucose?
5. Why is glucose important to the plant?

## Answers
1. It captures light energy from the sun.
2. In the chloroplasts.
3. Oxygen.
4. Water and carbon dioxide (plus sunlight energy).
5. It provides energy for the plant to grow and repair.
""".strip()

_LIST_ITEM_RE = re.compile(r"^(- |\* |\d+\. )")
_TITLE_RE = re.compile(r"^##\s+Title\s*\n+(.+?)\s*$", re.MULTILINE)


def build_messages(source_text: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": EXAMPLE_INPUT},
        {"role": "assistant", "content": EXAMPLE_OUTPUT},
        {"role": "user", "content": f"Source Text:\n\n{source_text}"},
    ]


def normalize_markdown(md: str) -> str:
    """Tidy model Markdown so lists render consistently.

    - Normalizes line endings.
    - Maps bullet glyphs (•, –, —) to hyphens.
    - Inserts a blank line before a list item that follows a non-blank line.
    - Converts `* ` bullets to `- `.
    """
    text = md.replace("\r\n", "\n").replace("\r", "\n")
    text = text.replace("•", "-").replace("– ", "- ").replace("— ", "- ")
    result: List[str] = []
    for line in text.split("\n"):
        trimmed = line.strip()
        if _LIST_ITEM_RE.match(trimmed):
            if result and result[-1].strip():
                result.append("")
            if trimmed.startswith("* "):
                result.append(line.replace("* ", "- ", 1))
                continue
        result.append(line)
    return "\n".join(result)


def extract_title(md: str, fallback: str = "Study Guide") -> str:
    m = _TITLE_RE.search(md or "")
    if not m:
        return fallback
    title = m.group(1).strip().lstrip("#").strip()
    return title or fallback


async def generate_study_guide(
    source_text: str,
    api_key: str | None,
    *,
    title: str | None = None,
    client: Any = None,
) -> StudyGuide:
    """Generate a StudyGuide from source text.

    Raises MissingCredentials, NetworkError, ServiceError or SchemaError. There
    is no local fallback.
    """
    if not api_key:
        raise MissingCredentials()
    client = client or make_client(api_key)
    logger.debug("Requesting study guide for %d chars of source text", len(source_text))
    content = await complete_chat(
        client,
        model=STUDY_GUIDE_MODEL,
        messages=build_messages(source_text),
        temperature=STUDY_GUIDE_TEMPERATURE,
        max_tokens=STUDY_GUIDE_MAX_TOKENS,
    )
    markdown = normalize_markdown(content.strip())
    guide_title = title.strip() if title and title.strip() else extract_title(markdown)
    return StudyGuide(title=guide_title, content=markdown)
