from __future__ import annotations

import html
import re
from typing import Sequence

from studybot.editing import question_to_text
from studybot.models import FlashcardSet, PracticeTest, QuizRun, StudyGuide, TestQuestion


# Telegram caps message text at 4096 characters
MAX_MESSAGE_LEN = 4000


def escape_html(s: str) -> str:
    """Escape text for safe HTML rendering in Telegram."""
    return html.escape(s, quote=True)


def truncate(text: str, limit: int = MAX_MESSAGE_LEN) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 1].rstrip() + "…"


def join_lines(lines: Sequence[str], limit: int = MAX_MESSAGE_LEN) -> str:
    """Join whole lines until `limit`; never cuts inside an HTML tag."""
    out: list[str] = []
    size = 0
    for line in lines:
        if size + len(line) + 1 > limit - 1:
            out.append("…")
            break
        out.append(line)
        size += len(line) + 1
    return "\n".join(out)


def _fmt_date(test_or_set) -> str:
    return test_or_set.created_at.strftime("%Y-%m-%d")


# ---- Flashcard sets --------------------------------------------------------

def format_sets_list_html(sets: Sequence[FlashcardSet]) -> str:
    if not sets:
        return "\n".join(
            [
                "<b>Flashcard sets</b>",
                "",
                "No flashcard sets found. Tap <i>New set</i> to create one.",
            ]
        )
    lines = ["<b>Flashcard sets</b>", ""]
    for i, s in enumerate(sets, start=1):
        lines.append(f"{i}) {escape_html(s.title)} ({len(s.cards)} cards)")
    return "\n".join(lines)


def format_set_html(fset: FlashcardSet, preview: int = 15) -> str:
    lines = [f"<b>{escape_html(fset.title)}</b>", f"{len(fset.cards)} cards • created {_fmt_date(fset)}", ""]
    for c in fset.cards[:preview]:
        lines.append(f"- {escape_html(c.front)} → <i>{escape_html(c.back)}</i>")
    if len(fset.cards) > preview:
        lines.append(f"… and {len(fset.cards) - preview} more")
    return join_lines(lines)


def format_new_set_prompt_html(error: str | None = None) -> str:
    lines = []
    if error:
        lines.append(f"❌ {escape_html(error)}")
        lines.append("")
    lines.extend(
        [
            "<b>New flashcard set</b>",
            "<i>Send the title on the first line, then one card per line as “front - back”.</i>",
            "",
            "Example:",
            "<code>Spanish Basics",
            "Hola - Hello",
            "Gracias - Thank you",
            "Adiós - Goodbye</code>",
        ]
    )
    return "\n".join(lines)


def format_study_card_html(fset: FlashcardSet, index: int, show_back: bool) -> str:
    if not fset.cards:
        return "\n".join([f"<b>{escape_html(fset.title)}</b>", "", "No cards to study."])
    card = fset.cards[index]
    side = "Back" if show_back else "Front"
    text = card.back if show_back else card.front
    return "\n".join(
        [
            f"<b>{escape_html(fset.title)}</b>",
            f"<i>Card {index + 1} of {len(fset.cards)}</i>",
            "",
            f"<b>{escape_html(text)}</b>",
            "",
            f"<i>{side}</i>",
        ]
    )


def format_add_cards_prompt_html(fset: FlashcardSet, error: str | None = None) -> str:
    lines = []
    if error:
        lines.append(f"❌ {escape_html(error)}")
        lines.append("")
    lines.extend(
        [
            f"<b>Add cards to {escape_html(fset.title)}</b>",
            "<i>Send one card per line as “front - back”.</i>",
        ]
    )
    return "\n".join(lines)


def format_remove_cards_html(fset: FlashcardSet, page: int, pages: int) -> str:
    if not fset.cards:
        return "\n".join([f"<b>{escape_html(fset.title)}</b>", "", "This set has no cards."])
    lines = [f"<b>Remove cards from {escape_html(fset.title)}</b>", "Tap a card to delete it."]
    if pages > 1:
        lines.append(f"<i>Page {page + 1} of {pages}</i>")
    return "\n".join(lines)


# ---- Practice test generation ----------------------------------------------

def format_generator_html(fset: FlashcardSet, count: int, title: str | None) -> str:
    return "\n".join(
        [
            "<b>Practice Test Generator</b>",
            "",
            f"• Flashcard set: {escape_html(fset.title)}",
            f"• Number of questions: {count}",
            f"• Title: {escape_html(title) if title else '<i>(automatic)</i>'}",
        ]
    )


def format_title_prompt_html(error: str | None = None) -> str:
    lines = []
    if error:
        lines.append(f"❌ {escape_html(error)}")
        lines.append("")
    lines.append("<b>Practice test title</b>")
    lines.append("Please enter a title:")
    return "\n".join(lines)


def format_generating_html() -> str:
    return "\n".join(
        [
            "<b>Practice Test Generator</b>",
            "",
            "⏳ Generating your practice test... Please wait a moment.",
        ]
    )


def format_generated_html(test: PracticeTest, used_fallback: bool) -> str:
    lines = [
        "<b>Practice Test Generator</b>",
        "",
        f"✅ Practice test “{escape_html(test.title)}” saved successfully.",
        f"{len(test.questions)} questions.",
    ]
    if used_fallback:
        lines.append("")
        lines.append("<i>AI generation was unavailable, so the test was generated locally.</i>")
    return "\n".join(lines)


# ---- Practice test library & taking a test ---------------------------------

def format_tests_list_html(tests: Sequence[PracticeTest]) -> str:
    if not tests:
        return "\n".join(["<b>Practice tests</b>", "", "No practice tests yet. Generate one from a flashcard set."])
    lines = ["<b>Practice tests</b>", ""]
    for i, t in enumerate(tests, start=1):
        lines.append(f"{i}) {escape_html(t.title)} ({len(t.questions)} questions, {_fmt_date(t)})")
    return "\n".join(lines)


def format_test_html(test: PracticeTest) -> str:
    return "\n".join(
        [
            f"<b>{escape_html(test.title)}</b>",
            f"{len(test.questions)} questions • created {_fmt_date(test)}",
        ]
    )


def format_question_html(test: PracticeTest, qidx: int) -> str:
    """Render a single question with numbered options."""
    q = test.questions[qidx]
    opts_lines = [f"{i}) {escape_html(opt)}" for i, opt in enumerate(q.options, start=1)]
    parts = [
        f"<i>Question {qidx + 1} of {len(test.questions)}</i>",
        "",
        f"<b>{escape_html(q.prompt)}</b>",
        "",
        *opts_lines,
    ]
    return "\n".join(parts)


def score(test: PracticeTest, run: QuizRun) -> int:
    return sum(
        1
        for q, choice in zip(test.questions, run.choices)
        if choice is not None and choice == q.correct_index
    )


def format_test_summary_html(test: PracticeTest, run: QuizRun) -> str:
    """Render overall score and a per-question breakdown."""
    total = len(test.questions)
    lines: list[str] = [
        "<b>Test Completed!</b>",
        f"Score: {score(test, run)} / {total}",
    ]
    for idx, q in enumerate(test.questions):
        uc = run.choices[idx] if idx < len(run.choices) else None
        ci = q.correct_index
        correct_text = q.options[ci] if 0 <= ci < len(q.options) else ""
        lines.append("")
        lines.append(f"{idx + 1}) <b>{escape_html(q.prompt)}</b>")
        if uc == ci:
            lines.append(f"✅ <b>{escape_html(correct_text)}</b>")
        else:
            if uc is not None and 0 <= uc < len(q.options):
                lines.append(f"❌ {escape_html(q.options[uc])}")
            else:
                lines.append("❌")
            lines.append(f"(Correct answer: <b>{escape_html(correct_text)}</b>)")
    return join_lines(lines)


# ---- Editing practice tests ------------------------------------------------

def format_test_edit_html(test: PracticeTest, page: int, pages: int) -> str:
    lines = [f"<b>Edit: {escape_html(test.title)}</b>", f"{len(test.questions)} questions"]
    if pages > 1:
        lines.append(f"<i>Page {page + 1} of {pages}</i>")
    lines.append("")
    lines.append("Tap a question to edit it.")
    return "\n".join(lines)


def format_question_edit_html(test: PracticeTest, qidx: int) -> str:
    q = test.questions[qidx]
    lines = [
        f"<i>Question {qidx + 1} of {len(test.questions)}</i>",
        "",
        f"<b>{escape_html(q.prompt)}</b>",
        "",
    ]
    for i, opt in enumerate(q.options):
        mark = "✅" if i == q.correct_index else "▫️"
        lines.append(f"{mark} {i + 1}) {escape_html(opt)}")
    lines.append("")
    lines.append("<i>Tap a number to mark the correct answer.</i>")
    return join_lines(lines)


def format_question_prompt_html(current: TestQuestion | None = None, error: str | None = None) -> str:
    lines = []
    if error:
        lines.append(f"❌ {escape_html(error)}")
        lines.append("")
    lines.extend(
        [
            "<b>Edit question</b>" if current else "<b>New question</b>",
            "<i>Send the question on the first line, then exactly 4 options, one per line.",
            "Mark the correct option with a leading *.</i>",
            "",
        ]
    )
    if current is not None:
        lines.append("Current:")
        lines.append(f"<code>{escape_html(question_to_text(current))}</code>")
    else:
        lines.extend(
            [
                "Example:",
                "<code>What is the capital of France?",
                "Berlin",
                "*Paris",
                "Madrid",
                "Rome</code>",
            ]
        )
    return join_lines(lines)


# ---- Study guides ----------------------------------------------------------

def format_guides_list_html(guides: Sequence[StudyGuide]) -> str:
    if not guides:
        return "\n".join(["<b>Study guides</b>", "", "No saved study guides yet."])
    lines = ["<b>Study guides</b>", ""]
    for i, g in enumerate(guides, start=1):
        lines.append(f"{i}) {escape_html(g.title)} ({_fmt_date(g)})")
    return "\n".join(lines)


def format_guide_prompt_html(error: str | None = None) -> str:
    lines = []
    if error:
        lines.append(f"❌ {escape_html(error)}")
        lines.append("")
    lines.append("<b>New study guide</b>")
    lines.append("<i>Paste the text you want to study. I’ll turn it into key takeaways, terms, a summary and practice questions.</i>")
    return "\n".join(lines)


def format_guide_loading_html() -> str:
    return "\n".join(["<b>Study guide</b>", "", "⏳ Writing your study guide... Please wait a moment."])


def format_guide_error_html(message: str) -> str:
    return "\n".join(
        [
            "<b>Study guide</b>",
            "",
            "❌ Sorry, we couldn’t generate the study guide this time.",
            f"<i>{escape_html(message)}</i>",
        ]
    )


def format_guide_html(guide: StudyGuide) -> str:
    # Escaping grows the text, so leave headroom
    return markdown_to_html_telegram(truncate(guide.content, MAX_MESSAGE_LEN - 600))


# ---- Markdown → Telegram HTML ---------------------------------------------

_CODE_BLOCK_RE = re.compile(r"```(\w+)?\n([\s\S]*?)\n```", re.MULTILINE)
_INLINE_CODE_RE = re.compile(r"`([^`]+)`")
_BOLD_RE = re.compile(r"\*\*(.+?)\*\*")
_ITALIC_STAR_RE = re.compile(r"(?<![\*\w])\*(?![\s\*])(.+?)(?<![\s\*])\*(?![\*\w])")
_ITALIC_UNDER_RE = re.compile(r"(?<!\w)_(?!\s)(.+?)(?<!\s)_(?!\w)")
_STRIKE_RE = re.compile(r"~~(.+?)~~")
_LINK_RE = re.compile(r"\[([^\]]+)\]\(([^)\s]+)\)")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.+?)\s*#*$", re.MULTILINE)
_BULLET_RE = re.compile(r"^(\s*)[-*] ", re.MULTILINE)


def markdown_to_html_telegram(md: str) -> str:
    """Convert the Markdown subset used by study guides to Telegram HTML.

    Headings become bold lines and hyphen bullets become "•". Bold, italic,
    strike, inline code, fenced code and links are supported. All other text
    is HTML-escaped.
    """
    if not md:
        return ""

    text = md.replace("\r\n", "\n").replace("\r", "\n")

    # Code is pulled out before escaping so its content is escaped exactly once
    placeholders: list[str] = []

    def _stash(html_snippet: str) -> str:
        placeholders.append(html_snippet)
        return f"\x00{len(placeholders) - 1}\x00"

    text = _CODE_BLOCK_RE.sub(lambda m: _stash(f"<pre><code>{escape_html(m.group(2))}</code></pre>"), text)
    text = _INLINE_CODE_RE.sub(lambda m: _stash(f"<code>{escape_html(m.group(1))}</code>"), text)

    text = escape_html(text)

    text = _LINK_RE.sub(lambda m: f'<a href="{m.group(2)}">{m.group(1)}</a>', text)
    text = _HEADING_RE.sub(lambda m: f"<b>{m.group(2)}</b>", text)
    text = _BULLET_RE.sub(lambda m: f"{m.group(1)}• ", text)
    text = _BOLD_RE.sub(r"<b>\1</b>", text)
    text = _ITALIC_STAR_RE.sub(r"<i>\1</i>", text)
    text = _ITALIC_UNDER_RE.sub(r"<i>\1</i>", text)
    text = _STRIKE_RE.sub(r"<s>\1</s>", text)

    return re.sub(r"\x00(\d+)\x00", lambda m: placeholders[int(m.group(1))], text)
