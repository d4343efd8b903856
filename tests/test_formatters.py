from __future__ import annotations

from studybot.formatters import (
    format_generated_html,
    format_question_edit_html,
    format_question_html,
    format_question_prompt_html,
    format_sets_list_html,
    format_study_card_html,
    format_test_summary_html,
    join_lines,
    markdown_to_html_telegram,
)
from studybot.models import Flashcard, FlashcardSet, PracticeTest, QuizRun, TestQuestion


def _test() -> PracticeTest:
    return PracticeTest(
        title="Spanish <basics>",
        questions=[
            TestQuestion("Hola", ["Goodbye", "Hello", "Thank you"], 1),
            TestQuestion("Gracias", ["Thank you", "Hello"], 0),
        ],
    )


def test_question_html_numbers_options_and_escapes() -> None:
    html = format_question_html(_test(), 0)
    assert "Question 1 of 2" in html
    assert "<b>Hola</b>" in html
    assert "1) Goodbye" in html and "2) Hello" in html and "3) Thank you" in html
    assert "4)" not in html


def test_summary_scores_and_shows_corrections() -> None:
    run = QuizRun(test_id="t", current_q=2, choices=[1, 1])
    html = format_test_summary_html(_test(), run)
    assert "Score: 1 / 2" in html
    assert "✅ <b>Hello</b>" in html
    assert "❌ Hello" in html
    assert "(Correct answer: <b>Thank you</b>)" in html


def test_generated_html_mentions_local_fallback() -> None:
    t = _test()
    assert "generated locally" in format_generated_html(t, used_fallback=True)
    assert "generated locally" not in format_generated_html(t, used_fallback=False)
    assert "Spanish &lt;basics&gt;" in format_generated_html(t, used_fallback=False)


def test_sets_list_empty_and_filled() -> None:
    assert "No flashcard sets found" in format_sets_list_html([])
    html = format_sets_list_html([FlashcardSet(title="Math")])
    assert "1) Math (0 cards)" in html


def test_study_card_shows_position_and_side() -> None:
    fset = FlashcardSet(title="Spanish", cards=[Flashcard("Hola", "Hello"), Flashcard("Gracias", "Thank you")])
    front = format_study_card_html(fset, 1, show_back=False)
    assert "Card 2 of 2" in front
    assert "<b>Gracias</b>" in front and "<i>Front</i>" in front
    back = format_study_card_html(fset, 1, show_back=True)
    assert "<b>Thank you</b>" in back and "<i>Back</i>" in back
    assert "No cards to study" in format_study_card_html(FlashcardSet(title="Empty"), 0, False)


def test_question_editing_screens() -> None:
    html = format_question_edit_html(_test(), 0)
    assert "✅ 2) Hello" in html
    assert "▫️ 1) Goodbye" in html
    prompt = format_question_prompt_html(_test().questions[1])
    assert "Edit question" in prompt
    assert "*Thank you" in prompt
    assert "New question" in format_question_prompt_html(error="Please fill all options")


def test_join_lines_stops_on_line_boundary() -> None:
    lines = ["<b>aaaa</b>"] * 10
    out = join_lines(lines, limit=40)
    assert out.endswith("…")
    assert all(part in ("<b>aaaa</b>", "…") for part in out.split("\n"))


def test_md_bold_italic_code_and_links():
    md = "**Bold** *Ital* _AlsoItalic_ ~~gone~~ `x<y` [link](https://ex.com?a=1&b=2)"
    html = markdown_to_html_telegram(md)
    assert "<b>Bold</b>" in html
    assert "<i>Ital</i>" in html
    assert "<i>AlsoItalic</i>" in html
    assert "<s>gone</s>" in html
    assert "<code>x&lt;y</code>" in html
    assert '<a href="https://ex.com?a=1&amp;b=2">link</a>' in html


def test_md_headings_bullets_and_plain_text_escaping():
    md = "## Key Takeaways\n\n- a < b\n- snake_case_name stays\n\n```py\nprint('x<y')\n```"
    html = markdown_to_html_telegram(md)
    assert "<b>Key Takeaways</b>" in html
    assert "• a &lt; b" in html
    assert "snake_case_name" in html
    assert "<pre><code>print(&#x27;x&lt;y&#x27;)</code></pre>" in html
