from __future__ import annotations

from typing import Sequence

from aiogram.types import InlineKeyboardButton, InlineKeyboardMarkup

from studybot.editing import PAGE_SIZE, card_ref, page_bounds, step_card
from studybot.models import FlashcardSet, PracticeTest, StudyGuide


# Title text on list buttons is clipped to keep rows readable
_BTN_TITLE_LEN = 40


def _clip(s: str) -> str:
    return s if len(s) <= _BTN_TITLE_LEN else s[: _BTN_TITLE_LEN - 1] + "…"


def kb_main_menu() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="🗂 Flashcards", callback_data="ui:sets"),
                InlineKeyboardButton(text="🧪 Generate test", callback_data="ui:gen"),
            ],
            [
                InlineKeyboardButton(text="📝 Practice tests", callback_data="ui:tests"),
                InlineKeyboardButton(text="📚 Study guides", callback_data="ui:guides"),
            ],
        ]
    )


def kb_back_to_menu() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="◀️ Back", callback_data="ui:menu")]]
    )


def kb_input_back(callback_data: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="◀️ Back", callback_data=callback_data)]]
    )


# ---- Flashcard sets --------------------------------------------------------

def kb_sets(sets: Sequence[FlashcardSet]) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(text=f"🗂 {_clip(s.title)}", callback_data=f"ui:sets.open:{s.id}")]
        for s in sets
    ]
    rows.append([InlineKeyboardButton(text="➕ New set", callback_data="ui:sets.new")])
    rows.append([InlineKeyboardButton(text="◀️ Back", callback_data="ui:menu")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_set_detail(set_id: str, has_cards: bool = True) -> InlineKeyboardMarkup:
    rows = []
    if has_cards:
        rows.append([InlineKeyboardButton(text="📖 Study", callback_data=f"ui:sets.study:{set_id}:0:f")])
        rows.append([InlineKeyboardButton(text="🧪 Generate practice test", callback_data=f"ui:gen.set:{set_id}")])
    rows.append([InlineKeyboardButton(text="➕ Add cards", callback_data=f"ui:sets.addcards:{set_id}")])
    if has_cards:
        rows.append([InlineKeyboardButton(text="✂️ Remove cards", callback_data=f"ui:sets.cards:{set_id}:0")])
    rows.append([InlineKeyboardButton(text="🗑 Delete set", callback_data=f"ui:sets.delete:{set_id}")])
    rows.append([InlineKeyboardButton(text="◀️ Back", callback_data="ui:sets")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_study(set_id: str, index: int, n_cards: int, show_back: bool) -> InlineKeyboardMarkup:
    """Back / Flip / Next through a set; a new card always opens on its front."""

    def move(delta: int) -> str:
        target = step_card(index, delta, n_cards)
        return "ui:sets.noop" if target == index else f"ui:sets.study:{set_id}:{target}:f"

    flip = "f" if show_back else "b"
    rows = [
        [
            InlineKeyboardButton(text="◀️ Back", callback_data=move(-1)),
            InlineKeyboardButton(text="🔄 Flip", callback_data=f"ui:sets.study:{set_id}:{index}:{flip}"),
            InlineKeyboardButton(text="Next ▶️", callback_data=move(1)),
        ],
        [InlineKeyboardButton(text="⬅️ Back to set", callback_data=f"ui:sets.open:{set_id}")],
    ]
    return InlineKeyboardMarkup(inline_keyboard=rows)


def _page_nav(prefix: str, page: int, pages: int) -> list[InlineKeyboardButton]:
    nav = []
    if page > 0:
        nav.append(InlineKeyboardButton(text="◀️", callback_data=f"{prefix}:{page - 1}"))
    if page < pages - 1:
        nav.append(InlineKeyboardButton(text="▶️", callback_data=f"{prefix}:{page + 1}"))
    return nav


def kb_remove_cards(fset: FlashcardSet, page: int) -> InlineKeyboardMarkup:
    start, end, page, pages = page_bounds(len(fset.cards), page, PAGE_SIZE)
    rows = [
        [
            InlineKeyboardButton(
                text=f"🗑 {_clip(f'{c.front} → {c.back}')}",
                callback_data=f"ui:sets.delcard:{fset.id}:{card_ref(c)}:{page}",
            )
        ]
        for c in fset.cards[start:end]
    ]
    nav = _page_nav(f"ui:sets.cards:{fset.id}", page, pages)
    if nav:
        rows.append(nav)
    rows.append([InlineKeyboardButton(text="◀️ Back", callback_data=f"ui:sets.open:{fset.id}")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


# ---- Practice test generator -----------------------------------------------

def kb_pick_set(sets: Sequence[FlashcardSet]) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(text=f"{_clip(s.title)} ({len(s.cards)})", callback_data=f"ui:gen.set:{s.id}")]
        for s in sets
        if s.cards
    ]
    rows.append([InlineKeyboardButton(text="◀️ Back", callback_data="ui:menu")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_generator(count: int, max_count: int) -> InlineKeyboardMarkup:
    """Stepper for question count plus title/generate actions."""
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [
                InlineKeyboardButton(text="➖", callback_data="ui:gen.count:-1"),
                InlineKeyboardButton(text=f"{count} / {max_count}", callback_data="ui:gen.noop"),
                InlineKeyboardButton(text="➕", callback_data="ui:gen.count:1"),
            ],
            [InlineKeyboardButton(text="✏️ Title (optional)", callback_data="ui:gen.title")],
            [InlineKeyboardButton(text="🧪 Generate Practice Test", callback_data="ui:gen.run")],
            [InlineKeyboardButton(text="◀️ Back", callback_data="ui:gen")],
        ]
    )


def kb_generated(test_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="▶️ Take test", callback_data=f"ui:test.start:{test_id}")],
            [InlineKeyboardButton(text="🔁 Generate Again", callback_data="ui:gen.run")],
            [InlineKeyboardButton(text="◀️ Back to menu", callback_data="ui:menu")],
        ]
    )


# ---- Practice tests --------------------------------------------------------

def kb_tests(tests: Sequence[PracticeTest]) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(text=f"📝 {_clip(t.title)}", callback_data=f"ui:tests.open:{t.id}")]
        for t in tests
    ]
    rows.append([InlineKeyboardButton(text="◀️ Back", callback_data="ui:menu")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_test_detail(test_id: str, has_questions: bool) -> InlineKeyboardMarkup:
    rows = []
    if has_questions:
        rows.append([InlineKeyboardButton(text="▶️ Take test", callback_data=f"ui:test.start:{test_id}")])
    rows.append([InlineKeyboardButton(text="✏️ Edit questions", callback_data=f"ui:tests.edit:{test_id}:0")])
    rows.append([InlineKeyboardButton(text="🗑 Delete test", callback_data=f"ui:tests.delete:{test_id}")])
    rows.append([InlineKeyboardButton(text="◀️ Back", callback_data="ui:tests")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_test_edit(test: PracticeTest, page: int) -> InlineKeyboardMarkup:
    start, end, page, pages = page_bounds(len(test.questions), page, PAGE_SIZE)
    rows = [
        [
            InlineKeyboardButton(
                text=f"{i + 1}. {_clip(test.questions[i].prompt)}",
                callback_data=f"ui:tests.q:{test.id}:{i}",
            )
        ]
        for i in range(start, end)
    ]
    nav = _page_nav(f"ui:tests.edit:{test.id}", page, pages)
    if nav:
        rows.append(nav)
    rows.append([InlineKeyboardButton(text="➕ Add question", callback_data=f"ui:tests.qadd:{test.id}")])
    rows.append([InlineKeyboardButton(text="◀️ Back", callback_data=f"ui:tests.open:{test.id}")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_question_edit(test_id: str, qidx: int, n_options: int, correct_index: int) -> InlineKeyboardMarkup:
    """Pick the correct option, rewrite or delete one question."""
    pick = [
        InlineKeyboardButton(
            text=f"✅ {i + 1}" if i == correct_index else str(i + 1),
            callback_data=f"ui:tests.qc:{test_id}:{qidx}:{i}",
        )
        for i in range(n_options)
    ]
    rows = [
        pick,
        [InlineKeyboardButton(text="✏️ Rewrite question", callback_data=f"ui:tests.qedit:{test_id}:{qidx}")],
        [InlineKeyboardButton(text="🗑 Delete question", callback_data=f"ui:tests.qdel:{test_id}:{qidx}")],
        [InlineKeyboardButton(text="◀️ Back", callback_data=f"ui:tests.edit:{test_id}:{qidx // PAGE_SIZE}")],
    ]
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_test_question(test_id: str, qidx: int, n_options: int) -> InlineKeyboardMarkup:
    """One button per option; callback data carries test, question and option index."""
    digits = ["1️⃣", "2️⃣", "3️⃣", "4️⃣"]
    row = [
        InlineKeyboardButton(text=digits[i], callback_data=f"ui:test.answer:{test_id}:{qidx}:{i}")
        for i in range(min(n_options, len(digits)))
    ]
    rows = [row, [InlineKeyboardButton(text="◀️ Quit test", callback_data="ui:test.quit")]]
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_test_summary(test_id: str) -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[
            [InlineKeyboardButton(text="🔁 Retake Test", callback_data=f"ui:test.start:{test_id}")],
            [InlineKeyboardButton(text="◀️ Back to menu", callback_data="ui:menu")],
        ]
    )


# ---- Study guides ----------------------------------------------------------

def kb_guides(guides: Sequence[StudyGuide]) -> InlineKeyboardMarkup:
    rows = [
        [InlineKeyboardButton(text=f"📚 {_clip(g.title)}", callback_data=f"ui:guides.open:{g.id}")]
        for g in guides
    ]
    rows.append([InlineKeyboardButton(text="➕ New study guide", callback_data="ui:guides.new")])
    rows.append([InlineKeyboardButton(text="◀️ Back", callback_data="ui:menu")])
    return InlineKeyboardMarkup(inline_keyboard=rows)


def kb_guide_back() -> InlineKeyboardMarkup:
    return InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="◀️ Back", callback_data="ui:guides")]]
    )
