from __future__ import annotations

import pytest

from services.text_postprocessor import postprocess_description

SENTENCE = "Sentence {n} describes the scenic coastal highway between the two towns."

def _long_single_block(count: int = 8) -> str:
    return " ".join(SENTENCE.format(n=n) for n in range(1, count + 1))

SAMPLES = [
    "",
    "Short text.",
    "First paragraph.\n\n\n\nSecond paragraph.",
    "Line one\r\nLine two\rLine three",
    "This shuttle connects San Jose\nand La Fortuna.\n\nHot springs are nearby.",
    _long_single_block(),
    "Intro line.\nCities Served:\n- San Jose\n- La Fortuna\n\nClosing line.",
    "Intro.\n\nHotels Served:\n- Arenal Springs Resort\n- Tabacon Lodge",
    "Trailing spaces   \nsecond line\t\n",
]

@pytest.mark.parametrize("text", SAMPLES)
def test_postprocess_is_idempotent(text):
    once = postprocess_description(text)
    assert postprocess_description(once) == once

def test_empty_and_none():
    assert postprocess_description("") == ""
    assert postprocess_description(None) == ""
    assert postprocess_description(" \n\n ") == ""

def test_short_text_unchanged():
    assert postprocess_description("Short text.") == "Short text."

def test_blank_runs_collapse():
    assert postprocess_description("A.\n\n\n\nB.") == "A.\n\nB."

def test_soft_wrapped_lines_join_into_one_paragraph():
    text = "This shuttle connects San Jose\nand La Fortuna in about three hours.\n\nHot springs are nearby."
    assert postprocess_description(text) == (
        "This shuttle connects San Jose and La Fortuna in about three hours.\n\nHot springs are nearby."
    )

def test_line_endings_normalized_before_joining():
    assert postprocess_description("Line one\r\nLine two") == "Line one Line two"

def test_prose_before_a_list_ends_its_paragraph():
    text = "Pickup from any hotel\nin the area.\n- San Jose\n- Jaco"
    assert postprocess_description(text) == "Pickup from any hotel in the area.\n\n- San Jose\n- Jaco"

def test_long_single_block_is_regrouped():
    out = postprocess_description(_long_single_block())
    paragraphs = out.split("\n\n")
    assert len(paragraphs) == 3
    for p in paragraphs:
        assert 2 <= p.count("Sentence ") <= 4
    assert "\n\n\n" not in out

def test_list_block_kept_verbatim():
    text = "Intro line.\nCities Served:\n- San Jose\n- La Fortuna\n\nClosing line."
    assert postprocess_description(text) == (
        "Intro line.\n\nCities Served:\n- San Jose\n- La Fortuna\n\nClosing line."
    )

def test_long_text_with_list_is_not_regrouped():
    text = _long_single_block() + "\n- Bottled water"
    out = postprocess_description(text)
    assert out.startswith(_long_single_block())
