from __future__ import annotations

import pytest

from processors.text_layout import draw_letters, encode_text_runs, rendering_matrix
from utils.pdf_transforms import PdfPoint, TransformationMatrix
from utils.validation import GlyphNotFoundError


def layout(font, text, size=10.0, x=10.0, y=20.0, sequence=1):
    return draw_letters(text, font, size, TransformationMatrix.translation(x, y), sequence, "F1")


def test_rendering_matrix_scales_by_font_size():
    assert rendering_matrix(12).to_list() == [12, 0, 0, 12, 0, 0]


def test_letters_follow_the_baseline(fake_font):
    letters = layout(fake_font, "Hi")

    first, second = letters
    assert first.value == "H"
    assert first.start_base_line.x == pytest.approx(10)
    assert first.start_base_line.y == pytest.approx(20)
    assert first.end_base_line.x == pytest.approx(15)
    assert first.width == 0
    assert first.glyph_rectangle.top == pytest.approx(27)

    assert second.start_base_line.x == pytest.approx(15)
    assert second.width == pytest.approx(5)
    assert second.advance == pytest.approx(5)


def test_every_letter_carries_call_metadata(fake_font):
    letters = layout(fake_font, "abc", size=8, sequence=7)
    assert {letter.text_sequence for letter in letters} == {7}
    assert {letter.font_name for letter in letters} == {"F1"}
    assert {letter.font_size for letter in letters} == {8}
    assert all(letter.color == (0.0, 0.0, 0.0) for letter in letters)


def test_whitespace_advances_without_a_glyph(fake_font):
    letters = layout(fake_font, "a b")
    assert letters[1].glyph_rectangle.area == 0
    assert letters[2].start_base_line.x == pytest.approx(10 + 5 + 2.5)


def test_missing_glyph_aborts_the_whole_call(fake_font):
    with pytest.raises(GlyphNotFoundError):
        layout(fake_font, "ab☃")


def test_runs_split_on_whitespace(fake_font):
    text = "  ab cd\tef "
    letters = layout(fake_font, text)
    runs = encode_text_runs(text, fake_font, letters)

    assert [run.payload for run in runs] == [b"ab", b"cd", b"ef"]
    assert runs[0].start == letters[2].start_base_line
    assert runs[1].start == letters[5].start_base_line
    assert runs[2].start == letters[8].start_base_line


def test_whitespace_only_text_has_no_runs(fake_font):
    assert encode_text_runs("   ", fake_font, layout(fake_font, "   ")) == []


def test_rotated_text_matrix_rotates_letters(fake_font):
    rotate = TransformationMatrix.from_values(0, 1, -1, 0, 100, 100)
    letters = draw_letters("ab", fake_font, 10, rotate, 1, "F1")

    assert letters[0].start_base_line == PdfPoint(100, 100)
    assert letters[1].start_base_line.x == pytest.approx(100)
    assert letters[1].start_base_line.y == pytest.approx(105)
