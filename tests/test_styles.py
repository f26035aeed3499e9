import pytest

from tdm.styles import (
    PINK,
    SELECTED_ITEM_STYLE,
    Style,
    join_horizontal,
    join_vertical,
    place,
    visible_width,
)


def test_plain_style_leaves_text_unchanged():
    assert Style().render("hello") == "hello"


def test_width_pads_to_requested_size():
    out = Style(width=10).render("abc")
    assert visible_width(out) == 10
    assert out.startswith("abc")


def test_center_alignment_is_symmetric_for_even_gap():
    out = Style(width=9, align="center").render("abc")
    assert out.strip() == "abc"
    assert len(out) - len(out.rstrip()) == len(out) - len(out.lstrip())


def test_bold_emits_sgr_code():
    assert Style(bold=True).render("x").startswith("\x1b[1m")


def test_colour_codes_do_not_count_toward_width():
    text = "abc"
    out = Style(foreground=PINK, background=PINK).render(text)
    assert visible_width(out) == len(text)
    assert text in out


def test_height_adds_blank_lines():
    out = Style(height=4).render("a")
    lines = out.split("\n")
    assert len(lines) == 4
    assert lines[0] == "a"
    assert all(line.strip() == "" for line in lines[1:])


def test_padding_surrounds_text():
    lines = Style(padding=(1, 2)).render("ab").split("\n")
    assert lines[0].strip() == ""
    assert lines[1].strip() == "ab"
    assert lines[-1].strip() == ""
    assert len({visible_width(line) for line in lines}) == 1


def test_rounded_border_frames_block():
    lines = Style(border="rounded").render("hi").split("\n")
    assert lines[0].startswith("╭")
    assert len(lines) == 3
    assert "hi" in lines[1]


def test_left_only_border_marks_every_line():
    lines = SELECTED_ITEM_STYLE.render("a\nb").split("\n")
    assert len(lines) == 2
    assert all("│" in line for line in lines)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"align": "diagonal"},
        {"foreground": "pink"},
        {"border": "wavy"},
        {"border_sides": frozenset({"middle"})},
    ],
)
def test_invalid_settings_raise(kwargs):
    with pytest.raises(ValueError):
        Style(**kwargs)


def test_replace_returns_changed_copy():
    base = Style()
    bold = base.replace(bold=True)
    assert bold.bold is True
    assert base.bold is False


def test_visible_width_ignores_escape_codes():
    assert visible_width("\x1b[1mabc\x1b[0m") == visible_width("abc")
    assert visible_width("") == visible_width("\x1b[1m\x1b[0m")


def test_visible_width_counts_wide_characters_double():
    assert visible_width("日本") == 4


def test_visible_width_uses_widest_line():
    assert visible_width("a\nabcde\nab") == len("abcde")


def test_join_vertical_equalises_widths():
    out = join_vertical("left", "a", "abcd", "ab")
    lines = out.split("\n")
    assert len(lines) == 3
    assert {visible_width(line) for line in lines} == {len("abcd")}


def test_join_horizontal_bottom_aligns_short_blocks():
    out = join_horizontal("bottom", "a\nb\nc", "x")
    lines = out.split("\n")
    assert len(lines) == 3
    assert lines[-1].endswith("x")
    assert "x" not in lines[0]


def test_place_fills_box():
    out = place(20, 5, "center", "center", "mid")
    lines = out.split("\n")
    assert len(lines) == 5
    assert all(visible_width(line) == 20 for line in lines)
    assert any(line.strip() == "mid" for line in lines)


def test_join_rejects_bad_alignment():
    with pytest.raises(ValueError):
        join_horizontal("left", "a")