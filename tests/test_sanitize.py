"""Tests for file name sanitization."""

from omniintel.sanitize import RESERVED_CHARS, sanitize_name


def test_replaces_every_reserved_char():
    result = sanitize_name('a\\b/c:d*e?f"g<h>i|j')
    assert result == "a_b_c_d_e_f_g_h_i_j"
    assert not any(ch in result for ch in RESERVED_CHARS)


def test_trims_surrounding_whitespace():
    assert sanitize_name("  GPT-5 Launch \n") == "GPT-5 Launch"


def test_clean_input_is_only_trimmed():
    for value in ["Industry News", "  模型发布  ", "Llama 4 (405B) – review"]:
        assert sanitize_name(value) == value.strip()


def test_replacement_happens_before_trim():
    # Reserved chars at the edge become underscores and survive the trim
    assert sanitize_name(" /path/ ") == "_path_"


def test_blank_input_uses_fallback():
    assert sanitize_name("", fallback="id-7") == "id-7"
    assert sanitize_name("   ", fallback="id-7") == "id-7"
    assert sanitize_name(None, fallback="id-7") == "id-7"


def test_blank_fallback_uses_default():
    assert sanitize_name("", fallback="") == "untitled"
    assert sanitize_name("   ") == "untitled"


def test_fallback_is_sanitized():
    assert sanitize_name("", fallback="a/b") == "a_b"


def test_all_reserved_yields_placeholders():
    assert sanitize_name('<>:"') == "____"


def test_non_string_input():
    assert sanitize_name(42) == "42"


def test_deterministic():
    value = 'Model: "Gemini" vs <GPT>?'
    assert sanitize_name(value) == sanitize_name(value)


def test_dot_segments_use_fallback():
    assert sanitize_name("..", fallback="id-3") == "id-3"
    assert sanitize_name(" . ", fallback="id-3") == "id-3"
    assert sanitize_name("...") == "untitled"
    assert sanitize_name("", fallback="..") == "untitled"


def test_dots_inside_a_name_are_kept():
    assert sanitize_name("v1.5 ..release") == "v1.5 ..release"


def test_control_characters_are_replaced():
    assert sanitize_name("Line one\nLine\ttwo\x00") == "Line one_Line_two_"
