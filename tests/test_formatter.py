from recipe_vision.core.formatter import BREAK_MARKER, format_output


def test_text_without_breaks_is_unchanged():
    assert format_output("Recipe: one cake") == "Recipe: one cake"


def test_empty_string():
    assert format_output("") == ""


def test_each_newline_becomes_a_marker():
    assert format_output("Recipe:\n- flour\n- sugar") == "Recipe:<br>- flour<br>- sugar"


def test_crlf_counts_as_one_break():
    assert format_output("a\r\nb\rc") == "a<br>b<br>c"


def test_consecutive_breaks_are_preserved():
    assert format_output("a\n\nb") == "a<br><br>b"


def test_no_raw_line_breaks_remain():
    text = "one\ntwo\r\nthree\rfour\u2028five\u2029six\u0085seven"
    formatted = format_output(text)
    assert formatted.splitlines() == [formatted]
    assert formatted.count(BREAK_MARKER) == 6


def test_reapplying_is_harmless():
    once = format_output("a\nb")
    assert format_output(once) == once


def test_splitlines_boundaries_are_all_replaced():
    text = "a\x0bb\x0cc\x1cd\x1de\x1ef"
    formatted = format_output(text)
    assert formatted == "a<br>b<br>c<br>d<br>e<br>f"
    assert formatted.splitlines() == [formatted]
