"""Display formatting for generated text.

`format_output` is pure and total: it maps every line break in the model's
response to an HTML break marker so the text can be dropped into markup as-is.
Re-applying it is harmless because the marker contains no line breaks.
"""

import re

BREAK_MARKER = "<br>"

# Same boundaries as `str.splitlines`; `\r\n` counts as a single break.
_LINE_BREAK_RE = re.compile(r"\r\n|[\n\r\v\f\x1c\x1d\x1e\u0085\u2028\u2029]")


def format_output(text: str) -> str:
    """Replace each line break in `text` with `BREAK_MARKER`."""
    if not text:
        return ""
    return _LINE_BREAK_RE.sub(BREAK_MARKER, text)
