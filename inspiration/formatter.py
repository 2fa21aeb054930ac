"""Local (non-AI) text tidy-up for mixed Chinese/English documents."""
import re

_CJK = r"一-龥"

_CJK_THEN_LATIN = re.compile(rf"([{_CJK}])([a-zA-Z0-9])")
_LATIN_THEN_CJK = re.compile(rf"([a-zA-Z0-9])([{_CJK}])")


def format_text(text: str) -> str:
    """
    Put one half-width space between CJK ideographs and ASCII letters/digits.

    Letter/digit spacing ("iPhone15") and quote unification are left alone.
    """
    formatted = _CJK_THEN_LATIN.sub(r"\1 \2", text)
    formatted = _LATIN_THEN_CJK.sub(r"\1 \2", formatted)
    return formatted
