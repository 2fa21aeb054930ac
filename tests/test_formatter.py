import pytest

from inspiration.formatter import format_text


@pytest.mark.parametrize("raw, expected", [
    ("我买了iPhone15", "我买了 iPhone15"),
    ("iPhone15真好用", "iPhone15 真好用"),
    ("用Python写了3个脚本", "用 Python 写了 3 个脚本"),
    ("已经 spaced 好了", "已经 spaced 好了"),
    ("plain english 123", "plain english 123"),
    ("纯中文没有变化", "纯中文没有变化"),
    ("", ""),
])
def test_cjk_latin_spacing(raw, expected):
    assert format_text(raw) == expected


def test_letter_digit_and_quotes_left_alone():
    assert format_text('iPhone15 "quoted"') == 'iPhone15 "quoted"'


@pytest.mark.parametrize("raw", ["a中b中c", "中1中2中", "混合ABC文本123结尾x", "我买了iPhone15"])
def test_idempotent(raw):
    once = format_text(raw)
    assert format_text(once) == once
