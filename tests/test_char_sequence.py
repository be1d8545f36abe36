"""글자 분할 정책 테스트.

BMP 밖 글자(서로게이트 쌍)와 결합 문자에서 정책별 동작을 고정한다.
"""

import sys
from pathlib import Path

import pytest

# src/ 디렉토리를 경로에 추가
_src = str(Path(__file__).resolve().parent.parent / "src")
if _src not in sys.path:
    sys.path.insert(0, _src)

from core.char_sequence import (
    CharSequence,
    IndexingPolicy,
    display_text,
    join_chars,
    split_chars,
)
from core.comparison import VerdictType, align, compare_texts, summarize

EXT_B_A = "\U00020000"  # 𠀀 (CJK 확장 B)
EXT_B_B = "\U00020001"  # 𠀁
THUMBS = "\U0001F44D"
SKIN = "\U0001F3FD"
E_ACUTE_DECOMPOSED = "e\u0301"


class TestIndexingPolicy:
    def test_values(self):
        assert IndexingPolicy.CODE_UNIT.value == "code_unit"
        assert IndexingPolicy.CODE_POINT.value == "code_point"
        assert IndexingPolicy.GRAPHEME.value == "grapheme"

    @pytest.mark.parametrize("raw,expected", [
        ("code_unit", IndexingPolicy.CODE_UNIT),
        ("Code-Point", IndexingPolicy.CODE_POINT),
        (" GRAPHEME ", IndexingPolicy.GRAPHEME),
        (IndexingPolicy.GRAPHEME, IndexingPolicy.GRAPHEME),
        (None, IndexingPolicy.CODE_POINT),
    ])
    def test_parse(self, raw, expected):
        assert IndexingPolicy.parse(raw) is expected

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="code_unit"):
            IndexingPolicy.parse("bytes")


class TestSplitChars:
    def test_bmp_same_for_all_policies(self):
        for policy in IndexingPolicy:
            assert split_chars("日本語abc", policy) == list("日本語abc")

    def test_code_unit_splits_surrogates(self):
        units = split_chars(EXT_B_A + "日", IndexingPolicy.CODE_UNIT)
        assert units == ["\ud840", "\udc00", "日"]

    def test_code_point_keeps_astral_char(self):
        assert split_chars(EXT_B_A + "日", IndexingPolicy.CODE_POINT) == [EXT_B_A, "日"]

    def test_grapheme_keeps_combining_mark(self):
        chars = split_chars(E_ACUTE_DECOMPOSED + "x", IndexingPolicy.GRAPHEME)
        assert chars == [E_ACUTE_DECOMPOSED, "x"]

    def test_lengths_per_policy(self):
        text = THUMBS + SKIN
        assert len(split_chars(text, IndexingPolicy.CODE_UNIT)) == 4
        assert len(split_chars(text, IndexingPolicy.CODE_POINT)) == 2
        assert len(split_chars(text, IndexingPolicy.GRAPHEME)) == 1

    def test_empty(self):
        for policy in IndexingPolicy:
            assert split_chars("", policy) == []


class TestJoinAndDisplay:
    def test_join_repairs_surrogates(self):
        units = split_chars("a😀b", IndexingPolicy.CODE_UNIT)
        assert join_chars(units) == "a😀b"

    def test_display_escapes_lone_surrogate(self):
        assert display_text(["\ud83d"]) == "\\ud83d"
        assert display_text(["x", "\ude00"]) == "x\\ude00"

    def test_display_plain(self):
        assert display_text(["學", "習"]) == "學習"


class TestCharSequence:
    def test_len_and_index(self):
        seq = CharSequence(EXT_B_A + "日本", IndexingPolicy.CODE_UNIT)
        assert len(seq) == 4
        assert seq[2] == "日"
        assert seq.text == EXT_B_A + "日本"
        assert seq.policy is IndexingPolicy.CODE_UNIT

    def test_default_policy(self):
        seq = CharSequence(EXT_B_A + "日本")
        assert seq.policy is IndexingPolicy.CODE_POINT
        assert len(seq) == 3

    def test_string_policy(self):
        assert CharSequence("abc", "grapheme").policy is IndexingPolicy.GRAPHEME

    def test_equality(self):
        assert CharSequence("abc") == CharSequence("abc")
        assert CharSequence("abc") != CharSequence("abc", IndexingPolicy.GRAPHEME)
        assert len({CharSequence("abc"), CharSequence("abc")}) == 1

    def test_iteration(self):
        assert list(CharSequence("日本")) == ["日", "本"]

    def test_chars_tuple(self):
        seq = CharSequence(EXT_B_A + "日", IndexingPolicy.CODE_UNIT)
        assert isinstance(seq.chars, tuple)
        assert seq.chars == tuple(seq)
        assert len(seq.chars) == 3
        assert CharSequence(EXT_B_A + "日").chars == (EXT_B_A, "日")


class TestSurrogatePairAlignment:
    """서로게이트 쌍 글자 대조 결과를 정책별로 고정한다."""

    def test_code_point_astral_substitution(self):
        verdicts = align(
            CharSequence(EXT_B_A + "日", "code_point"),
            CharSequence(EXT_B_B + "日", "code_point"),
        )
        assert [v.verdict for v in verdicts] == [
            VerdictType.SUBSTITUTED, VerdictType.MATCHED,
        ]
        assert summarize(verdicts).accuracy == 50.0

    def test_code_unit_shares_high_surrogate(self):
        """code_unit: 상위 서로게이트가 같아 절반이 일치로 잡힌다 (브라우저 방식)."""
        result = compare_texts(EXT_B_A + "日", EXT_B_B + "日", policy="code_unit")
        assert [v.verdict for v in result.verdicts] == [
            VerdictType.MATCHED, VerdictType.SUBSTITUTED, VerdictType.MATCHED,
        ]
        assert result.verdicts[1].candidate_char == "\udc01"
        assert result.stats.accuracy == 66.7

    def test_emoji_modifier_per_policy(self):
        reference = THUMBS + SKIN
        candidate = THUMBS

        grapheme = compare_texts(reference, candidate, policy="grapheme")
        assert [v.verdict for v in grapheme.verdicts] == [VerdictType.SUBSTITUTED]
        assert grapheme.stats.accuracy == 0.0

        code_point = compare_texts(reference, candidate, policy="code_point")
        assert [v.verdict for v in code_point.verdicts] == [
            VerdictType.MATCHED, VerdictType.OMITTED,
        ]
        assert code_point.stats.accuracy == 50.0

        code_unit = compare_texts(reference, candidate, policy="code_unit")
        assert [v.verdict for v in code_unit.verdicts] == [
            VerdictType.MATCHED, VerdictType.MATCHED,
            VerdictType.OMITTED, VerdictType.OMITTED,
        ]
        assert code_unit.stats.accuracy == 50.0

    def test_code_unit_to_dict_is_json_safe(self):
        import json

        result = compare_texts("😀", "😁", policy="code_unit")
        payload = json.dumps(result.to_dict(), ensure_ascii=False).encode("utf-8")
        assert b"\\\\ud83d" in payload
