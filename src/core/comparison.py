"""대조 엔진 — 참조 텍스트와 사용자 입력을 글자 단위로 대조.

암기 연습에서 사용자가 기억나는 대로 입력한 텍스트를 원문과 비교하여
원문의 글자 하나하나를 일치/오기/누락으로 분류한다.
단어 경계를 가정하지 않으므로 영어·중국어·혼합 텍스트에 모두 쓸 수 있다.

핵심 원칙:
  - 순수 함수: 입력을 수정하지 않고, I/O가 없다
  - 원문 기준: 결과는 항상 원문 글자 수와 같은 길이
  - 추가 입력 무시: 원문에 대응하지 않는 사용자 입력은 보고하지 않는다

사용법:
    from core.comparison import align, summarize

    verdicts = align("cat", "cut")
    for v in verdicts:
        print(f"{v.ref_char} / {v.candidate_char} → {v.verdict}")

    stats = summarize(verdicts)
    print(stats.accuracy)  # 66.7

정책·정규화·길이 제한까지 한 번에:
    from core.comparison import compare_texts

    result = compare_texts("日本語", "日本", policy="grapheme", normalization="NFC")
"""

from __future__ import annotations

import logging
import unicodedata
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional, Sequence, Union

from core.char_sequence import (
    DEFAULT_POLICY,
    CharSequence,
    IndexingPolicy,
    display_text,
)

logger = logging.getLogger(__name__)

NORMALIZATION_FORMS = ("NFC", "NFD", "NFKC", "NFKD")

CharInput = Union[str, CharSequence, Sequence[str]]


class ComparisonInputError(ValueError):
    """대조 입력이 허용 범위를 벗어났다 (정규화 형식 오류 등)."""


class InputTooLongError(ComparisonInputError):
    """입력이 글자 수 상한을 넘었다.

    LCS 표는 O(n·m) 메모리를 쓰므로 호출 측에서 길이를 제한한다.
    """

    def __init__(self, field_name: str, length: int, limit: int):
        self.field_name = field_name
        self.length = length
        self.limit = limit
        super().__init__(
            f"{field_name} 텍스트가 너무 깁니다: {length}자 (최대 {limit}자)"
        )


# ──────────────────────────────────────
# 데이터 모델
# ──────────────────────────────────────


class VerdictType(str, Enum):
    """원문 글자 하나의 판정.

    | 유형 | 의미 | GUI 색상 |
    |------|------|----------|
    | matched | 같은 글자를 입력 | 초록 |
    | substituted | 다른 글자를 입력 | 빨강 |
    | omitted | 입력하지 않음 | 회색 |
    """

    MATCHED = "matched"
    SUBSTITUTED = "substituted"
    OMITTED = "omitted"


@dataclass
class CharacterVerdict:
    """원문 글자 하나의 대조 결과.

    omitted이면 candidate_char와 candidate_index가 None.
    """

    ref_char: str
    verdict: VerdictType
    candidate_char: Optional[str] = None
    ref_index: Optional[int] = None
    candidate_index: Optional[int] = None

    def to_dict(self) -> dict:
        """API 응답용 딕셔너리."""
        return {
            "ref_char": display_text([self.ref_char]),
            "verdict": self.verdict.value,
            "candidate_char": (
                display_text([self.candidate_char])
                if self.candidate_char is not None else None
            ),
            "ref_index": self.ref_index,
            "candidate_index": self.candidate_index,
        }


@dataclass
class ComparisonStats:
    """대조 통계. 점수 요약 바에 표시."""

    total: int = 0
    matched: int = 0
    substituted: int = 0
    omitted: int = 0

    def _percentage(self) -> Decimal:
        """일치율을 소수 첫째 자리로 반올림한다. 0.05 경계는 올림(half-up)."""
        if self.total == 0:
            return Decimal("0.0")
        exact = Decimal(self.matched / self.total * 100)
        return exact.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)

    @property
    def accuracy(self) -> float:
        """일치율 matched / total × 100, 소수 첫째 자리 반올림. total이 0이면 0.0."""
        return float(self._percentage())

    @property
    def accuracy_display(self) -> str:
        """소수 한 자리 고정 표기. 예: "66.7", "100.0"."""
        return str(self._percentage())

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "matched": self.matched,
            "substituted": self.substituted,
            "omitted": self.omitted,
            "accuracy": self.accuracy,
            "accuracy_display": self.accuracy_display,
        }

    @classmethod
    def from_verdicts(cls, verdicts: Sequence[CharacterVerdict]) -> ComparisonStats:
        """CharacterVerdict 리스트에서 통계를 계산한다."""
        stats = cls(total=len(verdicts))
        for v in verdicts:
            if v.verdict == VerdictType.MATCHED:
                stats.matched += 1
            elif v.verdict == VerdictType.SUBSTITUTED:
                stats.substituted += 1
            elif v.verdict == VerdictType.OMITTED:
                stats.omitted += 1
        return stats


@dataclass
class ComparisonResult:
    """compare_texts()의 결과 묶음."""

    reference: str
    candidate: str
    policy: IndexingPolicy
    verdicts: list[CharacterVerdict] = field(default_factory=list)
    stats: ComparisonStats = field(default_factory=ComparisonStats)
    normalization: Optional[str] = None

    def segments(self) -> list[dict]:
        return group_segments(self.verdicts)

    def to_dict(self) -> dict:
        return {
            "indexing": self.policy.value,
            "normalization": self.normalization,
            "verdicts": [v.to_dict() for v in self.verdicts],
            "stats": self.stats.to_dict(),
            "segments": self.segments(),
        }


# ──────────────────────────────────────
# 핵심 정렬 알고리즘
# ──────────────────────────────────────


def _as_chars(value: CharInput) -> Sequence[str]:
    """str이면 코드 포인트 단위로, CharSequence는 글자 튜플로, 나머지는 그대로 쓴다."""
    if isinstance(value, str):
        return list(value)
    if isinstance(value, CharSequence):
        return value.chars
    return value


def build_lcs_table(reference: CharInput, candidate: CharInput) -> list[list[int]]:
    """LCS 동적 계획 표를 만든다.

    출력: (len(reference)+1) × (len(candidate)+1) 표.
          table[i][j] = reference 앞 i글자와 candidate 앞 j글자의 LCS 길이.
          0행과 0열은 모두 0.
    """
    ref = _as_chars(reference)
    cand = _as_chars(candidate)
    n, m = len(ref), len(cand)

    table = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(1, n + 1):
        ref_char = ref[i - 1]
        prev_row = table[i - 1]
        row = table[i]
        for j in range(1, m + 1):
            if ref_char == cand[j - 1]:
                row[j] = prev_row[j - 1] + 1
            else:
                row[j] = max(prev_row[j], row[j - 1])
    return table


def lcs_length(reference: CharInput, candidate: CharInput) -> int:
    """두 시퀀스의 LCS 길이."""
    table = build_lcs_table(reference, candidate)
    return table[-1][-1]


def backtrack_lcs_pairs(
    reference: CharInput,
    candidate: CharInput,
    table: list[list[int]],
) -> set[tuple[int, int]]:
    """완성된 표를 (n, m)에서 원점까지 역추적하여 LCS 쌍을 모은다.

    출력: {(원문 인덱스, 입력 인덱스), ...}

    규칙:
      - 두 글자가 같으면 쌍으로 기록하고 대각선 이동
      - 다르면 값이 큰 이웃으로 이동
      - 동점이면 원문 쪽(i)을 줄인다. 이 규칙이 바뀌면
        모호한 입력에서 누락/오기 판정이 달라진다.
    """
    ref = _as_chars(reference)
    cand = _as_chars(candidate)

    pairs: set[tuple[int, int]] = set()
    i, j = len(ref), len(cand)
    while i > 0 and j > 0:
        if ref[i - 1] == cand[j - 1]:
            pairs.add((i - 1, j - 1))
            i -= 1
            j -= 1
        elif table[i - 1][j] >= table[i][j - 1]:
            i -= 1
        else:
            j -= 1
    return pairs


def align(reference: CharInput, candidate: CharInput) -> list[CharacterVerdict]:
    """원문과 사용자 입력을 글자 단위로 정렬한다.

    입력:
      reference: 원문 (정답)
      candidate: 사용자 입력
      str을 넘기면 코드 포인트 단위. 다른 정책은 CharSequence로 넘긴다.

    출력: 원문 글자마다 하나씩, 원문 순서대로 CharacterVerdict 리스트.

    알고리즘:
      1단계: LCS 표 작성
      2단계: 역추적으로 LCS 쌍 수집
      3단계: 원문을 왼쪽부터 훑으며 입력 커서와 함께 분류
        - 이 원문 글자의 LCS 쌍이 커서 이후에 있으면 matched, 커서는 그 다음으로
        - 아니고 커서 위치 입력 글자가 어느 LCS 쌍에도 속하지 않으면
          substituted, 커서 한 칸 전진
        - 그 외(입력 소진, 또는 커서 글자가 다른 원문 글자의 짝)는 omitted
    """
    ref = _as_chars(reference)
    cand = _as_chars(candidate)

    table = build_lcs_table(ref, cand)
    pairs = backtrack_lcs_pairs(ref, cand, table)

    # 역추적은 매 쌍마다 i를 줄이므로 원문 인덱스당 쌍은 최대 하나
    pair_for_ref = dict(pairs)
    paired_candidates = {j for _, j in pairs}

    verdicts: list[CharacterVerdict] = []
    cursor = 0
    for i, ref_char in enumerate(ref):
        j = pair_for_ref.get(i)
        if j is not None and j >= cursor and ref_char == cand[j]:
            verdicts.append(CharacterVerdict(
                ref_char=ref_char,
                verdict=VerdictType.MATCHED,
                candidate_char=cand[j],
                ref_index=i,
                candidate_index=j,
            ))
            cursor = j + 1
        elif cursor < len(cand) and cursor not in paired_candidates:
            verdicts.append(CharacterVerdict(
                ref_char=ref_char,
                verdict=VerdictType.SUBSTITUTED,
                candidate_char=cand[cursor],
                ref_index=i,
                candidate_index=cursor,
            ))
            cursor += 1
        else:
            verdicts.append(CharacterVerdict(
                ref_char=ref_char,
                verdict=VerdictType.OMITTED,
                ref_index=i,
            ))

    return verdicts


def summarize(verdicts: Sequence[CharacterVerdict]) -> ComparisonStats:
    """CharacterVerdict 리스트에서 통계를 계산한다. (편의 함수)"""
    return ComparisonStats.from_verdicts(verdicts)


# ──────────────────────────────────────
# 표시용 구간 묶기
# ──────────────────────────────────────


def group_segments(verdicts: Sequence[CharacterVerdict]) -> list[dict]:
    """연속된 같은 판정을 하나의 구간으로 묶는다.

    GUI가 글자마다 span을 만들지 않고 색상 구간 단위로 렌더링할 수 있게 한다.
    출력: [{"verdict", "text", "candidate_text", "start", "end"}, ...]
          start/end는 원문 인덱스 (end 미포함).
    """
    segments: list[dict] = []
    run: list[CharacterVerdict] = []

    def flush():
        if not run:
            return
        start = run[0].ref_index if run[0].ref_index is not None else 0
        segments.append({
            "verdict": run[0].verdict.value,
            "text": display_text(v.ref_char for v in run),
            "candidate_text": display_text(
                v.candidate_char for v in run if v.candidate_char is not None
            ),
            "start": start,
            "end": start + len(run),
        })

    for v in verdicts:
        if run and run[-1].verdict != v.verdict:
            flush()
            run = []
        run.append(v)
    flush()

    return segments


# ──────────────────────────────────────
# 호출 측 진입점 (정규화 + 길이 제한)
# ──────────────────────────────────────


def _normalize(text: str, form: Optional[str]) -> str:
    if not form:
        return text
    return unicodedata.normalize(form, text)


def compare_texts(
    reference: str,
    candidate: str,
    policy: Union[str, IndexingPolicy] = DEFAULT_POLICY,
    normalization: Optional[str] = None,
    max_chars: Optional[int] = None,
) -> ComparisonResult:
    """원문과 사용자 입력을 대조하고 통계까지 계산한다.

    입력:
      policy: 글자 분할 정책 (code_unit / code_point / grapheme)
      normalization: 유니코드 정규화 형식 (NFC 등). None이면 정규화 안 함.
      max_chars: 두 입력 각각의 글자 수 상한 (정책 단위). None이면 제한 없음.

    에러:
      ValueError — 알 수 없는 정책
      ComparisonInputError — 알 수 없는 정규화 형식
      InputTooLongError — 상한 초과
    """
    policy = IndexingPolicy.parse(policy)

    form = normalization.upper() if normalization else None
    if form is not None and form not in NORMALIZATION_FORMS:
        raise ComparisonInputError(
            f"알 수 없는 정규화 형식: {normalization!r} "
            f"(허용: {', '.join(NORMALIZATION_FORMS)})"
        )

    ref_seq = CharSequence(_normalize(reference, form), policy)
    cand_seq = CharSequence(_normalize(candidate, form), policy)

    if max_chars is not None:
        for field_name, seq in (("reference", ref_seq), ("candidate", cand_seq)):
            if len(seq) > max_chars:
                logger.warning(
                    "대조 입력 거부: %s %d자 > 상한 %d자",
                    field_name, len(seq), max_chars,
                )
                raise InputTooLongError(field_name, len(seq), max_chars)

    verdicts = align(ref_seq, cand_seq)
    stats = summarize(verdicts)

    logger.debug(
        "대조 완료: 원문 %d자, 입력 %d자, 정책 %s, 일치율 %s%%",
        len(ref_seq), len(cand_seq), policy.value, stats.accuracy_display,
    )

    return ComparisonResult(
        reference=ref_seq.text,
        candidate=cand_seq.text,
        policy=policy,
        verdicts=verdicts,
        stats=stats,
        normalization=form,
    )
