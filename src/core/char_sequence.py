"""글자 시퀀스 — 무엇을 "한 글자"로 셀 것인가.

대조 엔진은 문자열을 글자 단위로 비교한다. 그런데 "글자"의 정의가 셋이다:

| 정책 | 단위 | 예: "😀a" 길이 |
|------|------|----------------|
| code_unit | UTF-16 코드 유닛 (브라우저 String 인덱싱과 동일) | 3 |
| code_point | 유니코드 코드 포인트 (Python str 인덱싱) | 2 |
| grapheme | 확장 자소 클러스터 (사람이 보는 한 글자) | 2 |

BMP 밖 글자(CJK 확장 B 이후 한자, 이모지)에서만 결과가 달라진다.
기본값은 code_point. grapheme 분할은 regex 라이브러리의 \\X 패턴을 쓴다.

사용법:
    from core.char_sequence import CharSequence, IndexingPolicy

    seq = CharSequence("𠀀日本", IndexingPolicy.CODE_UNIT)
    len(seq)  # 4 (𠀀은 서로게이트 쌍)
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Iterable, Iterator, Union

import regex

_GRAPHEME_PATTERN = regex.compile(r"\X")
_LONE_SURROGATE = re.compile(r"[\ud800-\udfff]")


class IndexingPolicy(str, Enum):
    """글자 분할 정책."""

    CODE_UNIT = "code_unit"
    CODE_POINT = "code_point"
    GRAPHEME = "grapheme"

    @classmethod
    def parse(cls, value: Union[str, "IndexingPolicy", None]) -> "IndexingPolicy":
        """문자열 또는 enum을 정책으로 변환한다.

        "code-point", "CODE_POINT", "code_point" 모두 허용.
        None이면 기본 정책(code_point).

        에러: ValueError — 알 수 없는 정책 이름.
        """
        if value is None:
            return cls.CODE_POINT
        if isinstance(value, cls):
            return value
        if isinstance(value, Enum):
            value = value.value
        key = str(value).strip().lower().replace("-", "_")
        for member in cls:
            if member.value == key:
                return member
        accepted = ", ".join(m.value for m in cls)
        raise ValueError(f"알 수 없는 글자 분할 정책: {value!r} (허용: {accepted})")


DEFAULT_POLICY = IndexingPolicy.CODE_POINT


def split_chars(text: str, policy: IndexingPolicy = DEFAULT_POLICY) -> list[str]:
    """문자열을 정책에 따라 글자 리스트로 나눈다.

    code_unit: 서로게이트 쌍은 두 개의 단독 서로게이트 str로 쪼개진다.
    """
    policy = IndexingPolicy.parse(policy)

    if policy == IndexingPolicy.CODE_POINT:
        return list(text)

    if policy == IndexingPolicy.GRAPHEME:
        return _GRAPHEME_PATTERN.findall(text)

    data = text.encode("utf-16-le", "surrogatepass")
    return [
        chr(int.from_bytes(data[k:k + 2], "little"))
        for k in range(0, len(data), 2)
    ]


def join_chars(chars: Iterable[str]) -> str:
    """글자 리스트를 다시 문자열로 합친다.

    인접한 서로게이트 쌍은 원래 글자로 복원된다.
    """
    joined = "".join(chars)
    if not _LONE_SURROGATE.search(joined):
        return joined
    return joined.encode("utf-16-le", "surrogatepass").decode(
        "utf-16-le", "surrogatepass"
    )


def display_text(chars: Iterable[str]) -> str:
    """JSON/터미널 출력용 문자열.

    짝 없는 서로게이트는 UTF-8로 인코딩할 수 없으므로 "\\ud83d" 형태로 표기한다.
    """
    text = join_chars(chars)
    return _LONE_SURROGATE.sub(lambda m: f"\\u{ord(m.group()):04x}", text)


class CharSequence:
    """한 가지 분할 정책으로 나뉜 불변 글자 시퀀스.

    len/인덱싱/순회는 정책 단위로 동작한다.
    text는 원본 문자열을 그대로 돌려준다.
    """

    __slots__ = ("_text", "_chars", "_policy")

    def __init__(self, text: str = "", policy: Union[str, IndexingPolicy] = DEFAULT_POLICY):
        self._policy = IndexingPolicy.parse(policy)
        self._text = text
        self._chars = tuple(split_chars(text, self._policy))

    @property
    def text(self) -> str:
        return self._text

    @property
    def policy(self) -> IndexingPolicy:
        return self._policy

    @property
    def chars(self) -> tuple[str, ...]:
        return self._chars

    def __len__(self) -> int:
        return len(self._chars)

    def __getitem__(self, index):
        return self._chars[index]

    def __iter__(self) -> Iterator[str]:
        return iter(self._chars)

    def __eq__(self, other) -> bool:
        if not isinstance(other, CharSequence):
            return NotImplemented
        return self._policy == other._policy and self._chars == other._chars

    def __hash__(self) -> int:
        return hash((self._policy, self._chars))

    def __repr__(self) -> str:
        return f"CharSequence({self._text!r}, policy={self._policy.value!r})"
