"""CLI 도구 — 암기 답안 대조기.

사용법:
    python -m cli compare <원문> <입력>
    python -m cli compare --reference-file ref.txt --candidate-file answer.txt
    python -m cli compare --reference-file ref.txt "입력한 답"
    python -m cli compare "日本語" "日本" --indexing grapheme --json

pip install -e . 후 실행하거나, src/ 디렉토리에서 실행한다.
"""

import argparse
import json
import logging
import sys
from pathlib import Path

# src/ 디렉토리를 Python 경로에 추가하여 pip install 없이도 실행 가능하게 한다.
_src_dir = str(Path(__file__).resolve().parent.parent)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from core.app_config import get_comparison_settings  # noqa: E402
from core.char_sequence import display_text  # noqa: E402
from core.comparison import ComparisonResult, VerdictType, compare_texts  # noqa: E402


def _read_input(inline: str | None, file_path: str | None, label: str) -> str:
    """인자 또는 파일에서 텍스트를 읽는다. 파일 끝 줄바꿈 하나는 떼어낸다.

    read_text는 universal newline 모드라 \\r\\n도 \\n으로 읽힌다.
    """
    if file_path:
        text = Path(file_path).read_text(encoding="utf-8")
        return text[:-1] if text.endswith("\n") else text
    if inline is None:
        raise ValueError(f"{label} 텍스트를 인자나 파일로 지정하세요.")
    return inline


def _resolve_positionals(args) -> tuple[str | None, str | None]:
    """위치 인자를 원문/입력에 배정한다.

    원문만 파일로 주고 위치 인자가 하나뿐이면 그 인자는 입력이다.
    예: compare --reference-file ref.txt "입력한 답"
    """
    if (
        args.reference_file
        and not args.candidate_file
        and args.reference is not None
        and args.candidate is None
    ):
        return None, args.reference
    return args.reference, args.candidate


def render_markup(result: ComparisonResult) -> str:
    """판정 결과를 한 줄 표기로 만든다.

    matched는 그대로, substituted는 [원문→입력], omitted는 (원문).
    """
    parts = []
    for v in result.verdicts:
        ref_char = display_text([v.ref_char])
        if v.verdict == VerdictType.MATCHED:
            parts.append(ref_char)
        elif v.verdict == VerdictType.SUBSTITUTED:
            parts.append(f"[{ref_char}→{display_text([v.candidate_char])}]")
        else:
            parts.append(f"({ref_char})")
    return "".join(parts)


def render_stats(result: ComparisonResult) -> str:
    s = result.stats
    return (
        f"일치 {s.matched} / 오기 {s.substituted} / 누락 {s.omitted} / 전체 {s.total}"
        f"  정확도 {s.accuracy_display}%"
    )


def cmd_compare(args):
    """원문과 입력을 대조하여 결과를 출력한다."""
    settings = get_comparison_settings()

    max_chars = settings.max_input_chars
    if args.max_input_chars is not None:
        if args.max_input_chars < 1:
            print("오류: --max-input-chars는 1 이상이어야 합니다.", file=sys.stderr)
            sys.exit(1)
        max_chars = args.max_input_chars

    reference_arg, candidate_arg = _resolve_positionals(args)
    try:
        reference = _read_input(reference_arg, args.reference_file, "원문")
        candidate = _read_input(candidate_arg, args.candidate_file, "입력")
        result = compare_texts(
            reference,
            candidate,
            policy=args.indexing or settings.indexing,
            normalization=args.normalization or settings.normalization,
            max_chars=max_chars,
        )
    except (OSError, ValueError) as e:
        print(f"오류: {e}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
        return

    print(render_markup(result))
    print(render_stats(result))


def main():
    parser = argparse.ArgumentParser(
        prog="recall-checker",
        description="암기 답안 대조기 — CLI 도구",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="디버그 로그 출력")
    subparsers = parser.add_subparsers(dest="command")

    p_compare = subparsers.add_parser("compare", help="원문과 입력을 글자 단위로 대조한다")
    p_compare.add_argument("reference", nargs="?", default=None, help="원문 (정답)")
    p_compare.add_argument("candidate", nargs="?", default=None, help="사용자 입력")
    p_compare.add_argument("--reference-file", default=None, help="원문 파일 (UTF-8)")
    p_compare.add_argument("--candidate-file", default=None, help="입력 파일 (UTF-8)")
    p_compare.add_argument(
        "--indexing", default=None,
        help="글자 분할 정책: code_unit / code_point / grapheme",
    )
    p_compare.add_argument("--normalization", default=None, help="유니코드 정규화: NFC 등")
    p_compare.add_argument("--max-input-chars", type=int, default=None, help="글자 수 상한")
    p_compare.add_argument("--json", action="store_true", help="JSON으로 출력")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "compare":
        cmd_compare(args)


if __name__ == "__main__":
    main()
