"""웹 앱 진입점.

사용법:
    python -m app serve [--port 8000] [--host 127.0.0.1]
    python -m app serve --max-input-chars 2000 --indexing grapheme
"""

import argparse
import logging
import sys
from pathlib import Path

# src/ 디렉토리를 Python 경로에 추가
_src_dir = str(Path(__file__).resolve().parent.parent)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)


def main():
    parser = argparse.ArgumentParser(
        prog="recall-checker",
        description="암기 답안 대조 웹 서버",
    )
    subparsers = parser.add_subparsers(dest="command")

    p_serve = subparsers.add_parser("serve", help="웹 서버를 실행한다")
    p_serve.add_argument("--port", type=int, default=8000, help="포트 (기본: 8000)")
    p_serve.add_argument("--host", default="127.0.0.1", help="호스트 (기본: 127.0.0.1)")
    p_serve.add_argument(
        "--max-input-chars", type=int, default=None,
        help="입력 글자 수 상한 (생략 시 설정 파일 값)",
    )
    p_serve.add_argument(
        "--indexing", default=None,
        help="글자 분할 정책: code_unit / code_point / grapheme",
    )
    p_serve.add_argument("--log-level", default="INFO", help="로그 레벨 (기본: INFO)")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    if args.command == "serve":
        import uvicorn
        from app.server import configure
        from core.app_config import get_comparison_settings
        from core.char_sequence import IndexingPolicy

        logging.basicConfig(
            level=args.log_level.upper(),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )

        settings = get_comparison_settings()
        if args.max_input_chars is not None:
            if args.max_input_chars < 1:
                print("오류: --max-input-chars는 1 이상이어야 합니다.", file=sys.stderr)
                sys.exit(1)
            settings.max_input_chars = args.max_input_chars
        if args.indexing:
            try:
                settings.indexing = IndexingPolicy.parse(args.indexing).value
            except ValueError as e:
                print(f"오류: {e}", file=sys.stderr)
                sys.exit(1)

        configure(settings)
        print(f"대조 설정: 상한 {settings.max_input_chars}자, 정책 {settings.indexing}")
        print(f"서버: http://{args.host}:{args.port}")
        uvicorn.run(
            app="app.server:app",
            host=args.host,
            port=args.port,
            reload=False,
        )


if __name__ == "__main__":
    main()
