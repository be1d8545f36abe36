"""웹 앱 서버.

FastAPI 기반. 암기 답안 대조 엔진을 JSON API로 제공한다.

API 엔드포인트:
    GET  /api/health            → 상태 확인
    POST /api/compare           → 원문/입력 글자 단위 대조
    POST /api/compare/stats     → 판정 목록으로 통계 재계산
    GET  /api/compare/settings  → 대조 설정 조회
    PUT  /api/compare/settings  → 대조 설정 변경
"""

import sys
from pathlib import Path

# src/ 디렉토리를 Python 경로에 추가
_src_dir = str(Path(__file__).resolve().parent.parent)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from fastapi import FastAPI

from app._state import get_settings, set_settings
from app.routers.comparison import router as comparison_router
from core.app_config import ComparisonSettings


app = FastAPI(
    title="암기 답안 대조기",
    description="원문과 기억해서 입력한 텍스트를 글자 단위로 대조한다 (영어·중국어 공용)",
    version="0.1.0",
)

app.include_router(comparison_router)


def configure(settings: ComparisonSettings | None = None) -> FastAPI:
    """대조 설정을 지정하고 앱을 반환한다.

    입력: settings — None이면 설정 파일·환경변수에서 다시 읽는다.
    출력: 설정된 FastAPI 앱 인스턴스.
    """
    set_settings(settings)
    get_settings()
    return app


@app.get("/api/health")
async def api_health():
    """서버 상태와 현재 대조 설정 요약을 반환한다."""
    settings = get_settings()
    return {
        "status": "ok",
        "version": app.version,
        "indexing": settings.indexing,
        "max_input_chars": settings.max_input_chars,
    }
