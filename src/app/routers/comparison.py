"""대조 엔진 라우터.

암기 답안 대조, 판정 통계 재계산, 대조 설정 조회/변경 API를 모아둔다.
"""

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from app._state import get_settings, set_settings
from core.app_config import update_comparison_settings
from core.comparison import (
    CharacterVerdict,
    InputTooLongError,
    VerdictType,
    compare_texts,
    summarize,
)

router = APIRouter(tags=["comparison"])


# ── Pydantic 모델 ─────────────────────────────────


class CompareRequest(BaseModel):
    """대조 요청. indexing/normalization을 생략하면 서버 설정을 쓴다."""
    reference: str
    candidate: str
    indexing: str | None = None
    normalization: str | None = None


class VerdictItem(BaseModel):
    """통계 재계산용 판정 항목. verdict 외 필드는 선택."""
    verdict: VerdictType
    ref_char: str = ""
    candidate_char: str | None = None


class StatsRequest(BaseModel):
    """통계 재계산 요청."""
    verdicts: list[VerdictItem] = Field(default_factory=list)


class SettingsUpdateRequest(BaseModel):
    """대조 설정 변경 요청. 보낸 항목만 바뀐다."""
    max_input_chars: int | None = None
    indexing: str | None = None
    normalization: str | None = None


# ===========================================================================
#  답안 대조
# ===========================================================================


@router.post("/api/compare")
def api_compare(body: CompareRequest):
    """원문(reference)과 사용자 입력(candidate)을 글자 단위로 대조한다.

    목적: 암기 연습 화면에서 입력 결과를 색상별로 표시하고 점수를 보여준다.
    출력: {
        "indexing": 정책, "normalization": 정규화 형식,
        "verdicts": [CharacterVerdict.to_dict(), ...],  # 원문 글자 수만큼
        "stats": ComparisonStats.to_dict(),
        "segments": [{"verdict", "text", "candidate_text", "start", "end"}, ...]
    }
    에러: 413 — 글자 수 상한 초과, 400 — 알 수 없는 정책/정규화 형식.
    """
    settings = get_settings()
    indexing = body.indexing or settings.indexing
    normalization = (
        body.normalization if body.normalization is not None
        else settings.normalization
    )

    try:
        result = compare_texts(
            body.reference,
            body.candidate,
            policy=indexing,
            normalization=normalization or None,
            max_chars=settings.max_input_chars,
        )
    except InputTooLongError as e:
        return JSONResponse(
            {"error": str(e), "field": e.field_name, "limit": e.limit},
            status_code=413,
        )
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    return result.to_dict()


@router.post("/api/compare/stats")
async def api_compare_stats(body: StatsRequest):
    """클라이언트가 가진 판정 목록으로 통계만 다시 계산한다.

    목적: 사용자가 판정을 수동으로 고친 뒤(예: 오기를 일치로 인정) 점수를 갱신한다.
    """
    verdicts = [
        CharacterVerdict(
            ref_char=item.ref_char,
            verdict=item.verdict,
            candidate_char=item.candidate_char,
            ref_index=idx,
        )
        for idx, item in enumerate(body.verdicts)
    ]
    return summarize(verdicts).to_dict()


# ===========================================================================
#  대조 설정
# ===========================================================================


@router.get("/api/compare/settings")
async def api_get_settings():
    """현재 대조 설정을 반환한다."""
    return get_settings().to_dict()


@router.put("/api/compare/settings")
async def api_update_settings(body: SettingsUpdateRequest):
    """대조 설정을 변경하고 설정 파일에 저장한다.

    normalization을 끄려면 "none"을 보낸다 (null은 "변경 안 함").
    """
    changes = body.model_dump(exclude_none=True)
    if not changes:
        return JSONResponse({"error": "변경할 설정이 없습니다."}, status_code=400)

    try:
        settings = update_comparison_settings(**changes)
    except ValueError as e:
        return JSONResponse({"error": str(e)}, status_code=400)

    set_settings(settings)
    return {"status": "saved", **settings.to_dict()}
