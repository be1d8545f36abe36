"""라우터 공통 상태 및 헬퍼.

모든 라우터가 이 모듈에서 get_settings()를 import한다.
설정은 처음 요청될 때 core.app_config에서 lazy-load한다.
"""

import logging

from core.app_config import ComparisonSettings, get_comparison_settings

logger = logging.getLogger(__name__)

# ── 전역 상태 ─────────────────────────────────

_settings: ComparisonSettings | None = None


# ── 상태 접근 함수 ───────────────────────────

def get_settings() -> ComparisonSettings:
    """현재 대조 설정을 반환한다. 아직 없으면 설정 파일·환경변수에서 읽는다."""
    global _settings
    if _settings is None:
        _settings = get_comparison_settings()
        logger.info(
            "대조 설정 로드: 상한 %d자, 정책 %s, 정규화 %s",
            _settings.max_input_chars,
            _settings.indexing,
            _settings.normalization,
        )
    return _settings


def set_settings(settings: ComparisonSettings | None):
    """대조 설정을 교체한다. None이면 다음 요청에서 다시 로드한다."""
    global _settings
    _settings = settings
