"""앱 전역 설정 관리.

설정 우선순위: 환경변수 → 설정 파일 → 기본값.
설정 파일: ~/.recall-checker/config.json
  (RECALL_CHECKER_CONFIG 환경변수로 다른 경로를 지정할 수 있다)

저장 항목:
    - comparison.max_input_chars: 입력 글자 수 상한 (LCS 표 크기 제한)
    - comparison.indexing: 글자 분할 정책 (code_unit / code_point / grapheme)
    - comparison.normalization: 유니코드 정규화 형식 (NFC 등, 없으면 null)

환경변수:
    RECALL_MAX_INPUT_CHARS, RECALL_INDEXING, RECALL_NORMALIZATION
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

from core.char_sequence import IndexingPolicy
from core.comparison import NORMALIZATION_FORMS

logger = logging.getLogger(__name__)

# ── 설정 경로 ──────────────────────────────────

CONFIG_DIR = Path.home() / ".recall-checker"
CONFIG_FILE = CONFIG_DIR / "config.json"

CONFIG_ENV = "RECALL_CHECKER_CONFIG"

# 환경변수명 매핑
SETTINGS_ENV = {
    "max_input_chars": "RECALL_MAX_INPUT_CHARS",
    "indexing": "RECALL_INDEXING",
    "normalization": "RECALL_NORMALIZATION",
}


@dataclass
class ComparisonSettings:
    """대조 기능 설정."""

    max_input_chars: int = 500
    indexing: str = IndexingPolicy.CODE_POINT.value
    normalization: Optional[str] = None

    def to_dict(self) -> dict:
        return asdict(self)


def config_path() -> Path:
    """현재 설정 파일 경로. 환경변수가 있으면 그것을 쓴다."""
    override = os.environ.get(CONFIG_ENV)
    if override:
        return Path(override)
    return CONFIG_FILE


# ── 설정 파일 읽기/쓰기 ─────────────────────────

def load_app_config() -> dict:
    """앱 설정을 로드한다.

    출력: 설정 dict. 파일이 없거나 읽을 수 없으면 빈 dict.
    """
    path = config_path()
    if not path.exists():
        return {}

    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"앱 설정 읽기 실패 (기본값 사용): {e}")
        return {}


def save_app_config(config: dict) -> None:
    """앱 설정을 저장한다.

    입력: config — 전체 설정 dict.
    """
    path = config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(config, ensure_ascii=False, indent=2) + "\n",
        encoding="utf-8",
    )


# ── 값 검증 ──────────────────────────────────

def _validate_max_input_chars(value) -> int:
    # bool은 int의 하위 클래스이므로 따로 거른다
    if isinstance(value, bool):
        raise ValueError(f"max_input_chars는 정수여야 합니다: {value!r}")
    number = int(value)
    if number < 1:
        raise ValueError(f"max_input_chars는 1 이상이어야 합니다: {number}")
    return number


def _validate_indexing(value) -> str:
    return IndexingPolicy.parse(value).value


def _validate_normalization(value) -> Optional[str]:
    if value is None:
        return None
    form = str(value).strip().upper()
    if form in ("", "NONE", "OFF"):
        return None
    if form not in NORMALIZATION_FORMS:
        raise ValueError(
            f"알 수 없는 정규화 형식: {value!r} (허용: {', '.join(NORMALIZATION_FORMS)})"
        )
    return form


_VALIDATORS = {
    "max_input_chars": _validate_max_input_chars,
    "indexing": _validate_indexing,
    "normalization": _validate_normalization,
}


# ── 대조 설정 ──────────────────────────────────

def get_comparison_settings() -> ComparisonSettings:
    """대조 설정을 반환한다.

    설정 파일의 "comparison" 섹션 위에 환경변수를 덮어쓴다.
    잘못된 값은 경고를 남기고 기본값으로 대체한다.
    """
    settings = ComparisonSettings()
    section = load_app_config().get("comparison", {})
    if not isinstance(section, dict):
        logger.warning(f"comparison 설정 형식 오류 (기본값 사용): {section!r}")
        section = {}

    for key, validate in _VALIDATORS.items():
        raw = section.get(key, getattr(settings, key))
        source = "설정 파일"
        env_value = os.environ.get(SETTINGS_ENV[key])
        if env_value is not None:
            raw = env_value
            source = SETTINGS_ENV[key]

        try:
            setattr(settings, key, validate(raw))
        except (TypeError, ValueError) as e:
            logger.warning(f"{source}의 {key} 값 무시 (기본값 사용): {e}")

    return settings


def update_comparison_settings(**changes) -> ComparisonSettings:
    """대조 설정을 검증 후 설정 파일에 저장한다.

    입력: max_input_chars / indexing / normalization 중 바꿀 항목.
    출력: 저장 후 유효 설정 (환경변수 반영).

    에러: ValueError — 알 수 없는 항목이거나 값이 잘못됨.
    """
    unknown = set(changes) - set(_VALIDATORS)
    if unknown:
        raise ValueError(f"알 수 없는 설정 항목: {', '.join(sorted(unknown))}")

    validated = {key: _VALIDATORS[key](value) for key, value in changes.items()}

    config = load_app_config()
    section = config.get("comparison")
    if not isinstance(section, dict):
        section = {}
    section.update(validated)
    config["comparison"] = section
    save_app_config(config)

    logger.info("대조 설정 저장: %s", validated)
    return get_comparison_settings()
