"""CLI 테스트."""

import json
import sys
from pathlib import Path

import pytest

# src/ 디렉토리를 경로에 추가
_src = str(Path(__file__).resolve().parent.parent / "src")
if _src not in sys.path:
    sys.path.insert(0, _src)

from cli.__main__ import main, render_markup
from core.app_config import CONFIG_ENV, SETTINGS_ENV
from core.comparison import compare_texts


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV, str(tmp_path / "config.json"))
    for env_name in SETTINGS_ENV.values():
        monkeypatch.delenv(env_name, raising=False)


def _run(monkeypatch, *argv):
    monkeypatch.setattr(sys, "argv", ["recall-checker", *argv])
    main()


class TestRenderMarkup:
    def test_all_verdicts(self):
        assert render_markup(compare_texts("cat", "cut")) == "c[a→u]t"
        assert render_markup(compare_texts("cat", "ct")) == "c(a)t"
        assert render_markup(compare_texts("日本語", "日本")) == "日本(語)"


class TestCompareCommand:
    def test_plain_output(self, monkeypatch, capsys):
        _run(monkeypatch, "compare", "cat", "cut")
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "c[a→u]t"
        assert "일치 2" in out[1]
        assert "정확도 66.7%" in out[1]

    def test_json_output(self, monkeypatch, capsys):
        _run(monkeypatch, "compare", "日本語", "日本", "--json")
        data = json.loads(capsys.readouterr().out)
        assert data["stats"]["omitted"] == 1
        assert data["verdicts"][2]["ref_char"] == "語"

    def test_files(self, monkeypatch, capsys, tmp_path):
        ref = tmp_path / "ref.txt"
        cand = tmp_path / "cand.txt"
        ref.write_text("學而時習之\n", encoding="utf-8")
        cand.write_text("學而習之\n", encoding="utf-8")
        _run(
            monkeypatch, "compare",
            "--reference-file", str(ref), "--candidate-file", str(cand),
        )
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "學而(時)習之"

    def test_reference_file_with_typed_answer(self, monkeypatch, capsys, tmp_path):
        """원문만 파일로 주면 위치 인자 하나는 입력으로 쓴다."""
        ref = tmp_path / "ref.txt"
        ref.write_text("cat\n", encoding="utf-8")
        _run(monkeypatch, "compare", "--reference-file", str(ref), "cut")
        out = capsys.readouterr().out.splitlines()
        assert out[0] == "c[a→u]t"

    def test_crlf_file(self, monkeypatch, capsys, tmp_path):
        """CRLF 파일도 끝 줄바꿈이 글자로 남지 않는다."""
        ref = tmp_path / "ref.txt"
        cand = tmp_path / "cand.txt"
        ref.write_bytes("學而時習之\r\n".encode("utf-8"))
        cand.write_bytes("學而時習之\r\n".encode("utf-8"))
        _run(
            monkeypatch, "compare",
            "--reference-file", str(ref), "--candidate-file", str(cand), "--json",
        )
        data = json.loads(capsys.readouterr().out)
        assert data["stats"]["total"] == 5
        assert data["stats"]["accuracy_display"] == "100.0"

    def test_half_rounds_up_in_output(self, monkeypatch, capsys):
        _run(monkeypatch, "compare", "a" * 16, "a")
        assert "정확도 6.3%" in capsys.readouterr().out

    def test_indexing_option(self, monkeypatch, capsys):
        _run(monkeypatch, "compare", "😀", "😁", "--indexing", "code_unit", "--json")
        data = json.loads(capsys.readouterr().out)
        assert data["indexing"] == "code_unit"
        assert data["stats"]["total"] == 2

    def test_too_long(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, "compare", "abc", "a", "--max-input-chars", "2")
        assert exc_info.value.code == 1
        assert "오류" in capsys.readouterr().err

    @pytest.mark.parametrize("limit", ["0", "-3"])
    def test_invalid_max_input_chars(self, monkeypatch, capsys, limit):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, "compare", "abc", "a", "--max-input-chars", limit)
        assert exc_info.value.code == 1
        assert "--max-input-chars" in capsys.readouterr().err

    def test_missing_candidate(self, monkeypatch, capsys):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch, "compare", "abc")
        assert exc_info.value.code == 1
        assert "입력" in capsys.readouterr().err

    def test_missing_file(self, monkeypatch, capsys, tmp_path):
        with pytest.raises(SystemExit):
            _run(
                monkeypatch, "compare",
                "--reference-file", str(tmp_path / "nope.txt"), "--candidate-file", "x",
            )
        assert "오류" in capsys.readouterr().err

    def test_no_command(self, monkeypatch):
        with pytest.raises(SystemExit) as exc_info:
            _run(monkeypatch)
        assert exc_info.value.code == 1
