"""
命令行测试
"""

import io

import orjson
import pytest

from conftest import TEST_DICT_TSV

from pinime import __version__
from pinime.cli import main, run_repl, sanitize_input


@pytest.fixture
def dict_path(tmp_path):
    path = tmp_path / "dict.tsv"
    path.write_text(TEST_DICT_TSV, encoding="utf-8")
    return str(path)


def _repl(session, text):
    out = io.StringIO()
    committed = run_repl(session, io.StringIO(text), out)
    return committed, out.getvalue()


class TestSanitize:

    @pytest.mark.parametrize("raw, expected", [
        ("NiHao", "nihao"),
        ("xi'an", "xi'an"),
        ("ni hao 123", "nihao"),
        ("你好", ""),
    ])
    def test_sanitize(self, raw, expected):
        assert sanitize_input(raw) == expected


class TestRepl:

    def test_enter_selects_first(self, session):
        committed, output = _repl(session, "nihao\n\n:q\n")
        assert committed == ["你好"]
        assert "1. 你好\t(compose)" in output
        assert "commit: 你好" in output

    def test_stepwise_selection(self, session):
        # 5 -> "你"（0..1），再 1 -> "好"
        committed, output = _repl(session, "nihao\n5\n1\n:q\n")
        assert committed == ["你好"]
        assert "confirmed: 你 (1 / 2)" in output
        assert "1. 你好\t(compose)" in output

    def test_zero_commits_raw(self, session):
        committed, _ = _repl(session, "nihao\n0\n:q\n")
        assert committed == ["nihao"]

    def test_no_candidates_commits_raw(self, session):
        committed, _ = _repl(session, "zzzzzzzz\n:q\n")
        assert committed == ["zzzzzzzz"]

    def test_ignored_line(self, session):
        committed, output = _repl(session, "123\n:q\n")
        assert committed == []
        assert "忽略" in output

    def test_invalid_selection_reprompts(self, session):
        committed, output = _repl(session, "nihao\nx\n\n")
        assert committed == ["你好"]
        assert "无效选择" in output

    def test_eof(self, session):
        committed, _ = _repl(session, "nihao\n")
        assert committed == []

    def test_multiple_lines(self, session):
        committed, _ = _repl(session, "nihao\n\nqs\n2\n:q\n")
        assert committed == ["你好", "骑士"]


class TestMain:

    def test_version(self, capsys):
        main(["version"])
        assert capsys.readouterr().out.strip() == f"pinime v{__version__}"

    def test_query(self, capsys, dict_path):
        main(["query", "nihao", "--dict", dict_path])
        out = capsys.readouterr().out
        assert out.splitlines()[0] == "> ni hao"
        assert "1. 你好 [3780]\t(compose)" in out

    def test_query_json(self, capsys, dict_path):
        main(["query", "NiHao", "--dict", dict_path, "--json", "-k", "3"])
        data = orjson.loads(capsys.readouterr().out)
        assert data["raw_input"] == "nihao"
        assert len(data["candidate_list"]) == 3

    def test_missing_dictionary(self, capsys, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main(["query", "ni", "--dict", str(tmp_path / "missing.tsv")])
        assert exc.value.code == 1
        assert "词典加载失败" in capsys.readouterr().err

    def test_bad_dictionary(self, capsys, tmp_path):
        path = tmp_path / "bad.tsv"
        path.write_text("只有文字\n", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            main(["query", "ni", "--dict", str(path)])
        assert exc.value.code == 1
        assert "第 1 行" in capsys.readouterr().err

    def test_no_command(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 1
