"""
引擎测试：配置、compose、compose_with_state
"""

import logging

import pytest

from pinime.engine import Analysis, EngineConfig, IMEEngine, TableDictionary, create_engine


class _ListHandler(logging.Handler):

    def __init__(self):
        super().__init__(logging.DEBUG)
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def engine_log():
    """pinime.engine 不向 root 传播，直接挂 handler 收集"""
    logger = logging.getLogger("pinime.engine")
    handler = _ListHandler()
    logger.addHandler(handler)
    yield handler.records
    logger.removeHandler(handler)


class TestEngineConfig:

    def test_defaults(self):
        config = EngineConfig()
        assert config.candidate_limit == 9
        assert config.max_word_length == 4
        assert config.per_span_limit == 16

    @pytest.mark.parametrize("limit", [2, 5, 9])
    def test_valid_limit(self, limit):
        assert EngineConfig(candidate_limit=limit).candidate_limit == limit

    @pytest.mark.parametrize("limit", [0, 1, 10, -1])
    def test_invalid_limit_falls_back(self, limit, engine_log):
        assert EngineConfig(candidate_limit=limit).candidate_limit == 9
        assert any(r.levelno == logging.WARNING and "candidate_limit" in r.getMessage() for r in engine_log)

    @pytest.mark.parametrize("limit", ["5", None, 5.0, True])
    def test_non_int_limit_falls_back(self, limit, engine_log):
        """非整数不抛异常，回退并告警"""
        assert EngineConfig(candidate_limit=limit).candidate_limit == 9
        assert any(r.levelno == logging.WARNING for r in engine_log)

    def test_non_int_lengths_fall_back(self, engine_log):
        config = EngineConfig(max_word_length="x", per_span_limit=None)
        assert config.max_word_length == 4
        assert config.per_span_limit == 16
        assert len([r for r in engine_log if r.levelno == logging.WARNING]) == 2

    def test_lengths_at_least_one(self):
        config = EngineConfig(max_word_length=0, per_span_limit=-5)
        assert config.max_word_length == 1
        assert config.per_span_limit == 1


class TestCompose:

    def test_nihao(self, engine):
        ui = engine.compose("nihao")
        assert ui.raw_input == "nihao"
        assert ui.preedit == "ni hao"
        assert ui.segment == ["ni", "hao"]
        assert (ui.caret, ui.confirm, ui.confirm_text) == (2, 0, "")
        assert [(c.text, c.weight, c.segment_start, c.segment_end) for c in ui.candidate_list] == [
            ("你好", 3780, 0, 2),
            ("你号", 3300, 0, 2),
            ("呢好", 3180, 0, 2),
            ("呢号", 2700, 0, 2),
            ("你", 900, 0, 1),
            ("呢", 300, 0, 1),
        ]

    def test_initials(self, engine):
        ui = engine.compose("qs")
        assert [(c.text, c.weight, c.comment) for c in ui.candidate_list] == [
            ("其实", 2800, "qishi"),
            ("骑士", 2400, "qishi"),
        ]

    def test_candidate_limit(self, dictionary, segmenter):
        engine = IMEEngine(dictionary, segmenter, EngineConfig(candidate_limit=3))
        assert len(engine.compose("nihao").candidate_list) == 3

    def test_passthrough(self, engine):
        ui = engine.compose("ni1")
        assert ui.segment == []
        assert ui.preedit == "ni1"
        assert ui.candidate_list == []
        assert ui.caret == 0

    def test_empty(self, engine):
        ui = engine.compose("")
        assert ui.candidate_list == []
        assert ui.preedit == ""

    def test_no_duplicates(self, engine):
        ui = engine.compose("nihao")
        keys = [(c.text, c.segment_start, c.segment_end) for c in ui.candidate_list]
        assert len(keys) == len(set(keys))

    def test_default_segmenter(self, dictionary):
        engine = IMEEngine(dictionary)
        assert engine.analyze("nihao").segment == ["ni", "hao"]


class TestComposeWithState:

    def test_after_confirm(self, engine):
        analysis = engine.analyze("nihao")
        ui = engine.compose_with_state("nihao", analysis, 1, None, "你")
        assert ui.confirm == 1
        assert ui.confirm_text == "你"
        assert [(c.text, c.weight, c.segment_start) for c in ui.candidate_list] == [
            ("好", 1880, 1),
            ("号", 1400, 1),
        ]

    def test_all_confirmed_has_no_candidates(self, engine):
        analysis = engine.analyze("nihao")
        ui = engine.compose_with_state("nihao", analysis, 2, 2, "你好")
        assert ui.candidate_list == []

    def test_clamps_out_of_range(self, engine):
        analysis = engine.analyze("nihao")
        ui = engine.compose_with_state("nihao", analysis, 5, 7)
        assert (ui.caret, ui.confirm) == (2, 2)

        ui = engine.compose_with_state("nihao", analysis, -1, -1)
        assert (ui.caret, ui.confirm) == (0, 0)
        assert ui.candidate_list == []

    def test_caret_limits_span(self, engine):
        """候选不越过 caret"""
        analysis = engine.analyze("nihao")
        ui = engine.compose_with_state("nihao", analysis, 0, 1)
        assert [c.text for c in ui.candidate_list] == ["你", "呢"]
        assert all(c.segment_end <= 1 for c in ui.candidate_list)

    def test_does_not_mutate_analysis(self, engine):
        analysis = Analysis(segment=["ni", "hao"], preedit="ni hao")
        ui = engine.compose_with_state("nihao", analysis, 0)
        ui.segment.append("x")
        assert analysis.segment == ["ni", "hao"]

    def test_to_dict(self, engine):
        data = engine.compose("nihao").to_dict()
        assert data["raw_input"] == "nihao"
        assert data["candidate_list"][0]["text"] == "你好"
        assert set(data["candidate_list"][0]) == {"text", "comment", "weight", "segment_start", "segment_end"}


class TestCreateEngine:

    def test_bundled_dictionary(self):
        engine = create_engine(EngineConfig(candidate_limit=5))
        ui = engine.compose("nihao")
        assert engine.config.candidate_limit == 5
        assert ui.candidate_list[0].text == "你好"
        assert len(ui.candidate_list) <= 5

    def test_custom_dictionary(self, tmp_path):
        path = tmp_path / "dict.tsv"
        path.write_text("是\tshi\t1\n", encoding="utf-8")
        engine = create_engine(dict_path=str(path))
        assert engine.compose("shi").candidate_list[0].text == "是"
