"""
拼音切分测试
"""

import orjson
import pytest

from pinime.engine import Analysis, PinyinSegmenter, create_segmenter_from_dict
from pinime.engine.segmenter import VALID_PINYINS


class TestSegment:
    """正常切分"""

    @pytest.mark.parametrize("raw, expected", [
        ("nihao", ["ni", "hao"]),
        ("zhongguoren", ["zhong", "guo", "ren"]),
        ("womenshi", ["wo", "men", "shi"]),
        ("nihaoma", ["ni", "hao", "ma"]),
        ("a", ["a"]),
    ])
    def test_known_spellings(self, segmenter, raw, expected):
        """已知音节拼接能被还原，preedit 为空格连接"""
        analysis = segmenter.analyze(raw)
        assert analysis.segment == expected
        assert analysis.preedit == " ".join(expected)

    def test_uppercase_input(self, segmenter):
        """大写输入先转小写"""
        assert segmenter.analyze("NiHao").segment == ["ni", "hao"]

    def test_break_marker(self, segmenter):
        """' 强制断开"""
        analysis = segmenter.analyze("xi'an")
        assert analysis.segment == ["xi", "an"]
        assert analysis.preedit == "xi an"

    def test_longest_syllable_wins_on_tie(self, segmenter):
        """频率相同时 xian 与 xi+an 同分，保留先评估到的长音节"""
        assert segmenter.analyze("xian").segment == ["xian"]

    def test_frequency_breaks_length_tie(self):
        """频率让 xi+an 的总分严格更高"""
        seg = PinyinSegmenter({"xi": 5, "an": 5})
        assert seg.analyze("xian").segment == ["xi", "an"]

    def test_strict_greater_replacement(self):
        """同分不替换，严格更高才替换"""
        seg = PinyinSegmenter(syllables=["ab", "a", "b"])
        assert seg.analyze("ab").segment == ["ab"]

        seg = PinyinSegmenter({"a": 1}, syllables=["ab", "a", "b"])
        assert seg.analyze("ab").segment == ["a", "b"]

    def test_evaluation_order(self):
        """音节表按频率降序 → 长度降序 → 字典序"""
        seg = PinyinSegmenter({"b": 3, "ab": 1}, syllables=["a", "b", "ab", "ba"])
        assert [sy for sy, _ in seg.vocabulary] == ["b", "ab", "ba", "a"]

    def test_pure(self, segmenter):
        """同一输入结果相同，且每次返回新对象"""
        first = segmenter.analyze("nihao")
        second = segmenter.analyze("nihao")
        assert first == second
        assert first is not second


class TestFallback:
    """无法切分时的退化"""

    def test_empty(self, segmenter):
        assert segmenter.analyze("") == Analysis(segment=[], preedit="")

    def test_initials_mode(self, segmenter):
        """短输入退化为简拼"""
        analysis = segmenter.analyze("qs")
        assert analysis.segment == ["q", "s"]
        assert analysis.preedit == "q s"

    def test_initials_drop_break_marker(self, segmenter):
        assert segmenter.analyze("q's").segment == ["q", "s"]

    def test_initials_length_boundary(self, segmenter):
        """1-6 个字母逐字母拆分"""
        assert segmenter.analyze("q").segment == ["q"]
        assert segmenter.analyze("qqqqqq").segment == ["q"] * 6

    def test_passthrough_long_input(self, segmenter):
        """7 个及以上字母且无法切分：空 segment，preedit 原样"""
        analysis = segmenter.analyze("qqqqqqq")
        assert analysis.segment == []
        assert analysis.preedit == "qqqqqqq"

    def test_passthrough_non_letters(self, segmenter):
        """含非字母字符：原样透传"""
        analysis = segmenter.analyze("ni1")
        assert analysis.segment == []
        assert analysis.preedit == "ni1"

    def test_one_bad_chunk_fails_whole_parse(self, segmenter):
        """任一分块失败则整体退化"""
        assert segmenter.analyze("ni'q").segment == ["n", "i", "q"]

    def test_only_break_marker(self, segmenter):
        assert segmenter.analyze("'").segment == []


class TestSegmenterFactory:

    def test_is_valid_sequence(self, segmenter):
        assert segmenter.is_valid_sequence(["ni", "hao"])
        assert not segmenter.is_valid_sequence(["ni", "q"])

    def test_default_table(self, segmenter):
        assert segmenter.valid_pinyins is VALID_PINYINS
        assert all(freq == 0 for _, freq in segmenter.vocabulary)

    def test_create_from_char_dict(self, tmp_path):
        """拼音频率取单字表中汉字个数"""
        path = tmp_path / "char_dict.json"
        path.write_bytes(orjson.dumps({"xi": ["西", "希"], "an": ["安"], "zzz": ["?"]}))

        seg = create_segmenter_from_dict(str(path))
        assert seg.pinyin_freq == {"xi": 2, "an": 1}
        assert seg.analyze("xian").segment == ["xi", "an"]

    def test_create_without_file(self):
        seg = create_segmenter_from_dict("/nonexistent/char_dict.json")
        assert seg.pinyin_freq == {}
