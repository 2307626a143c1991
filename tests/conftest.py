import os

# 测试时不写日志文件
os.environ["PINIME_LOG_TO_FILE"] = "0"

import pytest

from pinime.engine import EngineConfig, IMEEngine, InputEvent, PinyinSegmenter, Session, TableDictionary


TEST_DICT_TSV = """\
# 测试词典
你\tni\t900
呢\tni\t300
好\thao\t880
号\thao\t400
你好\tnihao\t1000
其实\tqishi\t800
骑士\tqishi\t400
是\tshi\t990
"""


@pytest.fixture(scope="session")
def segmenter():
    return PinyinSegmenter()


@pytest.fixture(scope="session")
def dictionary(segmenter):
    return TableDictionary.from_tsv_str(TEST_DICT_TSV, segmenter)


@pytest.fixture
def engine(dictionary, segmenter):
    return IMEEngine(dictionary, segmenter, EngineConfig())


@pytest.fixture
def session(engine):
    return Session(engine)


def index_of(ui, text, start=None, end=None):
    """在候选列表中查找 (text, span) 的下标"""
    for i, c in enumerate(ui.candidate_list):
        if c.text != text:
            continue
        if start is not None and c.segment_start != start:
            continue
        if end is not None and c.segment_end != end:
            continue
        return i
    raise AssertionError(f"候选中没有 {text!r}: {[c.text for c in ui.candidate_list]}")


def type_text(session, text):
    """逐字符输入，返回最后一次的 (ui, actions)"""
    result = None
    for ch in text:
        result = session.handle(InputEvent.char(ch))
    return result
