"""
pinime - 全拼输入法组合引擎

音节切分 + 词典查词/组句 + 逐段选词会话状态机
"""

__version__ = "0.1.0"

from pinime.engine import (
    IMEEngine,
    create_engine,
    EngineConfig,
    Analysis,
    Candidate,
    UiState,
    Dictionary,
    TableDictionary,
    load_dictionary,
    PinyinSegmenter,
    create_segmenter_from_dict,
    Context,
    EventKind,
    InputEvent,
    Commit,
    Action,
    Session,
    PinimeError,
    DictionaryFormatError,
)

__all__ = [
    "__version__",
    # 引擎
    "IMEEngine",
    "create_engine",
    "EngineConfig",
    "Analysis",
    "Candidate",
    "UiState",
    # 词典
    "Dictionary",
    "TableDictionary",
    "load_dictionary",
    # 切分
    "PinyinSegmenter",
    "create_segmenter_from_dict",
    # 会话
    "Context",
    "EventKind",
    "InputEvent",
    "Commit",
    "Action",
    "Session",
    # 异常
    "PinimeError",
    "DictionaryFormatError",
]
