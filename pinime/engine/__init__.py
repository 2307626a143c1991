from .config import EngineConfig, Analysis, Candidate, UiState
from .core import IMEEngine
from .dictionary import Dictionary, TableDictionary, load_dictionary, DEFAULT_DICT_PATH
from .segmenter import PinyinSegmenter, VALID_PINYINS, create_segmenter_from_dict
from .generator import CandidateGenerator
from .filter import DedupSortTruncate
from .context import Context
from .events import EventKind, InputEvent, Commit, Action
from .processor import ProcessStatus, Processor, EditingProcessor, SelectionProcessor, EnterCommitProcessor
from .session import Session, default_processors
from .errors import PinimeError, DictionaryFormatError, SessionNotFoundError
from .logging import setup_logging, get_logger, get_api_logger, get_engine_logger


def create_engine(config: EngineConfig = None, dict_path: str = None, segmenter=None) -> IMEEngine:
    """
    创建引擎

    Args:
        config: 引擎配置
        dict_path: 词典路径（.tsv / .json），缺省使用包内示例词典
        segmenter: 切分器，缺省为 PinyinSegmenter

    Returns:
        IMEEngine 实例
    """
    segmenter = segmenter or PinyinSegmenter()
    dictionary = load_dictionary(dict_path, segmenter)
    engine = IMEEngine(dictionary, segmenter, config)

    logger = get_engine_logger()
    logger.info("=" * 50)
    logger.info("pinime 引擎")
    logger.info(f"  候选数: {engine.config.candidate_limit}")
    logger.info(f"  最大词长: {engine.config.max_word_length}")
    logger.info(f"  每段查询上限: {engine.config.per_span_limit}")
    logger.info("=" * 50)
    return engine


__all__ = [
    # 引擎
    'IMEEngine',
    'create_engine',
    'EngineConfig',
    'Analysis',
    'Candidate',
    'UiState',
    'CandidateGenerator',
    'DedupSortTruncate',
    # 词典
    'Dictionary',
    'TableDictionary',
    'load_dictionary',
    'DEFAULT_DICT_PATH',
    # 切分
    'PinyinSegmenter',
    'VALID_PINYINS',
    'create_segmenter_from_dict',
    # 会话
    'Context',
    'EventKind',
    'InputEvent',
    'Commit',
    'Action',
    'ProcessStatus',
    'Processor',
    'EditingProcessor',
    'SelectionProcessor',
    'EnterCommitProcessor',
    'Session',
    'default_processors',
    # 异常
    'PinimeError',
    'DictionaryFormatError',
    'SessionNotFoundError',
    # 日志
    'setup_logging',
    'get_logger',
    'get_api_logger',
    'get_engine_logger',
]
