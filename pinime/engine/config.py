from dataclasses import dataclass, field, asdict
from typing import List, Optional

from .logging import get_engine_logger

# 候选权重上限（有符号 32 位）
MAX_WEIGHT = 2 ** 31 - 1

DEFAULT_CANDIDATE_LIMIT = 9


@dataclass
class EngineConfig:
    """引擎配置"""
    candidate_limit: int = DEFAULT_CANDIDATE_LIMIT  # 候选数量（2-9），非法值回退到 9
    max_word_length: int = 4    # 单个词最多覆盖的音节段数
    per_span_limit: int = 16    # 每个 span 查询最多取多少条（控制 beam search 扩展规模）

    def __post_init__(self):
        logger = get_engine_logger()
        if not _is_int(self.candidate_limit) or not 2 <= self.candidate_limit <= 9:
            logger.warning(f"candidate_limit={self.candidate_limit!r} 超出范围 2-9，回退到 {DEFAULT_CANDIDATE_LIMIT}")
            self.candidate_limit = DEFAULT_CANDIDATE_LIMIT

        for name, default in (("max_word_length", 4), ("per_span_limit", 16)):
            value = getattr(self, name)
            if not _is_int(value):
                logger.warning(f"{name}={value!r} 不是整数，回退到 {default}")
                value = default
            setattr(self, name, max(value, 1))


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class Analysis:
    """切分结果"""
    segment: List[str] = field(default_factory=list)  # 音节段，如 ["ni", "hao"] 或简拼 ["q", "s"]
    preedit: str = ""                                 # 展示用，如 "ni hao"


@dataclass(frozen=True)
class Candidate:
    """
    候选词

    segment_start/segment_end 是对当前 segment 的索引范围 [start, end)，
    Context 用它推进 confirm。
    """
    text: str
    comment: Optional[str] = None  # 备注（来源 key、compose 等）
    weight: int = 0                # 越大越靠前
    segment_start: int = 0
    segment_end: int = 0


@dataclass
class UiState:
    """给前端的只读快照，每次事件后重新获取"""
    raw_input: str = ""
    preedit: str = ""
    segment: List[str] = field(default_factory=list)
    caret: int = 0
    confirm: int = 0
    confirm_text: str = ""
    candidate_list: List[Candidate] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)
