from typing import List, Optional, Sequence

from .config import Analysis, Candidate, EngineConfig, UiState
from .dictionary import Dictionary
from .filter import DedupSortTruncate
from .generator import CandidateGenerator
from .logging import get_engine_logger, log_execution_time
from .segmenter import PinyinSegmenter

logger = get_engine_logger()


class IMEEngine:
    """
    IME 引擎

    流水线：segmenter（切分）-> generator（查词/组句）-> filter（去重/排序）-> UiState

    引擎对会话来说是只读服务：词典与切分器在构造后不再修改，
    可被多个 Session 共享。
    """

    def __init__(self, dictionary: Dictionary, segmenter=None, config: EngineConfig = None):
        """
        Args:
            dictionary: 词典（任何 Dictionary 实现）
            segmenter: 任何提供 analyze(raw) -> Analysis 的对象，缺省为 PinyinSegmenter
            config: 引擎配置
        """
        self.config = config or EngineConfig()
        self.dictionary = dictionary
        self.segmenter = segmenter or PinyinSegmenter()
        self.generator = CandidateGenerator(self.dictionary, self.config)
        self.filter = DedupSortTruncate(self.config.candidate_limit)

    def analyze(self, raw_input: str) -> Analysis:
        """raw_input -> segment + preedit（不生成候选）"""
        return self.segmenter.analyze(raw_input)

    def compose(self, raw_input: str) -> UiState:
        """快捷接口：confirm=0，caret 在末尾"""
        return self.compose_with_state(raw_input, self.analyze(raw_input), 0, None, "")

    @log_execution_time()
    def compose_with_state(
        self,
        raw_input: str,
        analysis: Analysis,
        confirm: int,
        caret: Optional[int] = None,
        confirm_text: str = "",
    ) -> UiState:
        """
        给定 segment/caret/confirm，生成“下一段要选”的候选

        Args:
            confirm: 已确认到哪个段位置（不含）
            caret: 光标位置；None 表示末尾
            confirm_text: 已确认文本
        """
        segment = list(analysis.segment)
        caret = len(segment) if caret is None else min(max(caret, 0), len(segment))
        confirm = min(max(confirm, 0), caret)

        # 只对 [confirm, caret) 生成候选
        if not segment or confirm >= caret:
            candidate_list = []
        else:
            candidate_list = self._compose_from_segment(segment, confirm, caret)

        return UiState(
            raw_input=raw_input,
            preedit=analysis.preedit,
            segment=segment,
            caret=caret,
            confirm=confirm,
            confirm_text=confirm_text,
            candidate_list=candidate_list,
        )

    def _compose_from_segment(self, segment: Sequence[str], start: int, end: int) -> List[Candidate]:
        candidates = self.generator.translate(segment, start, end, self.config.candidate_limit)
        return self.filter.apply(candidates)
