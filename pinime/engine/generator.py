from dataclasses import replace
from typing import List, Sequence, Tuple

from .config import Candidate, EngineConfig, MAX_WEIGHT
from .dictionary import Dictionary

# 组句时每个音节段的长度奖励（鼓励长词）
SPAN_BONUS = 1000

MIN_BEAM_WIDTH = 8
MAX_BEAM_WIDTH = 64


class CandidateGenerator:
    """候选生成器 (负责词典召回和 Beam Search 组句)"""

    def __init__(self, dictionary: Dictionary, config: EngineConfig):
        self.dictionary = dictionary
        self.config = config

    def translate(self, segment: Sequence[str], start: int, end: int, limit: int) -> List[Candidate]:
        """
        生成 [start, end) 的候选，顺序为：直查 → 单词 → 组句，总数不超过 limit
        """
        limit = max(limit, 1)
        candidates: List[Candidate] = []

        # 直查整段
        direct = self.dictionary.lookup_span(segment, start, end, limit)
        candidates.extend(self._respan(direct[:limit], start, end))

        # 单词候选：从 start 开始，枚举长度 1..max_word_length
        max_j = min(start + self.config.max_word_length, end)
        for j in range(start + 1, max_j + 1):
            room = limit - len(candidates)
            if room <= 0:
                break
            words = self.dictionary.lookup_span(segment, start, j, self.config.per_span_limit)
            candidates.extend(self._respan(words[:room], start, j))

        # 组句候选（覆盖 start..end）
        if len(candidates) < limit:
            composed = self._beam_search(segment, start, end, limit - len(candidates))
            # 与已有带 key 备注的整段候选同文本时沿用其 key（如简拼命中的 "qishi"）
            keyed = {
                c.text: c.comment for c in candidates
                if c.comment and c.segment_start == start and c.segment_end == end
            }
            candidates.extend(
                Candidate(
                    text=text,
                    comment=keyed.get(text, "compose"),
                    weight=min(score, MAX_WEIGHT),
                    segment_start=start,
                    segment_end=end,
                )
                for text, score in composed
            )

        return candidates

    @staticmethod
    def _respan(candidates: List[Candidate], start: int, end: int) -> List[Candidate]:
        return [replace(c, segment_start=start, segment_end=end) for c in candidates]

    def _beam_search(self, segment: Sequence[str], start: int, end: int, limit: int) -> List[Tuple[str, int]]:
        """
        Beam Search 组句 (Viterbi-style)

        beams[i] 存储到达第 i 个段位置的路径: List[Tuple[text, score]]
        """
        if limit <= 0 or start >= end or end > len(segment):
            return []

        beam_width = min(max(limit, MIN_BEAM_WIDTH), MAX_BEAM_WIDTH)
        beams: List[List[Tuple[str, int]]] = [[] for _ in range(end + 1)]
        beams[start] = [("", 0)]

        for i in range(start, end):
            if not beams[i]:
                continue

            # 剪枝：只保留分数最高的 beam_width 条路径
            paths = sorted(beams[i], key=lambda p: p[1], reverse=True)[:beam_width]

            max_j = min(i + self.config.max_word_length, end)
            for j in range(i + 1, max_j + 1):
                words = self.dictionary.lookup_span(segment, i, j, self.config.per_span_limit)
                if not words:
                    continue
                bonus = (j - i) * SPAN_BONUS
                for text, score in paths:
                    for word in words:
                        beams[j].append((text + word.text, score + word.weight + bonus))

        finals = sorted(beams[end], key=lambda p: (-p[1], p[0]))
        return finals[:limit]
