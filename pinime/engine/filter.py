"""候选后处理（排序 / 去重 / 截断）"""

from typing import List

from .config import Candidate


class DedupSortTruncate:
    """按 weight 降序、text 升序排序，按 (text, span) 去重（保留排名最高者），截断到 limit"""

    def __init__(self, limit: int):
        self.limit = max(limit, 1)

    def apply(self, candidates: List[Candidate]) -> List[Candidate]:
        ordered = sorted(candidates, key=lambda c: (-c.weight, c.text))

        out: List[Candidate] = []
        seen = set()
        for cand in ordered:
            key = (cand.text, cand.segment_start, cand.segment_end)
            if key in seen:
                continue
            seen.add(key)
            out.append(cand)
            if len(out) >= self.limit:
                break
        return out
