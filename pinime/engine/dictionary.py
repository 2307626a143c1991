"""
词典模块

core 只依赖 Dictionary 抽象（查询 segment[start:end] 的候选），
不关心词典来自文件、内存还是网络。

TableDictionary 是内存实现，支持：
- 精确查询：key 为音节段拼接串（如 "nihao"）
- 前缀补全：仅对整段输入
- 简拼查询：["q", "s"] -> 首字母索引 "qs"
"""

import bisect
import os
from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Sequence, Tuple

import orjson

from .config import Candidate
from .errors import DictionaryFormatError
from .logging import get_engine_logger
from .segmenter import PinyinSegmenter

logger = get_engine_logger()

# (text, weight)
Entry = Tuple[str, int]


class Dictionary(ABC):
    """
    词典抽象

    约定：
    - segment 是切分后的音节段序列（如 ["qi", "shi"] 或简拼 ["q", "s"]）
    - [start, end) 为段索引范围
    - 返回候选的 segment_start/segment_end 由调用方覆盖
    - 实现应只读，可被多个会话并发共享
    """

    @abstractmethod
    def lookup_span(self, segment: Sequence[str], start: int, end: int, limit: int) -> List[Candidate]:
        """查询 segment[start:end] 对应的候选（通常按权重降序）"""

    def lookup(self, segment: Sequence[str], limit: int) -> List[Candidate]:
        """查询整段输入"""
        return self.lookup_span(segment, 0, len(segment), limit)


def _sort_entries(entries: List[Entry]) -> List[Entry]:
    return sorted(entries, key=lambda e: (-e[1], e[0]))


class TableDictionary(Dictionary):
    """内存词典：key -> [(text, weight), ...]"""

    def __init__(self, table: Dict[str, List[Entry]] = None, segmenter: PinyinSegmenter = None):
        """
        Args:
            table: key（无分隔拼音串）-> 词条列表
            segmenter: 用于把 key 切成音节以建立首字母索引
        """
        segmenter = segmenter or PinyinSegmenter()

        self._map: Dict[str, Tuple[Entry, ...]] = {}
        initials_map: Dict[str, List[Tuple[str, Entry]]] = {}

        for key, entries in (table or {}).items():
            self._map[key] = tuple(_sort_entries(list(entries)))

            # 预计算：qishi -> [qi, shi] -> qs；只有能切成合法音节的 key 才进首字母索引
            analysis = segmenter.analyze(key)
            initials = ''.join(seg[0] for seg in analysis.segment if seg)
            if initials and segmenter.is_valid_sequence(analysis.segment):
                initials_map.setdefault(initials, []).extend((key, e) for e in entries)

        self._initials_map: Dict[str, Tuple[Tuple[str, Entry], ...]] = {
            k: tuple(sorted(v, key=lambda item: (-item[1][1], item[1][0])))
            for k, v in initials_map.items()
        }
        self._keys: Tuple[str, ...] = tuple(sorted(self._map))

    def __len__(self) -> int:
        return sum(len(v) for v in self._map.values())

    def __contains__(self, key: str) -> bool:
        return key in self._map

    @property
    def key_count(self) -> int:
        return len(self._map)

    def lookup_span(self, segment: Sequence[str], start: int, end: int, limit: int) -> List[Candidate]:
        limit = max(limit, 1)
        if start < 0 or start >= end or end > len(segment):
            return []

        key = ''.join(segment[start:end])
        if not key:
            return []

        out = [
            Candidate(text=text, comment=None, weight=weight, segment_start=start, segment_end=end)
            for text, weight in self._map.get(key, ())[:limit]
        ]

        full_span = start == 0 and end == len(segment)

        # 前缀补全（仅对整段输入）
        if full_span and len(out) < limit:
            out.extend(self._prefix_candidates(key, start, end, limit - len(out)))

        # 简拼查询：["q", "s"] 这种单字母数组
        if not out and full_span and all(len(s) == 1 and 'a' <= s <= 'z' for s in segment):
            initials = ''.join(segment)
            for orig_key, (text, weight) in self._initials_map.get(initials, ())[:limit]:
                out.append(Candidate(
                    text=text, comment=orig_key, weight=weight,
                    segment_start=start, segment_end=end,
                ))

        return out

    def _prefix_candidates(self, prefix: str, start: int, end: int, limit: int) -> List[Candidate]:
        out = []
        idx = bisect.bisect_left(self._keys, prefix)
        for key in self._keys[idx:]:
            if not key.startswith(prefix):
                break
            if key == prefix:
                continue
            for text, weight in self._map[key]:
                out.append(Candidate(
                    text=text, comment=key, weight=weight,
                    segment_start=start, segment_end=end,
                ))
                if len(out) >= limit:
                    return out
        return out

    # ===== 加载 =====

    @classmethod
    def from_tsv_str(cls, text: str, segmenter: PinyinSegmenter = None) -> 'TableDictionary':
        """
        TSV 格式：text<TAB>key<TAB>weight

        - weight 可省略（或无法解析）时为 0
        - 空行与 # 开头的注释行跳过
        - 缺少 text/key 抛出 DictionaryFormatError
        """
        table: Dict[str, List[Entry]] = {}
        for lineno, line in enumerate(text.splitlines(), 1):
            line = line.strip()
            if not line or line.startswith('#'):
                continue
            parts = line.split('\t')
            word = parts[0].strip()
            key = parts[1].strip() if len(parts) > 1 else ''
            if not word or not key:
                raise DictionaryFormatError("缺少 text/key", line=lineno)
            weight = _parse_weight(parts[2] if len(parts) > 2 else '')
            table.setdefault(key, []).append((word, weight))
        return cls(table, segmenter)

    @classmethod
    def from_tsv_path(cls, path: str, segmenter: PinyinSegmenter = None) -> 'TableDictionary':
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_tsv_str(f.read(), segmenter)

    @classmethod
    def from_json_bytes(cls, data: bytes, segmenter: PinyinSegmenter = None) -> 'TableDictionary':
        """
        JSON 格式：{key: [[text, weight], ...]} 或 {key: [text, ...]}
        """
        try:
            raw = orjson.loads(data)
        except orjson.JSONDecodeError as e:
            raise DictionaryFormatError(f"JSON 解析失败: {e}") from e
        if not isinstance(raw, dict):
            raise DictionaryFormatError("顶层必须是对象 {key: [...]}")

        table: Dict[str, List[Entry]] = {}
        for key, items in raw.items():
            if not key or not isinstance(items, list):
                raise DictionaryFormatError(f"key={key!r} 的词条必须是列表")
            entries = []
            for item in items:
                if isinstance(item, str):
                    entries.append((item, 0))
                elif isinstance(item, list) and item and isinstance(item[0], str):
                    weight = _parse_weight(str(item[1])) if len(item) > 1 else 0
                    entries.append((item[0], weight))
                else:
                    raise DictionaryFormatError(f"key={key!r} 存在无效词条: {item!r}")
            table[key] = entries
        return cls(table, segmenter)

    @classmethod
    def from_json_path(cls, path: str, segmenter: PinyinSegmenter = None) -> 'TableDictionary':
        with open(path, 'rb') as f:
            return cls.from_json_bytes(f.read(), segmenter)


def _parse_weight(value: str) -> int:
    try:
        return int(value.strip())
    except ValueError:
        return 0


DEFAULT_DICT_PATH = os.path.join(os.path.dirname(os.path.dirname(__file__)), 'data', 'dict.tsv')


def load_dictionary(path: Optional[str] = None, segmenter: PinyinSegmenter = None) -> TableDictionary:
    """
    按后缀加载词典（.json -> JSON，其余 -> TSV）

    文件不存在抛 OSError，格式错误抛 DictionaryFormatError
    """
    path = path or DEFAULT_DICT_PATH
    if path.endswith('.json'):
        dictionary = TableDictionary.from_json_path(path, segmenter)
    else:
        dictionary = TableDictionary.from_tsv_path(path, segmenter)
    logger.info(f"词典加载完成: {path} ({dictionary.key_count} 个 key, {len(dictionary)} 个词条)")
    return dictionary
