"""
拼音切分模块

功能：
1. 将连续拼音字符串切分为音节（segment）并生成 preedit 展示串
2. 支持用 ' 强制断开
3. 动态规划找最优切分：长音节优先，频率辅助
4. 无法切分时退化为简拼（initials）模式或原样透传
"""

import os
from typing import Dict, Iterable, List, Optional, Tuple

import orjson

from .config import Analysis

# 强制分隔符
BREAK_MARKER = "'"

# 简拼模式的最大输入长度
MAX_INITIALS_LENGTH = 6

# 长度结构分：每个字母 10000，保证长音节压过频率差
LENGTH_SCORE = 10000

# 所有有效拼音（无声调）
VALID_PINYINS = frozenset({
    # 零声母
    'a', 'o', 'e', 'ai', 'ei', 'ao', 'ou', 'an', 'en', 'ang', 'eng', 'er',

    # b
    'ba', 'bo', 'bi', 'bu', 'bai', 'bei', 'bao', 'ban', 'ben', 'bang', 'beng',
    'bie', 'biao', 'bian', 'bin', 'bing',

    # p
    'pa', 'po', 'pi', 'pu', 'pai', 'pei', 'pao', 'pou', 'pan', 'pen', 'pang', 'peng',
    'pie', 'piao', 'pian', 'pin', 'ping',

    # m
    'ma', 'mo', 'me', 'mi', 'mu', 'mai', 'mei', 'mao', 'mou', 'man', 'men', 'mang', 'meng',
    'mie', 'miao', 'miu', 'mian', 'min', 'ming',

    # f
    'fa', 'fo', 'fu', 'fei', 'fou', 'fan', 'fen', 'fang', 'feng',

    # d
    'da', 'de', 'di', 'du', 'dai', 'dei', 'dao', 'dou', 'dan', 'den', 'dang', 'deng', 'dong',
    'die', 'diao', 'diu', 'dian', 'ding',
    'duo', 'dui', 'duan', 'dun',

    # t
    'ta', 'te', 'ti', 'tu', 'tai', 'tei', 'tao', 'tou', 'tan', 'tang', 'teng', 'tong',
    'tie', 'tiao', 'tian', 'ting',
    'tuo', 'tui', 'tuan', 'tun',

    # n
    'na', 'ne', 'ni', 'nu', 'nv', 'nai', 'nei', 'nao', 'nou', 'nan', 'nen', 'nang', 'neng', 'nong',
    'nie', 'niao', 'niu', 'nian', 'nin', 'niang', 'ning',
    'nuo', 'nuan', 'nve',

    # l
    'la', 'le', 'li', 'lu', 'lv', 'lai', 'lei', 'lao', 'lou', 'lan', 'lang', 'leng', 'long',
    'lia', 'lie', 'liao', 'liu', 'lian', 'lin', 'liang', 'ling',
    'luo', 'luan', 'lun', 'lve',

    # g
    'ga', 'ge', 'gu', 'gai', 'gei', 'gao', 'gou', 'gan', 'gen', 'gang', 'geng', 'gong',
    'gua', 'guo', 'guai', 'gui', 'guan', 'gun', 'guang',

    # k
    'ka', 'ke', 'ku', 'kai', 'kei', 'kao', 'kou', 'kan', 'ken', 'kang', 'keng', 'kong',
    'kua', 'kuo', 'kuai', 'kui', 'kuan', 'kun', 'kuang',

    # h
    'ha', 'he', 'hu', 'hai', 'hei', 'hao', 'hou', 'han', 'hen', 'hang', 'heng', 'hong',
    'hua', 'huo', 'huai', 'hui', 'huan', 'hun', 'huang',

    # j
    'ji', 'jia', 'jie', 'jiao', 'jiu', 'jian', 'jin', 'jiang', 'jing', 'jiong',
    'ju', 'jue', 'juan', 'jun',

    # q
    'qi', 'qia', 'qie', 'qiao', 'qiu', 'qian', 'qin', 'qiang', 'qing', 'qiong',
    'qu', 'que', 'quan', 'qun',

    # x
    'xi', 'xia', 'xie', 'xiao', 'xiu', 'xian', 'xin', 'xiang', 'xing', 'xiong',
    'xu', 'xue', 'xuan', 'xun',

    # zh
    'zha', 'zhe', 'zhi', 'zhu', 'zhai', 'zhei', 'zhao', 'zhou', 'zhan', 'zhen', 'zhang', 'zheng', 'zhong',
    'zhua', 'zhuo', 'zhuai', 'zhui', 'zhuan', 'zhun', 'zhuang',

    # ch
    'cha', 'che', 'chi', 'chu', 'chai', 'chao', 'chou', 'chan', 'chen', 'chang', 'cheng', 'chong',
    'chua', 'chuo', 'chuai', 'chui', 'chuan', 'chun', 'chuang',

    # sh
    'sha', 'she', 'shi', 'shu', 'shai', 'shei', 'shao', 'shou', 'shan', 'shen', 'shang', 'sheng',
    'shua', 'shuo', 'shuai', 'shui', 'shuan', 'shun', 'shuang',

    # r
    'ri', 're', 'ru', 'rao', 'rou', 'ran', 'ren', 'rang', 'reng', 'rong',
    'rua', 'ruo', 'rui', 'ruan', 'run',

    # z
    'za', 'ze', 'zi', 'zu', 'zai', 'zei', 'zao', 'zou', 'zan', 'zen', 'zang', 'zeng', 'zong',
    'zuo', 'zui', 'zuan', 'zun',

    # c
    'ca', 'ce', 'ci', 'cu', 'cai', 'cao', 'cou', 'can', 'cen', 'cang', 'ceng', 'cong',
    'cuo', 'cui', 'cuan', 'cun',

    # s
    'sa', 'se', 'si', 'su', 'sai', 'sao', 'sou', 'san', 'sen', 'sang', 'seng', 'song',
    'suo', 'sui', 'suan', 'sun',

    # y
    'ya', 'yo', 'ye', 'yi', 'yu', 'yao', 'you', 'yan', 'yin', 'yang', 'ying', 'yong',
    'yue', 'yuan', 'yun',

    # w
    'wa', 'wo', 'wu', 'wai', 'wei', 'wan', 'wen', 'wang', 'weng',
})


def _is_lower_ascii(text: str) -> bool:
    return all('a' <= ch <= 'z' for ch in text)


class PinyinSegmenter:
    """
    拼音切分器

    音节表在构造时排好序（频率降序 → 长度降序 → 字典序）且之后不再修改，
    同一实例可以在多个会话/线程间共享。
    """

    def __init__(self, pinyin_freq: Dict[str, int] = None, syllables: Iterable[str] = None):
        """
        Args:
            pinyin_freq: 拼音频率字典，缺省为 0
            syllables: 音节表，缺省为 VALID_PINYINS
        """
        self.pinyin_freq = dict(pinyin_freq or {})
        self.valid_pinyins = frozenset(syllables) if syllables is not None else VALID_PINYINS

        vocab = [(sy, int(self.pinyin_freq.get(sy, 0))) for sy in self.valid_pinyins]
        vocab.sort(key=lambda x: (-x[1], -len(x[0]), x[0]))
        self.vocabulary: Tuple[Tuple[str, int], ...] = tuple(vocab)

        # 按首字母分桶，桶内保持上面的评估顺序
        by_initial: Dict[str, List[Tuple[str, int]]] = {}
        for sy, freq in self.vocabulary:
            by_initial.setdefault(sy[0], []).append((sy, freq))
        self._by_initial = {k: tuple(v) for k, v in by_initial.items()}

    def analyze(self, raw: str) -> Analysis:
        """
        raw -> Analysis（segment + preedit），总是成功

        例：
            "nihao"  -> ["ni", "hao"], "ni hao"
            "xi'an"  -> ["xi", "an"],  "xi an"
            "qs"     -> ["q", "s"],    "q s"   （简拼）
        """
        if not raw:
            return Analysis(segment=[], preedit="")

        text = raw.lower()
        segments = self.segment(text)
        if segments:
            return Analysis(segment=segments, preedit=" ".join(segments))

        # 简拼模式：无法切分的短输入按字母拆开，便于词典做首字母检索
        letters_only = _is_lower_ascii(text.replace(BREAK_MARKER, ''))
        if letters_only and 1 <= len(text) <= MAX_INITIALS_LENGTH:
            initials = [ch for ch in text if ch != BREAK_MARKER]
            return Analysis(segment=initials, preedit=" ".join(initials))

        # 原样透传（无候选）
        return Analysis(segment=[], preedit=raw)

    def segment(self, text: str) -> Optional[List[str]]:
        """按 ' 分块逐块切分；任一块失败则整体失败（返回 None）"""
        out = []
        for chunk in text.split(BREAK_MARKER):
            tokens = self._segment_chunk(chunk)
            if tokens is None:
                return None
            out.extend(tokens)
        return out

    def _segment_chunk(self, chunk: str) -> Optional[List[str]]:
        if not chunk:
            return []
        if not _is_lower_ascii(chunk):
            return None

        n = len(chunk)
        # best[i] = 到达位置 i 的最高分；prev[i] = (上一位置, 音节)
        best: List[Optional[int]] = [None] * (n + 1)
        prev: List[Optional[Tuple[int, str]]] = [None] * (n + 1)
        best[0] = 0

        for i in range(n):
            base = best[i]
            if base is None:
                continue
            for sy, freq in self._by_initial.get(chunk[i], ()):
                if not chunk.startswith(sy, i):
                    continue
                j = i + len(sy)
                score = base + len(sy) * LENGTH_SCORE + freq
                # 严格大于才替换：同分时保留先评估到的音节
                if best[j] is None or score > best[j]:
                    best[j] = score
                    prev[j] = (i, sy)

        if best[n] is None:
            return None

        # 回溯
        tokens = []
        cur = n
        while cur > 0:
            cur, sy = prev[cur]
            tokens.append(sy)
        tokens.reverse()
        return tokens

    def is_valid_sequence(self, pinyins: List[str]) -> bool:
        """检查拼音序列是否全部有效"""
        return all(py in self.valid_pinyins for py in pinyins)


def create_segmenter_from_dict(dict_path: str = None) -> PinyinSegmenter:
    """
    从单字表创建切分器

    Args:
        dict_path: JSON 文件 {拼音: [汉字, ...]}，拼音频率取汉字个数

    Returns:
        PinyinSegmenter 实例
    """
    pinyin_freq = {}

    if dict_path and os.path.exists(dict_path):
        with open(dict_path, 'rb') as f:
            char_dict = orjson.loads(f.read())

        for pinyin, chars in char_dict.items():
            if pinyin in VALID_PINYINS:
                pinyin_freq[pinyin] = len(chars)

    return PinyinSegmenter(pinyin_freq)
