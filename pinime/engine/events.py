"""
输入事件与输出动作

Session/processor 只关心语义事件，不关心平台键值；
前端负责把物理按键转换成 InputEvent，把 Commit 转换成上屏。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventKind(Enum):
    CHAR = "char"            # 输入一个字符（通常是 a-z 或 '）
    BACKSPACE = "backspace"  # 删除最后一个字符
    SPACE = "space"          # 选择首个候选
    ENTER = "enter"          # 提交 confirm_text + raw_input
    CLEAR = "clear"          # 清空当前会话（类似 Esc）
    SELECT = "select"        # 选择第 index 个候选
    EXIT = "exit"            # 退出（由前端处理，core 忽略）


@dataclass(frozen=True)
class InputEvent:
    """输入事件（逻辑键盘事件）"""
    kind: EventKind
    text: Optional[str] = None  # CHAR 事件的字符
    index: Optional[int] = None

    @classmethod
    def char(cls, c: str) -> 'InputEvent':
        return cls(EventKind.CHAR, text=c)

    @classmethod
    def backspace(cls) -> 'InputEvent':
        return cls(EventKind.BACKSPACE)

    @classmethod
    def space(cls) -> 'InputEvent':
        return cls(EventKind.SPACE)

    @classmethod
    def enter(cls) -> 'InputEvent':
        return cls(EventKind.ENTER)

    @classmethod
    def clear(cls) -> 'InputEvent':
        return cls(EventKind.CLEAR)

    @classmethod
    def select(cls, index: int) -> 'InputEvent':
        return cls(EventKind.SELECT, index=index)

    @classmethod
    def exit(cls) -> 'InputEvent':
        return cls(EventKind.EXIT)


@dataclass(frozen=True)
class Commit:
    """提交文本（上屏）"""
    text: str


# 目前唯一的输出动作
Action = Commit
