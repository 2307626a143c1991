"""
输入事件处理链

按顺序把 InputEvent 交给各 processor，对 Context 做状态变更，
必要时产生 Action（例如 Commit）。

默认链路（Session 组装）：
- EditingProcessor：编辑输入（Char/Backspace/Clear）并触发重新切分
- SelectionProcessor：选词（Space/Select）推进 confirm
- EnterCommitProcessor：回车提交（confirm_text + raw_input）
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Tuple

from .context import Context
from .events import Action, EventKind, InputEvent
from .segmenter import BREAK_MARKER


class ProcessStatus(Enum):
    CONSUME = "consume"    # 已处理，后续 processor 不再执行
    CONTINUE = "continue"  # 不处理，交给下一个 processor


ProcessResult = Tuple[ProcessStatus, List[Action]]


class Processor(ABC):
    """处理输入事件并改变 Context"""

    @abstractmethod
    def process(self, engine, context: Context, event: InputEvent) -> ProcessResult:
        ...


def _is_input_char(c: str) -> bool:
    return len(c) == 1 and ((c.isascii() and c.isalpha()) or c == BREAK_MARKER)


class EditingProcessor(Processor):
    """插入 / 退格 / 清空"""

    def process(self, engine, context: Context, event: InputEvent) -> ProcessResult:
        if event.kind is EventKind.CHAR:
            # 非法字符同样吞掉，不交给后续 processor
            if event.text and _is_input_char(event.text):
                context.raw_input += event.text.lower()
                context.reanalyze(engine)
            return ProcessStatus.CONSUME, []

        if event.kind is EventKind.BACKSPACE:
            context.raw_input = context.raw_input[:-1]
            context.reanalyze(engine)
            return ProcessStatus.CONSUME, []

        if event.kind is EventKind.CLEAR:
            context.reset()
            return ProcessStatus.CONSUME, []

        return ProcessStatus.CONTINUE, []


class SelectionProcessor(Processor):
    """空格选首个候选，Select(i) 选第 i 个"""

    def process(self, engine, context: Context, event: InputEvent) -> ProcessResult:
        if event.kind is EventKind.SPACE:
            return ProcessStatus.CONSUME, context.select_candidate(engine, 0)

        if event.kind is EventKind.SELECT:
            index = event.index if event.index is not None else 0
            return ProcessStatus.CONSUME, context.select_candidate(engine, index)

        return ProcessStatus.CONTINUE, []


class EnterCommitProcessor(Processor):
    """回车提交"""

    def process(self, engine, context: Context, event: InputEvent) -> ProcessResult:
        if event.kind is EventKind.ENTER:
            return ProcessStatus.CONSUME, context.commit_on_enter()
        return ProcessStatus.CONTINUE, []
