"""
Session：对前端（CLI/GUI/HTTP）提供的会话对象

Session 自身不做业务判断，只负责：
- 持有 Context（状态）与 processors 链
- 把每个 InputEvent 依次交给 processors，直到被消费
- 返回最新 UiState + Action 列表

Session 只能由一个调用方独占使用；多个 Session 可共享同一个引擎。
"""

from typing import List, Sequence, Tuple

from .config import UiState
from .context import Context
from .core import IMEEngine
from .events import Action, InputEvent
from .logging import get_engine_logger
from .processor import (
    EditingProcessor,
    EnterCommitProcessor,
    ProcessStatus,
    Processor,
    SelectionProcessor,
)

logger = get_engine_logger()


def default_processors() -> List[Processor]:
    return [EditingProcessor(), SelectionProcessor(), EnterCommitProcessor()]


class Session:
    """输入法会话（一次输入过程的状态机容器）"""

    def __init__(self, engine: IMEEngine, processors: Sequence[Processor] = None):
        self.engine = engine
        self.context = Context()
        self.processors: List[Processor] = list(processors) if processors is not None else default_processors()

    def ui_state(self) -> UiState:
        """当前 UI 快照（只读）"""
        return self.context.ui_state(self.engine)

    def handle(self, event: InputEvent) -> Tuple[UiState, List[Action]]:
        """处理一个输入事件，返回最新 UI 快照与动作列表"""
        actions: List[Action] = []
        for processor in self.processors:
            status, emitted = processor.process(self.engine, self.context, event)
            actions.extend(emitted)
            if status is ProcessStatus.CONSUME:
                break

        for action in actions:
            logger.debug(f"提交: {action.text!r}")

        return self.ui_state(), actions
