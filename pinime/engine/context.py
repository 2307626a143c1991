"""
Context：processor 链共享的唯一状态容器

约定：
- raw_input：尚未上屏的输入串（全拼/简拼）
- analysis：对 raw_input 的切分结果（segment + preedit）
- caret：可确认范围的结束位置（目前总在末尾）
- confirm/confirm_text：已确认的段范围 [0, confirm) 与对应文本（逐段选词）

不变量：0 <= confirm <= caret <= len(segment)
"""

from typing import List

from .config import Analysis, UiState
from .events import Action, Commit


class Context:
    """输入会话上下文"""

    def __init__(self):
        self.raw_input: str = ""
        self.analysis: Analysis = Analysis()
        self.caret: int = 0
        self.confirm: int = 0
        self.confirm_text: str = ""

    def __repr__(self):
        return (f"Context(raw_input={self.raw_input!r}, segment={self.analysis.segment!r}, "
                f"caret={self.caret}, confirm={self.confirm}, confirm_text={self.confirm_text!r})")

    @property
    def is_empty(self) -> bool:
        return not self.raw_input and not self.confirm_text

    def reset(self):
        """清空会话状态（重新开始一次输入）"""
        self.raw_input = ""
        self.analysis = Analysis()
        self.caret = 0
        self.confirm = 0
        self.confirm_text = ""

    def reanalyze(self, engine):
        """重新切分 raw_input，并同步 caret/confirm 边界"""
        self.analysis = engine.analyze(self.raw_input)
        self.caret = len(self.analysis.segment)
        # 段数缩到 confirm 及以下：旧的已确认文本不再对应新的段边界
        if self.confirm >= self.caret:
            self.confirm = self.caret
            self.confirm_text = ""

    def ui_state(self, engine) -> UiState:
        """生成 UI 只读快照"""
        return engine.compose_with_state(
            self.raw_input,
            self.analysis,
            self.confirm,
            self.caret,
            self.confirm_text,
        )

    def commit_on_enter(self) -> List[Action]:
        """Enter：提交“已确认 + 原始输入”，然后清空"""
        actions = []
        text = self.confirm_text + self.raw_input
        if text:
            actions.append(Commit(text))
        self.reset()
        return actions

    def select_candidate(self, engine, index: int) -> List[Action]:
        """
        选词并推进 confirm；全部确认时提交并清空

        只接受从当前 confirm 位置开始、且不越过 caret 的候选，
        否则静默忽略（返回空列表，不修改状态）。
        """
        if not self.raw_input or self.confirm >= self.caret:
            return []

        ui = self.ui_state(engine)
        if index < 0 or index >= len(ui.candidate_list):
            return []
        cand = ui.candidate_list[index]

        if cand.segment_start != self.confirm:
            return []
        if cand.segment_end <= cand.segment_start or cand.segment_end > self.caret:
            return []

        self.confirm_text += cand.text
        self.confirm = cand.segment_end

        if self.confirm == self.caret:
            text = self.confirm_text
            self.reset()
            if text:
                return [Commit(text)]
        return []
