"""异常定义"""


class PinimeError(Exception):
    """pinime 异常基类"""


class DictionaryFormatError(PinimeError, ValueError):
    """词典数据格式错误（在加载阶段抛出）"""

    def __init__(self, message: str, line: int = None):
        self.line = line
        if line is not None:
            message = f"第 {line} 行: {message}"
        super().__init__(message)


class SessionNotFoundError(PinimeError, KeyError):
    """会话不存在"""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(session_id)

    def __str__(self):
        return f"会话不存在: {self.session_id}"
