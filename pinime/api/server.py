"""
pinime FastAPI 服务

提供 RESTful API 接口：一次性组合查询 + 有状态的输入会话
"""

import os
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Literal, Optional
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from pinime.engine import (
    IMEEngine,
    EngineConfig,
    InputEvent,
    EventKind,
    Session,
    UiState,
    SessionNotFoundError,
    create_engine,
    get_api_logger,
)

# 初始化日志
logger = get_api_logger()


# ===== 请求/响应模型 =====

class ComposeRequest(BaseModel):
    """组合查询请求"""
    pinyin: str = Field(..., description="拼音输入")


class CandidateItem(BaseModel):
    """候选项"""
    text: str
    comment: Optional[str] = None
    weight: int
    segment_start: int
    segment_end: int


class UiStateResponse(BaseModel):
    """UI 快照"""
    raw_input: str
    preedit: str
    segment: List[str]
    caret: int
    confirm: int
    confirm_text: str
    candidate_list: List[CandidateItem]


class EventRequest(BaseModel):
    """输入事件"""
    type: Literal["char", "backspace", "space", "enter", "clear", "select", "exit"]
    char: Optional[str] = Field(None, min_length=1, max_length=1, description="type=char 时的字符")
    index: Optional[int] = Field(None, ge=0, description="type=select 时的候选下标（从 0 开始）")


class ActionItem(BaseModel):
    """输出动作"""
    type: Literal["commit"] = "commit"
    text: str


class EventResponse(BaseModel):
    state: UiStateResponse
    actions: List[ActionItem]


class SessionResponse(BaseModel):
    session_id: str
    state: UiStateResponse


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str
    version: str
    sessions: int


# ===== 会话管理 =====

# 会话空闲超过该秒数后回收
DEFAULT_SESSION_TTL = 30 * 60


@dataclass
class _SessionEntry:
    session: Session
    lock: threading.Lock = field(default_factory=threading.Lock)
    last_used: float = 0.0


class SessionStore:
    """
    会话注册表

    所有会话共享同一个引擎；每个会话有独立的锁，保证同一会话的事件串行处理
    （会话相关路由是同步函数，由 FastAPI 线程池并发执行）。
    空闲超过 ttl 秒的会话在下次创建会话时回收。
    """

    def __init__(self, engine: IMEEngine, ttl: float = DEFAULT_SESSION_TTL,
                 clock: Callable[[], float] = time.monotonic):
        self.engine = engine
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, _SessionEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def create(self) -> str:
        session_id = uuid.uuid4().hex
        with self._lock:
            self._evict_idle()
            self._entries[session_id] = _SessionEntry(Session(self.engine), last_used=self._clock())
        return session_id

    def _evict_idle(self):
        now = self._clock()
        expired = [sid for sid, e in self._entries.items() if now - e.last_used > self.ttl]
        for sid in expired:
            del self._entries[sid]
        if expired:
            logger.info(f"回收空闲会话: {len(expired)} 个")

    def _get(self, session_id: str) -> _SessionEntry:
        with self._lock:
            entry = self._entries.get(session_id)
            if entry is None:
                raise SessionNotFoundError(session_id)
            entry.last_used = self._clock()
            return entry

    def ui_state(self, session_id: str) -> UiState:
        entry = self._get(session_id)
        with entry.lock:
            return entry.session.ui_state()

    def handle(self, session_id: str, event: InputEvent):
        entry = self._get(session_id)
        with entry.lock:
            return entry.session.handle(event)

    def delete(self, session_id: str):
        with self._lock:
            if self._entries.pop(session_id, None) is None:
                raise SessionNotFoundError(session_id)


def _env_int(name: str, default: int) -> int:
    """读取整数环境变量；非法值回退到默认值"""
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"{name}={value!r} 不是整数，回退到 {default}")
        return default


def to_input_event(req: EventRequest) -> InputEvent:
    """请求 -> InputEvent；缺少必需字段抛 ValueError"""
    kind = EventKind(req.type)
    if kind is EventKind.CHAR:
        if req.char is None:
            raise ValueError("type=char 需要 char 字段")
        return InputEvent.char(req.char)
    if kind is EventKind.SELECT:
        if req.index is None:
            raise ValueError("type=select 需要 index 字段")
        return InputEvent.select(req.index)
    return InputEvent(kind)


def to_response(ui: UiState) -> UiStateResponse:
    return UiStateResponse(**ui.to_dict())


# ===== 全局实例 =====
engine: Optional[IMEEngine] = None
store: Optional[SessionStore] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """应用生命周期管理"""
    global engine, store

    logger.info("=" * 50)
    logger.info("pinime API 服务启动")
    logger.info("正在初始化 IME 引擎...")

    limit = _env_int("PINIME_CANDIDATE_LIMIT", 9)
    ttl = _env_int("PINIME_SESSION_TTL", DEFAULT_SESSION_TTL)
    engine = create_engine(EngineConfig(candidate_limit=limit), os.getenv("PINIME_DICT"))
    store = SessionStore(engine, ttl=ttl)

    logger.info("IME 引擎初始化完成")
    logger.info("=" * 50)

    yield

    logger.info("正在关闭 IME 引擎...")
    engine = None
    store = None
    logger.info("pinime API 服务已停止")


# ===== FastAPI 应用 =====
app = FastAPI(
    title="pinime API",
    description="全拼输入法组合引擎 API",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ===== 请求日志中间件 =====

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """记录所有请求的详细日志"""
    request_id = str(uuid.uuid4())[:8]
    start_time = time.perf_counter()

    client_ip = request.client.host if request.client else "unknown"
    logger.info(f"[{request_id}] --> {request.method} {request.url.path} | IP: {client_ip}")

    try:
        response = await call_next(request)
    except Exception as e:
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.error(f"[{request_id}] <-- ERROR | {elapsed_ms:.2f}ms | {type(e).__name__}: {e}")
        raise

    elapsed_ms = (time.perf_counter() - start_time) * 1000
    status_code = response.status_code
    log_level = "info" if status_code < 400 else "warning" if status_code < 500 else "error"
    getattr(logger, log_level)(f"[{request_id}] <-- {status_code} | {elapsed_ms:.2f}ms")

    response.headers["X-Request-ID"] = request_id
    response.headers["X-Response-Time"] = f"{elapsed_ms:.2f}ms"
    return response


def _require_store() -> SessionStore:
    if store is None:
        logger.error("引擎未就绪，拒绝请求")
        raise HTTPException(status_code=503, detail="引擎未就绪")
    return store


# ===== API 路由 =====

@app.get("/health", response_model=HealthResponse)
async def health_check():
    """健康检查"""
    from pinime import __version__
    return HealthResponse(
        status="healthy" if engine is not None else "not_ready",
        version=__version__,
        sessions=len(store) if store is not None else 0,
    )


@app.post("/compose", response_model=UiStateResponse)
async def compose(request: ComposeRequest):
    """一次性组合：切分 + 候选（confirm=0，caret 在末尾）"""
    current = _require_store()
    ui = current.engine.compose(request.pinyin)
    logger.debug(f"组合查询: '{request.pinyin}' -> {[c.text for c in ui.candidate_list[:3]]}")
    return to_response(ui)


@app.post("/sessions", response_model=SessionResponse, status_code=201)
def create_session():
    """创建输入会话"""
    current = _require_store()
    session_id = current.create()
    logger.info(f"创建会话: {session_id}")
    return SessionResponse(session_id=session_id, state=to_response(current.ui_state(session_id)))


@app.get("/sessions/{session_id}", response_model=UiStateResponse)
def get_session(session_id: str):
    """获取会话快照"""
    current = _require_store()
    try:
        return to_response(current.ui_state(session_id))
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.delete("/sessions/{session_id}", status_code=204)
def delete_session(session_id: str):
    """关闭会话"""
    current = _require_store()
    try:
        current.delete(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    logger.info(f"关闭会话: {session_id}")


@app.post("/sessions/{session_id}/events", response_model=EventResponse)
def post_event(session_id: str, request: EventRequest):
    """向会话发送一个输入事件"""
    current = _require_store()
    try:
        event = to_input_event(request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        ui, actions = current.handle(session_id, event)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return EventResponse(
        state=to_response(ui),
        actions=[ActionItem(text=a.text) for a in actions],
    )


# ===== 启动入口 =====

def main():
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "3000"))
    log_level = os.getenv("LOG_LEVEL", "info").lower()

    logger.info(f"启动 pinime API 服务: http://{host}:{port}")
    logger.info(f"API 文档: http://{host}:{port}/docs")

    uvicorn.run(
        "pinime.api.server:app",
        host=host,
        port=port,
        reload=False,
        workers=1,
        log_level=log_level,
    )


if __name__ == "__main__":
    main()
