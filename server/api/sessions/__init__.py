# 编排会话模块

from .routes import router as sessions_router
from .models import CreateSessionRequest, SessionState

__all__ = [
    "sessions_router",
    "CreateSessionRequest",
    "SessionState"
]
