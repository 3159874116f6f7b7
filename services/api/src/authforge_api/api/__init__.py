"""路由模块导出集合。"""

from . import auth, health

__all__ = [
    "auth",
    "health",
]
