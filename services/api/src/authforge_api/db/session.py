"""数据库会话管理。"""

from collections.abc import Generator
from functools import lru_cache

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from authforge_api.core.config import get_settings


@lru_cache
def get_engine() -> Engine:
    """按配置懒加载全局数据库引擎，开启连接预检查以减少僵尸连接影响。"""
    settings = get_settings()
    return create_engine(settings.database_url, future=True, pool_pre_ping=True)


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    """统一会话工厂，路由层通过依赖注入获取短生命周期会话。"""
    return sessionmaker(bind=get_engine(), autoflush=False, autocommit=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """为每个请求提供独立数据库会话。"""
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
