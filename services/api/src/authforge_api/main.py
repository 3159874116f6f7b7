"""FastAPI 应用入口点。"""

from fastapi import FastAPI

from authforge_api.api.router import api_router
from authforge_api.core.config import get_settings
from authforge_api.core.logging import setup_logging
from authforge_api.exceptions import register_exception_handlers
from authforge_api.middlewares import register_middlewares


def create_app() -> FastAPI:
    """创建并配置 FastAPI 应用实例。"""
    settings = get_settings()
    setup_logging(settings.log_level)
    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        debug=settings.app_debug,
        description=(
            "账号认证服务接口。\n\n"
            "所有业务接口统一返回：`{request_id, data, meta}`。\n"
            "注册后需通过邮件中的确认链接激活账号，登录返回访问令牌与刷新令牌。"
        ),
        openapi_tags=[
            {"name": "health", "description": "服务存活与就绪探针。"},
            {"name": "auth", "description": "注册、登录、邮箱确认、口令重置与令牌校验。"},
        ],
    )

    register_middlewares(app)
    register_exception_handlers(app)
    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
