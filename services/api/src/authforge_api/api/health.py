"""健康检查接口。"""

from sqlalchemy import text
from sqlalchemy.orm import Session

from fastapi import APIRouter, Depends, Request, status

from authforge_api.db.session import get_db
from authforge_api.utils.response import success
from authforge_api.schemas.common import ErrorResponse, HealthStatusData, SuccessResponse

router = APIRouter(prefix="/health", tags=["health"])


@router.get(
    "/live",
    summary="存活探针",
    description="用于容器编排系统检测服务进程是否存活。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[HealthStatusData],
    responses={500: {"model": ErrorResponse}},
)
def live(request: Request):
    """仅表示进程存活，不校验外部依赖。"""
    return success(request, {"status": "ok"}, message="查询成功。")


@router.get(
    "/ready",
    summary="就绪探针",
    description="通过数据库连通性检测账号存储是否可用。",
    status_code=status.HTTP_200_OK,
    response_model=SuccessResponse[HealthStatusData],
    responses={500: {"model": ErrorResponse}},
)
def ready(request: Request, db: Session = Depends(get_db)):
    """执行轻量数据库探活语句。"""
    db.execute(text("select 1"))
    return success(request, {"status": "ready"}, message="查询成功。")
