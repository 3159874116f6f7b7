"""数据库基础模型导出。

导入全部模型以便 Base.metadata 收录 accounts 与两类令牌表。
不执行自动建表，生产库结构由迁移脚本维护；测试直接调用 create_all。
"""

import authforge_api.models  # noqa: F401
from authforge_api.models.base import Base

__all__ = ["Base"]
