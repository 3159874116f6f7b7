"""协作方异常定义。

存储与通知实现只抛出这里的异常类型，凭据引擎据此归类为 internal 失败。
"""


class CollaboratorError(Exception):
    """外部协作方（存储、通知）故障基类。"""


class StoreError(CollaboratorError):
    """存储读写失败。"""


class NotFoundError(StoreError):
    """按键查找的记录不存在。"""


class DuplicateKeyError(StoreError):
    """唯一键冲突，例如重复邮箱或重复令牌串。"""


class NotifierError(CollaboratorError):
    """令牌投递失败。"""
