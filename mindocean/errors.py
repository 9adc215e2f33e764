# -*- coding: utf-8 -*-

"""
统一的错误类型

- Failure: 可预期的业务失败（资源不存在、非法操作），以返回值形式交给调用方
- StoreFailure: 底层存储异常，记录日志后向上抛出
"""
import logging
from dataclasses import dataclass
from functools import wraps

from django.db import DatabaseError

NOT_FOUND = 'not_found'
INVALID_OPERATION = 'invalid_operation'


@dataclass(frozen=True)
class Failure:
    code: str
    message: str

    def __bool__(self) -> bool:
        return False

    def to_dict(self) -> dict:
        return {'code': self.code, 'message': self.message}


def not_found(message: str) -> Failure:
    return Failure(NOT_FOUND, message)


def invalid_operation(message: str) -> Failure:
    return Failure(INVALID_OPERATION, message)


class StoreFailure(Exception):
    """存储层操作失败"""


def store_operation(func):
    """
    数据访问装饰器
    捕获数据库异常，记录日志后包装为 StoreFailure 抛出
    """
    logger = logging.getLogger(func.__module__)

    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DatabaseError as exc:
            logger.exception(f'{func.__name__} 执行失败: {exc}')
            raise StoreFailure(f'{func.__name__} 执行失败: {exc}') from exc

    return wrapper


def coerce_non_negative(value, default: int) -> int:
    """分页参数转换为非负整数，无法解析时使用默认值"""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 0 else 0
