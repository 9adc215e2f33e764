# -*- coding: utf-8 -*-

"""
帖子搜索用的大小写折叠

SQLite 的 LIKE / LOWER() 只处理 ASCII 字母，西里尔字母、带重音的拉丁字母等无法忽略大小写。
在 SQLite 连接上注册 Python 的 str.casefold 作为 SQL 函数，其他数据库使用 LOWER()。
"""
from django.db.models import Func, TextField

CASEFOLD_SQL_FUNCTION = 'MINDOCEAN_CASEFOLD'


def _casefold(value):
    if value is None:
        return None
    return str(value).casefold()


def register_sqlite_functions(sender, connection, **kwargs):
    """connection_created 信号处理：为新的 SQLite 连接注册 casefold"""
    if connection.vendor != 'sqlite':
        return
    connection.connection.create_function(CASEFOLD_SQL_FUNCTION, 1, _casefold, deterministic=True)


class Casefold(Func):
    function = 'LOWER'
    output_field = TextField()

    def as_sqlite(self, compiler, connection, **extra_context):
        return super().as_sql(compiler, connection, function=CASEFOLD_SQL_FUNCTION, **extra_context)
