from django.apps import AppConfig
from django.db.backends.signals import connection_created


class ForumConfig(AppConfig):
    name = 'forum'
    verbose_name = '论坛'

    def ready(self):
        from .search import register_sqlite_functions

        connection_created.connect(register_sqlite_functions, dispatch_uid='forum_sqlite_casefold')
