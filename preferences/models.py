from django.db import models


class GlobalSetting(models.Model):
    """
    用户全局设置（llm_base / embedding_base / reranking_base）

    每个用户每个类别一行，config_data 保存整份 JSON 配置
    """

    user_id = models.IntegerField(verbose_name='用户ID')
    category = models.CharField(max_length=50)
    config_data = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'global_settings'
        constraints = [
            models.UniqueConstraint(fields=['user_id', 'category'], name='global_setting_user_cat_uniq'),
        ]

    def __str__(self):
        return f'{self.user_id}:{self.category}'


class AppSetting(models.Model):
    """应用级设置，按 (用户, 应用, 类别) 唯一"""

    user_id = models.IntegerField(verbose_name='用户ID')
    app_name = models.CharField(max_length=50)
    category = models.CharField(max_length=50)
    config_data = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'app_settings'
        constraints = [
            models.UniqueConstraint(fields=['user_id', 'app_name', 'category'], name='app_setting_user_app_cat_uniq'),
        ]

    def __str__(self):
        return f'{self.user_id}:{self.app_name}.{self.category}'


class CalendarSetting(models.Model):
    # exchange / caldav / imap
    user_id = models.IntegerField(verbose_name='用户ID')
    setting_type = models.CharField(max_length=20)
    config_data = models.JSONField(default=dict)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'calendar_settings'
        constraints = [
            models.UniqueConstraint(fields=['user_id', 'setting_type'], name='calendar_setting_user_type_uniq'),
        ]

    def __str__(self):
        return f'{self.user_id}:{self.setting_type}'
