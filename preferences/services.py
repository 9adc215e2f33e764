# -*- coding: utf-8 -*-

"""
数据库中的用户设置

- SettingsService: 全局基础AI设置 + 应用设置
- CalendarSettingsService: 日历账号（exchange / caldav / imap）
"""
import logging
from typing import Any, Dict, List, Optional

from mindocean.errors import invalid_operation, store_operation

from .config import SettingsConfig
from .defaults import (
    APP_NAMES,
    CALENDAR_SETTING_TYPES,
    GLOBAL_CATEGORIES,
    default_app_settings,
    default_calendar_settings,
    default_global_settings,
)
from .models import AppSetting, CalendarSetting, GlobalSetting

logger = logging.getLogger(__name__)


def _serialize_setting(setting, **extra) -> Dict[str, Any]:
    data = {
        'id': setting.id,
        'user_id': setting.user_id,
        'config_data': setting.config_data,
        'created_at': setting.created_at.isoformat() if setting.created_at else None,
        'updated_at': setting.updated_at.isoformat() if setting.updated_at else None,
    }
    data.update(extra)
    return data


def _serialize_global(setting: GlobalSetting) -> Dict[str, Any]:
    return _serialize_setting(setting, category=setting.category)


def _serialize_app(setting: AppSetting) -> Dict[str, Any]:
    return _serialize_setting(setting, app_name=setting.app_name, category=setting.category)


def _serialize_calendar(setting: CalendarSetting) -> Dict[str, Any]:
    return _serialize_setting(setting, setting_type=setting.setting_type)


class SettingsService:
    def __init__(self, config: SettingsConfig):
        self.config = config

    def _check_global(self, category):
        if category not in GLOBAL_CATEGORIES:
            return invalid_operation(f'未知的全局设置类别: {category}')
        return None

    def _check_app(self, app_name, category=None):
        if app_name not in APP_NAMES:
            return invalid_operation(f'未知的应用: {app_name}')
        if category is not None and category not in default_app_settings(app_name):
            return invalid_operation(f'应用 {app_name} 不支持设置类别: {category}')
        return None

    def get_default_global_settings(self) -> Dict[str, Any]:
        return default_global_settings(self.config)

    # --- 全局设置 ---

    @store_operation
    def get_global_settings(self, user_id, category):
        failure = self._check_global(category)
        if failure is not None:
            return failure
        setting = GlobalSetting.objects.filter(user_id=user_id, category=category).first()
        return _serialize_global(setting) if setting else None

    @store_operation
    def save_global_settings(self, user_id, category, config_data: Dict[str, Any]):
        """保存或覆盖某一类全局设置"""
        failure = self._check_global(category)
        if failure is not None:
            return failure
        setting, created = GlobalSetting.objects.update_or_create(
            user_id=user_id,
            category=category,
            defaults={'config_data': config_data or {}},
        )
        logger.info(f'用户 {user_id} {"新建" if created else "更新"}全局设置 {category}')
        return _serialize_global(setting)

    @store_operation
    def delete_global_settings(self, user_id, category):
        failure = self._check_global(category)
        if failure is not None:
            return failure
        deleted, _ = GlobalSetting.objects.filter(user_id=user_id, category=category).delete()
        return deleted > 0

    @store_operation
    def get_all_global_settings(self, user_id) -> List[Dict[str, Any]]:
        return [_serialize_global(s) for s in GlobalSetting.objects.filter(user_id=user_id).order_by('category')]

    @store_operation
    def delete_all_global_settings(self, user_id) -> int:
        deleted, _ = GlobalSetting.objects.filter(user_id=user_id).delete()
        logger.info(f'删除用户 {user_id} 的全局设置 {deleted} 条')
        return deleted

    # --- 应用设置 ---

    @store_operation
    def get_app_settings(self, user_id, app_name, category):
        failure = self._check_app(app_name, category)
        if failure is not None:
            return failure
        setting = AppSetting.objects.filter(user_id=user_id, app_name=app_name, category=category).first()
        return _serialize_app(setting) if setting else None

    @store_operation
    def save_app_settings(self, user_id, app_name, category, config_data: Dict[str, Any]):
        failure = self._check_app(app_name, category)
        if failure is not None:
            return failure
        setting, _ = AppSetting.objects.update_or_create(
            user_id=user_id,
            app_name=app_name,
            category=category,
            defaults={'config_data': config_data or {}},
        )
        logger.info(f'用户 {user_id} 保存应用设置 {app_name}.{category}')
        return _serialize_app(setting)

    @store_operation
    def delete_app_settings(self, user_id, app_name, category):
        failure = self._check_app(app_name, category)
        if failure is not None:
            return failure
        deleted, _ = AppSetting.objects.filter(user_id=user_id, app_name=app_name, category=category).delete()
        return deleted > 0

    @store_operation
    def get_all_app_settings(self, user_id, app_name):
        failure = self._check_app(app_name)
        if failure is not None:
            return failure
        queryset = AppSetting.objects.filter(user_id=user_id, app_name=app_name).order_by('category')
        return [_serialize_app(s) for s in queryset]

    @store_operation
    def delete_all_app_settings(self, user_id, app_name):
        failure = self._check_app(app_name)
        if failure is not None:
            return failure
        deleted, _ = AppSetting.objects.filter(user_id=user_id, app_name=app_name).delete()
        logger.info(f'删除用户 {user_id} 的应用 {app_name} 设置 {deleted} 条')
        return deleted

    @store_operation
    def get_full_user_config(self, user_id, app_name):
        """
        合并全局设置和应用设置

        按类别合并：用户保存过的类别整体覆盖默认值，其余类别使用默认值。
        返回 {'global': {...}, 'app': {...}}
        """
        failure = self._check_app(app_name)
        if failure is not None:
            return failure

        user_global = {
            s.category: s.config_data
            for s in GlobalSetting.objects.filter(user_id=user_id)
        }
        user_app = {
            s.category: s.config_data
            for s in AppSetting.objects.filter(user_id=user_id, app_name=app_name)
        }

        result = {'global': {}, 'app': {}}
        for category, default in self.get_default_global_settings().items():
            result['global'][category] = user_global.get(category, default)
        for category, default in default_app_settings(app_name).items():
            result['app'][category] = user_app.get(category, default)
        return result


class CalendarSettingsService:
    """日历账号设置，每种类型一行"""

    def _check_type(self, setting_type):
        if setting_type not in CALENDAR_SETTING_TYPES:
            return invalid_operation(f'未知的日历设置类型: {setting_type}')
        return None

    def defaults(self) -> Dict[str, Any]:
        return default_calendar_settings()

    @store_operation
    def get(self, user_id, setting_type) -> Optional[Dict[str, Any]]:
        failure = self._check_type(setting_type)
        if failure is not None:
            return failure
        setting = CalendarSetting.objects.filter(user_id=user_id, setting_type=setting_type).first()
        return _serialize_calendar(setting) if setting else None

    @store_operation
    def get_all(self, user_id) -> List[Dict[str, Any]]:
        queryset = CalendarSetting.objects.filter(user_id=user_id).order_by('setting_type')
        return [_serialize_calendar(s) for s in queryset]

    @store_operation
    def save(self, user_id, setting_type, config_data: Dict[str, Any]):
        failure = self._check_type(setting_type)
        if failure is not None:
            return failure
        setting, _ = CalendarSetting.objects.update_or_create(
            user_id=user_id,
            setting_type=setting_type,
            defaults={'config_data': config_data or {}},
        )
        logger.info(f'用户 {user_id} 保存日历设置 {setting_type}')
        return _serialize_calendar(setting)

    @store_operation
    def delete(self, user_id, setting_type):
        failure = self._check_type(setting_type)
        if failure is not None:
            return failure
        deleted, _ = CalendarSetting.objects.filter(user_id=user_id, setting_type=setting_type).delete()
        return deleted > 0

    @store_operation
    def delete_all(self, user_id) -> int:
        deleted, _ = CalendarSetting.objects.filter(user_id=user_id).delete()
        return deleted
