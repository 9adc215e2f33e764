# -*- coding: utf-8 -*-

"""
基于 JSON 文件的用户设置存储

每个用户一个独立目录，互不影响：

user-settings/
└── {user_id}/
    ├── llm.json          # LLM（多 provider 格式）
    ├── calendar.json     # 日历显示设置
    ├── imap.json
    ├── exchange.json
    ├── caldav.json
    ├── embedding.json
    └── reranking.json
"""
import copy
import json
import logging
import os
import re
import shutil
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

from mindocean.errors import StoreFailure, invalid_operation

from .config import SettingsConfig
from .defaults import (
    FILE_CALENDAR_DEFAULTS,
    FILE_EMBEDDING_DEFAULTS,
    FILE_RERANKING_DEFAULTS,
)
from .llm import KIND_MULTI, ProviderConfig, parse_llm_settings, to_multi

logger = logging.getLogger(__name__)

BUILTIN_PROVIDER = 'builtin'
USE_DEFAULT_CONFIG = 'USE_DEFAULT_CONFIG'

_USER_ID_PATTERN = re.compile(r'^[A-Za-z0-9_\-]+$')


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FileSettingsService:
    def __init__(self, config: SettingsConfig):
        self.config = config
        self.base_dir = Path(config.settings_dir)

    # --- 文件读写 ---

    def _user_dir(self, user_id, create: bool = False) -> Path:
        user_key = str(user_id)
        if not _USER_ID_PATTERN.match(user_key):
            raise ValueError(f'非法的用户ID: {user_key!r}')
        user_dir = self.base_dir / user_key
        if create and not user_dir.exists():
            user_dir.mkdir(parents=True, exist_ok=True)
            logger.info(f'创建用户设置目录: {user_dir}')
        return user_dir

    def _read_json(self, path: Path, default: Any = None) -> Any:
        if not path.exists():
            return copy.deepcopy(default)
        try:
            with path.open('r', encoding='utf-8') as fp:
                return json.load(fp)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning(f'读取文件失败 {path}: {exc}')
            return copy.deepcopy(default)

    def _write_json(self, path: Path, data: Dict[str, Any]) -> None:
        """先写临时文件再替换，避免写到一半留下损坏的 JSON"""
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f'.{path.name}.', suffix='.tmp')
            with os.fdopen(fd, 'w', encoding='utf-8') as fp:
                json.dump(data, fp, ensure_ascii=False, indent=2)
            os.replace(tmp_path, path)
        except OSError as exc:
            logger.exception(f'保存文件失败 {path}: {exc}')
            raise StoreFailure(f'保存文件失败 {path}: {exc}') from exc
        logger.info(f'保存文件成功: {path}')

    def _user_file(self, user_id, name: str, create: bool = False) -> Path:
        return self._user_dir(user_id, create=create) / name

    # --- LLM ---

    def _builtin_settings(self) -> Optional[Dict[str, Any]]:
        builtin = self.config.builtin_config()
        return builtin or None

    def get_llm_settings(self, user_id) -> Optional[Dict[str, Any]]:
        """
        获取用户当前生效的 LLM 设置

        - 没有设置文件：返回内置免费模型
        - 多 provider 格式：返回当前 provider 的配置，并附带全部 provider
        - 当前 provider 为 builtin：返回最新的内置模型配置
        """
        raw = self._read_json(self._user_file(user_id, 'llm.json'))
        parsed = parse_llm_settings(raw)

        if parsed is None:
            logger.info(f'用户 {user_id} 无LLM设置，返回默认免费模型')
            return self._builtin_settings()

        if parsed.kind == KIND_MULTI:
            all_providers = {name: cfg.to_dict() for name, cfg in parsed.providers.items()}
            active = parsed.active()
            if parsed.current_provider == BUILTIN_PROVIDER or active is None:
                result = self._builtin_settings() or {}
            else:
                result = {
                    'provider': parsed.current_provider,
                    'api_key': active.api_key,
                    'model_name': active.model_name,
                    'base_url': active.base_url,
                }
            result.update({
                'multi_provider': True,
                'current_provider': parsed.current_provider,
                'all_providers': all_providers,
                'updated_at': parsed.updated_at,
            })
            return result

        if parsed.provider == BUILTIN_PROVIDER:
            return self._builtin_settings()

        return {
            'provider': parsed.provider,
            'api_key': parsed.config.api_key,
            'model_name': parsed.config.model_name,
            'base_url': parsed.config.base_url,
            'multi_provider': False,
            'updated_at': parsed.updated_at,
        }

    def save_llm_settings(self, user_id, settings: Dict[str, Any]):
        """
        保存某个 provider 的设置并设为当前 provider

        provider=builtin 且 api_key=USE_DEFAULT_CONFIG 时只切换到内置模型，不保存具体配置。
        """
        provider = (settings or {}).get('provider')
        if not provider:
            return invalid_operation('缺少 provider')

        path = self._user_file(user_id, 'llm.json', create=True)
        existing = to_multi(parse_llm_settings(self._read_json(path)))
        now = _now()

        if provider == BUILTIN_PROVIDER and settings.get('api_key') == USE_DEFAULT_CONFIG:
            logger.info(f'用户 {user_id} 选择内置免费模型')
            existing.providers.pop(BUILTIN_PROVIDER, None)
        else:
            defaults = self.config.provider_default(provider)
            if provider == BUILTIN_PROVIDER:
                cfg = ProviderConfig(
                    api_key=defaults.get('api_key', ''),
                    model_name=defaults.get('default_model', ''),
                    base_url=defaults.get('base_url', ''),
                    description=defaults.get('description', ''),
                    updated_at=now,
                )
            else:
                cfg = ProviderConfig(
                    api_key=settings.get('api_key') or '',
                    model_name=settings.get('model_name') or defaults.get('default_model', ''),
                    base_url=settings.get('base_url') or defaults.get('base_url', ''),
                    updated_at=now,
                )
            existing.providers[provider] = cfg
            logger.info(f'保存{provider}设置，使用base_url: {cfg.base_url}')

        existing.current_provider = provider
        existing.updated_at = now
        data = existing.to_dict()
        self._write_json(path, data)
        return data

    # --- 日历 / 邮箱 ---

    def get_calendar_settings(self, user_id) -> Dict[str, Any]:
        return self._read_json(self._user_file(user_id, 'calendar.json'), FILE_CALENDAR_DEFAULTS)

    def save_calendar_settings(self, user_id, settings: Dict[str, Any]) -> Dict[str, Any]:
        """与已有设置合并后保存"""
        path = self._user_file(user_id, 'calendar.json', create=True)
        existing = self._read_json(path, FILE_CALENDAR_DEFAULTS)
        if not isinstance(existing, dict):
            logger.warning(f'日历设置格式错误，使用默认值: {path}')
            existing = copy.deepcopy(FILE_CALENDAR_DEFAULTS)
        merged = {**existing, **(settings or {}), 'updated_at': _now()}
        logger.info(f'保存用户 {user_id} 的日历设置，包含: {", ".join((settings or {}).keys())}')
        self._write_json(path, merged)
        return merged

    def _save_with_timestamp(self, user_id, filename: str, settings: Dict[str, Any]) -> Dict[str, Any]:
        data = {**(settings or {}), 'updated_at': _now()}
        self._write_json(self._user_file(user_id, filename, create=True), data)
        return data

    def get_imap_settings(self, user_id) -> Dict[str, Any]:
        return self._read_json(self._user_file(user_id, 'imap.json'), {})

    def save_imap_settings(self, user_id, settings: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f'保存用户 {user_id} 的IMAP设置: {(settings or {}).get("email") or "N/A"}')
        return self._save_with_timestamp(user_id, 'imap.json', settings)

    def get_exchange_settings(self, user_id) -> Dict[str, Any]:
        return self._read_json(self._user_file(user_id, 'exchange.json'), {})

    def save_exchange_settings(self, user_id, settings: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f'保存用户 {user_id} 的Exchange设置: {(settings or {}).get("email") or "N/A"}')
        return self._save_with_timestamp(user_id, 'exchange.json', settings)

    def get_caldav_settings(self, user_id) -> Dict[str, Any]:
        return self._read_json(self._user_file(user_id, 'caldav.json'), {})

    def save_caldav_settings(self, user_id, settings: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f'保存用户 {user_id} 的CalDAV设置: {(settings or {}).get("username") or "N/A"}')
        return self._save_with_timestamp(user_id, 'caldav.json', settings)

    # --- embedding / reranking ---

    def get_embedding_settings(self, user_id) -> Dict[str, Any]:
        return self._read_json(self._user_file(user_id, 'embedding.json'), FILE_EMBEDDING_DEFAULTS)

    def save_embedding_settings(self, user_id, settings: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f'保存用户 {user_id} 的embedding设置: {(settings or {}).get("provider") or "N/A"}')
        return self._save_with_timestamp(user_id, 'embedding.json', settings)

    def get_reranking_settings(self, user_id) -> Dict[str, Any]:
        return self._read_json(self._user_file(user_id, 'reranking.json'), FILE_RERANKING_DEFAULTS)

    def save_reranking_settings(self, user_id, settings: Dict[str, Any]) -> Dict[str, Any]:
        logger.info(f'保存用户 {user_id} 的reranking设置: {(settings or {}).get("rerankingProvider") or "N/A"}')
        return self._save_with_timestamp(user_id, 'reranking.json', settings)

    # --- 用户级操作 ---

    def delete_user_settings(self, user_id) -> bool:
        user_dir = self._user_dir(user_id)
        if not user_dir.exists():
            return False
        try:
            shutil.rmtree(user_dir)
        except OSError as exc:
            logger.exception(f'删除用户设置失败: {exc}')
            raise StoreFailure(f'删除用户设置失败: {exc}') from exc
        logger.info(f'删除用户 {user_id} 的所有设置')
        return True

    def list_users(self) -> List[str]:
        if not self.base_dir.exists():
            return []
        return sorted(entry.name for entry in self.base_dir.iterdir() if entry.is_dir())

    def get_overview(self, user_id) -> Dict[str, Any]:
        return {
            'user_id': str(user_id),
            'llm': self._read_json(self._user_file(user_id, 'llm.json')),
            'calendar': self._read_json(self._user_file(user_id, 'calendar.json')),
            'embedding': self._read_json(self._user_file(user_id, 'embedding.json')),
            'reranking': self._read_json(self._user_file(user_id, 'reranking.json')),
            'last_access': _now(),
        }
