# -*- coding: utf-8 -*-

"""
设置模块配置

进程启动时调用一次 load_config()，得到的 SettingsConfig 通过构造函数传给各个服务，
不在模块级别缓存。
"""
import copy
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from django.conf import settings

logger = logging.getLogger(__name__)

FALLBACK_BUILTIN_MODEL = {
    'provider': 'builtin',
    'api_key': '',
    'base_url': 'https://openrouter.ai/api/v1/chat/completions',
    'model_name': 'deepseek/deepseek-r1:free',
    'model': 'deepseek/deepseek-r1:free',
    'temperature': 0.7,
    'max_tokens': 2000,
    'timeout': 30000,
    'description': '内置免费模型（需要配置API密钥）',
}

PROVIDER_DEFAULTS = {
    'openai': {
        'base_url': 'https://api.openai.com/v1',
        'default_model': 'gpt-4o-mini',
    },
    'anthropic': {
        'base_url': 'https://api.anthropic.com',
        'default_model': 'claude-3-haiku-20240307',
    },
    'deepseek': {
        'base_url': 'https://api.deepseek.com/v1',
        'default_model': 'deepseek-chat',
    },
    'google': {
        'base_url': 'https://generativelanguage.googleapis.com/v1beta',
        'default_model': 'gemini-1.5-flash',
    },
    'openrouter': {
        'base_url': 'https://openrouter.ai/api/v1',
        'default_model': 'meta-llama/llama-3.2-3b-instruct:free',
    },
    'ollama': {
        'base_url': 'http://localhost:11434/v1',
        'default_model': 'llama3.2:3b',
    },
    'builtin': {
        'base_url': '',
        'default_model': 'builtin-free',
        'api_key': 'builtin-free-key',
        'description': '内置免费模型',
    },
}

REQUIRED_BUILTIN_FIELDS = ('provider', 'api_key', 'base_url', 'model_name')


@dataclass(frozen=True)
class SettingsConfig:
    settings_dir: Path
    builtin_free: Dict[str, Any]
    builtin_models: List[Dict[str, Any]] = field(default_factory=list)
    provider_defaults: Dict[str, Dict[str, str]] = field(default_factory=lambda: copy.deepcopy(PROVIDER_DEFAULTS))

    def builtin_config(self) -> Dict[str, Any]:
        return copy.deepcopy(self.builtin_free)

    def provider_default(self, provider: str) -> Dict[str, str]:
        return dict(self.provider_defaults.get(provider) or {'base_url': '', 'default_model': ''})

    def all_builtin_configs(self) -> List[Dict[str, Any]]:
        """内置免费模型 + 配置文件中的其他内置模型"""
        configs = [{**self.builtin_config(), 'name': self.builtin_free.get('name') or 'Default Free Model'}]
        for model in self.builtin_models:
            configs.append({
                'name': model.get('name') or model.get('id'),
                'provider': model.get('provider'),
                'api_key': model.get('api_key'),
                'base_url': model.get('base_url'),
                'model_name': model.get('model'),
                'model': model.get('model'),
                'description': model.get('description'),
            })
        return configs

    def builtin_is_valid(self) -> bool:
        return all(str(self.builtin_free.get(name) or '').strip() for name in REQUIRED_BUILTIN_FIELDS)


def _normalize_builtin(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'provider': raw.get('provider') or 'builtin',
        'api_key': raw.get('api_key', ''),
        'base_url': raw.get('base_url', ''),
        'model_name': raw.get('model_name', ''),
        'model': raw.get('model_name', ''),
        'temperature': raw.get('temperature') or 0.7,
        'max_tokens': raw.get('max_tokens') or 2000,
        'timeout': 30000,
        'description': raw.get('description', ''),
        'name': raw.get('name', ''),
    }


def read_default_models(path: Path) -> Dict[str, Any]:
    """读取 default-models.json；文件不存在或格式错误时返回空字典"""
    if not path.exists():
        logger.warning(f'默认模型配置文件不存在: {path}')
        return {}
    try:
        with path.open('r', encoding='utf-8') as fp:
            return json.load(fp)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning(f'读取默认模型配置失败 {path}: {exc}')
        return {}


def load_config(settings_dir: Optional[str] = None, default_models_path: Optional[str] = None) -> SettingsConfig:
    """
    构建设置模块配置

    Args:
        settings_dir: 用户设置根目录，默认取 settings.USER_SETTINGS_DIR
        default_models_path: 默认模型配置文件，默认取 settings.DEFAULT_MODELS_PATH
    """
    settings_dir = Path(settings_dir or settings.USER_SETTINGS_DIR)
    models_path = Path(default_models_path or settings.DEFAULT_MODELS_PATH)

    raw = read_default_models(models_path)
    builtin_raw = raw.get('builtin_free')
    if builtin_raw:
        builtin_free = _normalize_builtin(builtin_raw)
    else:
        logger.warning('未找到 builtin_free 配置，使用回退配置')
        builtin_free = dict(FALLBACK_BUILTIN_MODEL)

    builtin_models = raw.get('builtin_models')
    if not isinstance(builtin_models, list):
        builtin_models = []

    logger.info(f'设置模块配置加载完成: 目录={settings_dir}, 内置模型={builtin_free.get("model_name")}')
    return SettingsConfig(
        settings_dir=settings_dir,
        builtin_free=builtin_free,
        builtin_models=builtin_models,
    )
