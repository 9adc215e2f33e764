# -*- coding: utf-8 -*-

"""各类设置的默认值"""
import copy
from typing import Any, Dict

from .config import SettingsConfig

GLOBAL_CATEGORIES = ('llm_base', 'embedding_base', 'reranking_base')

APP_NAMES = ('notebook_lm', 'calendar')

CALENDAR_SETTING_TYPES = ('exchange', 'caldav', 'imap')

_EMBEDDING_BASE = {
    'provider': 'openai',
    'api_key': '',
    'base_url': 'https://api.openai.com/v1',
    'model': 'text-embedding-ada-002',
    'dimensions': 1536,
}

_RERANKING_BASE = {
    'provider': 'cohere',
    'api_key': '',
    'base_url': 'https://api.cohere.ai/v1',
    'model': 'rerank-multilingual-v2.0',
    'top_k': 5,
}

_APP_SETTINGS = {
    'notebook_lm': {
        'ui': {
            'theme': 'light',
            'language': 'zh-CN',
            'sidebar_collapsed': False,
            'auto_save': True,
            'line_numbers': True,
        },
        'features': {
            'auto_summary': True,
            'smart_completion': True,
            'collaborative_editing': False,
            'version_control': True,
            'citation_format': 'apa',
        },
    },
    'calendar': {
        'ui': {
            'theme': 'light',
            'language': 'zh-CN',
            'default_view': 'month',
            'week_start': 'monday',
            'time_format': '24h',
        },
        'features': {
            'smart_scheduling': True,
            'auto_categorize': True,
            'conflict_detection': True,
            'weather_integration': False,
            'meeting_reminders': True,
        },
        'sync': {
            'outlook_enabled': False,
            'outlook_server': '',
            'outlook_username': '',
            'qq_enabled': False,
            'qq_server': '',
            'qq_username': '',
            'sync_interval': 15,
        },
        'notification': {
            'email_enabled': True,
            'desktop_enabled': True,
            'advance_minutes': 15,
            'sound_enabled': True,
            'recurring_reminders': True,
        },
        'exchange': {
            'enabled': False,
            'server': '',
            'username': '',
            'password': '',
            'auto_sync': True,
            'sync_interval': 15,
        },
        'imap': {
            'enabled': False,
            'server': '',
            'port': 993,
            'username': '',
            'password': '',
            'use_ssl': True,
            'folder': 'INBOX',
        },
        'caldav': {
            'enabled': False,
            'server': '',
            'username': '',
            'password': '',
            'calendar_url': '',
            'sync_interval': 30,
        },
        'imap_filter': {
            'enabled': True,
            'sender_allowlist': [],
        },
    },
}

_CALENDAR_SETTINGS = {
    'exchange': {
        'email': '',
        'password': '',
        'ewsUrl': '',
        'exchangeVersion': 'Exchange2013',
    },
    'caldav': {
        'username': '',
        'password': '',
        'serverUrl': '',
    },
    'imap': {
        'email': '',
        'password': '',
        'imapHost': '',
        'imapPort': 993,
        'useTLS': True,
        'allowlist': [],
    },
}

# JSON 文件存储的默认值
FILE_CALENDAR_DEFAULTS = {
    'default_view': 'month',
    'week_start': 1,
    'time_format': '24h',
    'first_day_of_week': 'monday',
}

FILE_EMBEDDING_DEFAULTS = {
    'provider': 'siliconflow',
    'apiKey': '',
    'model': 'BAAI/bge-large-zh-v1.5',
    'encodingFormat': 'float',
    'customEndpoint': '',
}

FILE_RERANKING_DEFAULTS = {
    'enableReranking': False,
    'rerankingProvider': 'siliconflow',
    'rerankingModel': 'BAAI/bge-reranker-v2-m3',
    'initialRerankCandidates': 100,
    'finalRerankTopN': 10,
    'rerankingCustomEndpoint': '',
}


def default_global_settings(config: SettingsConfig) -> Dict[str, Any]:
    return {
        'llm_base': config.builtin_config(),
        'embedding_base': copy.deepcopy(_EMBEDDING_BASE),
        'reranking_base': copy.deepcopy(_RERANKING_BASE),
    }


def default_app_settings(app_name: str) -> Dict[str, Any]:
    return copy.deepcopy(_APP_SETTINGS.get(app_name, {}))


def default_calendar_settings() -> Dict[str, Any]:
    return copy.deepcopy(_CALENDAR_SETTINGS)
