"""
LLM 设置的两种存储格式

历史上 llm.json 有两种写法：
- 单 provider：{"provider": "openai", "api_key": ..., "model_name": ..., "base_url": ...}
- 多 provider：{"current_provider": "openai", "providers": {"openai": {...}, ...}}

读取时统一解析为 SingleProviderSettings / MultiProviderSettings，写入时只写多 provider 格式。
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union

KIND_SINGLE = 'single'
KIND_MULTI = 'multi'

NO_PROVIDER = 'none'


@dataclass
class ProviderConfig:
    api_key: str = ''
    model_name: str = ''
    base_url: str = ''
    description: str = ''
    updated_at: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'ProviderConfig':
        raw = raw or {}
        return cls(
            api_key=raw.get('api_key') or '',
            model_name=raw.get('model_name') or raw.get('model') or '',
            base_url=raw.get('base_url') or '',
            description=raw.get('description') or '',
            updated_at=raw.get('updated_at'),
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {
            'api_key': self.api_key,
            'model_name': self.model_name,
            'base_url': self.base_url,
            'updated_at': self.updated_at,
        }
        if self.description:
            result['description'] = self.description
        return result


@dataclass
class SingleProviderSettings:
    provider: str
    config: ProviderConfig
    updated_at: Optional[str] = None
    kind: str = field(default=KIND_SINGLE, init=False)


@dataclass
class MultiProviderSettings:
    current_provider: str = NO_PROVIDER
    providers: Dict[str, ProviderConfig] = field(default_factory=dict)
    updated_at: Optional[str] = None
    kind: str = field(default=KIND_MULTI, init=False)

    def active(self) -> Optional[ProviderConfig]:
        return self.providers.get(self.current_provider)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'current_provider': self.current_provider,
            'providers': {name: cfg.to_dict() for name, cfg in self.providers.items()},
            'updated_at': self.updated_at,
        }


LlmSettings = Union[SingleProviderSettings, MultiProviderSettings]


def parse_llm_settings(raw: Any) -> Optional[LlmSettings]:
    """解析 llm.json 内容；无法识别时返回 None"""
    if not isinstance(raw, dict) or not raw:
        return None

    if isinstance(raw.get('providers'), dict) and raw.get('current_provider'):
        return MultiProviderSettings(
            current_provider=raw['current_provider'],
            providers={
                name: ProviderConfig.from_dict(cfg)
                for name, cfg in raw['providers'].items()
                if isinstance(cfg, dict)
            },
            updated_at=raw.get('updated_at'),
        )

    if raw.get('provider'):
        return SingleProviderSettings(
            provider=raw['provider'],
            config=ProviderConfig.from_dict(raw),
            updated_at=raw.get('updated_at'),
        )

    return None


def to_multi(parsed: Optional[LlmSettings]) -> MultiProviderSettings:
    """任意格式转为多 provider 格式（写入前使用）"""
    if parsed is None:
        return MultiProviderSettings()
    if parsed.kind == KIND_MULTI:
        return parsed
    return MultiProviderSettings(
        current_provider=parsed.provider,
        providers={parsed.provider: parsed.config},
        updated_at=parsed.updated_at,
    )
