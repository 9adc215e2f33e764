# -*- coding: utf-8 -*-


import json
import shutil
import tempfile
from pathlib import Path

from django.test import SimpleTestCase, TestCase

from mindocean.errors import INVALID_OPERATION

from .config import FALLBACK_BUILTIN_MODEL, load_config
from .file_store import USE_DEFAULT_CONFIG, FileSettingsService
from .llm import KIND_MULTI, KIND_SINGLE, parse_llm_settings, to_multi
from .services import CalendarSettingsService, SettingsService


class TempSettingsMixin:
    def setUp(self):
        super().setUp()
        self.tmp_dir = Path(tempfile.mkdtemp())
        self.addCleanup(shutil.rmtree, self.tmp_dir, ignore_errors=True)

        models_path = self.tmp_dir / 'default-models.json'
        models_path.write_text(json.dumps({
            'builtin_free': {
                'name': '测试免费模型',
                'provider': 'builtin',
                'api_key': 'free-key',
                'base_url': 'https://example.com/v1',
                'model_name': 'free-model',
            },
            'builtin_models': [{'id': 'extra', 'provider': 'openrouter', 'model': 'extra-model'}],
        }), encoding='utf-8')
        self.config = load_config(str(self.tmp_dir / 'user-settings'), str(models_path))


class ConfigTests(TempSettingsMixin, SimpleTestCase):
    def test_load_builtin(self):
        self.assertEqual(self.config.builtin_config()['model_name'], 'free-model')
        self.assertTrue(self.config.builtin_is_valid())

        names = [c['name'] for c in self.config.all_builtin_configs()]
        self.assertEqual(names, ['测试免费模型', 'extra'])

    def test_missing_models_file_uses_fallback(self):
        config = load_config(str(self.tmp_dir), str(self.tmp_dir / 'missing.json'))
        self.assertEqual(config.builtin_config()['model_name'], FALLBACK_BUILTIN_MODEL['model_name'])
        self.assertFalse(config.builtin_is_valid())


class LlmShapeTests(SimpleTestCase):
    def test_parse_single_layout(self):
        parsed = parse_llm_settings({'provider': 'openai', 'api_key': 'k', 'model_name': 'gpt-4o-mini'})

        self.assertEqual(parsed.kind, KIND_SINGLE)
        multi = to_multi(parsed)
        self.assertEqual(multi.current_provider, 'openai')
        self.assertEqual(multi.active().api_key, 'k')

    def test_parse_multi_layout(self):
        parsed = parse_llm_settings({
            'current_provider': 'deepseek',
            'providers': {'deepseek': {'api_key': 'd', 'model_name': 'deepseek-chat'}},
        })

        self.assertEqual(parsed.kind, KIND_MULTI)
        self.assertEqual(parsed.active().model_name, 'deepseek-chat')

    def test_parse_unknown(self):
        self.assertIsNone(parse_llm_settings({}))
        self.assertIsNone(parse_llm_settings(['openai']))


class FileSettingsTests(TempSettingsMixin, SimpleTestCase):
    def setUp(self):
        super().setUp()
        self.store = FileSettingsService(self.config)

    def test_llm_defaults_to_builtin(self):
        self.assertEqual(self.store.get_llm_settings('42')['model_name'], 'free-model')

    def test_save_provider_uses_defaults(self):
        self.store.save_llm_settings('42', {'provider': 'deepseek', 'api_key': 'sk-1'})
        self.store.save_llm_settings('42', {'provider': 'openai', 'api_key': 'sk-2', 'model_name': 'gpt-4o'})

        current = self.store.get_llm_settings('42')
        self.assertEqual(current['provider'], 'openai')
        self.assertEqual(current['model_name'], 'gpt-4o')
        self.assertTrue(current['multi_provider'])
        self.assertEqual(current['all_providers']['deepseek']['base_url'], 'https://api.deepseek.com/v1')

    def test_select_builtin_keeps_other_providers(self):
        self.store.save_llm_settings('42', {'provider': 'openai', 'api_key': 'sk-2'})
        saved = self.store.save_llm_settings('42', {'provider': 'builtin', 'api_key': USE_DEFAULT_CONFIG})

        self.assertNotIn('builtin', saved['providers'])
        current = self.store.get_llm_settings('42')
        self.assertEqual(current['model_name'], 'free-model')
        self.assertIn('openai', current['all_providers'])

    def test_legacy_single_layout(self):
        user_dir = self.config.settings_dir / '7'
        user_dir.mkdir(parents=True)
        (user_dir / 'llm.json').write_text(json.dumps({
            'provider': 'ollama', 'api_key': '', 'model_name': 'llama3.2:3b', 'base_url': 'http://localhost:11434/v1',
        }), encoding='utf-8')

        current = self.store.get_llm_settings('7')
        self.assertEqual(current['provider'], 'ollama')
        self.assertFalse(current['multi_provider'])

    def test_save_without_provider(self):
        self.assertEqual(self.store.save_llm_settings('42', {}).code, INVALID_OPERATION)

    def test_corrupt_file_returns_defaults(self):
        user_dir = self.config.settings_dir / '42'
        user_dir.mkdir(parents=True)
        (user_dir / 'embedding.json').write_text('{not json', encoding='utf-8')

        self.assertEqual(self.store.get_embedding_settings('42')['provider'], 'siliconflow')

    def test_calendar_merges_with_defaults(self):
        self.store.save_calendar_settings('42', {'default_view': 'week'})

        calendar = self.store.get_calendar_settings('42')
        self.assertEqual(calendar['default_view'], 'week')
        self.assertEqual(calendar['time_format'], '24h')
        self.assertIn('updated_at', calendar)

    def test_calendar_save_over_non_object_file(self):
        user_dir = self.config.settings_dir / '42'
        user_dir.mkdir(parents=True)
        (user_dir / 'calendar.json').write_text('[]', encoding='utf-8')

        saved = self.store.save_calendar_settings('42', {'default_view': 'day'})
        self.assertEqual(saved['default_view'], 'day')
        self.assertEqual(saved['week_start'], 1)
        self.assertEqual(self.store.get_calendar_settings('42')['default_view'], 'day')

    def test_overview(self):
        self.store.save_llm_settings('42', {'provider': 'openai', 'api_key': 'sk-2'})
        self.store.save_embedding_settings('42', {'provider': 'siliconflow'})

        overview = self.store.get_overview('42')
        self.assertEqual(overview['user_id'], '42')
        self.assertEqual(overview['llm']['current_provider'], 'openai')
        self.assertEqual(overview['embedding']['provider'], 'siliconflow')
        self.assertIsNone(overview['calendar'])
        self.assertIn('last_access', overview)

    def test_imap_replaced_with_timestamp(self):
        self.store.save_imap_settings('42', {'email': 'a@example.com'})
        self.store.save_imap_settings('42', {'email': 'b@example.com'})

        imap = self.store.get_imap_settings('42')
        self.assertEqual(imap['email'], 'b@example.com')
        self.assertIn('updated_at', imap)

    def test_users_are_isolated_and_deletable(self):
        self.store.save_reranking_settings('1', {'enableReranking': True})
        self.store.save_caldav_settings('2', {'username': 'u'})

        self.assertEqual(self.store.list_users(), ['1', '2'])
        self.assertFalse(self.store.get_reranking_settings('2')['enableReranking'])
        self.assertTrue(self.store.delete_user_settings('1'))
        self.assertFalse(self.store.delete_user_settings('1'))
        self.assertEqual(self.store.list_users(), ['2'])

    def test_rejects_path_like_user_id(self):
        with self.assertRaises(ValueError):
            self.store.get_exchange_settings('../etc')


class SettingsServiceTests(TempSettingsMixin, TestCase):
    def setUp(self):
        super().setUp()
        self.service = SettingsService(self.config)

    def test_save_and_get_global(self):
        self.service.save_global_settings(1, 'embedding_base', {'provider': 'siliconflow'})
        saved = self.service.save_global_settings(1, 'embedding_base', {'provider': 'openai'})

        self.assertEqual(saved['config_data'], {'provider': 'openai'})
        self.assertEqual(len(self.service.get_all_global_settings(1)), 1)
        self.assertIsNone(self.service.get_global_settings(2, 'embedding_base'))

    def test_unknown_category_or_app(self):
        self.assertEqual(self.service.save_global_settings(1, 'weather', {}).code, INVALID_OPERATION)
        self.assertEqual(self.service.get_all_app_settings(1, 'music').code, INVALID_OPERATION)
        self.assertEqual(self.service.save_app_settings(1, 'calendar', 'colors', {}).code, INVALID_OPERATION)

    def test_full_config_overrides_by_category(self):
        self.service.save_global_settings(1, 'llm_base', {'provider': 'openai'})
        self.service.save_app_settings(1, 'calendar', 'ui', {'theme': 'dark'})

        full = self.service.get_full_user_config(1, 'calendar')
        self.assertEqual(full['global']['llm_base'], {'provider': 'openai'})
        self.assertEqual(full['global']['embedding_base']['provider'], 'openai')
        self.assertEqual(full['app']['ui'], {'theme': 'dark'})
        self.assertEqual(full['app']['notification']['advance_minutes'], 15)

    def test_app_settings_listing_and_delete_all(self):
        self.service.save_app_settings(1, 'notebook_lm', 'ui', {'theme': 'dark'})
        self.service.save_app_settings(1, 'notebook_lm', 'features', {})
        self.service.save_app_settings(1, 'calendar', 'ui', {'theme': 'light'})
        self.service.save_app_settings(2, 'notebook_lm', 'ui', {'theme': 'light'})

        listed = self.service.get_all_app_settings(1, 'notebook_lm')
        self.assertEqual([s['category'] for s in listed], ['features', 'ui'])
        self.assertEqual(listed[1]['config_data'], {'theme': 'dark'})

        self.assertEqual(self.service.delete_all_app_settings(1, 'notebook_lm'), 2)
        self.assertEqual(self.service.get_all_app_settings(1, 'notebook_lm'), [])
        self.assertFalse(self.service.delete_app_settings(1, 'notebook_lm', 'ui'))
        # 其他应用和其他用户不受影响
        self.assertEqual(len(self.service.get_all_app_settings(1, 'calendar')), 1)
        self.assertEqual(len(self.service.get_all_app_settings(2, 'notebook_lm')), 1)


class CalendarSettingsServiceTests(TestCase):
    def setUp(self):
        self.service = CalendarSettingsService()

    def test_save_get_delete(self):
        self.service.save(1, 'exchange', {'email': 'a@example.com'})
        self.service.save(1, 'imap', {'email': 'a@example.com', 'imapPort': 993})

        self.assertEqual(self.service.get(1, 'exchange')['config_data']['email'], 'a@example.com')
        self.assertEqual([s['setting_type'] for s in self.service.get_all(1)], ['exchange', 'imap'])
        self.assertTrue(self.service.delete(1, 'exchange'))
        self.assertEqual(self.service.delete_all(1), 1)

    def test_unknown_type(self):
        self.assertEqual(self.service.save(1, 'outlook', {}).code, INVALID_OPERATION)

    def test_defaults(self):
        self.assertEqual(self.service.defaults()['exchange']['exchangeVersion'], 'Exchange2013')
