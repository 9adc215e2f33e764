# -*- coding: utf-8 -*-


from datetime import datetime, timedelta, timezone

import jwt
from django.conf import settings
from django.test import TestCase

from mindocean.errors import INVALID_OPERATION, NOT_FOUND

from . import accounts, tokens
from .models import User


class AccountTests(TestCase):
    def setUp(self):
        self.user = accounts.create_user('li@example.com', '李工', 'secret123')

    def test_create_user_hides_hash(self):
        self.assertEqual(self.user['username'], '李工')
        self.assertNotIn('password_hash', self.user)
        self.assertNotEqual(User.objects.get(id=self.user['id']).password_hash, 'secret123')

    def test_duplicate_email_or_username(self):
        self.assertEqual(accounts.create_user('li@example.com', '别人', 'x').code, INVALID_OPERATION)
        self.assertEqual(accounts.create_user('other@example.com', '李工', 'x').code, INVALID_OPERATION)

    def test_authenticate(self):
        self.assertIsNone(accounts.authenticate('li@example.com', 'wrong'))

        user = accounts.authenticate('li@example.com', 'secret123')
        self.assertEqual(user['id'], self.user['id'])
        self.assertIsNotNone(user['last_login_time'])

    def test_banned_user_cannot_login(self):
        User.objects.filter(id=self.user['id']).update(status='banned')
        self.assertIsNone(accounts.authenticate('li@example.com', 'secret123'))

    def test_update_user(self):
        updated = accounts.update_user(self.user['id'], username='李工程师', password='newpass')

        self.assertEqual(updated['username'], '李工程师')
        self.assertTrue(accounts.validate_password(self.user['id'], 'newpass'))
        self.assertEqual(accounts.update_user(self.user['id']).code, INVALID_OPERATION)
        self.assertEqual(accounts.update_user(9999, username='x').code, NOT_FOUND)

    def test_update_user_conflict(self):
        accounts.create_user('wang@example.com', '王工', 'pw')
        self.assertEqual(accounts.update_user(self.user['id'], username='王工').code, INVALID_OPERATION)

    def test_usernames_and_admin(self):
        User.objects.filter(id=self.user['id']).update(permission=User.PERMISSION_ADMIN)

        self.assertEqual(accounts.get_usernames([self.user['id'], None]), {self.user['id']: '李工'})
        self.assertTrue(accounts.is_admin(self.user['id']))
        self.assertEqual(accounts.get_user_count(), 1)

    def test_find_user(self):
        self.assertEqual(accounts.find_by_username('李工')['email'], 'li@example.com')
        self.assertEqual(accounts.find_by_id(self.user['id'])['username'], '李工')
        self.assertIsNone(accounts.find_by_username('不存在'))
        self.assertNotIn('password_hash', accounts.find_by_username('李工'))

    def test_delete_user(self):
        self.assertTrue(accounts.delete_user(self.user['id']))
        self.assertFalse(accounts.delete_user(self.user['id']))
        self.assertIsNone(accounts.find_by_email('li@example.com'))


class TokenTests(TestCase):
    def test_token_round_trip(self):
        token = tokens.generate_token({'id': 7, 'username': '赵工'})
        self.assertEqual(tokens.decode_token(token), 7)

    def test_expired_token(self):
        past = datetime.now(timezone.utc) - timedelta(days=1)
        token = jwt.encode(
            {'user_id': 7, 'exp': past, 'iat': past - timedelta(hours=1)},
            settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
        )
        self.assertIsNone(tokens.decode_token(token))

    def test_invalid_token(self):
        self.assertIsNone(tokens.decode_token('not-a-token'))
        self.assertIsNone(tokens.decode_token(''))
