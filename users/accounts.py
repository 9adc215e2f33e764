# -*- coding: utf-8 -*-

"""
用户账户仓库

所有账户数据只存放在 user 表中，对外返回不含密码哈希的字典。
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from django.contrib.auth.hashers import check_password, make_password
from django.db import transaction

from mindocean.errors import invalid_operation, not_found, store_operation

from .models import User

logger = logging.getLogger(__name__)


def _serialize_user(user: User) -> Dict[str, Any]:
    return {
        'id': user.id,
        'username': user.username,
        'email': user.email,
        'status': user.status or 'normal',
        'permission': user.permission,
        'last_login_time': user.last_login_time.isoformat() if user.last_login_time else None,
        'created_at': user.created_at.isoformat() if user.created_at else None,
        'updated_at': user.updated_at.isoformat() if user.updated_at else None,
    }


@store_operation
def create_user(email: str, username: str, password: str):
    """
    创建用户

    Returns:
        dict: 新用户信息；邮箱或用户名重复时返回 Failure
    """
    email = (email or '').strip()
    username = (username or '').strip()

    if User.objects.filter(email=email).exists():
        return invalid_operation('邮箱已被注册')
    if User.objects.filter(username=username).exists():
        return invalid_operation('用户名已被使用')

    with transaction.atomic():
        user = User.objects.create(
            email=email,
            username=username,
            password_hash=make_password(password),
        )

    logger.info(f'创建用户成功: {user.id} ({user.username})')
    return _serialize_user(user)


@store_operation
def find_by_id(user_id: int) -> Optional[Dict[str, Any]]:
    user = User.objects.filter(id=user_id).first()
    return _serialize_user(user) if user else None


@store_operation
def find_by_email(email: str) -> Optional[Dict[str, Any]]:
    user = User.objects.filter(email=email).first()
    return _serialize_user(user) if user else None


@store_operation
def find_by_username(username: str) -> Optional[Dict[str, Any]]:
    user = User.objects.filter(username=username).first()
    return _serialize_user(user) if user else None


@store_operation
def validate_password(user_id: int, password: str) -> bool:
    user = User.objects.filter(id=user_id).only('password_hash').first()
    if not user:
        return False
    return check_password(password, user.password_hash)


@store_operation
def authenticate(email: str, password: str) -> Optional[Dict[str, Any]]:
    """邮箱 + 密码登录，成功时刷新最后登录时间"""
    user = User.objects.filter(email=(email or '').strip()).first()
    if not user or not check_password(password, user.password_hash):
        return None
    if user.status == 'banned':
        logger.warning(f'封禁用户尝试登录: {user.id}')
        return None

    user.last_login_time = datetime.now(timezone.utc)
    user.save(update_fields=['last_login_time'])
    return _serialize_user(user)


@store_operation
def update_user(user_id: int, email: Optional[str] = None, username: Optional[str] = None,
                password: Optional[str] = None):
    user = User.objects.filter(id=user_id).first()
    if not user:
        return not_found('用户不存在')

    update_fields = []

    if email:
        if User.objects.filter(email=email).exclude(id=user_id).exists():
            return invalid_operation('邮箱已被其他用户使用')
        user.email = email
        update_fields.append('email')

    if username:
        if User.objects.filter(username=username).exclude(id=user_id).exists():
            return invalid_operation('用户名已被其他用户使用')
        user.username = username
        update_fields.append('username')

    if password:
        user.password_hash = make_password(password)
        update_fields.append('password_hash')

    if not update_fields:
        return invalid_operation('没有提供要更新的字段')

    update_fields.append('updated_at')
    user.save(update_fields=update_fields)
    return _serialize_user(user)


@store_operation
def delete_user(user_id: int) -> bool:
    deleted, _ = User.objects.filter(id=user_id).delete()
    if deleted:
        logger.info(f'删除用户: {user_id}')
    return deleted > 0


@store_operation
def get_user_count() -> int:
    return User.objects.count()


@store_operation
def is_admin(user_id: int) -> bool:
    return User.objects.filter(id=user_id, permission__gte=User.PERMISSION_ADMIN).exists()


@store_operation
def get_usernames(user_ids) -> Dict[int, str]:
    """批量查询用户名，供论坛模块补全显示名"""
    ids = {uid for uid in user_ids if uid is not None}
    if not ids:
        return {}
    return dict(User.objects.filter(id__in=ids).values_list('id', 'username'))
