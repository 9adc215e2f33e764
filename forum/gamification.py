# -*- coding: utf-8 -*-

"""
论坛积分与等级

积分规则：
- 发帖 +10
- 帖子被点赞 +5（取消点赞时扣回，自己给自己点赞不计分）
- 发表评论 +3
- 评论被采纳 +20
- 每日登录 +2（每个自然日一次）

等级由积分实时计算，不落库。
"""
import logging
from typing import Any, Dict, List, Optional

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from mindocean.errors import invalid_operation, store_operation

from .models import PointsRecord, UserProfile

logger = logging.getLogger(__name__)

REASON_POST_CREATED = 'post_created'
REASON_POST_LIKED = 'post_liked'
REASON_POST_UNLIKED = 'post_unliked'
REASON_COMMENT_CREATED = 'comment_created'
REASON_COMMENT_ACCEPTED = 'comment_accepted'
REASON_DAILY_LOGIN = 'daily_login'

POINT_RULES = {
    REASON_POST_CREATED: 10,
    REASON_POST_LIKED: 5,
    REASON_COMMENT_CREATED: 3,
    REASON_COMMENT_ACCEPTED: 20,
    REASON_DAILY_LOGIN: 2,
}

# 按 min_points 升序排列
LEVELS: List[Dict[str, Any]] = [
    {'level': 1, 'title': '实习工程师', 'min_points': 0, 'icon': '🌱'},
    {'level': 2, 'title': '助理工程师', 'min_points': 50, 'icon': '🔧'},
    {'level': 3, 'title': '工程师', 'min_points': 200, 'icon': '⚙️'},
    {'level': 4, 'title': '高级工程师', 'min_points': 500, 'icon': '🛠️'},
    {'level': 5, 'title': '资深工程师', 'min_points': 1000, 'icon': '🏅'},
    {'level': 6, 'title': '主任工程师', 'min_points': 2000, 'icon': '🎖️'},
    {'level': 7, 'title': '专家工程师', 'min_points': 4000, 'icon': '🏆'},
    {'level': 8, 'title': '首席工程师', 'min_points': 7000, 'icon': '💎'},
    {'level': 9, 'title': '技术总监', 'min_points': 12000, 'icon': '👑'},
    {'level': 10, 'title': '行业大师', 'min_points': 20000, 'icon': '🌟'},
]

EXPERTISE_OPTIONS = [
    '工艺优化',
    '设备维护',
    '安全管理',
    '环保治理',
    '自动化控制',
    '质量检测',
    '项目管理',
    '催化剂',
    '分离提纯',
    '反应工程',
    '节能降耗',
    '职业规划',
]


def get_level(points: int) -> Dict[str, Any]:
    """
    根据积分计算等级

    积分低于第一档时按第一档处理（积分允许为负）。
    """
    current_index = 0
    for index, tier in enumerate(LEVELS):
        if tier['min_points'] <= points:
            current_index = index
        else:
            break

    tier = LEVELS[current_index]
    next_tier = LEVELS[current_index + 1] if current_index + 1 < len(LEVELS) else None
    return {
        'level': tier['level'],
        'title': tier['title'],
        'icon': tier['icon'],
        'current_level_min_points': tier['min_points'],
        'next_level_min_points': next_tier['min_points'] if next_tier else None,
    }


def get_level_config() -> List[Dict[str, Any]]:
    return [dict(tier) for tier in LEVELS]


def get_expertise_options() -> List[str]:
    return list(EXPERTISE_OPTIONS)


def _get_or_create_profile(user_id: int) -> UserProfile:
    profile, created = UserProfile.objects.get_or_create(user_id=user_id)
    if created:
        logger.info(f'创建论坛用户资料: {user_id}')
    return profile


def _serialize_profile(profile: UserProfile) -> Dict[str, Any]:
    return {
        'user_id': profile.user_id,
        'points': profile.points,
        'level': get_level(profile.points),
        'expertise_tags': list(profile.expertise_tags or []),
        'bio': profile.bio or '',
        'created_at': profile.created_at.isoformat() if profile.created_at else None,
        'updated_at': profile.updated_at.isoformat() if profile.updated_at else None,
    }


@store_operation
def add_points(user_id: int, delta: int, reason: str) -> int:
    """
    调整用户积分并记录流水

    Returns:
        int: 调整后的积分
    """
    with transaction.atomic():
        _get_or_create_profile(user_id)
        UserProfile.objects.filter(user_id=user_id).update(
            points=F('points') + delta,
            updated_at=timezone.now(),
        )
        PointsRecord.objects.create(user_id=user_id, delta=delta, reason=reason)
        points = UserProfile.objects.values_list('points', flat=True).get(user_id=user_id)

    logger.info(f'用户 {user_id} 积分 {delta:+d} ({reason})，当前 {points}')
    return points


@store_operation
def get_profile(user_id: int) -> Dict[str, Any]:
    return _serialize_profile(_get_or_create_profile(user_id))


@store_operation
def get_user_level(user_id: int) -> Dict[str, Any]:
    profile = _get_or_create_profile(user_id)
    return {'points': profile.points, **get_level(profile.points)}


@store_operation
def record_daily_login(user_id: int) -> Optional[int]:
    """
    每日登录奖励，同一自然日内只发放一次

    Returns:
        int | None: 发放后的积分；今日已发放时返回 None
    """
    today_start = timezone.localtime().replace(hour=0, minute=0, second=0, microsecond=0)
    with transaction.atomic():
        already = PointsRecord.objects.filter(
            user_id=user_id,
            reason=REASON_DAILY_LOGIN,
            created_at__gte=today_start,
        ).exists()
        if already:
            return None
        return add_points(user_id, POINT_RULES[REASON_DAILY_LOGIN], REASON_DAILY_LOGIN)


@store_operation
def update_expertise_tags(user_id: int, tags):
    """更新擅长领域标签，超过5个时截断"""
    if not isinstance(tags, (list, tuple)):
        return invalid_operation('擅长领域必须是字符串列表')
    if any(not isinstance(tag, str) for tag in tags):
        return invalid_operation('擅长领域必须是字符串列表')

    cleaned = [tag.strip() for tag in tags if tag.strip()][:UserProfile.MAX_EXPERTISE_TAGS]

    profile = _get_or_create_profile(user_id)
    profile.expertise_tags = cleaned
    profile.save(update_fields=['expertise_tags', 'updated_at'])
    return _serialize_profile(profile)


@store_operation
def update_bio(user_id: int, bio: str) -> Dict[str, Any]:
    """更新个人简介，超过200字符时截断"""
    profile = _get_or_create_profile(user_id)
    profile.bio = (bio or '')[:UserProfile.MAX_BIO_LENGTH]
    profile.save(update_fields=['bio', 'updated_at'])
    return _serialize_profile(profile)


@store_operation
def get_user_stats(user_id: int) -> Dict[str, Any]:
    """用户主页统计：发帖数、点赞数、收藏数、获赞数及等级"""
    from . import interactions, posts

    return {
        'post_count': posts.get_user_post_count(user_id),
        'like_count': interactions.get_user_like_count(user_id),
        'collect_count': interactions.get_user_collect_count(user_id),
        'received_likes': posts.get_user_received_likes(user_id),
        'profile': get_profile(user_id),
    }
