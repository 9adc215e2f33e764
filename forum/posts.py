# -*- coding: utf-8 -*-

"""
帖子存储：创建、查询、搜索排序、更新、软删除、浏览量
"""
import logging
from typing import Any, Dict, Iterable, List, Optional

from django.db import transaction
from django.db.models import Count, ExpressionWrapper, F, IntegerField, Q, Sum

from mindocean.errors import coerce_non_negative, invalid_operation, not_found, store_operation
from users.accounts import get_usernames

from . import gamification
from .models import Post
from .search import Casefold
from .serializers import serialize_post

logger = logging.getLogger(__name__)

SORT_LATEST = 'latest'
SORT_HOT = 'hot'
SORT_ESSENCE = 'essence'
SORT_CHOICES = (SORT_LATEST, SORT_HOT, SORT_ESSENCE)

CATEGORY_ALL = 'all'

EDITABLE_FIELDS = ('title', 'content', 'category', 'tags', 'type', 'attachments')

DEFAULT_LIMIT = 20


def _valid_categories():
    return {choice[0] for choice in Post.CATEGORY_CHOICES}


def _valid_types():
    return {choice[0] for choice in Post.TYPE_CHOICES}


def _active_posts():
    return Post.objects.filter(status=Post.STATUS_ACTIVE).annotate(comment_count=Count('comments'))


def _paginate(queryset, limit, offset) -> List[Dict[str, Any]]:
    limit = coerce_non_negative(limit, DEFAULT_LIMIT)
    offset = coerce_non_negative(offset, 0)
    return [serialize_post(p) for p in queryset[offset:offset + limit]]


@store_operation
def create_post(title: str, content: str, category: str, author_id: int,
                author_name: Optional[str] = None, tags: Optional[Iterable[str]] = None,
                type: str = Post.TYPE_HELP, attachments: Optional[Iterable[dict]] = None):
    """
    发布帖子并为作者增加发帖积分

    标题/内容是否为空由调用方校验。
    """
    if category not in _valid_categories():
        return invalid_operation('帖子板块不合法')
    type_value = type or Post.TYPE_HELP
    if type_value not in _valid_types():
        return invalid_operation('帖子类型不合法')

    if not author_name:
        author_name = get_usernames([author_id]).get(author_id) or str(author_id)

    with transaction.atomic():
        post = Post.objects.create(
            title=title,
            content=content,
            category=category,
            tags=list(tags or []),
            type=type_value,
            attachments=list(attachments or []),
            author_id=author_id,
            author_name=author_name,
        )
        gamification.add_points(
            author_id,
            gamification.POINT_RULES[gamification.REASON_POST_CREATED],
            gamification.REASON_POST_CREATED,
        )

    logger.info(f'用户 {author_id} 发布帖子 {post.id}')
    return serialize_post(post)


@store_operation
def get_post(post_id: int) -> Optional[Dict[str, Any]]:
    """按ID获取帖子（包括已软删除的帖子）"""
    post = Post.objects.annotate(comment_count=Count('comments')).filter(id=post_id).first()
    return serialize_post(post) if post else None


@store_operation
def list_posts(category: Optional[str] = None, search: Optional[str] = None, sort: Optional[str] = SORT_LATEST,
               limit=DEFAULT_LIMIT, offset=0):
    """
    帖子列表

    - category: 板块筛选，"all" 或空表示不筛选
    - search: 按空白拆分为多个关键词，每个关键词都必须出现在标题或正文中（不区分大小写的子串匹配）
    - sort: latest（置顶优先，最新）/ hot（置顶优先，浏览量+评论数）/ essence（仅精华，排序同 latest）
    """
    sort = sort or SORT_LATEST
    if sort not in SORT_CHOICES:
        return invalid_operation('排序方式不合法')

    queryset = _active_posts()

    if category and category != CATEGORY_ALL:
        if category not in _valid_categories():
            return invalid_operation('帖子板块不合法')
        queryset = queryset.filter(category=category)

    if search:
        queryset = queryset.alias(title_folded=Casefold('title'), content_folded=Casefold('content'))
        for term in search.split():
            folded = term.casefold()
            queryset = queryset.filter(Q(title_folded__contains=folded) | Q(content_folded__contains=folded))

    if sort == SORT_ESSENCE:
        queryset = queryset.filter(is_essence=True)

    if sort == SORT_HOT:
        queryset = queryset.annotate(
            hot_score=ExpressionWrapper(F('views') + F('comment_count'), output_field=IntegerField()),
        ).order_by('-is_top', '-hot_score', '-created_at', '-id')
    else:
        queryset = queryset.order_by('-is_top', '-created_at', '-id')

    return _paginate(queryset, limit, offset)


@store_operation
def update_post(post_id: int, fields: Dict[str, Any]):
    """
    更新帖子，仅标题/内容/板块/标签/类型/附件可修改

    权限（作者或管理员）由调用方检查。
    """
    post = Post.objects.filter(id=post_id).first()
    if not post:
        return not_found('帖子不存在')

    update_fields = []
    for field in EDITABLE_FIELDS:
        if field not in fields:
            continue
        value = fields[field]
        if field == 'category' and value not in _valid_categories():
            return invalid_operation('帖子板块不合法')
        if field == 'type' and value not in _valid_types():
            return invalid_operation('帖子类型不合法')
        if field in ('tags', 'attachments'):
            value = list(value or [])
        setattr(post, field, value)
        update_fields.append(field)

    update_fields.append('updated_at')
    post.save(update_fields=update_fields)
    return get_post(post.id)


@store_operation
def delete_post(post_id: int):
    """软删除：评论、点赞、收藏保持不变"""
    post = Post.objects.filter(id=post_id).first()
    if not post:
        return not_found('帖子不存在')

    post.status = Post.STATUS_DELETED
    post.save(update_fields=['status', 'updated_at'])
    logger.info(f'帖子 {post_id} 已删除')
    return serialize_post(post)


@store_operation
def increment_views(post_id: int) -> None:
    Post.objects.filter(id=post_id).update(views=F('views') + 1)


def _set_flag(post_id: int, field: str, value: bool):
    post = Post.objects.filter(id=post_id).first()
    if not post:
        return not_found('帖子不存在')
    setattr(post, field, bool(value))
    post.save(update_fields=[field])
    return serialize_post(post)


@store_operation
def set_top(post_id: int, is_top: bool):
    return _set_flag(post_id, 'is_top', is_top)


@store_operation
def set_essence(post_id: int, is_essence: bool):
    return _set_flag(post_id, 'is_essence', is_essence)


@store_operation
def get_posts_by_ids(post_ids: Iterable[int], limit=50, offset=0) -> List[Dict[str, Any]]:
    post_ids = list(post_ids or [])
    if not post_ids:
        return []
    queryset = _active_posts().filter(id__in=post_ids).order_by('-created_at', '-id')
    return _paginate(queryset, limit, offset)


@store_operation
def get_user_posts(user_id: int, limit=DEFAULT_LIMIT, offset=0) -> List[Dict[str, Any]]:
    queryset = _active_posts().filter(author_id=user_id).order_by('-created_at', '-id')
    return _paginate(queryset, limit, offset)


@store_operation
def get_user_post_count(user_id: int) -> int:
    return Post.objects.filter(author_id=user_id, status=Post.STATUS_ACTIVE).count()


@store_operation
def get_user_received_likes(user_id: int) -> int:
    total = Post.objects.filter(author_id=user_id).aggregate(total=Sum('likes'))['total']
    return total or 0
