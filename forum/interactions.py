# -*- coding: utf-8 -*-

"""
点赞 / 收藏

点赞记录与帖子 likes 计数在同一事务内变更，任何一步失败都会整体回滚。
"""
import logging
from typing import List

from django.db import transaction
from django.db.models import F

from mindocean.errors import not_found, store_operation

from . import gamification
from .models import Collection, Like, Post

logger = logging.getLogger(__name__)


@store_operation
def toggle_like(post_id: int, user_id: int):
    """
    点赞 / 取消点赞

    Returns:
        dict: {'liked': bool, 'likes': int}
    """
    with transaction.atomic():
        post = Post.objects.select_for_update().filter(id=post_id).first()
        if not post:
            return not_found('帖子不存在')

        deleted, _ = Like.objects.filter(user_id=user_id, post=post).delete()
        if deleted:
            Post.objects.filter(id=post.id).update(likes=F('likes') - 1)
            liked = False
        else:
            Like.objects.create(user_id=user_id, post=post)
            Post.objects.filter(id=post.id).update(likes=F('likes') + 1)
            liked = True

        # 自己给自己点赞只计数，不改积分
        if post.author_id != user_id:
            delta = gamification.POINT_RULES[gamification.REASON_POST_LIKED]
            if liked:
                gamification.add_points(post.author_id, delta, gamification.REASON_POST_LIKED)
            else:
                gamification.add_points(post.author_id, -delta, gamification.REASON_POST_UNLIKED)

        likes = Post.objects.values_list('likes', flat=True).get(id=post.id)

    logger.info(f'用户 {user_id} {"点赞" if liked else "取消点赞"}帖子 {post_id}，当前点赞数 {likes}')
    return {'liked': liked, 'likes': likes}


@store_operation
def toggle_collect(post_id: int, user_id: int):
    """
    收藏 / 取消收藏

    Returns:
        dict: {'collected': bool}
    """
    with transaction.atomic():
        if not Post.objects.filter(id=post_id).exists():
            return not_found('帖子不存在')

        deleted, _ = Collection.objects.filter(user_id=user_id, post_id=post_id).delete()
        if deleted:
            return {'collected': False}
        Collection.objects.create(user_id=user_id, post_id=post_id)
    return {'collected': True}


@store_operation
def is_liked(post_id: int, user_id: int) -> bool:
    return Like.objects.filter(user_id=user_id, post_id=post_id).exists()


@store_operation
def is_collected(post_id: int, user_id: int) -> bool:
    return Collection.objects.filter(user_id=user_id, post_id=post_id).exists()


@store_operation
def get_post_status(post_id: int, user_id: int):
    """当前用户对帖子的互动状态"""
    likes = Post.objects.filter(id=post_id).values_list('likes', flat=True).first()
    if likes is None:
        return not_found('帖子不存在')
    return {
        'liked': is_liked(post_id, user_id),
        'collected': is_collected(post_id, user_id),
        'likes': likes,
    }


@store_operation
def get_user_liked_posts(user_id: int) -> List[int]:
    return list(Like.objects.filter(user_id=user_id).order_by('-created_at').values_list('post_id', flat=True))


@store_operation
def get_user_collected_posts(user_id: int) -> List[int]:
    return list(
        Collection.objects.filter(user_id=user_id).order_by('-created_at').values_list('post_id', flat=True)
    )


@store_operation
def get_user_like_count(user_id: int) -> int:
    return Like.objects.filter(user_id=user_id).count()


@store_operation
def get_user_collect_count(user_id: int) -> int:
    return Collection.objects.filter(user_id=user_id).count()
