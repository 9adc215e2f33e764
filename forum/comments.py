# -*- coding: utf-8 -*-

"""
帖子评论

评论最多两级展示：回复一条回复时，新评论挂到最初的顶层评论下（depth 固定为 1），
reply_to_user 记录被回复者的显示名。
"""
import logging
from typing import Any, Dict, List, Optional

from django.db import transaction

from mindocean.errors import invalid_operation, not_found, store_operation
from users.accounts import get_usernames

from . import gamification
from .models import Comment, Post
from .serializers import serialize_comment

logger = logging.getLogger(__name__)

MAX_DEPTH = 1


@store_operation
def create_comment(post_id: int, author_id: int, content: str, parent_comment_id: Optional[int] = None,
                   author_name: Optional[str] = None):
    post = Post.objects.filter(id=post_id).first()
    if not post:
        return not_found('帖子不存在')

    parent = None
    depth = 0
    reply_to_user = ''
    if parent_comment_id is not None:
        parent = Comment.objects.filter(id=parent_comment_id).first()
        if not parent:
            return not_found('回复的评论不存在')
        if parent.post_id != post.id:
            return invalid_operation('回复的评论不属于该帖子')

        reply_to_user = parent.author_name
        # 回复的是二级评论时，挂到其顶层评论下
        if parent.depth >= MAX_DEPTH and parent.parent_id is not None:
            parent = Comment.objects.filter(id=parent.parent_id).first() or parent
        depth = MAX_DEPTH

    if not author_name:
        author_name = get_usernames([author_id]).get(author_id) or str(author_id)

    with transaction.atomic():
        comment = Comment.objects.create(
            post=post,
            author_id=author_id,
            author_name=author_name,
            content=content,
            parent=parent,
            reply_to_user=reply_to_user,
            depth=depth,
        )
        gamification.add_points(
            author_id,
            gamification.POINT_RULES[gamification.REASON_COMMENT_CREATED],
            gamification.REASON_COMMENT_CREATED,
        )

    logger.info(f'用户 {author_id} 评论帖子 {post_id}（评论 {comment.id}，depth={depth}）')
    return serialize_comment(comment)


@store_operation
def get_comment(comment_id: int) -> Optional[Dict[str, Any]]:
    comment = Comment.objects.filter(id=comment_id).first()
    return serialize_comment(comment) if comment else None


@store_operation
def get_comments_for_post(post_id: int) -> List[Dict[str, Any]]:
    """
    获取帖子评论树

    父评论不在结果集中的评论按顶层评论处理，不会被丢弃。
    """
    flat = Comment.objects.filter(post_id=post_id).order_by('created_at', 'id')

    nodes: Dict[int, Dict[str, Any]] = {}
    order: List[int] = []
    for comment in flat:
        node = serialize_comment(comment)
        node['replies'] = []
        nodes[comment.id] = node
        order.append(comment.id)

    roots = []
    for comment_id in order:
        node = nodes[comment_id]
        parent = nodes.get(node['parent_id']) if node['parent_id'] is not None else None
        if parent is None:
            roots.append(node)
        else:
            parent['replies'].append(node)
    return roots


@store_operation
def accept_comment(comment_id: int):
    """采纳评论，评论作者获得采纳积分；重复采纳不重复加分"""
    with transaction.atomic():
        comment = Comment.objects.select_for_update().filter(id=comment_id).first()
        if not comment:
            return not_found('评论不存在')
        if comment.is_accepted:
            return serialize_comment(comment)

        comment.is_accepted = True
        comment.save(update_fields=['is_accepted'])
        gamification.add_points(
            comment.author_id,
            gamification.POINT_RULES[gamification.REASON_COMMENT_ACCEPTED],
            gamification.REASON_COMMENT_ACCEPTED,
        )
    return serialize_comment(comment)
