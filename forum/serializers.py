"""论坛实体序列化为普通字典（JSON 可直接输出）"""
from typing import Any, Dict, Optional

from .models import Comment, Message, Post


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


def serialize_post(post: Post) -> Dict[str, Any]:
    result = {
        'id': post.id,
        'title': post.title,
        'content': post.content,
        'category': post.category,
        'tags': list(post.tags or []),
        'type': post.type,
        'attachments': list(post.attachments or []),
        'author_id': post.author_id,
        'author_name': post.author_name,
        'views': post.views,
        'likes': post.likes,
        'is_top': post.is_top,
        'is_essence': post.is_essence,
        'status': post.status,
        'created_at': _iso(post.created_at),
        'updated_at': _iso(post.updated_at),
    }
    comment_count = getattr(post, 'comment_count', None)
    if comment_count is not None:
        result['comment_count'] = comment_count
    return result


def serialize_comment(comment: Comment) -> Dict[str, Any]:
    return {
        'id': comment.id,
        'post_id': comment.post_id,
        'author_id': comment.author_id,
        'author_name': comment.author_name,
        'content': comment.content,
        'parent_id': comment.parent_id,
        'reply_to_user': comment.reply_to_user or None,
        'depth': comment.depth,
        'is_accepted': comment.is_accepted,
        'created_at': _iso(comment.created_at),
    }


def serialize_message(message: Message, usernames: Optional[Dict[int, str]] = None) -> Dict[str, Any]:
    usernames = usernames or {}
    return {
        'id': message.id,
        'sender_id': message.sender_id,
        'receiver_id': message.receiver_id,
        'sender_name': usernames.get(message.sender_id),
        'receiver_name': usernames.get(message.receiver_id),
        'content': message.content,
        'is_read': message.is_read,
        'created_at': _iso(message.created_at),
    }
