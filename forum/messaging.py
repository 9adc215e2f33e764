# -*- coding: utf-8 -*-

"""
站内私信

A 与 B 的对话由两个方向的消息共同组成，按发送时间排序。
"""
import logging
from typing import Any, Dict, List, Optional

from django.db.models import Count, Q

from mindocean.errors import coerce_non_negative, invalid_operation, not_found, store_operation
from users.accounts import get_usernames
from users.models import User

from .models import Message
from .serializers import serialize_message

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50


def _between(user_id: int, other_id: int) -> Q:
    return (Q(sender_id=user_id) & Q(receiver_id=other_id)) | (Q(sender_id=other_id) & Q(receiver_id=user_id))


def _serialize_many(messages) -> List[Dict[str, Any]]:
    messages = list(messages)
    ids = set()
    for message in messages:
        ids.add(message.sender_id)
        ids.add(message.receiver_id)
    usernames = get_usernames(ids)
    return [serialize_message(m, usernames) for m in messages]


@store_operation
def send_message(sender_id: int, receiver_id: int, content: str):
    if sender_id == receiver_id:
        return invalid_operation('不能给自己发送消息')
    if not User.objects.filter(id=receiver_id).exists():
        return not_found('接收用户不存在')

    message = Message.objects.create(sender_id=sender_id, receiver_id=receiver_id, content=content)
    logger.info(f'用户 {sender_id} 向用户 {receiver_id} 发送消息 {message.id}')
    return _serialize_many([message])[0]


@store_operation
def get_message(message_id: int) -> Optional[Dict[str, Any]]:
    message = Message.objects.filter(id=message_id).first()
    return _serialize_many([message])[0] if message else None


@store_operation
def get_conversation(user_id: int, other_id: int, limit=DEFAULT_LIMIT, offset=0) -> List[Dict[str, Any]]:
    limit = coerce_non_negative(limit, DEFAULT_LIMIT)
    offset = coerce_non_negative(offset, 0)
    queryset = Message.objects.filter(_between(user_id, other_id)).order_by('created_at', 'id')
    return _serialize_many(queryset[offset:offset + limit])


@store_operation
def get_user_messages(user_id: int, limit=DEFAULT_LIMIT, offset=0) -> List[Dict[str, Any]]:
    """收到的消息，最新在前"""
    limit = coerce_non_negative(limit, DEFAULT_LIMIT)
    offset = coerce_non_negative(offset, 0)
    queryset = Message.objects.filter(receiver_id=user_id).order_by('-created_at', '-id')
    return _serialize_many(queryset[offset:offset + limit])


@store_operation
def get_contacts(user_id: int) -> List[Dict[str, Any]]:
    """
    联系人列表

    每个联系人一条记录：双方往来消息中最新的一条，按最近会话时间倒序。
    """
    queryset = Message.objects.filter(Q(sender_id=user_id) | Q(receiver_id=user_id)).order_by('-created_at', '-id')

    latest = {}
    for message in queryset.iterator():
        other_id = message.receiver_id if message.sender_id == user_id else message.sender_id
        if other_id not in latest:
            latest[other_id] = message

    contacts = _serialize_many(latest.values())
    unread = dict(
        Message.objects.filter(receiver_id=user_id, is_read=False)
        .values('sender_id')
        .annotate(count=Count('id'))
        .values_list('sender_id', 'count')
    )
    for contact in contacts:
        other_id = contact['receiver_id'] if contact['sender_id'] == user_id else contact['sender_id']
        contact['other_id'] = other_id
        contact['unread_count'] = unread.get(other_id, 0)
    return contacts


@store_operation
def mark_conversation_read(user_id: int, other_id: int) -> int:
    """把 other_id 发给 user_id 的消息全部标记为已读（单向）"""
    return Message.objects.filter(receiver_id=user_id, sender_id=other_id, is_read=False).update(is_read=True)


@store_operation
def mark_message_read(message_id: int, user_id: int) -> bool:
    """只有接收者可以标记"""
    return Message.objects.filter(id=message_id, receiver_id=user_id).update(is_read=True) > 0


@store_operation
def get_unread_count(user_id: int) -> int:
    return Message.objects.filter(receiver_id=user_id, is_read=False).count()
