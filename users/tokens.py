"""JWT 签发与校验"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from django.conf import settings

logger = logging.getLogger(__name__)


def generate_token(user: Dict[str, Any]) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        'user_id': user['id'],
        'username': user['username'],
        'exp': now + timedelta(seconds=settings.JWT_EXP_DELTA_SECONDS),
        'iat': now,
    }
    token = jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)
    if isinstance(token, bytes):
        token = token.decode('utf-8')
    return token


def decode_token(token: str) -> Optional[int]:
    """
    校验 token 并返回其中的 user_id

    过期或签名无效时返回 None
    """
    if not token:
        return None
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        logger.info('token已过期')
        return None
    except jwt.InvalidTokenError:
        logger.info('无效的token')
        return None
    return payload.get('user_id')
