# bodyshop/middleware/rbac.py
import logging

import jwt
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer

from bodyshop.core.error_messages import ErrorResponses
from bodyshop.utils.auth_utils import JWTConfig, decode_token, get_jwt_config

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

ADMIN = "admin"
STAFF = "staff"
CLIENT = "client"


def get_current_user(
    token: str = Depends(oauth2_scheme),
    config: JWTConfig = Depends(get_jwt_config),
) -> dict:
    try:
        return decode_token(token, config)
    except jwt.ExpiredSignatureError:
        raise ErrorResponses.TOKEN_EXPIRED
    except jwt.InvalidTokenError as e:
        logger.warning("Authentication error: %s", e)
        raise ErrorResponses.INVALID_TOKEN


def is_privileged(user: dict) -> bool:
    return user.get("role") in (ADMIN, STAFF)


def require_roles(*roles: str):
    def checker(user: dict = Depends(get_current_user)) -> dict:
        if user.get("role") not in roles:
            raise ErrorResponses.ACCESS_DENIED
        return user
    return checker


is_admin = require_roles(ADMIN)
is_staff = require_roles(ADMIN, STAFF)
