# bodyshop/utils/auth_utils.py
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from fastapi import Request

from bodyshop.core.config import Settings


@dataclass(frozen=True)
class JWTConfig:
    secret_key: str
    algorithm: str = "HS256"
    access_expires: timedelta = timedelta(hours=24)
    refresh_expires: timedelta = timedelta(days=7)

    @classmethod
    def from_settings(cls, settings: Settings) -> "JWTConfig":
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.ALGORITHM,
            access_expires=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_expires=timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
        )


def get_jwt_config(request: Request) -> JWTConfig:
    return request.app.state.jwt_config


def _encode(data: dict, config: JWTConfig, token_type: str, expires_delta: timedelta) -> str:
    to_encode = data.copy()
    to_encode.update({"type": token_type, "exp": datetime.now(timezone.utc) + expires_delta})
    return jwt.encode(to_encode, config.secret_key, algorithm=config.algorithm)


def create_access_token(data: dict, config: JWTConfig, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(data, config, "access", expires_delta or config.access_expires)


def create_refresh_token(data: dict, config: JWTConfig, expires_delta: Optional[timedelta] = None) -> str:
    return _encode(data, config, "refresh", expires_delta or config.refresh_expires)


def decode_token(token: str, config: JWTConfig, expected_type: str = "access") -> dict:
    payload = jwt.decode(token, config.secret_key, algorithms=[config.algorithm])
    if payload.get("type") != expected_type:
        raise jwt.InvalidTokenError(f"Expected a {expected_type} token")
    return payload
