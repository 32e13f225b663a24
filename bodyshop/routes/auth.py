# bodyshop/routes/auth.py
import logging

import jwt
from fastapi import APIRouter, Depends, Request, Security

from bodyshop.core.config import Settings, get_app_settings
from bodyshop.core.error_messages import ErrorResponses
from bodyshop.database import get_db
from bodyshop.middleware.rbac import ADMIN, CLIENT, get_current_user, is_admin
from bodyshop.models import user as user_model
from bodyshop.schemas.user import (
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    RoleUpdate,
    TokenResponse,
    UserOut,
)
from bodyshop.utils.audit_logger import client_ip, create_audit_log
from bodyshop.utils.auth_utils import (
    JWTConfig,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_jwt_config,
)
from bodyshop.utils.hash_utils import hash_password, verify_password

logger = logging.getLogger(__name__)

auth_router = APIRouter(tags=["Auth"])


def _token_pair(user: dict, config: JWTConfig) -> dict:
    claims = {"id": user["id"], "email": user["email"], "role": user["role"]}
    return {
        "access_token": create_access_token(claims, config),
        "refresh_token": create_refresh_token(claims, config),
        "role": user["role"],
    }


@auth_router.post("/register", status_code=201)
async def register(
    data: RegisterSchema,
    db=Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    if await user_model.get_user_by_email(db, data.email):
        raise ErrorResponses.USER_EXISTS

    is_bootstrap_admin = (
        settings.ADMIN_EMAIL is not None
        and data.email == settings.ADMIN_EMAIL
        and data.password == settings.ADMIN_PASSWORD
    )
    role = ADMIN if is_bootstrap_admin else CLIENT

    user_data = {**data.model_dump(), "password": hash_password(data.password), "role": role}
    user_id = await user_model.create_user(db, user_data)
    logger.info("User registered: %s (%s)", user_id, role)
    return {"message": "Registered successfully", "user_id": user_id}


@auth_router.post("/login", response_model=TokenResponse)
async def login(data: LoginSchema, db=Depends(get_db), config: JWTConfig = Depends(get_jwt_config)):
    user = await user_model.get_user_by_email(db, data.email)
    if not user or not verify_password(data.password, user["password"]):
        raise ErrorResponses.INVALID_CREDENTIALS
    return _token_pair(user, config)


@auth_router.post("/refresh", response_model=TokenResponse)
async def refresh_token(data: RefreshSchema, db=Depends(get_db), config: JWTConfig = Depends(get_jwt_config)):
    try:
        payload = decode_token(data.refresh_token, config, expected_type="refresh")
    except jwt.ExpiredSignatureError:
        raise ErrorResponses.TOKEN_EXPIRED
    except jwt.InvalidTokenError:
        raise ErrorResponses.INVALID_TOKEN

    # role is re-read so a promotion or demotion applies on the next refresh
    user = await user_model.get_user(db, payload.get("id"))
    if not user:
        raise ErrorResponses.USER_NOT_FOUND
    return _token_pair(user, config)


@auth_router.get("/me", response_model=UserOut)
async def get_current_user_info(current_user: dict = Security(get_current_user), db=Depends(get_db)):
    user = await user_model.get_user(db, current_user["id"])
    if not user:
        raise ErrorResponses.USER_NOT_FOUND
    return user


# Admin: promote / demote accounts
@auth_router.patch("/users/{user_id}/role", response_model=UserOut)
async def set_role(
    user_id: int,
    data: RoleUpdate,
    request: Request,
    admin=Depends(is_admin),
    db=Depends(get_db),
):
    user = await user_model.get_user(db, user_id)
    if not user:
        raise ErrorResponses.USER_NOT_FOUND

    await user_model.set_user_role(db, user_id, data.role)
    await create_audit_log(
        db,
        user_id=admin["id"],
        action="update",
        table_name="users",
        record_id=user_id,
        old_values={"role": user["role"]},
        new_values={"role": data.role},
        ip_address=client_ip(request),
    )
    return {**user, "role": data.role}
