"""
Token auth for cart routes

Tokens are stateless HS256 JWTs carrying {"user": {"id": ...}}. No expiry is
set at issuance, so a token stays valid for as long as the secret does.
"""
import logging
from typing import Optional

import jwt
from fastapi import Header, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)

TOKEN_HEADER = "auth-token"
TOKEN_SECRET = "ecom_token"
TOKEN_ALGORITHM = "HS256"


class Unauthorized(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def unauthorized_handler(request: Request, exc: Unauthorized):
    return JSONResponse(status_code=401, content={"errors": exc.message})


def create_token(user_id: str) -> str:
    payload = {"user": {"id": user_id}}
    return jwt.encode(payload, TOKEN_SECRET, algorithm=TOKEN_ALGORITHM)


def decode_token(token: str) -> str:
    """Verify a token and return the user id it carries"""
    try:
        data = jwt.decode(token, TOKEN_SECRET, algorithms=[TOKEN_ALGORITHM])
        return str(data["user"]["id"])
    except (jwt.InvalidTokenError, KeyError, TypeError) as e:
        logger.info("Rejected token: %s", e)
        raise Unauthorized("use valid token")


def fetch_user(request: Request, token: Optional[str] = Header(None, alias=TOKEN_HEADER)) -> str:
    """Route dependency: resolve the caller's user id or stop with 401"""
    if not token:
        raise Unauthorized("No valid token")
    user_id = decode_token(token)
    request.state.user_id = user_id
    return user_id
