import hashlib
import logging
import secrets
from typing import Optional

import jwt
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Header
from pydantic import ValidationError
from pymongo.errors import DuplicateKeyError

import config
import database
from database import create_document
from errors import DuplicateEmail, InvalidCredentials, InvalidEmail, Unauthenticated, UnknownUser
from schemas import User as UserSchema

logger = logging.getLogger(__name__)

TOKEN_ALGORITHM = "HS256"


def hash_password(password: str, salt: Optional[str] = None) -> str:
    salt = salt or secrets.token_hex(8)
    return salt + "$" + hashlib.sha256((salt + password).encode()).hexdigest()


def verify_password(password: str, stored: str) -> bool:
    try:
        salt, _ = stored.split("$")
    except ValueError:
        return False
    return secrets.compare_digest(hash_password(password, salt), stored)


def issue_token(user_id: str, secret: Optional[str] = None) -> str:
    # no exp claim: tokens stay valid until the signing secret changes
    return jwt.encode({"user": {"id": user_id}}, secret or config.SECRET_KEY, algorithm=TOKEN_ALGORITHM)


def decode_token(token: str, secret: Optional[str] = None) -> str:
    try:
        data = jwt.decode(token, secret or config.SECRET_KEY, algorithms=[TOKEN_ALGORITHM])
        return str(data["user"]["id"])
    except (jwt.InvalidTokenError, KeyError, TypeError):
        raise Unauthenticated()


def user_object_id(user_id: str) -> ObjectId:
    try:
        return ObjectId(user_id)
    except (InvalidId, TypeError):
        raise UnknownUser()


def get_user_by_email(email: str) -> Optional[dict]:
    return database.get_db()["user"].find_one({"email": email})


def signup(name: str, email: str, password: str) -> str:
    if get_user_by_email(email):
        raise DuplicateEmail()
    try:
        user = UserSchema(name=name, email=email, password_hash=hash_password(password))
    except ValidationError:
        raise InvalidEmail()
    try:
        user_id = create_document("user", user)
    except DuplicateKeyError:
        # lost the race against a concurrent signup for the same email
        raise DuplicateEmail()
    logger.info("Created user %s", user_id)
    return issue_token(user_id)


def login(email: str, password: str) -> str:
    user = get_user_by_email(email)
    if not user or not verify_password(password, user.get("password_hash", "")):
        logger.warning("Failed login for %s", email)
        raise InvalidCredentials()
    return issue_token(str(user["_id"]))


def authenticate(token: Optional[str]) -> str:
    """Return the user id carried by a bearer token.

    Raises Unauthenticated when the token is missing, malformed or signed
    with another secret. Expiry is never checked.
    """
    if not token:
        raise Unauthenticated()
    try:
        return decode_token(token)
    except Unauthenticated:
        logger.warning("Rejected auth token")
        raise


def fetch_user(auth_token: Optional[str] = Header(None, alias="auth-token")) -> str:
    return authenticate(auth_token)


def get_profile(user_id: str) -> dict:
    user = database.get_db()["user"].find_one({"_id": user_object_id(user_id)}, {"name": 1, "email": 1})
    if not user:
        raise UnknownUser()
    return {"name": user.get("name", ""), "email": user.get("email")}
