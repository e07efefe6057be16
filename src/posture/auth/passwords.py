"""Argon2id password hashing with a server-side pepper."""

import logging

from argon2 import PasswordHasher, Type, extract_parameters
from argon2.exceptions import InvalidHashError, VerificationError

from posture.config import settings

logger = logging.getLogger(__name__)


def _hasher() -> PasswordHasher:
    return PasswordHasher(
        time_cost=settings.argon2_time_cost,
        memory_cost=settings.argon2_memory_cost,
        parallelism=settings.argon2_parallelism,
        type=Type.ID,
    )


def _peppered(password: str) -> str:
    return password + settings.password_pepper


def hash_password(password: str) -> str:
    if not password:
        raise ValueError("Password cannot be empty")
    return _hasher().hash(_peppered(password))


def verify_password(password_hash: str, candidate: str) -> bool:
    """Return True when *candidate* matches the stored hash; never raises."""
    if not password_hash or not candidate:
        return False
    try:
        return _hasher().verify(password_hash, _peppered(candidate))
    except (VerificationError, InvalidHashError):
        return False


def needs_rehash(password_hash: str) -> bool:
    """True when the stored hash is not Argon2id or uses weaker parameters than configured."""
    if not password_hash:
        return True
    try:
        params = extract_parameters(password_hash)
    except InvalidHashError:
        logger.debug("Unparseable password hash; scheduling rehash")
        return True
    if params.type is not Type.ID:
        return True
    return (
        params.time_cost < settings.argon2_time_cost
        or params.memory_cost < settings.argon2_memory_cost
        or params.parallelism < settings.argon2_parallelism
    )
