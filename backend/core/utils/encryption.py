"""
Password hashing utilities
"""
from passlib.context import CryptContext

from core.config import settings

# Argon2 unless PASSWORD_HASH_SCHEME names another passlib scheme
pwd_context = CryptContext(schemes=[settings.PASSWORD_HASH_SCHEME], deprecated="auto")


class PasswordManager:
    """
    Password management utility for hashing and verification
    """

    @staticmethod
    def hash_password(password: str) -> str:
        return pwd_context.hash(password)

    @staticmethod
    def verify_password(plain_password: str, hashed_password: str) -> bool:
        return pwd_context.verify(plain_password, hashed_password)
