from passlib.context import CryptContext

from auction_site.core.config import settings

# Password hashing
pwd_context = CryptContext(schemes=settings.PASSWORD_SCHEMES, deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password"""
    return pwd_context.hash(password)
