from datetime import datetime, timezone

import structlog
from passlib.context import CryptContext
from sqlalchemy.ext.asyncio import AsyncSession

from shared.errors import (
    ConflictException,
    ErrorCode,
    ForbiddenException,
    NotFoundException,
    UnauthorizedException,
)
from shared.security.jwt_handler import create_access_token

from .models import User
from .repository import UserRepository
from .schemas import ProfileResponse, TokenResponse, UserCreate, UserLogin

logger = structlog.get_logger(__name__)

_pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


class AuthService:

    @staticmethod
    def _hash_password(password: str) -> str:
        return _pwd_context.hash(password)

    @staticmethod
    def _verify_password(plain: str, hashed: str) -> bool:
        return _pwd_context.verify(plain, hashed)

    @staticmethod
    async def create_user(db: AsyncSession, data: UserCreate, role: str = "customer") -> User:
        email = data.email.lower()
        existing = await UserRepository.find_conflicting(db, data.name, email, data.phone)
        if existing:
            raise ConflictException(
                "User with this name, email or phone already exists",
                ErrorCode.USER_ALREADY_EXISTS,
            )
        user = User(
            name=data.name,
            email=email,
            phone=data.phone,
            role=role,
            hashed_password=AuthService._hash_password(data.password),
        )
        user = await UserRepository.create(db, user)
        logger.info("user_created", user_id=user.id, role=role)
        return user

    @staticmethod
    async def register(db: AsyncSession, data: UserCreate) -> User:
        return await AuthService.create_user(db, data, role="customer")

    @staticmethod
    async def login(db: AsyncSession, data: UserLogin) -> TokenResponse:
        user = await UserRepository.get_by_email(db, data.email.lower())
        if not user or not AuthService._verify_password(data.password, user.hashed_password):
            raise UnauthorizedException("Incorrect email or password", ErrorCode.INVALID_CREDENTIALS)
        if not user.is_active:
            raise ForbiddenException("Account is disabled", ErrorCode.ACCOUNT_DISABLED)

        user.last_login = datetime.now(timezone.utc)
        await UserRepository.update(db, user)

        token = create_access_token(user.id, user.role)
        return TokenResponse(access_token=token, role=user.role)

    @staticmethod
    async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
        user = await UserRepository.get_by_id(db, user_id)
        if not user:
            raise NotFoundException("User not found")
        return user

    @staticmethod
    async def get_profile(db: AsyncSession, user_id: int) -> ProfileResponse:
        user = await AuthService.get_user_by_id(db, user_id)
        orders, total_spent = await UserRepository.get_order_stats(db, user.id)
        profile = ProfileResponse.model_validate(user)
        profile.orders = orders
        profile.total_spent = total_spent
        return profile
