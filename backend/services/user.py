import logging
from typing import Any, Dict, Optional

from core.database import DuplicateEntityError, UserRepository
from core.exceptions import ConflictException, NotFoundException
from core.utils.encryption import PasswordManager
from models.user import User, UserRole
from schemas.user import UserCreate, UserUpdate
from services.kafka_producer import AuthServiceProducer, ServiceResult

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, repository: UserRepository, producer: AuthServiceProducer):
        self.repository = repository
        self.producer = producer
        self.password_manager = PasswordManager()

    async def register_user(self, user_data: UserCreate, correlation_id: Optional[str] = None) -> ServiceResult:
        if await self.repository.get_by_email(user_data.email):
            raise ConflictException("User already exists")

        user = User(
            email=user_data.email,
            name=user_data.name,
            hashed_password=self.password_manager.hash_password(user_data.password),
            role=UserRole(user_data.role),
        )
        try:
            await self.repository.add(user)
        except DuplicateEntityError:
            raise ConflictException("User already exists")

        logger.info(f"User registered: {user.id} ({user.role.value})")
        event = await self.producer.publish_user_registered(user, correlation_id)
        return ServiceResult(user, event)

    async def get_user(self, user_id: str) -> User:
        user = await self.repository.get(user_id)
        if not user:
            raise NotFoundException("User not found", resource="user")
        return user

    async def update_user(
        self, user_id: str, user_data: UserUpdate, correlation_id: Optional[str] = None
    ) -> ServiceResult:
        """
        Apply the given fields and publish UserUpdated with only the fields whose
        value actually changed. Password changes are applied but never published.
        """
        user = await self.get_user(user_id)
        updates = user_data.model_dump(exclude_unset=True, exclude_none=True)
        changes: Dict[str, Any] = {}

        new_email = updates.get("email")
        if new_email and new_email != user.email:
            existing = await self.repository.get_by_email(new_email)
            if existing and existing.id != user.id:
                raise ConflictException("Email already in use")
            user.email = new_email
            changes["email"] = new_email

        new_name = updates.get("name")
        if new_name and new_name != user.name:
            user.name = new_name
            changes["name"] = new_name

        password_changed = "password" in updates
        if password_changed:
            user.hashed_password = self.password_manager.hash_password(updates["password"])

        if not changes and not password_changed:
            return ServiceResult(user, None)

        user.touch()
        await self.repository.save(user)
        if not changes:
            return ServiceResult(user, None)

        event = await self.producer.publish_user_updated(user.id, changes, correlation_id)
        return ServiceResult(user, event)

    async def delete_user(self, user_id: str, correlation_id: Optional[str] = None) -> ServiceResult:
        user = await self.get_user(user_id)
        await self.repository.delete(user.id)
        logger.info(f"User deleted: {user.id}")
        event = await self.producer.publish_user_deleted(user.id, correlation_id)
        return ServiceResult(user, event)
