import math
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery.config import settings
from food_delivery.crud import user as user_crud
from food_delivery.models import Address, User
from food_delivery.schemas.user import (
    AddressRead,
    ChangeSelectedClientAddressInput,
    ChangeSelectedClientAddressOutput,
    ClientAddressesInput,
    ClientAddressesOutput,
    CreateAccountInput,
    CreateAccountOutput,
    CreateClientAddressInput,
    CreateClientAddressOutput,
    DeleteClientAddressInput,
    DeleteClientAddressOutput,
    EditProfileInput,
    EditProfileOutput,
    UserOut,
    UserProfileInput,
    UserProfileOutput,
)
from food_delivery.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    """Accounts, profiles and client delivery addresses."""

    def __init__(self, db: AsyncSession, page_size: int | None = None):
        self.db = db
        self.page_size = page_size or settings.PAGE_SIZE

    async def create_account(self, account_in: CreateAccountInput) -> CreateAccountOutput:
        try:
            exists = await user_crud.get_user_by_email(self.db, account_in.email)
            if exists:
                return CreateAccountOutput(ok=False, error="There is a user with that email already")
            user = User(email=account_in.email, role=account_in.role, verified=False)
            self.db.add(user)
            await self.db.commit()
            logger.info(f"Account {user.id} created with role {user.role.value}")
            return CreateAccountOutput(ok=True, user_id=user.id)
        except Exception:
            logger.exception("Couldn't create account")
            await self.db.rollback()
            return CreateAccountOutput(ok=False, error="Couldn't create account")

    async def find_by_id(self, user_id: int) -> Optional[User]:
        return await user_crud.get_user(self.db, user_id)

    async def user_profile(self, profile_in: UserProfileInput) -> UserProfileOutput:
        try:
            user = await user_crud.get_user(self.db, profile_in.user_id)
            if not user:
                return UserProfileOutput(ok=False, error="User not found")
            return UserProfileOutput(ok=True, user=UserOut.model_validate(user))
        except Exception:
            logger.exception("Could not load user profile")
            return UserProfileOutput(ok=False, error="Could not load user profile")

    async def edit_profile(self, user: User, profile_in: EditProfileInput) -> EditProfileOutput:
        """
        A changed email resets `verified`. An email that belongs to another
        account is rejected.
        """
        try:
            email = profile_in.email
            if email and email != user.email:
                exists = await user_crud.get_user_by_email(self.db, email)
                if exists:
                    return EditProfileOutput(ok=False, error="There is a user with that email already")
                user.email = email
                user.verified = False
                await self.db.commit()
                logger.info(f"User {user.id} changed email, verification reset")
            return EditProfileOutput(ok=True)
        except Exception:
            logger.exception("Could not update profile")
            await self.db.rollback()
            return EditProfileOutput(ok=False, error="Could not update profile")

    # --- addresses ---

    async def create_client_address(
        self, client: User, address_in: CreateClientAddressInput
    ) -> CreateClientAddressOutput:
        try:
            address = Address(client_id=client.id, **address_in.model_dump())
            self.db.add(address)
            await self.db.commit()
            return CreateClientAddressOutput(
                ok=True,
                address_id=address.id,
                address=address.address,
                lat=address.lat,
                lng=address.lng,
            )
        except Exception:
            logger.exception("Could not add address")
            await self.db.rollback()
            return CreateClientAddressOutput(ok=False, error="Could not add address")

    async def client_addresses(self, client: User, page_in: ClientAddressesInput) -> ClientAddressesOutput:
        try:
            addresses, total_results = await user_crud.get_client_addresses(
                self.db,
                client.id,
                limit=self.page_size,
                offset=(page_in.page - 1) * self.page_size,
            )
            return ClientAddressesOutput(
                ok=True,
                addresses=[AddressRead.model_validate(a) for a in addresses],
                total_pages=math.ceil(total_results / self.page_size),
                total_results=total_results,
            )
        except Exception:
            logger.exception("Could not find addresses")
            return ClientAddressesOutput(ok=False, error="Could not find addresses")

    async def _find_own_address(self, client: User, address_id: int, usage: str):
        address = await user_crud.get_address(self.db, address_id)
        if not address:
            return None, "Address not found"
        if address.client_id != client.id:
            return None, f"You cannot {usage} an address that you don't own"
        return address, None

    async def delete_client_address(
        self, client: User, address_in: DeleteClientAddressInput
    ) -> DeleteClientAddressOutput:
        try:
            address, error = await self._find_own_address(client, address_in.address_id, "delete")
            if error:
                return DeleteClientAddressOutput(ok=False, error=error)
            await self.db.delete(address)
            await self.db.commit()
            return DeleteClientAddressOutput(ok=True)
        except Exception:
            logger.exception("Could not delete address")
            await self.db.rollback()
            return DeleteClientAddressOutput(ok=False, error="Could not delete address")

    async def change_selected_client_address(
        self, client: User, address_in: ChangeSelectedClientAddressInput
    ) -> ChangeSelectedClientAddressOutput:
        try:
            address, error = await self._find_own_address(client, address_in.address_id, "select")
            if error:
                return ChangeSelectedClientAddressOutput(ok=False, error=error)
            await user_crud.select_address(self.db, client.id, address.id)
            await self.db.commit()
            logger.info(f"Client {client.id} selected address {address.id}")
            return ChangeSelectedClientAddressOutput(ok=True)
        except Exception:
            logger.exception("Could not change selected address")
            await self.db.rollback()
            return ChangeSelectedClientAddressOutput(ok=False, error="Could not change selected address")
