from fastapi import APIRouter, Depends, Query

from food_delivery.api.deps import get_current_user, get_user_service, role_required
from food_delivery.models.user import RoleEnum, User
from food_delivery.schemas.user import (
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
from food_delivery.services.users import UserService

router = APIRouter(prefix="/users", tags=["users"])

client_only = role_required(RoleEnum.Client)


@router.post("/", response_model=CreateAccountOutput)
async def create_account(
    account_in: CreateAccountInput,
    service: UserService = Depends(get_user_service),
):
    return await service.create_account(account_in)


@router.get("/me", response_model=UserOut)
async def me(user: User = Depends(get_current_user)):
    return user


@router.patch("/me", response_model=EditProfileOutput)
async def edit_profile(
    profile_in: EditProfileInput,
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    """Changing the email resets the verified flag."""
    return await service.edit_profile(user, profile_in)


# --- addresses ---

@router.post("/me/addresses", response_model=CreateClientAddressOutput)
async def create_client_address(
    address_in: CreateClientAddressInput,
    client: User = Depends(client_only),
    service: UserService = Depends(get_user_service),
):
    return await service.create_client_address(client, address_in)


@router.get("/me/addresses", response_model=ClientAddressesOutput)
async def client_addresses(
    page: int = Query(1, ge=1),
    client: User = Depends(client_only),
    service: UserService = Depends(get_user_service),
):
    return await service.client_addresses(client, ClientAddressesInput(page=page))


@router.delete("/me/addresses/{address_id}", response_model=DeleteClientAddressOutput)
async def delete_client_address(
    address_id: int,
    client: User = Depends(client_only),
    service: UserService = Depends(get_user_service),
):
    return await service.delete_client_address(client, DeleteClientAddressInput(address_id=address_id))


@router.put("/me/addresses/{address_id}/selected", response_model=ChangeSelectedClientAddressOutput)
async def change_selected_client_address(
    address_id: int,
    client: User = Depends(client_only),
    service: UserService = Depends(get_user_service),
):
    return await service.change_selected_client_address(
        client, ChangeSelectedClientAddressInput(address_id=address_id)
    )


@router.get("/{user_id}", response_model=UserProfileOutput)
async def user_profile(
    user_id: int,
    user: User = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
):
    return await service.user_profile(UserProfileInput(user_id=user_id))
