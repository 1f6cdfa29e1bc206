from pydantic import BaseModel, EmailStr, Field
from datetime import datetime
from typing import List, Optional

from food_delivery.models.user import RoleEnum
from food_delivery.schemas.common import CoreOutput, PaginationInput, PaginationOutput


class UserOut(BaseModel):
    id: int
    email: str
    role: RoleEnum
    verified: bool
    created_at: datetime

    class Config:
        from_attributes = True


class CreateAccountInput(BaseModel):
    email: EmailStr
    role: RoleEnum


class CreateAccountOutput(CoreOutput):
    user_id: Optional[int] = None


class UserProfileInput(BaseModel):
    user_id: int


class UserProfileOutput(CoreOutput):
    user: Optional[UserOut] = None


class EditProfileInput(BaseModel):
    email: Optional[EmailStr] = None


class EditProfileOutput(CoreOutput):
    pass


# --- addresses ---

class AddressRead(BaseModel):
    id: int
    address: str
    lat: float
    lng: float
    selected: bool

    class Config:
        from_attributes = True


class CreateClientAddressInput(BaseModel):
    address: str = Field(..., min_length=1, max_length=255)
    lat: float
    lng: float


class CreateClientAddressOutput(CoreOutput):
    address_id: Optional[int] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None


class ClientAddressesInput(PaginationInput):
    pass


class ClientAddressesOutput(PaginationOutput):
    addresses: Optional[List[AddressRead]] = None


class DeleteClientAddressInput(BaseModel):
    address_id: int


class DeleteClientAddressOutput(CoreOutput):
    pass


class ChangeSelectedClientAddressInput(BaseModel):
    address_id: int


class ChangeSelectedClientAddressOutput(CoreOutput):
    pass
