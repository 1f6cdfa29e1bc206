from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from decimal import Decimal

from food_delivery.schemas.common import CoreOutput, PaginationInput, PaginationOutput
from food_delivery.schemas.order import OrderRead


class DishChoice(BaseModel):
    name: str
    extra: Optional[float] = None


class DishOption(BaseModel):
    name: str
    choices: Optional[List[DishChoice]] = None
    extra: Optional[float] = None


class DishRead(BaseModel):
    id: int
    name: str
    price: Decimal
    photo: Optional[str] = None
    description: Optional[str] = None
    restaurant_id: int
    options: Optional[List[DishOption]] = None

    class Config:
        from_attributes = True


class CategoryRead(BaseModel):
    id: int
    name: str
    slug: str
    cover_img: Optional[str] = None

    class Config:
        from_attributes = True


class RestaurantRead(BaseModel):
    id: int
    name: str
    cover_img: str
    address: str
    lat: float
    lng: float
    owner_id: int
    category_id: Optional[int] = None
    is_promoted: bool
    promoted_until: Optional[datetime] = None

    class Config:
        from_attributes = True


class RestaurantDetail(RestaurantRead):
    menu: List[DishRead] = []
    orders: List[OrderRead] = []


# --- restaurants ---

class CreateRestaurantInput(BaseModel):
    name: str = Field(..., min_length=1, max_length=128)
    cover_img: str
    address: str
    lat: float
    lng: float
    category_name: str = Field(..., min_length=1)


class CreateRestaurantOutput(CoreOutput):
    restaurant_id: Optional[int] = None


class RestaurantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    cover_img: Optional[str] = None
    address: Optional[str] = None
    lat: Optional[float] = None
    lng: Optional[float] = None
    category_name: Optional[str] = None

    class Config:
        extra = "forbid"


class EditRestaurantInput(RestaurantUpdate):
    restaurant_id: int


class DeleteRestaurantInput(BaseModel):
    restaurant_id: int


class RestaurantInput(BaseModel):
    restaurant_id: int


class RestaurantOutput(CoreOutput):
    restaurant: Optional[RestaurantDetail] = None


class MyRestaurantsOutput(CoreOutput):
    restaurants: Optional[List[RestaurantRead]] = None


class AllCategoriesOutput(CoreOutput):
    categories: Optional[List[CategoryRead]] = None


class CategoryInput(PaginationInput):
    slug: str


class CategoryOutput(PaginationOutput):
    category: Optional[CategoryRead] = None
    restaurants: Optional[List[RestaurantRead]] = None


class SearchRestaurantInput(PaginationInput):
    query: str = Field(..., min_length=1)


class SearchRestaurantOutput(PaginationOutput):
    restaurants: Optional[List[RestaurantRead]] = None


# --- dishes ---

class CreateDishInput(BaseModel):
    restaurant_id: int
    name: str = Field(..., min_length=1, max_length=128)
    price: Decimal = Field(..., ge=0)
    description: Optional[str] = Field(None, max_length=100)
    photo: Optional[str] = None
    options: Optional[List[DishOption]] = None


class CreateDishOutput(CoreOutput):
    dish_id: Optional[int] = None


class DishUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=128)
    price: Optional[Decimal] = Field(None, ge=0)
    description: Optional[str] = Field(None, max_length=100)
    photo: Optional[str] = None
    options: Optional[List[DishOption]] = None

    class Config:
        extra = "forbid"


class EditDishInput(DishUpdate):
    dish_id: int


class DeleteDishInput(BaseModel):
    dish_id: int


class MyDishInput(BaseModel):
    restaurant_id: int
    dish_id: int


class MyDishOutput(CoreOutput):
    dish: Optional[DishRead] = None
