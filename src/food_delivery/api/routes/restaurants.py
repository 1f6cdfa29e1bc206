from fastapi import APIRouter, Depends, Query

from food_delivery.api.deps import get_restaurant_service, role_required
from food_delivery.models import RoleEnum, User
from food_delivery.schemas.common import CoreOutput
from food_delivery.schemas.restaurant import (
    AllCategoriesOutput,
    CategoryInput,
    CategoryOutput,
    CreateDishInput,
    CreateDishOutput,
    CreateRestaurantInput,
    CreateRestaurantOutput,
    DeleteDishInput,
    DeleteRestaurantInput,
    DishUpdate,
    EditDishInput,
    EditRestaurantInput,
    MyDishInput,
    MyDishOutput,
    MyRestaurantsOutput,
    RestaurantInput,
    RestaurantOutput,
    RestaurantUpdate,
    SearchRestaurantInput,
    SearchRestaurantOutput,
)
from food_delivery.services.restaurants import RestaurantService

router = APIRouter(tags=["restaurants"])

owner_only = role_required(RoleEnum.Owner)


# --- restaurants ---

@router.post("/restaurants", response_model=CreateRestaurantOutput)
async def create_restaurant(
    restaurant_in: CreateRestaurantInput,
    owner: User = Depends(owner_only),
    service: RestaurantService = Depends(get_restaurant_service),
):
    """
    Creates a restaurant owned by the caller. The category is matched by slug
    and created when it does not exist yet.
    """
    return await service.create_restaurant(owner, restaurant_in)


@router.get("/restaurants/mine", response_model=MyRestaurantsOutput)
async def my_restaurants(
    owner: User = Depends(owner_only),
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.my_restaurants(owner)


@router.get("/restaurants/mine/{restaurant_id}", response_model=RestaurantOutput)
async def my_restaurant(
    restaurant_id: int,
    owner: User = Depends(owner_only),
    service: RestaurantService = Depends(get_restaurant_service),
):
    """Owned restaurant with its menu and orders."""
    return await service.my_restaurant(owner, RestaurantInput(restaurant_id=restaurant_id))


@router.get("/restaurants/search", response_model=SearchRestaurantOutput)
async def search_restaurants(
    query: str = Query(..., min_length=1),
    page: int = Query(1, ge=1),
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.search_restaurant_by_name(SearchRestaurantInput(query=query, page=page))


@router.get("/restaurants/{restaurant_id}", response_model=RestaurantOutput)
async def get_restaurant(
    restaurant_id: int,
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.find_restaurant_by_id(RestaurantInput(restaurant_id=restaurant_id))


@router.patch("/restaurants/{restaurant_id}", response_model=CoreOutput)
async def edit_restaurant(
    restaurant_id: int,
    restaurant_in: RestaurantUpdate,
    owner: User = Depends(owner_only),
    service: RestaurantService = Depends(get_restaurant_service),
):
    edit_in = EditRestaurantInput(
        restaurant_id=restaurant_id, **restaurant_in.model_dump(exclude_unset=True)
    )
    return await service.edit_restaurant(owner, edit_in)


@router.delete("/restaurants/{restaurant_id}", response_model=CoreOutput)
async def delete_restaurant(
    restaurant_id: int,
    owner: User = Depends(owner_only),
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.delete_restaurant(owner, DeleteRestaurantInput(restaurant_id=restaurant_id))


@router.get("/restaurants/{restaurant_id}/dishes/{dish_id}", response_model=MyDishOutput)
async def my_dish(
    restaurant_id: int,
    dish_id: int,
    owner: User = Depends(owner_only),
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.find_dish_by_id(owner, MyDishInput(restaurant_id=restaurant_id, dish_id=dish_id))


# --- categories ---

@router.get("/categories", response_model=AllCategoriesOutput)
async def all_categories(
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.all_categories()


@router.get("/categories/{slug}", response_model=CategoryOutput)
async def category(
    slug: str,
    page: int = Query(1, ge=1),
    service: RestaurantService = Depends(get_restaurant_service),
):
    """Category with one page of its restaurants, promoted ones first."""
    return await service.find_category_by_slug(CategoryInput(slug=slug, page=page))


# --- dishes ---

@router.post("/dishes", response_model=CreateDishOutput)
async def create_dish(
    dish_in: CreateDishInput,
    owner: User = Depends(owner_only),
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.create_dish(owner, dish_in)


@router.patch("/dishes/{dish_id}", response_model=CoreOutput)
async def edit_dish(
    dish_id: int,
    dish_in: DishUpdate,
    owner: User = Depends(owner_only),
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.edit_dish(
        owner, EditDishInput(dish_id=dish_id, **dish_in.model_dump(exclude_unset=True))
    )


@router.delete("/dishes/{dish_id}", response_model=CoreOutput)
async def delete_dish(
    dish_id: int,
    owner: User = Depends(owner_only),
    service: RestaurantService = Depends(get_restaurant_service),
):
    return await service.delete_dish(owner, DeleteDishInput(dish_id=dish_id))
