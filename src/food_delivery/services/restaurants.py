import math

from sqlalchemy.ext.asyncio import AsyncSession

from food_delivery.config import settings
from food_delivery.crud import dish as dish_crud
from food_delivery.crud import restaurant as restaurant_crud
from food_delivery.models import Dish, Restaurant, User
from food_delivery.schemas.common import CoreOutput
from food_delivery.schemas.order import OrderRead
from food_delivery.schemas.restaurant import (
    AllCategoriesOutput,
    CategoryInput,
    CategoryOutput,
    CategoryRead,
    CreateDishInput,
    CreateDishOutput,
    CreateRestaurantInput,
    CreateRestaurantOutput,
    DeleteDishInput,
    DeleteRestaurantInput,
    DishRead,
    EditDishInput,
    EditRestaurantInput,
    MyDishInput,
    MyDishOutput,
    MyRestaurantsOutput,
    RestaurantDetail,
    RestaurantInput,
    RestaurantOutput,
    RestaurantRead,
    SearchRestaurantInput,
    SearchRestaurantOutput,
)
from food_delivery.utils.logging import get_logger

logger = get_logger(__name__)


def restaurant_detail(restaurant: Restaurant, with_orders: bool = False) -> RestaurantDetail:
    base = RestaurantRead.model_validate(restaurant).model_dump()
    return RestaurantDetail(
        **base,
        menu=[DishRead.model_validate(dish) for dish in restaurant.menu],
        orders=[OrderRead.from_orm_with_owner(order) for order in restaurant.orders] if with_orders else [],
    )


class RestaurantService:
    """Restaurant, category and dish catalog."""

    def __init__(self, db: AsyncSession, page_size: int | None = None):
        self.db = db
        self.page_size = page_size or settings.PAGE_SIZE

    def _total_pages(self, total_results: int) -> int:
        return math.ceil(total_results / self.page_size)

    async def create_restaurant(self, owner: User, restaurant_in: CreateRestaurantInput) -> CreateRestaurantOutput:
        try:
            category = await restaurant_crud.get_or_create_category(self.db, restaurant_in.category_name)
            restaurant = Restaurant(
                **restaurant_in.model_dump(exclude={"category_name"}),
                owner_id=owner.id,
                category_id=category.id,
            )
            self.db.add(restaurant)
            await self.db.commit()
            logger.info(f"Restaurant {restaurant.id} created by owner {owner.id}")
            return CreateRestaurantOutput(ok=True, restaurant_id=restaurant.id)
        except Exception:
            logger.exception("Could not create restaurant")
            await self.db.rollback()
            return CreateRestaurantOutput(ok=False, error="Could not create restaurant")

    async def edit_restaurant(self, owner: User, restaurant_in: EditRestaurantInput) -> CoreOutput:
        try:
            restaurant = await restaurant_crud.find_and_check_restaurant(
                self.db, restaurant_in.restaurant_id, owner, "edit"
            )
            if isinstance(restaurant, CoreOutput):
                return restaurant

            update_data = restaurant_in.model_dump(exclude_unset=True, exclude={"restaurant_id", "category_name"})
            if restaurant_in.category_name:
                category = await restaurant_crud.get_or_create_category(self.db, restaurant_in.category_name)
                restaurant.category_id = category.id
            for key, value in update_data.items():
                setattr(restaurant, key, value)

            await self.db.commit()
            return CoreOutput(ok=True)
        except Exception:
            logger.exception("Could not edit restaurant")
            await self.db.rollback()
            return CoreOutput(ok=False, error="Could not edit restaurant")

    async def delete_restaurant(self, owner: User, restaurant_in: DeleteRestaurantInput) -> CoreOutput:
        try:
            restaurant = await restaurant_crud.find_and_check_restaurant(
                self.db, restaurant_in.restaurant_id, owner, "delete"
            )
            if isinstance(restaurant, CoreOutput):
                return restaurant
            await self.db.delete(restaurant)
            await self.db.commit()
            logger.info(f"Restaurant {restaurant_in.restaurant_id} deleted by owner {owner.id}")
            return CoreOutput(ok=True)
        except Exception:
            logger.exception("Could not delete restaurant")
            await self.db.rollback()
            return CoreOutput(ok=False, error="Could not delete restaurant")

    async def my_restaurants(self, owner: User) -> MyRestaurantsOutput:
        try:
            restaurants = await restaurant_crud.get_restaurants_by_owner(self.db, owner.id)
            return MyRestaurantsOutput(
                ok=True, restaurants=[RestaurantRead.model_validate(r) for r in restaurants]
            )
        except Exception:
            logger.exception("Could not load restaurants")
            return MyRestaurantsOutput(ok=False, error="Could not load restaurants")

    async def my_restaurant(self, owner: User, restaurant_in: RestaurantInput) -> RestaurantOutput:
        try:
            restaurant = await restaurant_crud.get_owner_restaurant(self.db, restaurant_in.restaurant_id, owner.id)
            if not restaurant:
                return RestaurantOutput(ok=False, error="Restaurant not found")
            return RestaurantOutput(ok=True, restaurant=restaurant_detail(restaurant, with_orders=True))
        except Exception:
            logger.exception("Could not load restaurant")
            return RestaurantOutput(ok=False, error="Could not load restaurant")

    async def all_categories(self) -> AllCategoriesOutput:
        try:
            categories = await restaurant_crud.get_categories(self.db)
            return AllCategoriesOutput(ok=True, categories=[CategoryRead.model_validate(c) for c in categories])
        except Exception:
            logger.exception("Could not load categories")
            return AllCategoriesOutput(ok=False, error="Could not load categories")

    async def find_category_by_slug(self, category_in: CategoryInput) -> CategoryOutput:
        try:
            category = await restaurant_crud.get_category_by_slug(self.db, category_in.slug)
            if not category:
                return CategoryOutput(ok=False, error="Category not found")
            restaurants, total_results = await restaurant_crud.get_restaurants_by_category(
                self.db,
                category.id,
                limit=self.page_size,
                offset=(category_in.page - 1) * self.page_size,
            )
            return CategoryOutput(
                ok=True,
                category=CategoryRead.model_validate(category),
                restaurants=[RestaurantRead.model_validate(r) for r in restaurants],
                total_pages=self._total_pages(total_results),
                total_results=total_results,
            )
        except Exception:
            logger.exception("Could not load category")
            return CategoryOutput(ok=False, error="Could not load category")

    async def find_restaurant_by_id(self, restaurant_in: RestaurantInput) -> RestaurantOutput:
        try:
            restaurant = await restaurant_crud.get_restaurant_with_menu(self.db, restaurant_in.restaurant_id)
            if not restaurant:
                return RestaurantOutput(ok=False, error="Restaurant not found")
            return RestaurantOutput(ok=True, restaurant=restaurant_detail(restaurant))
        except Exception:
            logger.exception("Could not find restaurant")
            return RestaurantOutput(ok=False, error="Could not find restaurant")

    async def search_restaurant_by_name(self, search_in: SearchRestaurantInput) -> SearchRestaurantOutput:
        try:
            restaurants, total_results = await restaurant_crud.search_restaurants_by_name(
                self.db,
                search_in.query,
                limit=self.page_size,
                offset=(search_in.page - 1) * self.page_size,
            )
            return SearchRestaurantOutput(
                ok=True,
                restaurants=[RestaurantRead.model_validate(r) for r in restaurants],
                total_pages=self._total_pages(total_results),
                total_results=total_results,
            )
        except Exception:
            logger.exception("Could not search restaurants")
            return SearchRestaurantOutput(ok=False, error="Could not search restaurants")

    # --- dishes ---

    async def create_dish(self, owner: User, dish_in: CreateDishInput) -> CreateDishOutput:
        try:
            restaurant = await restaurant_crud.find_and_check_restaurant(
                self.db, dish_in.restaurant_id, owner, "add a dish to"
            )
            if isinstance(restaurant, CoreOutput):
                return CreateDishOutput(ok=False, error=restaurant.error)
            dish = Dish(**dish_in.model_dump(mode="json", exclude={"price"}), price=dish_in.price)
            self.db.add(dish)
            await self.db.commit()
            logger.info(f"Dish {dish.id} added to restaurant {restaurant.id}")
            return CreateDishOutput(ok=True, dish_id=dish.id)
        except Exception:
            logger.exception("Could not create dish")
            await self.db.rollback()
            return CreateDishOutput(ok=False, error="Could not create dish")

    async def find_dish_by_id(self, owner: User, dish_in: MyDishInput) -> MyDishOutput:
        try:
            dish = await dish_crud.get_dish_with_restaurant(self.db, dish_in.dish_id)
            if not dish or dish.restaurant_id != dish_in.restaurant_id:
                return MyDishOutput(ok=False, error="Dish not found")
            if dish.restaurant.owner_id != owner.id:
                return MyDishOutput(ok=False, error="This dish is not belongs to your restaurant")
            return MyDishOutput(ok=True, dish=DishRead.model_validate(dish))
        except Exception:
            logger.exception("Could not find dish")
            return MyDishOutput(ok=False, error="Could not find dish")

    async def edit_dish(self, owner: User, dish_in: EditDishInput) -> CoreOutput:
        try:
            dish = await dish_crud.find_and_check_dish(self.db, dish_in.dish_id, owner, "edit")
            if isinstance(dish, CoreOutput):
                return dish
            update_data = dish_in.model_dump(mode="json", exclude_unset=True, exclude={"dish_id", "price"})
            if dish_in.price is not None:
                dish.price = dish_in.price
            for key, value in update_data.items():
                setattr(dish, key, value)
            await self.db.commit()
            return CoreOutput(ok=True)
        except Exception:
            logger.exception("Could not edit dish")
            await self.db.rollback()
            return CoreOutput(ok=False, error="Could not edit dish")

    async def delete_dish(self, owner: User, dish_in: DeleteDishInput) -> CoreOutput:
        try:
            dish = await dish_crud.find_and_check_dish(self.db, dish_in.dish_id, owner, "delete")
            if isinstance(dish, CoreOutput):
                return dish
            await self.db.delete(dish)
            await self.db.commit()
            return CoreOutput(ok=True)
        except Exception:
            logger.exception("Could not delete dish")
            await self.db.rollback()
            return CoreOutput(ok=False, error="Could not delete dish")
