"""initial schema: users, catalog, orders, payments"""

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum("Client", "Owner", "Delivery", name="user_role")
order_status = sa.Enum("Pending", "Cooking", "Cooked", "PickedUp", "Delivered", name="order_status")


def timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True),
        *timestamps(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("role", user_role, nullable=False),
        sa.Column("verified", sa.Boolean, nullable=False, server_default=sa.false()),
    )
    op.create_index("ix_users_email", "users", ["email"])

    op.create_table(
        "categories",
        sa.Column("id", sa.Integer, primary_key=True),
        *timestamps(),
        sa.Column("name", sa.String(128), nullable=False, unique=True),
        sa.Column("slug", sa.String(128), nullable=False, unique=True),
        sa.Column("cover_img", sa.String(512), nullable=True),
    )
    op.create_index("ix_categories_slug", "categories", ["slug"])

    op.create_table(
        "restaurants",
        sa.Column("id", sa.Integer, primary_key=True),
        *timestamps(),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("cover_img", sa.String(512), nullable=False),
        sa.Column("address", sa.String(255), nullable=False),
        sa.Column("lat", sa.Float, nullable=False),
        sa.Column("lng", sa.Float, nullable=False),
        sa.Column("category_id", sa.Integer, sa.ForeignKey("categories.id", ondelete="SET NULL"), nullable=True),
        sa.Column("owner_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("is_promoted", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("promoted_until", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_restaurants_name", "restaurants", ["name"])
    op.create_index("ix_restaurants_owner_id", "restaurants", ["owner_id"])

    op.create_table(
        "dishes",
        sa.Column("id", sa.Integer, primary_key=True),
        *timestamps(),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("price", sa.Numeric(10, 2), nullable=False),
        sa.Column("photo", sa.String(512), nullable=True),
        sa.Column("description", sa.String(100), nullable=True),
        sa.Column("restaurant_id", sa.Integer, sa.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False),
        sa.Column("options", sa.JSON, nullable=True),
    )
    op.create_index("ix_dishes_restaurant_id", "dishes", ["restaurant_id"])

    op.create_table(
        "orders",
        sa.Column("id", sa.Integer, primary_key=True),
        *timestamps(),
        sa.Column("customer_id", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("driver_id", sa.Integer, sa.ForeignKey("users.id", ondelete="SET NULL"), nullable=True),
        sa.Column("restaurant_id", sa.Integer, sa.ForeignKey("restaurants.id", ondelete="SET NULL"), nullable=True),
        sa.Column("total", sa.Numeric(10, 2), nullable=False),
        sa.Column("status", order_status, nullable=False, server_default="Pending"),
    )
    op.create_index("ix_orders_customer_id", "orders", ["customer_id"])
    op.create_index("ix_orders_driver_id", "orders", ["driver_id"])
    op.create_index("ix_orders_restaurant_id", "orders", ["restaurant_id"])

    op.create_table(
        "order_items",
        sa.Column("id", sa.Integer, primary_key=True),
        *timestamps(),
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
        sa.Column("dish_id", sa.Integer, sa.ForeignKey("dishes.id", ondelete="CASCADE"), nullable=True),
        sa.Column("options", sa.JSON, nullable=True),
    )

    op.create_table(
        "order_dishes",
        sa.Column("order_id", sa.Integer, sa.ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("dish_id", sa.Integer, sa.ForeignKey("dishes.id", ondelete="CASCADE"), primary_key=True),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.Integer, primary_key=True),
        *timestamps(),
        sa.Column("transaction_id", sa.String(255), nullable=False),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("restaurant_id", sa.Integer, sa.ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False),
    )
    op.create_index("ix_payments_user_id", "payments", ["user_id"])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table("payments")
    op.drop_table("order_dishes")
    op.drop_table("order_items")
    op.drop_table("orders")
    op.drop_table("dishes")
    op.drop_table("restaurants")
    op.drop_table("categories")
    op.drop_table("users")
    order_status.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
