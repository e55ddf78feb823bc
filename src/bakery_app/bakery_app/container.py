from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Callable, Optional

from .common.datetime_utils import now_local, today_local
from .core.constants import DEFAULT_PAGE_SIZE
from .dashboard.service import DashboardService
from .database.connection import DatabaseConnection, DBConfig
from .orders.mysql_order_repository import MySQLOrderRepository, MySQLPickupLocationRepository
from .orders.repository import OrderRepository, PickupLocationRepository
from .orders.service import OrderService
from .products.mysql_product_repository import MySQLProductRepository
from .products.repository import ProductRepository
from .products.service import ProductService
from .storefront.page_source import OrdersPageSource
from .storefront.header_chain import HeaderChain
from .storefront.presenter import GroupingPresenter, PresenterRegistry
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, UserService


@dataclass(frozen=True)
class Container:
    users_repo: UserRepository
    products_repo: ProductRepository
    orders_repo: OrderRepository
    pickup_locations_repo: PickupLocationRepository

    auth_service: AuthService
    user_service: UserService
    product_service: ProductService
    order_service: OrderService
    dashboard_service: DashboardService

    storefront_presenters: PresenterRegistry

    today: Callable[[], date] = today_local
    conn: Optional[DatabaseConnection] = field(default=None)


def wire(
    *,
    users_repo: UserRepository,
    products_repo: ProductRepository,
    orders_repo: OrderRepository,
    pickup_locations_repo: PickupLocationRepository,
    conn: Optional[DatabaseConnection] = None,
    today: Callable[[], date] = today_local,
    now: Callable[[], datetime] = now_local,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> Container:
    """Build services on top of the given repositories (MySQL in production, in-memory in tests)."""

    order_service = OrderService(orders_repo, products_repo, pickup_locations_repo, clock=now)

    def new_presenter() -> GroupingPresenter:
        # each storefront view gets its own source so page observers never cross sessions
        return GroupingPresenter(
            OrdersPageSource(order_service, clock=today),
            chain=HeaderChain(clock=today),
            page_size=page_size,
        )

    return Container(
        users_repo=users_repo,
        products_repo=products_repo,
        orders_repo=orders_repo,
        pickup_locations_repo=pickup_locations_repo,
        auth_service=AuthService(users_repo),
        user_service=UserService(users_repo),
        product_service=ProductService(products_repo),
        order_service=order_service,
        dashboard_service=DashboardService(orders_repo, clock=today),
        storefront_presenters=PresenterRegistry(new_presenter),
        today=today,
        conn=conn,
    )


def build_container(*, db_config: dict, page_size: int = DEFAULT_PAGE_SIZE) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire(
        users_repo=MySQLUserRepository(conn),
        products_repo=MySQLProductRepository(conn),
        orders_repo=MySQLOrderRepository(conn),
        pickup_locations_repo=MySQLPickupLocationRepository(conn),
        conn=conn,
        page_size=page_size,
    )
