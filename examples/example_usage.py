"""Example: drive the services without Flask.

Lists the first storefront page with its group headers, then prints the
delivery stats shown on the dashboard.
"""

import importlib

from config import get_settings_module

from src.bakery_app.bakery_app.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    presenter = container.storefront_presenters.get("example")
    page = presenter.load_page(0)
    for order in page.content:
        header = presenter.get_header_by_order_id(order.id)
        if header:
            print(f"== {header.main} {header.secondary}".rstrip())
        print(f"  #{order.id} {order.due_date} {order.due_time:%H:%M} {order.customer_full_name} ({order.state.display_name})")

    print(container.dashboard_service.get_delivery_stats().to_dict())


if __name__ == "__main__":
    main()
