"""Example: use the service layer directly (no Flask).

Controllers are thin; the business rules live in the services.
"""

import importlib

from config import get_settings_module

from src.pension_system.pension_system.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, jwt_secret=settings.JWT_SECRET)

    print("Manager stats:", container.application_service.stats())
    print("Admin stats:", container.dashboard_service.admin_stats())
    for row in container.application_service.list_for_review()[:5]:
        app = row.application
        print(f"#{app.application_id} {row.pension_holder_name} {app.status.value} overdue={app.is_overdue()}")


if __name__ == "__main__":
    main()
