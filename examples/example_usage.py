"""Ví dụ: dùng service layer (không qua Flask).

Controllers chỉ là lớp mỏng, nghiệp vụ nằm ở Services.
"""

import importlib

from config import get_settings_module

from src.hrm_core.hrm_core.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)
    print(container.attendance_service.stats("EMP001").to_dict())
    print(container.leave_service.get(1).to_dict())


if __name__ == "__main__":
    main()
