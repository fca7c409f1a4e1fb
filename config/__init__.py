import os
from typing import Optional

_ALIASES = {
    "prod": "production",
    "production": "production",
    "test": "testing",
    "testing": "testing",
}


def get_settings_module(env: Optional[str] = None) -> str:
    # APP_ENV menentukan modul pengaturan; selain prod/test dianggap development
    name = (env or os.getenv("APP_ENV", "development")).strip().lower()
    return f"config.{_ALIASES.get(name, 'development')}"
