import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "izin_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Peran yang boleh memutuskan tahap ustadzah / ndalem (dipisah koma)
IZIN_STAFF_ROLES = os.getenv("IZIN_STAFF_ROLES", "pengurus,pengasuh,superAdmin")
IZIN_SUPERVISOR_ROLES = os.getenv("IZIN_SUPERVISOR_ROLES", "pengasuh,superAdmin")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
