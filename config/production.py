import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "izin_db"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

IZIN_STAFF_ROLES = os.getenv("IZIN_STAFF_ROLES", "pengurus,pengasuh,superAdmin")
IZIN_SUPERVISOR_ROLES = os.getenv("IZIN_SUPERVISOR_ROLES", "pengasuh,superAdmin")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
