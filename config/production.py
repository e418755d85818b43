import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "school_attendance"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

CLASS_START_TIME = os.getenv("CLASS_START_TIME", "16:00")
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))

FANOUT_WORKERS = int(os.getenv("FANOUT_WORKERS", "4"))
NOTIFY_IN_BACKGROUND = bool(int(os.getenv("NOTIFY_IN_BACKGROUND", "1")))
