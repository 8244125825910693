import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_pipeline_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "memory")

NOTIFICATION_BACKEND = "inprocess"
CELERY_BROKER_URL = "memory://"
CELERY_RESULT_BACKEND = "cache+memory://"
CELERY_TASK_ALWAYS_EAGER = True

RECOGNITION_THRESHOLDS = {"confidence": 0.93, "liveness": 0.80, "quality": 0.75}

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
