import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_pipeline"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "mysql")

NOTIFICATION_BACKEND = os.getenv("NOTIFICATION_BACKEND", "celery")
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")

RECOGNITION_THRESHOLDS = {
    "confidence": float(os.getenv("RECOGNITION_CONFIDENCE_THRESHOLD", "0.93")),
    "liveness": float(os.getenv("RECOGNITION_LIVENESS_THRESHOLD", "0.80")),
    "quality": float(os.getenv("RECOGNITION_QUALITY_THRESHOLD", "0.75")),
}

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
