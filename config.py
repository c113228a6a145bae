import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-key")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///spendflow.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    JWT_SECRET = os.environ.get("JWT_SECRET", SECRET_KEY)
    JWT_REFRESH_SECRET = os.environ.get("JWT_REFRESH_SECRET") or JWT_SECRET
    JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
    JWT_ACCESS_EXPIRES_MINUTES = int(os.environ.get("JWT_ACCESS_EXPIRES_MINUTES", 60 * 24))
    JWT_REFRESH_EXPIRES_DAYS = int(os.environ.get("JWT_REFRESH_EXPIRES_DAYS", 7))

    DEFAULT_CURRENCY = os.environ.get("DEFAULT_CURRENCY", "USD")
    EXCHANGE_RATE_SOURCE = os.environ.get("EXCHANGE_RATE_SOURCE", "static")
    STATIC_EXCHANGE_RATE = float(os.environ.get("STATIC_EXCHANGE_RATE", 1.1))

    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "uploads")
    MAX_CONTENT_LENGTH = 8 * 1024 * 1024
    ALLOWED_UPLOAD_TYPES = {"image/jpeg", "image/png", "image/gif", "application/pdf"}


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    JWT_SECRET = "test-secret"
    JWT_REFRESH_SECRET = "test-refresh-secret"
    EXCHANGE_RATE_SOURCE = "static"


class ProductionConfig(Config):
    DEBUG = False


config_by_name = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
