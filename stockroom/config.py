import os


class Config:
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev_secret_key_change_me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "sqlite:///stockroom.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Bearer tokens issued at login/register
    JWT_SECRET = os.environ.get("JWT_SECRET", "dev_jwt_secret_change_me")
    JWT_EXPIRES_HOURS = int(os.environ.get("JWT_EXPIRES_HOURS", "24"))

    # The token API is not cookie based, so form CSRF stays off
    WTF_CSRF_ENABLED = False

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SECRET_KEY = "test-secret-key"
    JWT_SECRET = "test-jwt-secret"
    LOG_LEVEL = "WARNING"
    BCRYPT_LOG_ROUNDS = 4
