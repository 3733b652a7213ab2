import os
from datetime import timedelta
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration class with all settings as static attributes."""

    # Core configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key'
    DEBUG = os.environ.get('FLASK_DEBUG', 'false').lower() == 'true'
    VERSION = '1.0.0'

    # Session settings
    PERMANENT_SESSION_LIFETIME = timedelta(hours=8)
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Remember me settings
    REMEMBER_COOKIE_DURATION = timedelta(days=7)
    REMEMBER_COOKIE_SECURE = True
    REMEMBER_COOKIE_HTTPONLY = True
    REMEMBER_COOKIE_SAMESITE = 'Lax'

    # MySQL connection timeouts
    MYSQL_CONNECT_TIMEOUT = 30
    MYSQL_READ_TIMEOUT = 30
    MYSQL_WRITE_TIMEOUT = 30

    # Database configuration
    base_db_uri = os.environ.get('DATABASE_URL')

    # Fallback to SQLite if no DATABASE_URL is provided
    if not base_db_uri:
        base_db_uri = 'sqlite:///training_portal.db'

    # Configure database URI
    if base_db_uri.startswith('mysql'):
        from urllib.parse import urlparse, urlunparse
        parsed = urlparse(base_db_uri)

        # PyMySQL specific parameters only
        query_params = {
            'charset': 'utf8mb4',
            'connect_timeout': str(MYSQL_CONNECT_TIMEOUT),
            'read_timeout': str(MYSQL_READ_TIMEOUT),
            'write_timeout': str(MYSQL_WRITE_TIMEOUT),
        }

        query_string = '&'.join([f"{k}={v}" for k, v in query_params.items()])
        new_query = f"{parsed.query}&{query_string}" if parsed.query else query_string

        SQLALCHEMY_DATABASE_URI = urlunparse((
            parsed.scheme,
            parsed.netloc,
            parsed.path,
            parsed.params,
            new_query,
            parsed.fragment
        ))
    else:
        SQLALCHEMY_DATABASE_URI = base_db_uri

    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Pool options only apply to server databases; SQLite rejects them
    if base_db_uri.startswith('sqlite'):
        SQLALCHEMY_ENGINE_OPTIONS = {}
    else:
        SQLALCHEMY_ENGINE_OPTIONS = {
            "pool_recycle": 3600,
            "pool_pre_ping": True,
            "pool_size": 10,
            "max_overflow": 20,
        }

    # Site settings
    SITE_NAME = 'Training Portal'
    CONTACT_EMAIL = os.environ.get('CONTACT_EMAIL', 'training@example.com')

    # Enrollment policy
    ENFORCE_STATUS_TRANSITIONS = os.environ.get('ENFORCE_STATUS_TRANSITIONS', 'true').lower() == 'true'
    ENFORCE_ATTENDANCE_ELIGIBILITY = os.environ.get('ENFORCE_ATTENDANCE_ELIGIBILITY', 'true').lower() == 'true'

    # Listing limits
    ACTIVITY_FEED_LIMIT = 50
    RECOMMENDED_TRAININGS_LIMIT = 4
    PAGE_VERSION_LIMIT = 50

    # Support page CMS
    SUPPORT_PAGE_SLUG = 'support'

    # Export settings
    EXPORT_FORMATS = {'csv', 'xlsx'}


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_ECHO = os.environ.get('SQL_DEBUG', 'false').lower() == 'true'
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    SYSLOG_SERVER = os.environ.get('SYSLOG_SERVER')

    SECRET_KEY = os.environ.get('SECRET_KEY')
    SQLALCHEMY_DATABASE_URI = Config.SQLALCHEMY_DATABASE_URI if os.environ.get('DATABASE_URL') else None

    @classmethod
    def validate(cls):
        """Raise if settings that have no safe default are missing."""
        if not cls.SECRET_KEY:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if not cls.SQLALCHEMY_DATABASE_URI:
            raise ValueError("DATABASE_URL environment variable must be set in production")


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SECRET_KEY = 'test-secret-key'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    WTF_CSRF_ENABLED = False
    SESSION_COOKIE_SECURE = False
    REMEMBER_COOKIE_SECURE = False

    ENFORCE_STATUS_TRANSITIONS = True
    ENFORCE_ATTENDANCE_ELIGIBILITY = True


# Configuration dictionary
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig
}
