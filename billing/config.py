import os


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY', 'dev-key-change-in-prod')
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', 'sqlite:///ngbilling.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    API_PREFIX = os.environ.get('API_PREFIX', '/api/v1')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    # Billing
    TAX_RATE = os.environ.get('TAX_RATE', '0.19')
    CURRENCY_SYMBOL = os.environ.get('CURRENCY_SYMBOL', 'DT')
    CURRENCY_DECIMALS = int(os.environ.get('CURRENCY_DECIMALS', 3))
    DOCUMENT_NUMBER_MAX_ATTEMPTS = int(os.environ.get('DOCUMENT_NUMBER_MAX_ATTEMPTS', 50))

    JSON_SORT_KEYS = False


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    DEBUG = False


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'test-key'
    LOG_LEVEL = 'WARNING'
