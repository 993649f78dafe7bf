"""
Django settings for the bookstore storefront and back-office API.

Every deploy-specific value is read through python-decouple so the same module
serves development, CI and production from environment variables or a `.env`
file. Business knobs for the order fulfillment lifecycle live at the bottom.
"""

from datetime import timedelta
from pathlib import Path

from decouple import Csv, config

BASE_DIR = Path(__file__).resolve().parent.parent


# SECURITY WARNING: keep the secret key used in production secret!
SECRET_KEY = config('SECRET_KEY', default='django-insecure-change-me-bookstore-dev-key')

DEBUG = config('DEBUG', default=False, cast=bool)

ALLOWED_HOSTS = config('ALLOWED_HOSTS', default='localhost,127.0.0.1', cast=Csv())


INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'rest_framework_simplejwt',
    'django_filters',
    'authentication',
    'products',
    'orders',
    'shipments',
    'fulfillment',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
    'authentication.middleware.SecurityHeadersMiddleware',
    'authentication.middleware.AuditLoggingMiddleware',
]

ROOT_URLCONF = 'bookstore_project.urls'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.debug',
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

WSGI_APPLICATION = 'bookstore_project.wsgi.application'


# Database
# Steps of the fulfillment save are committed one by one, so requests must
# not be wrapped in a transaction.
DATABASES = {
    'default': {
        'ENGINE': config('DB_ENGINE', default='django.db.backends.sqlite3'),
        'NAME': config('DB_NAME', default=str(BASE_DIR / 'db.sqlite3')),
        'USER': config('DB_USER', default=''),
        'PASSWORD': config('DB_PASSWORD', default=''),
        'HOST': config('DB_HOST', default=''),
        'PORT': config('DB_PORT', default=''),
        'ATOMIC_REQUESTS': False,
    }
}

CACHES = {
    'default': {
        'BACKEND': config('CACHE_BACKEND', default='django.core.cache.backends.locmem.LocMemCache'),
        'LOCATION': config('CACHE_LOCATION', default='bookstore'),
    }
}

AUTH_USER_MODEL = 'authentication.User'

AUTH_PASSWORD_VALIDATORS = [
    {'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator'},
    {'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator'},
    {'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator'},
    {'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator'},
]

AUTH_LOCKOUT_THRESHOLD = config('AUTH_LOCKOUT_THRESHOLD', default=5, cast=int)
AUTH_LOCKOUT_MINUTES = config('AUTH_LOCKOUT_MINUTES', default=15, cast=int)

# Role granted to every self-registered account.
DEFAULT_CUSTOMER_ROLE = config('DEFAULT_CUSTOMER_ROLE', default='CUSTOMER')


REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
    ],
    'DEFAULT_PAGINATION_CLASS': 'bookstore_project.pagination.EnvelopePagination',
    'PAGE_SIZE': 10,
    'EXCEPTION_HANDLER': 'bookstore_project.exceptions.api_exception_handler',
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=config('JWT_ACCESS_MINUTES', default=30, cast=int)),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=config('JWT_REFRESH_DAYS', default=7, cast=int)),
    'AUTH_HEADER_TYPES': ('Bearer',),
}


# django-ratelimit needs a shared cache in production; the local-memory
# default is only acceptable for development.
RATELIMIT_ENABLE = config('RATELIMIT_ENABLE', default=True, cast=bool)
SILENCED_SYSTEM_CHECKS = ['django_ratelimit.E003', 'django_ratelimit.W001']


LANGUAGE_CODE = 'en-us'
TIME_ZONE = config('TIME_ZONE', default='Asia/Dhaka')
USE_I18N = True
USE_TZ = True

STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'staticfiles'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'


LOG_LEVEL = config('LOG_LEVEL', default='INFO')

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'verbose': {
            'format': '{asctime} {levelname} {name} {message}',
            'style': '{',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'verbose',
        },
    },
    'root': {
        'handlers': ['console'],
        'level': LOG_LEVEL,
    },
    'loggers': {
        'django.db.backends': {
            'level': 'WARNING',
        },
    },
}


# Order fulfillment
ORDER_FREE_SHIPPING_THRESHOLD = config('ORDER_FREE_SHIPPING_THRESHOLD', default=500, cast=int)
ORDER_FLAT_SHIPPING_COST = config('ORDER_FLAT_SHIPPING_COST', default=60, cast=int)

# Off by default: creation checks availability but does not decrement stock.
ORDER_RESERVE_STOCK = config('ORDER_RESERVE_STOCK', default=False, cast=bool)

# The checkout UI asks for a screenshot on online payments; the API only
# enforces it when this is switched on.
ORDER_REQUIRE_PAYMENT_PROOF = config('ORDER_REQUIRE_PAYMENT_PROOF', default=False, cast=bool)

PAYMENT_METHOD_DEFAULTS = {
    'CashOnDelivery': 'UNPAID',
    'bkash': 'PAID',
    'nagad': 'PAID',
    'rocket': 'PAID',
}
PAYMENT_STATUS_FALLBACK = config('PAYMENT_STATUS_FALLBACK', default='PAID')

FULFILLMENT_IDEMPOTENCY_TTL = config('FULFILLMENT_IDEMPOTENCY_TTL', default=60 * 60 * 24, cast=int)
