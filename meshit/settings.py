"""
Django settings for the MeshIt project.

Configuration is read from the environment (and an optional `.env` file at the
repository root) through django-environ. Every value has a development default
so `manage.py` works out of the box against a local SQLite database.
"""

from datetime import timedelta
from pathlib import Path

import environ

BASE_DIR = Path(__file__).resolve().parent.parent

env = environ.Env(
    DEBUG=(bool, False),
    ALLOWED_HOSTS=(list, ['localhost', '127.0.0.1']),
    LOG_LEVEL=(str, 'INFO'),
)
environ.Env.read_env(BASE_DIR / '.env')

# =============================================================================
# CORE
# =============================================================================

SECRET_KEY = env('SECRET_KEY', default='meshit-dev-insecure-key')
DEBUG = env('DEBUG')
ALLOWED_HOSTS = env('ALLOWED_HOSTS')

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
    'drf_spectacular',

    'core',
    'skills',
    'profiles',
    'availability',
    'postings',
    'matching',
    'notifications',
]

MIDDLEWARE = [
    'django.middleware.security.SecurityMiddleware',
    'django.contrib.sessions.middleware.SessionMiddleware',
    'django.middleware.common.CommonMiddleware',
    'django.middleware.csrf.CsrfViewMiddleware',
    'django.contrib.auth.middleware.AuthenticationMiddleware',
    'django.contrib.messages.middleware.MessageMiddleware',
    'django.middleware.clickjacking.XFrameOptionsMiddleware',
]

ROOT_URLCONF = 'meshit.urls'
WSGI_APPLICATION = 'meshit.wsgi.application'

TEMPLATES = [
    {
        'BACKEND': 'django.template.backends.django.DjangoTemplates',
        'DIRS': [],
        'APP_DIRS': True,
        'OPTIONS': {
            'context_processors': [
                'django.template.context_processors.request',
                'django.contrib.auth.context_processors.auth',
                'django.contrib.messages.context_processors.messages',
            ],
        },
    },
]

# =============================================================================
# DATABASE
# =============================================================================

DATABASES = {
    'default': env.db('DATABASE_URL', default=f"sqlite:///{BASE_DIR / 'db.sqlite3'}"),
}
DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

# =============================================================================
# INTERNATIONALIZATION
# =============================================================================

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True

STATIC_URL = 'static/'
STATIC_ROOT = env('STATIC_ROOT', default=str(BASE_DIR / 'staticfiles'))

# =============================================================================
# CACHE
# =============================================================================

CACHES = {
    'default': env.cache('CACHE_URL', default='locmemcache://meshit'),
}

# =============================================================================
# REST FRAMEWORK
# =============================================================================

REST_FRAMEWORK = {
    'DEFAULT_AUTHENTICATION_CLASSES': [
        'rest_framework_simplejwt.authentication.JWTAuthentication',
        'rest_framework.authentication.SessionAuthentication',
        'rest_framework.authentication.BasicAuthentication',
    ],
    'DEFAULT_PERMISSION_CLASSES': [
        'rest_framework.permissions.IsAuthenticated',
    ],
    'DEFAULT_FILTER_BACKENDS': [
        'django_filters.rest_framework.DjangoFilterBackend',
        'rest_framework.filters.OrderingFilter',
    ],
    'DEFAULT_PAGINATION_CLASS': None,
    'DEFAULT_SCHEMA_CLASS': 'drf_spectacular.openapi.AutoSchema',
    'EXCEPTION_HANDLER': 'api.exceptions.meshit_exception_handler',
}

SIMPLE_JWT = {
    'ACCESS_TOKEN_LIFETIME': timedelta(minutes=env.int('JWT_ACCESS_MINUTES', default=60)),
    'REFRESH_TOKEN_LIFETIME': timedelta(days=env.int('JWT_REFRESH_DAYS', default=7)),
    'ROTATE_REFRESH_TOKENS': True,
    'AUTH_HEADER_TYPES': ('Bearer',),
}

SPECTACULAR_SETTINGS = {
    'TITLE': 'MeshIt API',
    'DESCRIPTION': 'Team matching, join requests and shared availability',
    'VERSION': '0.1.0',
    'SERVE_INCLUDE_SCHEMA': False,
    'COMPONENT_SPLIT_REQUEST': True,
}

# =============================================================================
# CELERY
# =============================================================================

CELERY_BROKER_URL = env('CELERY_BROKER_URL', default='redis://127.0.0.1:6379/0')
CELERY_RESULT_BACKEND = env('CELERY_RESULT_BACKEND', default='redis://127.0.0.1:6379/1')
CELERY_ACCEPT_CONTENT = ['json']
CELERY_TASK_SERIALIZER = 'json'
CELERY_RESULT_SERIALIZER = 'json'
CELERY_TIMEZONE = TIME_ZONE
CELERY_TASK_ALWAYS_EAGER = env.bool('CELERY_TASK_ALWAYS_EAGER', default=False)

# =============================================================================
# EMBEDDINGS
# =============================================================================

OPENAI_API_KEY = env('OPENAI_API_KEY', default='')
EMBEDDING_MODEL = env('EMBEDDING_MODEL', default='text-embedding-3-small')
EMBEDDING_DIMENSIONS = env.int('EMBEDDING_DIMENSIONS', default=1536)

# =============================================================================
# MESHIT DOMAIN SETTINGS
# =============================================================================

MESHIT = {
    'MAX_PROPOSALS_PER_POSTING': env.int('MESHIT_MAX_PROPOSALS_PER_POSTING', default=5),
    'DEFAULT_EXTENSION_DAYS': env.int('MESHIT_DEFAULT_EXTENSION_DAYS', default=7),
    'REACTIVATE_DAYS': env.int('MESHIT_REACTIVATE_DAYS', default=90),
    'EMBEDDING_BATCH_SIZE': env.int('MESHIT_EMBEDDING_BATCH_SIZE', default=50),
    'CANONICAL_MIN_WEEKS_BUSY': env.int('MESHIT_CANONICAL_MIN_WEEKS_BUSY', default=2),
    'CALENDAR_SYNC_INLINE_LIMIT': env.int('MESHIT_CALENDAR_SYNC_INLINE_LIMIT', default=500),
    'MATCH_SCORE_THRESHOLD': env.float('MESHIT_MATCH_SCORE_THRESHOLD', default=0.05),
    'MATCH_LIMIT': env.int('MESHIT_MATCH_LIMIT', default=20),
}

MESHIT_AVAILABILITY = {
    'SPLIT_MIDNIGHT_WINDOWS': env.bool('MESHIT_SPLIT_MIDNIGHT_WINDOWS', default=False),
}

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = env('LOG_LEVEL')

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
        'level': 'WARNING',
    },
    'loggers': {
        'django': {
            'handlers': ['console'],
            'level': 'INFO',
            'propagate': False,
        },
        **{
            app: {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': False}
            for app in (
                'core', 'api', 'skills', 'profiles', 'availability',
                'postings', 'matching', 'notifications',
            )
        },
    },
}
