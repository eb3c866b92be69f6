from environs import Env
from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent.parent

env = Env()
env.read_env(BASE_DIR / '.env')

APP_ENV = env.str('APP_ENV', 'local')

SECRET_KEY = env.str('APP_SECRET_KEY', 'change-me')

DEBUG = APP_ENV != 'production'

ALLOWED_HOSTS = env.list('ALLOWED_HOSTS', default=['*'])

INSTALLED_APPS = [
    'django.contrib.admin',
    'django.contrib.auth',
    'django.contrib.contenttypes',
    'django.contrib.sessions',
    'django.contrib.messages',
    'django.contrib.staticfiles',
    'rest_framework',
    'vanitygate',
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

ROOT_URLCONF = 'core.urls'

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

WSGI_APPLICATION = 'core.wsgi.application'


DATABASES = {
    'default': {
        'ENGINE': env.str('DATABASE_ENGINE', 'django.db.backends.postgresql_psycopg2'),
        'NAME': env.str(
            'PGSQL_DATABASE_VANITY',
            env.str('PGSQL_DATABASE', 'solana_vanity'),
        ),
        'USER': env.str('PGSQL_USER', 'postgres'),
        'PASSWORD': env.str('PGSQL_PASSWORD', 'mysecretpassword'),
        'HOST': env.str('PGSQL_HOST', 'localhost'),
        'PORT': env.int('PGSQL_PORT', 5432),
    }
}


AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.UserAttributeSimilarityValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.CommonPasswordValidator',
    },
    {
        'NAME': 'django.contrib.auth.password_validation.NumericPasswordValidator',
    },
]


LANGUAGE_CODE = 'en-us'

TIME_ZONE = 'UTC'

USE_I18N = True

USE_TZ = True


STATIC_URL = '/static/'
STATIC_ROOT = BASE_DIR / 'static'

DEFAULT_AUTO_FIELD = 'django.db.models.BigAutoField'

REST_FRAMEWORK = {
    'DEFAULT_RENDERER_CLASSES': [
        'rest_framework.renderers.JSONRenderer',
    ],
}

# 0.1 SOL; compared against the integer lamport amount, never the decimal one.
VANITY_MIN_PAYMENT_LAMPORTS = env.int('VANITY_MIN_PAYMENT_LAMPORTS', 100_000_000)
VANITY_TREASURY_ADDRESS = env.str('VANITY_TREASURY_ADDRESS', '')
VANITY_MAX_WORD_LENGTH = env.int('VANITY_MAX_WORD_LENGTH', 6)
VANITY_WORKER_URL = env.str('VANITY_WORKER_URL', 'http://localhost:8080/generate')
VANITY_WORKER_TIMEOUT_SECONDS = env.float('VANITY_WORKER_TIMEOUT_SECONDS', 30.0)
HELIUS_WEBHOOK_AUTH_HEADER = env.str('HELIUS_WEBHOOK_AUTH_HEADER', '')
