from core.settings import *  # noqa: F401,F403

# File-backed so concurrent claims in separate threads share one database.
DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': str(BASE_DIR / 'vanitygate.sqlite3'),  # noqa: F405
        'OPTIONS': {'timeout': 20},
        'TEST': {'NAME': str(BASE_DIR / 'test_vanitygate.sqlite3')},  # noqa: F405
    }
}

VANITY_TREASURY_ADDRESS = ''
VANITY_WORKER_URL = 'http://worker.test/generate'
VANITY_WORKER_TIMEOUT_SECONDS = 5.0
HELIUS_WEBHOOK_AUTH_HEADER = ''
