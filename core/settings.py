"""
Settings for the CRM back office.

Class based (django-configurations). Select a class with DJANGO_CONFIGURATION;
every value can be overridden from the environment with the DJANGO_ prefix,
e.g. DJANGO_CRM_TAX_DEFAULT_RATE=7.
"""

from decimal import Decimal
from pathlib import Path

from configurations import Configuration, values

BASE_DIR = Path(__file__).resolve().parent.parent


class Base(Configuration):
    SECRET_KEY = values.SecretValue()
    DEBUG = values.BooleanValue(False)
    ALLOWED_HOSTS = values.ListValue(["localhost", "127.0.0.1"])

    SERVICE_NAME = "crm"

    INSTALLED_APPS = [
        "django.contrib.admin",
        "django.contrib.auth",
        "django.contrib.contenttypes",
        "django.contrib.sessions",
        "django.contrib.messages",
        "django.contrib.staticfiles",
        "core.apps.CoreConfig",
        "clients",
        "projects",
        "quotes",
    ]

    MIDDLEWARE = [
        "django.middleware.security.SecurityMiddleware",
        "django.contrib.sessions.middleware.SessionMiddleware",
        "django.middleware.common.CommonMiddleware",
        "django.middleware.csrf.CsrfViewMiddleware",
        "django.contrib.auth.middleware.AuthenticationMiddleware",
        "django.contrib.messages.middleware.MessageMiddleware",
        "django.middleware.clickjacking.XFrameOptionsMiddleware",
    ]

    ROOT_URLCONF = "core.urls"
    WSGI_APPLICATION = "core.wsgi.application"

    TEMPLATES = [
        {
            "BACKEND": "django.template.backends.django.DjangoTemplates",
            "DIRS": [],
            "APP_DIRS": True,
            "OPTIONS": {
                "context_processors": [
                    "django.template.context_processors.request",
                    "django.contrib.auth.context_processors.auth",
                    "django.contrib.messages.context_processors.messages",
                ],
            },
        },
    ]

    DB_PATH = values.Value(str(BASE_DIR / "crm.db"))

    @property
    def DATABASES(self):
        return {
            "default": {
                "ENGINE": "django.db.backends.sqlite3",
                "NAME": self.DB_PATH,
            }
        }

    DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

    LANGUAGE_CODE = "en-us"
    TIME_ZONE = values.Value("Europe/Berlin")
    USE_I18N = True
    USE_TZ = True

    STATIC_URL = "static/"
    STATIC_ROOT = values.Value(str(BASE_DIR / "staticfiles"))

    # SQLite connection tuning (see core.db_pragmas)
    SQLITE_WAL = values.BooleanValue(True)
    SQLITE_BUSY_TIMEOUT_MS = values.IntegerValue(30000)

    # -----------------------------
    # Logging
    # -----------------------------
    LOG_LEVEL = values.Value("INFO")

    @property
    def LOGGING(self):
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "simple": {
                    "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "simple",
                },
            },
            "root": {"handlers": ["console"], "level": self.LOG_LEVEL},
            "loggers": {
                "django.db.backends": {"level": "WARNING"},
            },
        }

    # -----------------------------
    # Sentry
    # -----------------------------
    SENTRY_URL = values.Value("")
    SENTRY_ENABLED = values.BooleanValue(False)
    SENTRY_ENVIRONMENT = values.Value("development")
    SENTRY_TRACES_SAMPLE_RATE = values.FloatValue(0.0)

    # -----------------------------
    # Celery
    # -----------------------------
    CELERY_BROKER_URL = values.Value("redis://localhost:6379/0")
    CELERY_RESULT_BACKEND = values.Value("redis://localhost:6379/1")
    CELERY_TASK_ALWAYS_EAGER = values.BooleanValue(False)
    CELERY_TIMEZONE = "Europe/Berlin"

    # -----------------------------
    # CRM: company identity
    # -----------------------------
    CRM_COMPANY_NAME = values.Value("Your Company Name")
    CRM_COMPANY_LEGAL_NAME = values.Value("Your Company Legal Name GmbH")
    CRM_COMPANY_ADDRESS_LINE_1 = values.Value("")
    CRM_COMPANY_ADDRESS_LINE_2 = values.Value("")
    CRM_COMPANY_POSTAL_CODE = values.Value("")
    CRM_COMPANY_CITY = values.Value("")
    CRM_COMPANY_COUNTRY = values.Value("Germany")
    CRM_COMPANY_EMAIL = values.Value("info@example.com")
    CRM_COMPANY_PHONE = values.Value("")
    CRM_COMPANY_WEBSITE = values.Value("")

    # -----------------------------
    # CRM: tax
    # -----------------------------
    CRM_TAX_NUMBER = values.Value("")  # Steuernummer
    CRM_VAT_ID = values.Value("")  # USt-IdNr
    CRM_TAX_DEFAULT_RATE = values.DecimalValue(Decimal("19.0"))
    CRM_TAX_REDUCED_RATE = values.DecimalValue(Decimal("7.0"))

    # -----------------------------
    # CRM: bank
    # -----------------------------
    CRM_BANK_NAME = values.Value("")
    CRM_BANK_ACCOUNT_HOLDER = values.Value("")
    CRM_BANK_IBAN = values.Value("")
    CRM_BANK_BIC = values.Value("")

    # -----------------------------
    # CRM: invoices / quotes
    # -----------------------------
    CRM_INVOICE_NUMBER_PREFIX = values.Value("INV")
    CRM_INVOICE_NUMBER_PADDING = values.IntegerValue(4)
    CRM_INVOICE_PAYMENT_TERMS = values.IntegerValue(30)
    CRM_INVOICE_PAYMENT_TERMS_TEXT = values.Value(
        "Zahlbar innerhalb von :days Tagen netto ohne Abzug."
    )
    CRM_INVOICE_FOOTER_TEXT = values.Value("")

    CRM_QUOTE_NUMBER_PREFIX = values.Value("Q")
    CRM_QUOTE_NUMBER_PADDING = values.IntegerValue(4)
    CRM_QUOTE_VALIDITY_DAYS = values.IntegerValue(30)
    CRM_QUOTE_FOOTER_TEXT = values.Value("")

    # Whether deleting a quote item recalculates the parent quote's totals
    CRM_RECALCULATE_ON_ITEM_DELETE = values.BooleanValue(True)

    # -----------------------------
    # CRM: locale & currency
    # -----------------------------
    CRM_LOCALE = values.Value("de_DE")
    CRM_CURRENCY = values.Value("EUR")
    CRM_CURRENCY_SYMBOL = values.Value("€")


class Development(Base):
    DEBUG = True
    SECRET_KEY = values.Value("dev-insecure-secret-key")
    LOG_LEVEL = values.Value("DEBUG")
    CELERY_TASK_ALWAYS_EAGER = values.BooleanValue(True)


class Production(Base):
    DB_PATH = values.Value("/data/crm.db")
    SENTRY_ENVIRONMENT = values.Value("production")


class Test(Base):
    DEBUG = False
    SECRET_KEY = "test-secret-key"
    SQLITE_WAL = False
    LOG_LEVEL = "WARNING"
    CELERY_TASK_ALWAYS_EAGER = True
    CELERY_TASK_EAGER_PROPAGATES = True
    CELERY_BROKER_URL = "memory://"
    CELERY_RESULT_BACKEND = "cache+memory://"

    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": ":memory:",
        }
    }

    PASSWORD_HASHERS = ["django.contrib.auth.hashers.MD5PasswordHasher"]
