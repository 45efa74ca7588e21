import sentry_sdk
from django.conf import settings
from sentry_sdk.integrations.django import DjangoIntegration


def init_sentry() -> bool:
    """
    Initialise Sentry when SENTRY_ENABLED and SENTRY_URL are set.
    Returns True if the SDK was initialised.
    """
    dsn = (getattr(settings, "SENTRY_URL", "") or "").strip()
    enabled = bool(getattr(settings, "SENTRY_ENABLED", False))

    if not (enabled and dsn):
        return False

    sentry_sdk.init(
        dsn=dsn,
        integrations=[DjangoIntegration()],
        send_default_pii=False,
        environment=getattr(settings, "SENTRY_ENVIRONMENT", "development"),
        traces_sample_rate=float(getattr(settings, "SENTRY_TRACES_SAMPLE_RATE", 0.0)),
    )
    return True
