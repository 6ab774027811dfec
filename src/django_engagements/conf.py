"""Configuration helpers for django-engagements.

All settings use the ENGAGEMENTS_ prefix:

    ENGAGEMENTS_RESOURCE_PROVIDER = "app.providers.ListingProvider"   # required
    ENGAGEMENTS_PARTY_DIRECTORY = "app.providers.ResidentDirectory"   # required
    ENGAGEMENTS_NOTIFIER = "django_engagements.providers.LoggingNotifier"
    ENGAGEMENTS_CHAT_PROVIDER = "django_engagements.providers.LoggingChatProvider"
    ENGAGEMENTS_CLOCK = "django.utils.timezone.now"
    ENGAGEMENTS_ORDER_CONFIRMATION_WINDOW_HOURS = 48
    ENGAGEMENTS_BOOKING_CONFIRMATION_WINDOW_HOURS = 24
    ENGAGEMENTS_DURATION_TOLERANCE_MINUTES = 1
    ENGAGEMENTS_SWEEP_INTERVAL_SECONDS = 3600
    ENGAGEMENTS_ACTIVE_RESOURCE_STATUS = "active"
"""

from functools import lru_cache
from importlib import import_module

from django.conf import settings

from .exceptions import ProviderLoadError


DEFAULTS = {
    "NOTIFIER": "django_engagements.providers.LoggingNotifier",
    "CHAT_PROVIDER": "django_engagements.providers.LoggingChatProvider",
    "CLOCK": "django.utils.timezone.now",
    "ORDER_CONFIRMATION_WINDOW_HOURS": 48,
    "BOOKING_CONFIRMATION_WINDOW_HOURS": 24,
    "DURATION_TOLERANCE_MINUTES": 1,
    "SWEEP_INTERVAL_SECONDS": 3600,
    "ACTIVE_RESOURCE_STATUS": "active",
}


def get_setting(name: str, default=None):
    """Get a setting with ENGAGEMENTS_ prefix."""
    if default is None:
        default = DEFAULTS.get(name)
    return getattr(settings, f"ENGAGEMENTS_{name}", default)


def _import_attribute(dotted_path: str):
    try:
        module_path, attr_name = dotted_path.rsplit(".", 1)
    except ValueError:
        raise ProviderLoadError(dotted_path, "Invalid dotted path format")

    try:
        module = import_module(module_path)
    except ImportError as e:
        raise ProviderLoadError(dotted_path, f"Cannot import module: {e}")

    try:
        return getattr(module, attr_name)
    except AttributeError:
        raise ProviderLoadError(dotted_path, f"'{attr_name}' not found in module")


@lru_cache(maxsize=32)
def load_provider(dotted_path: str, base_class_path: str):
    """
    Import and instantiate a provider from dotted path.

    Raises ProviderLoadError for bad imports or classes that do not
    subclass the expected interface.
    """
    base_class = _import_attribute(base_class_path)
    provider_class = _import_attribute(dotted_path)

    if not isinstance(provider_class, type) or not issubclass(provider_class, base_class):
        raise ProviderLoadError(
            dotted_path,
            f"'{getattr(provider_class, '__name__', dotted_path)}' must be a subclass of {base_class.__name__}"
        )

    return provider_class()


def _provider(setting_name: str, base_name: str):
    path = get_setting(setting_name)
    if not path:
        raise ProviderLoadError(
            f"ENGAGEMENTS_{setting_name}", "Setting is required but not configured"
        )
    return load_provider(path, f"django_engagements.providers.{base_name}")


def get_resource_provider():
    return _provider("RESOURCE_PROVIDER", "BaseResourceProvider")


def get_party_directory():
    return _provider("PARTY_DIRECTORY", "BasePartyDirectory")


def get_notifier():
    return _provider("NOTIFIER", "BaseNotifier")


def get_chat_provider():
    return _provider("CHAT_PROVIDER", "BaseChatProvider")


@lru_cache(maxsize=8)
def _load_clock(dotted_path: str):
    clock = _import_attribute(dotted_path)
    if not callable(clock):
        raise ProviderLoadError(dotted_path, "Clock must be callable")
    return clock


def now():
    """Current time from the configured clock."""
    return _load_clock(get_setting("CLOCK"))()


def clear_provider_cache():
    """Clear the provider loading cache. Useful for testing."""
    load_provider.cache_clear()
    _load_clock.cache_clear()
