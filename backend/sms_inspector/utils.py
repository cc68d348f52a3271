# Settings persistence for the SMS inspector application
import json
import logging
from typing import Any, Dict, List

from sms_inspector import config
from sms_inspector.models import (
    COLOR_KEYS,
    AdminSettings,
    ErrorMapping,
    ProxySettings,
    PublicSettings,
    SettingsUpdate,
)

logger = logging.getLogger(__name__)

SETTINGS_DIR = config.DATA_DIR
SETTINGS_FILE = SETTINGS_DIR / config.SETTINGS_FILE_NAME

DEFAULT_COLORS = {
    "color_primary": "217.2 91.2% 59.8%",
    "color_primary_foreground": "210 20% 98%",
    "color_background": "0 0% 100%",
    "color_foreground": "224 71.4% 4.1%",
    "color_card": "0 0% 100%",
    "color_card_foreground": "224 71.4% 4.1%",
    "color_popover": "0 0% 100%",
    "color_popover_foreground": "224 71.4% 4.1%",
    "color_secondary": "215 27.9% 95.1%",
    "color_secondary_foreground": "224 71.4% 4.1%",
    "color_muted": "215 27.9% 95.1%",
    "color_muted_foreground": "215 20.2% 65.1%",
    "color_accent": "215 27.9% 95.1%",
    "color_accent_foreground": "224 71.4% 4.1%",
    "color_destructive": "0 84.2% 60.2%",
    "color_destructive_foreground": "210 20% 98%",
    "color_border": "215 20.2% 90.1%",
    "color_input": "215 20.2% 90.1%",
    "color_ring": "217.2 91.2% 59.8%",
    "color_sidebar_background": "217.2 91.2% 59.8%",
    "color_sidebar_foreground": "210 20% 98%",
    "color_sidebar_accent": "222.1 71.1% 50.4%",
    "color_sidebar_accent_foreground": "210 20% 98%",
    "color_sidebar_border": "222.1 71.1% 50.4%",
}

DEFAULT_SETTINGS: Dict[str, Any] = {
    "api_key": "",
    "proxy_settings": {"ip": "", "port": "", "username": "", "password": ""},
    "site_name": "SMS Inspector 2.0",
    "email_change_enabled": True,
    "signup_enabled": True,
    "footer_text": "© {YEAR} {SITENAME}. All rights reserved.",
    "number_list": [],
    "error_mappings": [],
    "colors": DEFAULT_COLORS,
}


def load_settings() -> Dict[str, Any]:
    """Load the raw settings document from file"""
    if SETTINGS_FILE.exists():
        try:
            with open(SETTINGS_FILE, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError:
            logger.warning("Settings file %s is not valid JSON, using defaults", SETTINGS_FILE)
            return {}
        if isinstance(data, dict):
            return data
        logger.warning("Settings file %s does not hold an object, using defaults", SETTINGS_FILE)
    return {}


def save_settings(settings: Dict[str, Any]):
    """Save the raw settings document to file"""
    SETTINGS_FILE.parent.mkdir(parents=True, exist_ok=True)
    with open(SETTINGS_FILE, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2, ensure_ascii=False)


def _merged_colors(stored: Dict[str, Any]) -> Dict[str, str]:
    colors = stored.get("colors")
    if not isinstance(colors, dict):
        colors = {}
    return {key: colors.get(key) or DEFAULT_COLORS[key] for key in COLOR_KEYS}


def _proxy_from(stored: Dict[str, Any]) -> ProxySettings:
    raw = stored.get("proxy_settings")
    if not isinstance(raw, dict):
        return ProxySettings()
    return ProxySettings(
        ip=str(raw.get("ip") or ""),
        port=str(raw.get("port") or ""),
        username=str(raw.get("username") or ""),
        password=str(raw.get("password") or ""),
    )


def _number_list_from(stored: Dict[str, Any]) -> List[str]:
    raw = stored.get("number_list")
    if not isinstance(raw, list):
        return []
    # Numbers hand-edited into the file may be JSON integers
    return [
        str(number)
        for number in raw
        if isinstance(number, (str, int)) and not isinstance(number, bool)
    ]


def _error_mappings_from(stored: Dict[str, Any]) -> List[ErrorMapping]:
    raw = stored.get("error_mappings")
    if not isinstance(raw, list):
        return []
    return [
        ErrorMapping(
            reason_code=str(entry.get("reason_code") or ""),
            custom_message=str(entry.get("custom_message") or ""),
        )
        for entry in raw
        if isinstance(entry, dict)
    ]


def _public_fields(stored: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "site_name": stored.get("site_name") or DEFAULT_SETTINGS["site_name"],
        "signup_enabled": stored.get("signup_enabled", True) is True,
        "email_change_enabled": stored.get("email_change_enabled") is not False,
        "footer_text": stored.get("footer_text") or DEFAULT_SETTINGS["footer_text"],
        "colors": _merged_colors(stored),
    }


def get_public_settings() -> PublicSettings:
    return PublicSettings(**_public_fields(load_settings()))


def get_admin_settings() -> AdminSettings:
    stored = load_settings()
    return AdminSettings(
        **_public_fields(stored),
        api_key=str(stored.get("api_key") or ""),
        proxy_settings=_proxy_from(stored),
        number_list=_number_list_from(stored),
        error_mappings=_error_mappings_from(stored),
    )


def update_settings(update: SettingsUpdate) -> AdminSettings:
    """
    Merge a partial update into the stored settings.

    Colors are merged key by key; every other field replaces the stored value.
    """
    stored = load_settings()
    changes = update.model_dump(exclude_none=True)

    colors = changes.pop("colors", None)
    if colors:
        merged = dict(stored.get("colors") or {})
        merged.update({k: v for k, v in colors.items() if k in COLOR_KEYS})
        stored["colors"] = merged

    stored.update(changes)
    save_settings(stored)
    logger.info("Updated settings: %s", ", ".join(sorted(update.model_fields_set)))
    return get_admin_settings()


def get_error_mappings() -> Dict[str, str]:
    """Reason code -> custom message lookup, skipping incomplete entries."""
    mappings = {}
    for entry in get_admin_settings().error_mappings:
        if entry.reason_code and entry.custom_message:
            mappings[entry.reason_code] = entry.custom_message
    return mappings
