import logging

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from sms_inspector import config
from sms_inspector.billing_api import fetch_access_list_data, fetch_sms_data, verify_proxy
from sms_inspector.langfuse_tracer import initialize_tracing
from sms_inspector.models import (
    AccessListFilter,
    AccessListResponse,
    AdminSettings,
    PublicSettings,
    SettingsUpdate,
    SmsFilter,
    SmsResponse,
)
from sms_inspector.utils import get_admin_settings, get_public_settings, update_settings

config.configure_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title="SMS Inspector API")

# CORS middleware for React frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

initialize_tracing()


@app.get("/")
def read_root():
    return {"message": "SMS Inspector API"}


@app.post("/sms", response_model=SmsResponse, response_model_exclude_none=True)
def get_sms_records(sms_filter: SmsFilter):
    """Fetch SMS delivery records with extracted codes and links"""
    return fetch_sms_data(sms_filter)


@app.post("/access-list", response_model=AccessListResponse, response_model_exclude_none=True)
def get_access_list(access_filter: AccessListFilter):
    """Fetch access-list pricing records"""
    return fetch_access_list_data(access_filter)


@app.get("/settings/public", response_model=PublicSettings)
def read_public_settings():
    """Branding and feature flags safe to show to any visitor"""
    return get_public_settings()


@app.get("/settings", response_model=AdminSettings)
def read_admin_settings():
    return get_admin_settings()


@app.put("/settings", response_model=AdminSettings)
def write_settings(update: SettingsUpdate):
    """Apply a partial settings update, testing a new proxy before saving it"""
    if update.proxy_settings is not None and not verify_proxy(update.proxy_settings):
        logger.warning("Rejected settings update: proxy %s failed the connectivity test", update.proxy_settings.ip)
        raise HTTPException(
            status_code=400,
            detail="Proxy test failed. Please check the details and ensure the proxy is active.",
        )
    return update_settings(update)


@app.get("/numbers")
def get_number_list():
    """Get the allowlist of numbers managed from the admin console"""
    return {"numbers": get_admin_settings().number_list}
