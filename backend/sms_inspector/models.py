# Data models for the SMS inspector application
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, model_validator

COLOR_KEYS = [
    "color_primary",
    "color_primary_foreground",
    "color_background",
    "color_foreground",
    "color_card",
    "color_card_foreground",
    "color_popover",
    "color_popover_foreground",
    "color_secondary",
    "color_secondary_foreground",
    "color_muted",
    "color_muted_foreground",
    "color_accent",
    "color_accent_foreground",
    "color_destructive",
    "color_destructive_foreground",
    "color_border",
    "color_input",
    "color_ring",
    "color_sidebar_background",
    "color_sidebar_foreground",
    "color_sidebar_accent",
    "color_sidebar_accent_foreground",
    "color_sidebar_border",
]


class ExtractedInfo(BaseModel):
    confirmation_code: Optional[str] = None
    link: Optional[str] = None


class SmsRecord(BaseModel):
    date_time: str
    sender_id: Optional[str] = None
    phone: Optional[str] = None
    mcc_mnc: Optional[str] = None
    destination: Optional[str] = None
    rate: Optional[str] = None
    currency: Optional[str] = None
    message: str
    extracted_info: ExtractedInfo = Field(default_factory=ExtractedInfo)


class AccessListRecord(BaseModel):
    price: Optional[str] = None
    access_origin: Optional[str] = None
    access_destination: Optional[str] = None
    test_number: Optional[str] = None
    rate: Optional[str] = None
    currency: Optional[str] = None
    comment: Optional[str] = None
    message: Optional[str] = None
    limit_hour: Optional[str] = None
    limit_day: Optional[str] = None
    datetime: Optional[str] = None


class SmsFilter(BaseModel):
    start_date: datetime
    end_date: datetime
    sender_id: Optional[str] = None
    phone: Optional[str] = None

    @model_validator(mode="after")
    def check_date_range(self):
        if self.end_date < self.start_date:
            raise ValueError("End date must be after start date.")
        if (self.end_date - self.start_date).days > 1:
            raise ValueError("The date range can be a maximum of two days.")
        return self


class AccessListFilter(BaseModel):
    origin: Optional[str] = None
    destination: Optional[str] = None
    message: Optional[str] = None


class SmsResponse(BaseModel):
    data: Optional[List[SmsRecord]] = None
    error: Optional[str] = None


class AccessListResponse(BaseModel):
    data: Optional[List[AccessListRecord]] = None
    error: Optional[str] = None


class ProxySettings(BaseModel):
    ip: str = ""
    port: str = ""
    username: str = ""
    password: str = ""

    @property
    def url(self) -> Optional[str]:
        """Proxy URL, or None when no proxy is configured."""
        if not self.ip or not self.port:
            return None
        auth = ""
        if self.username and self.password:
            auth = f"{self.username}:{self.password}@"
        return f"http://{auth}{self.ip}:{self.port}"


class ErrorMapping(BaseModel):
    reason_code: str = ""
    custom_message: str = ""


class PublicSettings(BaseModel):
    site_name: str
    signup_enabled: bool
    email_change_enabled: bool
    footer_text: str
    colors: Dict[str, str] = Field(default_factory=dict)


class AdminSettings(PublicSettings):
    api_key: str = ""
    proxy_settings: ProxySettings = Field(default_factory=ProxySettings)
    number_list: List[str] = Field(default_factory=list)
    error_mappings: List[ErrorMapping] = Field(default_factory=list)


class SettingsUpdate(BaseModel):
    """Partial settings update; fields left as None are not touched."""

    api_key: Optional[str] = None
    proxy_settings: Optional[ProxySettings] = None
    signup_enabled: Optional[bool] = None
    site_name: Optional[str] = None
    footer_text: Optional[str] = None
    email_change_enabled: Optional[bool] = None
    number_list: Optional[List[str]] = None
    error_mappings: Optional[List[ErrorMapping]] = None
    colors: Optional[Dict[str, str]] = None
