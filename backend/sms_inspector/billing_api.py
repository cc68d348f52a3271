"""
Client for the telephony billing API.

Requests are JSON-RPC bodies POSTed to a single CSV endpoint; successful
responses are semicolon-delimited text, failures are JSON error objects.
Results are returned as response envelopes carrying either data or a
user-facing error string.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from sms_inspector import config
from sms_inspector.csv_parser import (
    MissingColumnsError,
    parse_access_list_records,
    parse_sms_records,
)
from sms_inspector.langfuse_tracer import get_tracer
from sms_inspector.models import (
    AccessListFilter,
    AccessListResponse,
    ProxySettings,
    SmsFilter,
    SmsResponse,
)
from sms_inspector.utils import get_admin_settings, get_error_mappings

logger = logging.getLogger(__name__)

SMS_METHOD = "sms.mdr_full:get_list"
ACCESS_LIST_METHOD = "sms.access_list__get_list:account_price"
API_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

MISSING_API_KEY_ERROR = "API key is not configured. Please set it in the admin panel."


def build_rpc_body(method: str, api_filter: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": None,
        "jsonrpc": "2.0",
        "method": method,
        "params": {
            "filter": api_filter,
            "page": 1,
            "per_page": config.PER_PAGE,
        },
    }


def build_sms_filter(sms_filter: SmsFilter) -> Dict[str, Any]:
    api_filter: Dict[str, Any] = {
        "start_date": sms_filter.start_date.strftime(API_DATE_FORMAT),
        "end_date": sms_filter.end_date.strftime(API_DATE_FORMAT),
    }
    if sms_filter.sender_id:
        api_filter["senderid"] = sms_filter.sender_id
    if sms_filter.phone:
        api_filter["phone"] = sms_filter.phone
    return api_filter


def build_access_list_filter(access_filter: AccessListFilter) -> Dict[str, Any]:
    api_filter: Dict[str, Any] = {"cur_key": 1, "sp_key_list": None}
    if access_filter.origin:
        api_filter["origin"] = access_filter.origin
    if access_filter.destination:
        api_filter["destination"] = access_filter.destination
    if access_filter.message:
        api_filter["message"] = access_filter.message
    return api_filter


def handle_api_error(status_code: int, reason: str, body: str) -> str:
    """
    Turn an error response into a user-facing message.

    A reason code with an admin-defined custom message wins; otherwise the
    API's own message is used, and non-JSON bodies are quoted verbatim.
    """
    try:
        payload = json.loads(body)
    except ValueError:
        payload = None

    if isinstance(payload, dict) and payload.get("error"):
        error = payload["error"]
        details = error if isinstance(error, dict) else {}
        reason_code = details.get("reason_code")
        if reason_code:
            custom_message = get_error_mappings().get(str(reason_code))
            if custom_message:
                return custom_message
        message = details.get("message") or (
            f"An unknown API error occurred. Raw error: {json.dumps(error)}"
        )
        return f"API Error: {message}"

    return f"API Error: {status_code} {reason}. {body}"


def _post_rpc(body: Dict[str, Any], api_key: str, proxy: ProxySettings) -> httpx.Response:
    headers = {"Content-Type": "application/json", "Api-Key": api_key}
    with httpx.Client(timeout=config.REQUEST_TIMEOUT_SECONDS, proxy=proxy.url) as client:
        return client.post(config.API_URL, json=body, headers=headers)


def _fetch(method: str, api_filter: Dict[str, Any], parse_records, response_cls):
    settings = get_admin_settings()
    if not settings.api_key:
        return response_cls(error=MISSING_API_KEY_ERROR)

    tracer = get_tracer()
    trace = tracer.create_trace(method, metadata={"filter": api_filter})
    try:
        response = _post_rpc(build_rpc_body(method, api_filter), settings.api_key, settings.proxy_settings)
        tracer.add_span(
            trace,
            "billing_api_request",
            input_text=json.dumps(api_filter),
            metadata={"status_code": response.status_code},
        )

        if not response.is_success:
            return response_cls(error=handle_api_error(response.status_code, response.reason_phrase, response.text))

        csv_text = response.text
        if not csv_text or not csv_text.strip():
            return response_cls(data=[])
        if csv_text.strip().startswith("{"):
            return response_cls(error=handle_api_error(response.status_code, response.reason_phrase, csv_text))

        records = parse_records(csv_text)
        tracer.add_span(trace, "parse_csv", output_text=f"{len(records)} records")
        return response_cls(data=records)
    except MissingColumnsError as e:
        logger.warning("%s: %s", method, e)
        return response_cls(error=str(e))
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        # InvalidURL comes from a malformed proxy already stored in settings
        logger.error("Billing API request %s failed: %s", method, e)
        return response_cls(error=str(e) or "An unknown error occurred.")
    finally:
        tracer.end_trace(trace)


def fetch_sms_data(sms_filter: SmsFilter) -> SmsResponse:
    """Fetch SMS delivery records for a date range and optional sender/phone."""
    return _fetch(SMS_METHOD, build_sms_filter(sms_filter), parse_sms_records, SmsResponse)


def fetch_access_list_data(access_filter: AccessListFilter) -> AccessListResponse:
    """Fetch access-list pricing rows, optionally narrowed by origin, destination or message."""
    return _fetch(ACCESS_LIST_METHOD, build_access_list_filter(access_filter), parse_access_list_records, AccessListResponse)


def verify_proxy(proxy: ProxySettings) -> bool:
    """
    Check that a proxy can reach the outside world.

    An empty proxy (no ip or port) passes, so clearing the proxy is always allowed.
    """
    proxy_url: Optional[str] = proxy.url
    if proxy_url is None:
        return True
    try:
        with httpx.Client(timeout=config.PROXY_CHECK_TIMEOUT_SECONDS, proxy=proxy_url) as client:
            response = client.get(config.PROXY_CHECK_URL)
        return response.is_success
    except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
        logger.error("Proxy test failed: %s", e)
        return False
