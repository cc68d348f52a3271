"""Pytest configuration and fixtures for testing the SMS Inspector API."""
import pytest
import tempfile
import shutil
from pathlib import Path
from fastapi.testclient import TestClient
from sms_inspector.main import app


@pytest.fixture
def temp_settings_dir():
    """Create a temporary directory for the settings file during testing."""
    temp_dir = tempfile.mkdtemp()
    temp_settings_file = Path(temp_dir) / "settings.json"

    # Patch the SETTINGS_DIR and SETTINGS_FILE in the utils module
    import sms_inspector.utils as utils_module
    original_dir = utils_module.SETTINGS_DIR
    original_file = utils_module.SETTINGS_FILE

    utils_module.SETTINGS_DIR = Path(temp_dir)
    utils_module.SETTINGS_FILE = temp_settings_file

    yield temp_dir

    # Cleanup: restore original paths and remove temp directory
    utils_module.SETTINGS_DIR = original_dir
    utils_module.SETTINGS_FILE = original_file
    shutil.rmtree(temp_dir)


@pytest.fixture
def client(temp_settings_dir):
    """Create a test client for the FastAPI application."""
    return TestClient(app)


@pytest.fixture
def api_key(temp_settings_dir):
    """Store an API key so billing API calls get past the configuration check."""
    from sms_inspector.utils import save_settings
    save_settings({"api_key": "test-key-123"})
    return "test-key-123"


@pytest.fixture
def sms_csv_content():
    """SMS records as returned by the billing API."""
    return (
        "Datetime;SenderID;B-Number;MCC/MNC;Destination;Rate;Currency;Message\r\n"
        '2024-05-01 10:00:00;ACME;491701234567;262/01;Germany;0.05;EUR;"Your code is 482910, expires in 5 minutes"\r\n'
        '2024-05-01 10:05:00;BANK;447700900123;234/15;United Kingdom;0.04;EUR;"Code: 123-456\nVerify at https://ex.am/ple?x=1 now"\r\n'
    )


@pytest.fixture
def access_list_csv_content():
    """Access-list pricing rows as returned by the billing API."""
    return (
        "Price;Access Origin;Access Destination;Test Number;Rate;Currency;Comment;Message;Limit Hour;Limit Day;Datetime\n"
        "0.010;ACME;Germany;491701234567;0.05;EUR;;Your code is {code};100;1000;2024-05-01 10:00:00\n"
        "0.020;BANK;France;33612345678;0.06;EUR;promo;;50;500;2024-05-01 11:00:00\n"
    )


class DummyResponse:
    """Stand-in for httpx.Response with just the attributes the client reads."""

    def __init__(self, text: str, status_code: int = 200, reason_phrase: str = "OK"):
        self.text = text
        self.status_code = status_code
        self.reason_phrase = reason_phrase

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


class DummyClient:
    """Records the outgoing request and answers with a canned response."""

    def __init__(self, response: DummyResponse, sink: dict, init_kwargs: dict):
        self._response = response
        self._sink = sink
        self._sink["client_kwargs"] = init_kwargs

    def __enter__(self) -> "DummyClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None

    def post(self, url: str, json: dict, headers: dict = None) -> DummyResponse:
        self._sink["url"] = str(url)
        self._sink["json"] = json
        self._sink["headers"] = dict(headers or {})
        return self._response

    def get(self, url: str) -> DummyResponse:
        self._sink["url"] = str(url)
        return self._response


@pytest.fixture
def mock_billing_api(monkeypatch):
    """
    Patch httpx.Client in the billing client.

    Returns a function taking the response body (and optional status) that
    installs the dummy client and returns the dict the request is recorded into.
    """
    import sms_inspector.billing_api as billing_module

    def install(text: str, status_code: int = 200, reason_phrase: str = "OK") -> dict:
        sink: dict = {}
        response = DummyResponse(text, status_code, reason_phrase)

        def make_client(*args, **kwargs):
            return DummyClient(response, sink, kwargs)

        monkeypatch.setattr(billing_module.httpx, "Client", make_client)
        return sink

    return install
