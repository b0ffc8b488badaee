"""
pytest configuration for notary client tests.

Adds src directory to Python path for imports and provides shared fixtures:
EC signing keys, a controllable clock, and canned HTTP responses served by a
mocked ``requests.Session``.
"""

import io
import json
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src directory to Python path
src_dir = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_dir))

import requests  # noqa: E402
from cryptography.hazmat.primitives import serialization  # noqa: E402
from cryptography.hazmat.primitives.asymmetric import ec  # noqa: E402
from requests.structures import CaseInsensitiveDict  # noqa: E402

KEY_ID = "A8B3X24VG1"
ISSUER_ID = "70a7de6a-a537-48e3-a053-5a8a7c22a4a1"
SUBMISSION_ID = "2efe2717-52ef-43a5-96dc-0797e4ca1041"
BASE_URL = "https://notary.test/notary/v2"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2024, 3, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


def make_response(
    status_code: int = 200,
    body: str | dict | None = None,
    reason: str = "OK",
    content_type: str | None = "application/json",
    url: str = f"{BASE_URL}/submissions",
    headers: dict[str, str] | None = None,
) -> requests.Response:
    """Build a fully-read ``requests.Response`` without a network."""
    if isinstance(body, dict):
        body = json.dumps(body)
    content = body.encode("utf-8") if body is not None else b""

    response = requests.Response()
    response.status_code = status_code
    response.reason = reason
    response.url = url
    response.encoding = "utf-8"
    response._content = content
    response._content_consumed = True
    response.raw = io.BytesIO(content)

    response_headers = {"Content-Length": str(len(content))}
    if content_type is not None:
        response_headers["Content-Type"] = content_type
    response_headers.update(headers or {})
    response.headers = CaseInsensitiveDict(response_headers)
    return response


def submission_body(
    status: str = "Accepted",
    created_date: str = "2022-06-08T01:38:09.498Z",
    submission_id: str = SUBMISSION_ID,
    name: str = "OvernightTextEditor_11.6.8.zip",
) -> dict:
    return {
        "data": {
            "attributes": {
                "createdDate": created_date,
                "name": name,
                "status": status,
            },
            "id": submission_id,
            "type": "submissions",
        },
        "meta": {},
    }


def not_found_body(submission_id: str = "5685647e-0125-4343-a068-1c5786499827") -> dict:
    return {
        "errors": [
            {
                "id": "228afb9e-58fa-4246-8fed-c0dec1f23595",
                "status": "404",
                "code": "NOT_FOUND",
                "title": "The specified resource does not exist",
                "detail": f"There is no resource of type 'submissions' with id '{submission_id}'",
            }
        ]
    }


@pytest.fixture
def ec_private_key() -> ec.EllipticCurvePrivateKey:
    """Fresh P-256 key, as issued for App Store Connect API keys."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def private_key_pem(ec_private_key) -> bytes:
    return ec_private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )


@pytest.fixture
def private_key_file(tmp_path, private_key_pem) -> Path:
    key_file = tmp_path / f"AuthKey_{KEY_ID}.p8"
    key_file.write_bytes(private_key_pem)
    return key_file


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def mock_session():
    """``requests.Session`` mock; queue responses on ``request.side_effect``."""
    session = MagicMock(spec=requests.Session)
    session.request.return_value = make_response(body=submission_body())
    return session


@pytest.fixture
def client(private_key_file, mock_session, clock):
    from notarytool.client import NotaryToolClient

    notary_client, error = NotaryToolClient.create(
        KEY_ID,
        ISSUER_ID,
        private_key_file,
        base_url=BASE_URL,
        session=mock_session,
        clock=clock,
    )
    assert error is None
    return notary_client
