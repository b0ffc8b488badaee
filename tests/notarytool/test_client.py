"""
Tests for NotaryToolClient operations.
"""

import hashlib
import json

import pytest
import requests

from conftest import (
    BASE_URL,
    ISSUER_ID,
    KEY_ID,
    SUBMISSION_ID,
    make_response,
    not_found_body,
    submission_body,
)
from notarytool import NotaryToolClient, PollingState, Status, SubmissionId, no_delay
from notarytool.api.schemas import Notification
from notarytool.config import NotaryConfig
from notarytool.errors import (
    ClientError4xx,
    ConnectionError,
    GeneralError,
    InvalidSubmissionIdError,
    JsonCreateError,
    PrivateKeyNotFoundError,
    SubmissionLogError,
)

LOG_URL = (
    "https://notary-artifacts-prod.s3.amazonaws.com/prod/"
    f"{SUBMISSION_ID}/developer_log.json?X-Amz-Signature=abc"
)
LOG_TEXT = json.dumps({"logFormatVersion": 1, "status": "Accepted", "issues": None})


def new_submission_body() -> dict:
    return {
        "data": {
            "attributes": {
                "awsAccessKeyId": "ASIAEXAMPLE",
                "awsSecretAccessKey": "secret",
                "awsSessionToken": "session",
                "bucket": "notary-submissions-prod",
                "object": "prod/AQAAAAEAAAAA/app.zip",
            },
            "id": SUBMISSION_ID,
            "type": "newSubmissions",
        },
        "meta": {},
    }


def log_url_body(url: str = LOG_URL) -> dict:
    return {
        "data": {
            "attributes": {"developerLogUrl": url},
            "id": SUBMISSION_ID,
            "type": "submissionsLog",
        },
        "meta": {},
    }


@pytest.fixture
def submission_id() -> SubmissionId:
    return SubmissionId(SUBMISSION_ID)


class TestCreate:

    def test_missing_key_file(self, tmp_path):
        client, error = NotaryToolClient.create(KEY_ID, ISSUER_ID, tmp_path / "nope.p8")
        assert client is None
        assert isinstance(error, PrivateKeyNotFoundError)

    def test_from_config(self, private_key_file, mock_session):
        config = NotaryConfig(
            key_id=KEY_ID,
            issuer_id=ISSUER_ID,
            private_key_file=str(private_key_file),
            base_url=BASE_URL,
            read_timeout_seconds=30,
        )
        client, error = NotaryToolClient.from_config(config, session=mock_session)
        assert error is None
        assert client.pipeline.timeout == (10.0, 30.0)
        assert client.pipeline.base_url == BASE_URL

    def test_context_manager_closes_session(self, client, mock_session):
        with client as c:
            assert c is client
        mock_session.close.assert_called_once()


class TestSubmit:

    def test_submit_software(self, client, mock_session, tmp_path):
        software = tmp_path / "OvernightTextEditor_11.6.8.zip"
        software.write_bytes(b"PK\x03\x04 not really a zip")
        mock_session.request.return_value = make_response(body=new_submission_body())

        response, error = client.submit_software(software)

        assert error is None
        assert response.id.id == SUBMISSION_ID
        assert response.object_key == "prod/AQAAAAEAAAAA/app.zip"

        args, kwargs = mock_session.request.call_args
        assert args == ("POST", f"{BASE_URL}/submissions")
        assert json.loads(kwargs["data"]) == {
            "notifications": [],
            "sha256": hashlib.sha256(software.read_bytes()).hexdigest(),
            "submissionName": "OvernightTextEditor_11.6.8.zip",
        }

    def test_submit_software_missing_file(self, client, mock_session, tmp_path):
        response, error = client.submit_software(tmp_path / "missing.zip")
        assert response is None
        assert isinstance(error, GeneralError)
        mock_session.request.assert_not_called()

    def test_submit_with_notifications(self, client, mock_session):
        mock_session.request.return_value = make_response(body=new_submission_body())
        client.submit("app.zip", "b" * 64, [Notification(target="https://hooks.test/n")])
        body = json.loads(mock_session.request.call_args.kwargs["data"])
        assert body["notifications"] == [{"channel": "webhook", "target": "https://hooks.test/n"}]

    def test_submit_bad_digest(self, client, mock_session):
        response, error = client.submit("app.zip", "not-a-digest")
        assert response is None
        assert isinstance(error, JsonCreateError)
        assert error.data["sha256"] == "not-a-digest"
        mock_session.request.assert_not_called()


class TestSubmissionStatus:

    def test_get_submission_status(self, client, mock_session, submission_id):
        response, error = client.get_submission_status(submission_id)

        assert error is None
        assert response.submission_info.status is Status.ACCEPTED
        assert mock_session.request.call_args.args == (
            "GET",
            f"{BASE_URL}/submissions/{SUBMISSION_ID}",
        )

    def test_unknown_submission(self, client, mock_session):
        unknown = SubmissionId("5685647e-0125-4343-a068-1c5786499827")
        mock_session.request.return_value = make_response(
            404, body=not_found_body(), reason="Not Found"
        )

        response, error = client.get_submission_status(unknown)

        assert response is None
        assert isinstance(error, InvalidSubmissionIdError)
        assert unknown.id in error.message

    def test_get_previous_submissions(self, client, mock_session):
        mock_session.request.return_value = make_response(
            body={"data": [submission_body()["data"]], "meta": {}}
        )
        response, error = client.get_previous_submissions()
        assert error is None
        assert len(response.submission_info_list) == 1
        assert mock_session.request.call_args.args == ("GET", f"{BASE_URL}/submissions")

    def test_poll_submission_status(self, client, mock_session, submission_id):
        mock_session.request.side_effect = [
            make_response(body=submission_body(status="In Progress")),
            make_response(body=submission_body(status="In Progress")),
            make_response(body=submission_body(status="Accepted")),
        ]
        seen = []

        outcome = client.poll_submission_status(
            submission_id,
            max_poll_count=10,
            delay_function=no_delay,
            progress_callback=lambda attempt, response: seen.append(
                (attempt, response.submission_info.status)
            ),
        )

        assert outcome.state is PollingState.DONE
        assert outcome.attempts == 3
        assert seen == [
            (1, Status.IN_PROGRESS),
            (2, Status.IN_PROGRESS),
            (3, Status.ACCEPTED),
        ]

    def test_poll_stops_on_transport_error(self, client, mock_session, submission_id):
        mock_session.request.side_effect = [
            make_response(body=submission_body(status="In Progress")),
            requests.ConnectionError("Connection aborted."),
        ]
        outcome = client.poll_submission_status(submission_id, 10, no_delay)
        assert outcome.state is PollingState.FAILED
        assert isinstance(outcome.error, ConnectionError)
        assert outcome.attempts == 2


class TestSubmissionLog:

    def test_get_submission_log(self, client, mock_session, submission_id):
        mock_session.request.return_value = make_response(body=log_url_body())
        response, error = client.get_submission_log(submission_id)
        assert error is None
        assert response.developer_log_url_string == LOG_URL
        assert mock_session.request.call_args.args == (
            "GET",
            f"{BASE_URL}/submissions/{SUBMISSION_ID}/logs",
        )

    def test_retrieve_submission_log(self, client, mock_session, submission_id):
        mock_session.request.side_effect = [
            make_response(body=log_url_body()),
            make_response(body=LOG_TEXT, url=LOG_URL),
        ]

        text, error = client.retrieve_submission_log(submission_id)

        assert error is None
        assert text == LOG_TEXT
        second_call = mock_session.request.call_args_list[1]
        assert second_call.args == ("GET", LOG_URL)
        assert "Authorization" not in second_call.kwargs["headers"]

    def test_retrieve_with_invalid_log_url(self, client, mock_session, submission_id):
        mock_session.request.return_value = make_response(body=log_url_body(url="::not-a-url::"))
        text, error = client.retrieve_submission_log(submission_id)
        assert text is None
        assert isinstance(error, SubmissionLogError)
        assert mock_session.request.call_count == 1

    def test_retrieve_log_download_fails(self, client, mock_session, submission_id):
        mock_session.request.side_effect = [
            make_response(body=log_url_body()),
            make_response(404, body="", reason="Not Found", content_type="application/xml"),
        ]
        _, error = client.retrieve_submission_log(submission_id)
        assert isinstance(error, ClientError4xx)

    def test_download_submission_log(self, client, mock_session, submission_id, tmp_path):
        mock_session.request.side_effect = [
            make_response(body=log_url_body()),
            make_response(body=LOG_TEXT, url=LOG_URL),
        ]
        destination = tmp_path / "developer_log.json"

        path, error = client.download_submission_log(submission_id, destination)

        assert error is None
        assert path == destination
        assert destination.read_text(encoding="utf-8") == LOG_TEXT

    def test_download_to_unwritable_path(self, client, mock_session, submission_id, tmp_path):
        mock_session.request.side_effect = [
            make_response(body=log_url_body()),
            make_response(body=LOG_TEXT, url=LOG_URL),
        ]
        path, error = client.download_submission_log(submission_id, tmp_path / "no" / "such" / "dir.json")
        assert path is None
        assert isinstance(error, SubmissionLogError)
