from __future__ import annotations

import pytest
import requests

from src.hrm_core.hrm_core.core.exceptions import DirectoryUnavailable
from src.hrm_core.hrm_core.directory.client import HttpEmployeeDirectory
from src.hrm_core.hrm_core.directory.enrichment import enrich_records


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def _send(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response

    def post(self, url, **kwargs):
        return self._send("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._send("GET", url, **kwargs)


def test_batch_lookup_sends_ids_and_service_key():
    session = FakeSession(
        FakeResponse(
            {
                "success": True,
                "data": [
                    {
                        "_id": "E1",
                        "firstName": "Lan",
                        "lastName": "Nguyen",
                        "employeeId": "EMP001",
                        "department": {"name": "Finance"},
                        "position": {"title": "Accountant"},
                    }
                ],
            }
        )
    )
    client = HttpEmployeeDirectory("http://emp.local/", service_key="k", timeout=2, session=session)

    people = client.batch_lookup(["E1", "E1", None], auth_header="Bearer t")

    method, url, kwargs = session.calls[0]
    assert (method, url) == ("POST", "http://emp.local/api/employees/batch")
    assert kwargs["json"] == {"ids": ["E1"]}
    assert kwargs["headers"] == {"Authorization": "Bearer t", "X-Service-Key": "k"}
    assert kwargs["timeout"] == 2.0
    assert people["E1"].department == "Finance"
    assert people["E1"].position == "Accountant"
    assert people["E1"].employee_code == "EMP001"


def test_batch_lookup_with_no_ids_skips_http():
    session = FakeSession(FakeResponse({}))
    client = HttpEmployeeDirectory("http://emp.local", session=session)

    assert client.batch_lookup([]) == {}
    assert session.calls == []


def test_list_active_passes_salary_through_unparsed():
    body = {"data": [{"_id": "E1", "salary": 1200.5}, {"id": "E2"}, {"_id": "E3", "salary": "n/a"}]}
    session = FakeSession(FakeResponse(body))
    client = HttpEmployeeDirectory("http://emp.local", session=session)

    roster = client.list_active()

    assert session.calls[0][1] == "http://emp.local/api/employees/active"
    assert [(r.employee_id, r.base_salary) for r in roster] == [("E1", 1200.5), ("E2", None), ("E3", "n/a")]


@pytest.mark.parametrize(
    "session",
    [
        FakeSession(error=requests.Timeout("timed out")),
        FakeSession(error=requests.ConnectionError("refused")),
        FakeSession(FakeResponse({}, status_code=502)),
    ],
)
def test_transport_errors_raise_directory_unavailable(session):
    client = HttpEmployeeDirectory("http://emp.local", session=session)

    with pytest.raises(DirectoryUnavailable):
        client.list_active()


def test_enrichment_replaces_known_references(directory):
    rows = [{"id": 1, "employee": "E1"}, {"id": 2, "employee": "E9"}]

    out = enrich_records(rows, directory, auth_header="Bearer t")

    assert out[0]["employee"]["first_name"] == "Lan"
    assert out[1]["employee"] == "E9"
    assert directory.lookups == [(["E1", "E9"], "Bearer t")]


def test_enrichment_degrades_when_directory_down(broken_directory):
    rows = [{"id": 1, "employee": "E1"}]

    assert enrich_records(rows, broken_directory) == rows


@pytest.mark.parametrize(
    "body",
    [
        ["unexpected list body"],
        {"data": "oops"},
        {"data": [{"_id": "E1"}, "E2"]},
    ],
)
def test_malformed_lookup_body_raises_directory_unavailable(body):
    client = HttpEmployeeDirectory("http://emp.local", session=FakeSession(FakeResponse(body)))

    with pytest.raises(DirectoryUnavailable):
        client.batch_lookup(["E1"])


def test_malformed_roster_body_raises_directory_unavailable():
    client = HttpEmployeeDirectory("http://emp.local", session=FakeSession(FakeResponse(["E1", "E2"])))

    with pytest.raises(DirectoryUnavailable):
        client.list_active()


def test_enrichment_keeps_rows_when_lookup_body_is_malformed():
    client = HttpEmployeeDirectory("http://emp.local", session=FakeSession(FakeResponse(["unexpected list body"])))
    rows = [{"id": 1, "employee": "E1"}]

    assert enrich_records(rows, client) == rows
