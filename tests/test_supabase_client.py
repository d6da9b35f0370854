from unittest.mock import MagicMock

import pytest
import requests

from common.supabase_client import VitalsClient


def _response(payload, status=200):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    if status >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} error")
    return response


def _client(session):
    return VitalsClient(base_url="https://example.supabase.co/", api_key="anon-key", session=session)


def test_requires_url_and_key():
    with pytest.raises(ValueError):
        VitalsClient(base_url="", api_key="", session=MagicMock())


def test_fetch_student_records():
    session = MagicMock()
    session.get.side_effect = [
        _response([{"consent_id": 7}, {"consent_id": 9}]),
        _response([
            {"vitals_id": 1, "consent_id": 7, "timelog": "2025-11-01T08:00:00Z",
             "temperature": 36.6, "heart_rate": 72, "systolic": 118, "diastolic": 76},
            {"vitals_id": 2, "consent_id": 9, "timelog": "2025-11-08T08:00:00Z",
             "temperature": None, "heart_rate": "80", "systolic": 131, "diastolic": None},
        ]),
    ]

    records = _client(session).fetch_student_records("2021-00123", limit=50)

    assert [r.vitals_id for r in records] == [1, 2]
    assert records[1].heart_rate == 80.0
    assert records[1].temperature is None

    consent_call, vitals_call = session.get.call_args_list
    assert consent_call.args[0] == "https://example.supabase.co/rest/v1/consent"
    assert consent_call.kwargs["params"]["student_id"] == "eq.2021-00123"
    assert consent_call.kwargs["headers"]["Authorization"] == "Bearer anon-key"
    assert consent_call.kwargs["headers"]["apikey"] == "anon-key"

    assert vitals_call.args[0] == "https://example.supabase.co/rest/v1/vitals"
    params = vitals_call.kwargs["params"]
    assert params["consent_id"] == "in.(7,9)"
    assert params["order"] == "timelog.asc"
    assert params["limit"] == "50"


def test_no_consent_skips_vitals_fetch():
    session = MagicMock()
    session.get.return_value = _response([])

    assert _client(session).fetch_student_records("unknown") == []
    assert session.get.call_count == 1


def test_http_error_degrades_to_empty():
    session = MagicMock()
    session.get.side_effect = [_response([{"consent_id": 7}]), _response({"message": "boom"}, status=500)]

    assert _client(session).fetch_student_records("2021-00123") == []


def test_network_error_degrades_to_empty():
    session = MagicMock()
    session.get.side_effect = requests.exceptions.ConnectionError("offline")

    assert _client(session).fetch_consent_ids("2021-00123") == []


def test_descending_order():
    session = MagicMock()
    session.get.return_value = _response([])

    _client(session).fetch_vitals([3], limit=100, ascending=False)

    params = session.get.call_args.kwargs["params"]
    assert params["order"] == "timelog.desc"
    assert params["limit"] == "100"
