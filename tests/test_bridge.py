import httpx
import pytest

from deskcrm.bridge import HostBridge, HostUnavailableError, UnknownOperationError
from deskcrm.result import Err, Ok


def _bridge(handler):
    return HostBridge(client=httpx.Client(base_url="http://host.test", transport=httpx.MockTransport(handler)))


def test_unknown_operation_is_refused_before_any_request():
    calls = []
    bridge = _bridge(lambda request: calls.append(request) or httpx.Response(200, json={"success": True}))

    with pytest.raises(UnknownOperationError):
        bridge.invoke("enquiries.dropAll")
    assert calls == []


def test_success_envelope_becomes_ok():
    bridge = _bridge(lambda request: httpx.Response(200, json={"success": True, "data": [1, 2]}))
    assert bridge.invoke("enquiries.getAll") == Ok([1, 2])


def test_error_envelope_becomes_err():
    bridge = _bridge(
        lambda request: httpx.Response(404, json={"success": False, "error": "Enquiry not found", "code": "not_found"})
    )
    result = bridge.invoke("enquiries.update", record_id="ENQ-1", body={"status": "x"}, token="t")
    assert result == Err("Enquiry not found", "not_found")


def test_record_id_is_quoted_and_token_sent():
    seen = {}

    def handler(request):
        seen["path"] = request.url.raw_path.decode()
        seen["method"] = request.method
        seen["auth"] = request.headers.get("authorization")
        return httpx.Response(200, json={"success": True, "data": {"deleted": True}})

    _bridge(handler).invoke("users.delete", record_id="a/b c", token="abc")

    assert seen == {"path": "/users/a%2Fb%20c", "method": "DELETE", "auth": "Bearer abc"}


def test_missing_record_id_is_an_err_without_request():
    calls = []
    bridge = _bridge(lambda request: calls.append(request) or httpx.Response(200, json={"success": True}))

    result = bridge.invoke("enquiries.delete", token="t")

    assert isinstance(result, Err)
    assert calls == []


def test_non_json_response_is_an_err():
    bridge = _bridge(lambda request: httpx.Response(502, text="<html>bad gateway</html>"))
    result = bridge.invoke("enquiries.getAll")
    assert isinstance(result, Err)
    assert "502" in result.reason


def test_malformed_envelope_is_an_err():
    bridge = _bridge(lambda request: httpx.Response(200, json=["not", "an", "envelope"]))
    assert isinstance(bridge.invoke("users.getAll"), Err)


def test_host_down_raises_host_unavailable():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(HostUnavailableError, match="will NOT be saved"):
        _bridge(handler).invoke("enquiries.add", body={}, token="t")


def test_read_timeout_is_an_err_not_a_crash():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    result = _bridge(handler).invoke("enquiries.getAll")
    assert isinstance(result, Err)
