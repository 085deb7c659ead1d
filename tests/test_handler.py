"""Tests for the request gateway (serverless event in, response dict out)."""

import asyncio
import base64
import json
from typing import Any, Callable, Dict, List, Optional

import httpx

from services.assistant.app.handler import handle


def _post(body: Any) -> Dict[str, Any]:
    return {"httpMethod": "POST", "body": json.dumps(body)}


def _invoke(
    event: Dict[str, Any],
    settings,
    upstream: Optional[Callable[[httpx.Request], httpx.Response]] = None,
) -> Dict[str, Any]:
    def _unexpected(request: httpx.Request) -> httpx.Response:
        raise AssertionError(f"unexpected upstream call: {request.url}")

    async def _go():
        transport = httpx.MockTransport(upstream or _unexpected)
        async with httpx.AsyncClient(transport=transport) as client:
            return await handle(event, settings, client=client)

    return asyncio.run(_go())


def _recording(status: int, content: Any, calls: List[httpx.Request]):
    def _upstream(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if isinstance(content, (dict, list)):
            return httpx.Response(status, json=content)
        return httpx.Response(status, text=content)

    return _upstream


def _assert_cors(headers: Dict[str, str]) -> None:
    assert headers["Access-Control-Allow-Origin"] == "*"
    assert headers["Access-Control-Allow-Methods"] == "POST, OPTIONS"
    assert headers["Access-Control-Allow-Headers"] == "Content-Type"


def test_options_preflight(make_settings) -> None:
    resp = _invoke({"httpMethod": "OPTIONS"}, make_settings())
    assert resp["statusCode"] == 204
    assert "body" not in resp
    _assert_cors(resp["headers"])


def test_other_methods_not_allowed(make_settings) -> None:
    for method in ("GET", "PUT", "DELETE", "post", ""):
        resp = _invoke({"httpMethod": method}, make_settings())
        assert resp["statusCode"] == 405
        assert resp["body"] == "Method Not Allowed"
        assert "Content-Type" not in resp["headers"]
        _assert_cors(resp["headers"])


def test_http_api_event_method_is_recognised(make_settings) -> None:
    event = {"requestContext": {"http": {"method": "OPTIONS"}}}
    assert _invoke(event, make_settings())["statusCode"] == 204


def test_missing_text_is_rejected(make_settings) -> None:
    for body in ({}, {"text": ""}, {"text": 12}, {"text": None}, [], "hola"):
        resp = _invoke(_post(body), make_settings())
        assert resp["statusCode"] == 400
        assert json.loads(resp["body"]) == {"error": "Falta 'text' en el body."}
        assert resp["headers"]["Content-Type"] == "application/json"
        _assert_cors(resp["headers"])


def test_missing_body_is_treated_as_empty_object(make_settings) -> None:
    resp = _invoke({"httpMethod": "POST", "body": None}, make_settings())
    assert resp["statusCode"] == 400


def test_missing_text_checked_before_api_key(make_settings) -> None:
    resp = _invoke(_post({}), make_settings(openai_api_key=None))
    assert resp["statusCode"] == 400


def test_missing_api_key_fails_before_upstream(make_settings) -> None:
    resp = _invoke(_post({"text": "Hola"}), make_settings(openai_api_key=None))
    assert resp["statusCode"] == 500
    assert json.loads(resp["body"]) == {"error": "OPENAI_API_KEY no configurada."}


def test_malformed_json_body_is_generic_error(make_settings) -> None:
    resp = _invoke({"httpMethod": "POST", "body": "{text:"}, make_settings())
    assert resp["statusCode"] == 500
    assert json.loads(resp["body"]) == {"error": "Error procesando la solicitud."}


def test_success_sanitizes_output_text(make_settings) -> None:
    calls: List[httpx.Request] = []
    upstream = _recording(200, {"output_text": "Hola【1:0†x.pdf】"}, calls)
    resp = _invoke(_post({"text": "Hola"}), make_settings(), upstream)
    assert resp["statusCode"] == 200
    assert json.loads(resp["body"]) == {"text": "Holax.pdf"}
    assert resp["headers"]["Content-Type"] == "application/json"
    _assert_cors(resp["headers"])
    assert len(calls) == 1


def test_upstream_request_shape(make_settings) -> None:
    calls: List[httpx.Request] = []
    upstream = _recording(200, {"output_text": "ok"}, calls)
    settings = make_settings(openai_api_key="sk-abc")
    _invoke(_post({"text": "¿Qué tal?", "temperature": 1}), settings, upstream)

    (request,) = calls
    assert request.method == "POST"
    assert str(request.url) == "https://api.openai.com/v1/responses"
    assert request.headers["Authorization"] == "Bearer sk-abc"
    assert request.headers["Content-Type"] == "application/json"
    assert json.loads(request.content) == {
        "model": "gpt-4o-mini",
        "input": [
            {
                "role": "user",
                "content": [{"type": "input_text", "text": "¿Qué tal?"}],
            }
        ],
        "temperature": 1,
    }


def test_request_assistant_overrides_configured_and_keeps_model(make_settings) -> None:
    calls: List[httpx.Request] = []
    upstream = _recording(200, {"output_text": "ok"}, calls)
    settings = make_settings(assistant_id="asst_env")
    _invoke(_post({"text": "Hola", "asst": "asst_abc"}), settings, upstream)

    sent = json.loads(calls[0].content)
    assert sent["assistant_id"] == "asst_abc"
    assert sent["model"] == "gpt-4o-mini"
    assert sent["temperature"] == 0.4


def test_invalid_request_assistant_falls_back_to_configured(make_settings) -> None:
    calls: List[httpx.Request] = []
    upstream = _recording(200, {"output_text": "ok"}, calls)
    settings = make_settings(assistant_id="asst_env")
    _invoke(_post({"text": "Hola", "asst": "abc"}), settings, upstream)
    assert json.loads(calls[0].content)["assistant_id"] == "asst_env"


def test_no_assistant_id_field_without_valid_id(make_settings) -> None:
    calls: List[httpx.Request] = []
    upstream = _recording(200, {"output_text": "ok"}, calls)
    settings = make_settings(assistant_id="not-an-id")
    _invoke(_post({"text": "Hola", "asst": "abc"}), settings, upstream)
    assert "assistant_id" not in json.loads(calls[0].content)


def test_structured_output_is_joined_and_sanitized(make_settings) -> None:
    data = {
        "output": [
            {"content": [{"text": "Uno 【3:1†a.pdf】"}]},
            {"content": [{"text": "Dos 【nota】"}]},
        ]
    }
    resp = _invoke(_post({"text": "Hola"}), make_settings(), _recording(200, data, []))
    assert json.loads(resp["body"]) == {"text": "Uno a.pdf\nDos"}


def test_upstream_error_is_passed_through(make_settings) -> None:
    upstream = _recording(429, {"error": "rate_limited"}, [])
    resp = _invoke(_post({"text": "Hola"}), make_settings(), upstream)
    assert resp["statusCode"] == 429
    assert json.loads(resp["body"]) == {"error": "rate_limited"}
    _assert_cors(resp["headers"])


def test_upstream_error_with_non_json_body(make_settings) -> None:
    upstream = _recording(502, "Bad gateway", [])
    resp = _invoke(_post({"text": "Hola"}), make_settings(), upstream)
    assert resp["statusCode"] == 502
    assert json.loads(resp["body"]) == {}


def test_non_json_success_body_yields_empty_text(make_settings) -> None:
    upstream = _recording(200, "<html>oops</html>", [])
    resp = _invoke(_post({"text": "Hola"}), make_settings(), upstream)
    assert resp["statusCode"] == 200
    assert json.loads(resp["body"]) == {"text": ""}


def test_network_failure_is_generic_error(make_settings) -> None:
    def _down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    resp = _invoke(_post({"text": "Hola"}), make_settings(), _down)
    assert resp["statusCode"] == 500
    assert json.loads(resp["body"]) == {"error": "Error procesando la solicitud."}


def test_base64_encoded_body(make_settings) -> None:
    raw = json.dumps({"text": "Hola"}).encode("utf-8")
    event = {
        "httpMethod": "POST",
        "body": base64.b64encode(raw).decode("ascii"),
        "isBase64Encoded": True,
    }
    upstream = _recording(200, {"output_text": "ok"}, [])
    resp = _invoke(event, make_settings(), upstream)
    assert json.loads(resp["body"]) == {"text": "ok"}
