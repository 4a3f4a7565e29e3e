"""Unit tests for DOM expression building and remote object decoding."""

import json
import math

import pytest

from browser_cli.exceptions import ElementNotFoundError, EvalError
from browser_cli.locator import (
    ElementLocator,
    decode_evaluation,
    decode_remote_object,
    js_call,
)


@pytest.mark.unit
class TestExpressionBuilding:
    """Selectors and text are passed as JSON literals."""

    def test_js_call_encodes_arguments(self):
        expr = js_call("(a, b) => a + b", "x", 2)
        assert expr == '((a, b) => a + b)("x", 2)'

    def test_hostile_selector_stays_a_string(self):
        selector = "a[title=\"x\"]'); alert(1); ('"
        expr = ElementLocator(selector).click()
        assert json.dumps(selector) in expr
        assert "alert(1); ('" not in expr.replace(json.dumps(selector), "")

    def test_fill_text_is_encoded(self):
        text = 'he said "hi"\n</script>'
        expr = ElementLocator("#q").fill(text)
        assert expr.endswith(f'("#q", {json.dumps(text)})')
        assert "dispatchEvent(new Event('input'" in expr
        assert "el.value = a0" in expr

    def test_attribute_name_is_an_argument(self):
        expr = ElementLocator("a").attribute("data-x")
        assert expr.endswith('("a", "data-x")')
        assert "getAttribute(a0)" in expr

    def test_count_uses_query_selector_all(self):
        expr = ElementLocator("div.missing").count()
        assert expr == '((selector) => document.querySelectorAll(selector).length)("div.missing")'

    def test_exists(self):
        expr = ElementLocator("#late").exists()
        assert "querySelector(selector) !== null" in expr

    def test_empty_selector_rejected(self):
        with pytest.raises(ValueError):
            ElementLocator("")


@pytest.mark.unit
class TestUnwrap:

    def test_found(self):
        assert ElementLocator("#a").unwrap({"found": True, "value": "hi"}) == "hi"

    def test_found_with_null_value(self):
        assert ElementLocator("#a").unwrap({"found": True}) is None

    @pytest.mark.parametrize("lookup", [{"found": False}, None, "junk"])
    def test_not_found(self, lookup):
        with pytest.raises(ElementNotFoundError) as exc_info:
            ElementLocator("#gone").unwrap(lookup)
        assert exc_info.value.selector == "#gone"


@pytest.mark.unit
class TestDecodeRemoteObject:

    def test_primitive(self):
        assert decode_remote_object({"type": "string", "value": "hello"}) == "hello"

    def test_object_by_value(self):
        assert decode_remote_object({"type": "object", "value": {"a": [1]}}) == {"a": [1]}

    def test_undefined_and_null(self):
        assert decode_remote_object({"type": "undefined"}) is None
        assert decode_remote_object({"type": "object", "subtype": "null", "value": None}) is None
        assert decode_remote_object(None) is None

    def test_unserializable(self):
        assert math.isinf(decode_remote_object({"type": "number", "unserializableValue": "Infinity"}))
        assert decode_remote_object({"type": "number", "unserializableValue": "-Infinity"}) == -math.inf
        assert math.copysign(1, decode_remote_object({"type": "number", "unserializableValue": "-0"})) == -1
        assert decode_remote_object({"type": "bigint", "unserializableValue": "12345678901234567890n"}) == 12345678901234567890

    def test_description_fallback(self):
        remote = {"type": "function", "description": "function f() {}"}
        assert decode_remote_object(remote) == "function f() {}"


@pytest.mark.unit
class TestDecodeEvaluation:

    def test_value(self):
        assert decode_evaluation({"result": {"type": "number", "value": 0}}) == 0

    def test_thrown_string(self):
        result = {
            "result": {"type": "string", "value": "Timeout"},
            "exceptionDetails": {
                "text": "Uncaught (in promise)",
                "exception": {"type": "string", "value": "Timeout"},
            },
        }
        with pytest.raises(EvalError, match="Timeout"):
            decode_evaluation(result)

    def test_exception_without_object(self):
        with pytest.raises(EvalError, match="SyntaxError"):
            decode_evaluation({"exceptionDetails": {"text": "SyntaxError: Unexpected token"}})
