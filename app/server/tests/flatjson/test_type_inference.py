import pytest

from flatjson.errors import KeyWillBeOverwritten
from flatjson.flattener import Flattener
from flatjson.type_inference import infer_type, parse_float, parse_int64


class TestInferType:

    @pytest.mark.parametrize("text, expected", [
        ("1", 1),
        ("-42", -42),
        ("+7", 7),
        ("007", 7),
        ("9223372036854775807", 9223372036854775807),
        ("-9223372036854775808", -9223372036854775808),
    ])
    def test_integers(self, text, expected):
        result = infer_type(text)
        assert result == expected
        assert type(result) is int

    @pytest.mark.parametrize("text, expected", [
        ("1.0", 1.0),
        ("-0.5", -0.5),
        (".5", 0.5),
        ("1.", 1.0),
        ("1e3", 1000.0),
        ("2.5E-2", 0.025),
        ("9223372036854775808", 9223372036854775808.0),
    ])
    def test_floats(self, text, expected):
        result = infer_type(text)
        assert result == expected
        assert type(result) is float

    def test_booleans(self):
        assert infer_type("true") is True
        assert infer_type("false") is False

    @pytest.mark.parametrize("text", [
        "", "value", "True", "FALSE", " 1", "1 ", "1_000", "1.2.3", "0x10",
        "nan", "NaN", "inf", "-Infinity", "1e400", "٣",
    ])
    def test_strings_kept(self, text):
        assert infer_type(text) == text

    @pytest.mark.parametrize("value", [1, 1.5, True, None])
    def test_non_strings_untouched(self, value):
        assert infer_type(value) is value

    def test_parsers_return_none_on_failure(self):
        assert parse_int64("1.5") is None
        assert parse_int64("99999999999999999999") is None
        assert parse_float("abc") is None
        assert parse_float("inf") is None


class TestFlattenerTypeInference:

    def test_single_int_as_str_value(self):
        flattener = Flattener().with_type_inference()
        assert flattener.flatten({"key": "1"}) == {"key": 1}

    def test_single_int_as_str_no_infer_type_value(self):
        assert Flattener().flatten({"key": "1"}) == {"key": "1"}

    def test_single_float_as_str_value(self):
        flattener = Flattener().with_type_inference()
        assert flattener.flatten({"key": "1.0"}) == {"key": 1.0}

    def test_single_bool_as_str_value(self):
        flattener = Flattener().with_type_inference()
        assert flattener.flatten({"key": "true"}) == {"key": True}

    def test_inference_inside_arrays(self):
        flattener = Flattener().with_type_inference()
        assert flattener.flatten({"a": ["1", "x", {"b": "false"}]}) == {
            "a.0": 1,
            "a.1": "x",
            "a.2.b": False,
        }

    def test_inference_does_not_affect_collisions(self):
        flattener = Flattener().with_type_inference()
        with pytest.raises(KeyWillBeOverwritten) as exc_info:
            flattener.flatten({"a": ["1"], "a.0": "2"})
        assert exc_info.value.key == "a.0"
