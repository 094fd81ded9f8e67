"""Tests for displayable rendering."""

import datetime

from scriptbox.sandbox.render import MAX_DEPTH, UNSERIALIZABLE, display, one_line


class _BadStr:
    def __str__(self) -> str:
        raise RuntimeError("no")


class TestScalars:
    def test_string_unchanged(self):
        assert display("hello") == "hello"

    def test_int(self):
        assert display(42) == "42"

    def test_float(self):
        assert display(1.5) == "1.5"

    def test_bool_and_none(self):
        assert display(True) == "True"
        assert display(None) == "None"

    def test_arbitrary_object_uses_str(self):
        assert display(datetime.date(2024, 5, 1)) == "2024-05-01"

    def test_failing_str_is_placeholder(self):
        assert display(_BadStr()) == UNSERIALIZABLE


class TestContainers:
    def test_dict_indented_json(self):
        assert display({"a": 1, "b": [1, 2]}) == '{\n  "a": 1,\n  "b": [\n    1,\n    2\n  ]\n}'

    def test_list(self):
        assert display([1, "x", None]) == '[\n  1,\n  "x",\n  null\n]'

    def test_tuple_renders_as_list(self):
        assert display((1,)) == "[\n  1\n]"

    def test_empty_containers(self):
        assert display([]) == "[]"
        assert display({}) == "{}"

    def test_insertion_order_kept(self):
        assert display({"b": 1, "a": 2}).index('"b"') < display({"b": 1, "a": 2}).index('"a"')

    def test_unicode_not_escaped(self):
        assert display(["é"]) == '[\n  "é"\n]'

    def test_set_sorted(self):
        assert display({3, 1, 2}) == "[\n  1,\n  2,\n  3\n]"

    def test_unsortable_set_placeholder(self):
        assert display({1, "a"}) == UNSERIALIZABLE

    def test_nested_datetime_isoformat(self):
        assert display([datetime.date(2024, 1, 2)]) == '[\n  "2024-01-02"\n]'

    def test_shared_reference_is_not_a_cycle(self):
        inner = [1]
        assert display([inner, inner]) != UNSERIALIZABLE


class TestPlaceholder:
    def test_cycle(self):
        data: list = []
        data.append(data)
        assert display(data) == UNSERIALIZABLE

    def test_dict_cycle(self):
        data: dict = {}
        data["self"] = data
        assert display(data) == UNSERIALIZABLE

    def test_unrepresentable_member(self):
        assert display([object()]) == UNSERIALIZABLE

    def test_tuple_key(self):
        assert display({(1, 2): "x"}) == UNSERIALIZABLE

    def test_too_deep(self):
        data: list = []
        for _ in range(MAX_DEPTH + 5):
            data = [data]
        assert display(data) == UNSERIALIZABLE

    def test_just_within_depth(self):
        data: list = []
        for _ in range(MAX_DEPTH - 1):
            data = [data]
        assert display(data) != UNSERIALIZABLE


class TestOneLine:
    def test_collapses_lines(self):
        assert one_line("a\n  b\n\nc") == "a b c"

    def test_single_line_untouched(self):
        assert one_line("ZeroDivisionError: division by zero") == "ZeroDivisionError: division by zero"
