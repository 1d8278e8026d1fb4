"""tests/test_codec.py: Unit tests for the row codec."""

import pytest
from botdb import codec
from botdb.codec import RAW, STRUCTURED
from botdb.errors import CorruptionError, InvalidDataError


class TestValueDomain:
    @pytest.mark.parametrize("value", ["Rex", "", 0, -7, 2.5, True, None, [1, "a"], {"k": [None]}])
    def test_structured_accepts(self, value):
        codec.validate_value(value, STRUCTURED)

    @pytest.mark.parametrize("value", [(1, 2), {1: "a"}, float("nan"), float("inf"), b"x", object()])
    def test_structured_rejects(self, value):
        with pytest.raises(InvalidDataError):
            codec.validate_value(value, STRUCTURED)

    def test_structured_rejects_nested_bad_value(self):
        with pytest.raises(InvalidDataError):
            codec.validate_value({"ok": [1, {2, 3}]}, STRUCTURED)

    def test_raw_accepts_plain_string(self):
        codec.validate_value("hello world", RAW)

    def test_raw_rejects_non_string(self):
        with pytest.raises(InvalidDataError):
            codec.validate_value(42, RAW)

    def test_raw_rejects_newline(self):
        with pytest.raises(InvalidDataError, match="line breaks"):
            codec.validate_value("two\nlines", RAW)

    @pytest.mark.parametrize("value", ["\ud800", ["ok", "\udfff"], {"\ud800": 1}])
    def test_structured_rejects_lone_surrogates(self, value):
        with pytest.raises(InvalidDataError, match="unicode"):
            codec.validate_value(value, STRUCTURED)

    def test_raw_rejects_lone_surrogate(self):
        with pytest.raises(InvalidDataError, match="unicode"):
            codec.validate_value("bad\ud800", RAW)


class TestIndexKey:
    def test_type_sensitive(self):
        keys = {codec.index_key(v) for v in (1, 1.0, True, "1")}
        assert len(keys) == 4

    def test_dict_key_order_ignored(self):
        assert codec.index_key({"a": 1, "b": 2}) == codec.index_key({"b": 2, "a": 1})


class TestEncodeDecode:
    def test_encode_one_line_per_value(self):
        assert codec.encode(["Rex", 3, None]) == ['"Rex"', "3", "null"]

    def test_encode_escapes_newlines(self):
        lines = codec.encode(["a\nb"])
        assert lines == ['"a\\nb"']
        assert "\n" not in lines[0]

    def test_encode_raw_is_bare(self):
        assert codec.encode(["Rex", "dog"], RAW) == ["Rex", "dog"]

    def test_decode_chunks_by_column_count(self):
        rows = codec.decode(['"a"', "1", '"b"', "2"], ["name", "n"])
        assert rows == [["a", 1], ["b", 2]]

    def test_decode_uneven_line_count_is_corruption(self):
        with pytest.raises(CorruptionError, match="multiple"):
            codec.decode(['"a"', "1", '"b"'], ["name", "n"])

    def test_decode_bad_literal_is_corruption(self):
        with pytest.raises(CorruptionError, match="Undecodable"):
            codec.decode(["not json"], ["x"])


class TestTableText:
    def test_dump_format(self):
        text = codec.dump_table(["name", "species"], [["Rex", "dog"], ["Mimi", "cat"]])
        assert text == 'name species\n"Rex"\n"dog"\n"Mimi"\n"cat"\n'

    def test_dump_raw_format(self):
        text = codec.dump_table(["name", "species"], [["Rex", "dog"]], RAW)
        assert text == "name species\nRex\ndog\n"

    def test_load_structured(self):
        schema, rows = codec.load_table('a b\n"x"\n1\n"y"\n[2]\n')
        assert schema == ["a", "b"]
        assert rows == [["x", 1], ["y", [2]]]

    def test_load_tolerates_trailing_space_in_header(self):
        schema, rows = codec.load_table("name species \nRex\ndog\n", RAW)
        assert schema == ["name", "species"]
        assert rows == [["Rex", "dog"]]

    def test_load_header_only(self):
        assert codec.load_table("a b\n") == (["a", "b"], [])

    def test_load_empty_text_is_corruption(self):
        with pytest.raises(CorruptionError, match="header"):
            codec.load_table("")

    def test_load_duplicate_header_is_corruption(self):
        with pytest.raises(CorruptionError, match="Duplicate"):
            codec.load_table('a a\n"x"\n"y"\n')

    def test_load_stride_mismatch_is_corruption(self):
        with pytest.raises(CorruptionError):
            codec.load_table('a b\n"x"\n"y"\n"z"\n')

    def test_round_trip_preserves_order_and_types(self):
        schema = ["name", "meta", "score"]
        rows = [
            ["Rex", {"age": 3, "tags": ["good", "boy"]}, 9.5],
            ["line\nbreak 'quoted' \"double\"", None, -1],
            ["ünïcødé", [], True],
        ]
        assert codec.load_table(codec.dump_table(schema, rows)) == (schema, rows)
