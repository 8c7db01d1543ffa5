"""Tests for List and String values."""

from mathcheck.math.collections import List, String
from mathcheck.math.formula import Formula
from mathcheck.math.numeric import Real


class TestList:
    def test_construction(self):
        assert List(1, -1, 0).to_python() == [1.0, -1.0, 0.0]
        assert List([1, 2]).length() == 2
        assert List("1, 2, 3").length() == 3

    def test_bare_list_renders_without_parens(self):
        assert List(1, -1, 0).to_string() == "1, -1, 0"

    def test_delimited_list_keeps_parens(self, numeric):
        value = List("[1, 2]", context=numeric)
        assert value.to_string() == "[1, 2]"
        assert value.with_parens("", "").to_string() == "1, 2"

    def test_nested_bare_lists_get_brackets(self):
        nested = List(elements=[List(1, 2), Real(3)])
        assert nested.to_string() == "[1, 2], 3"

    def test_compare_is_ordered(self):
        assert List(1, 2) == List(1, 2)
        assert List(1, 2) != List(2, 1)
        assert List(1, 2) != List(1, 2, 3)

    def test_list_of_formulas(self):
        value = List("x, x^2")
        assert all(isinstance(entry, Formula) for entry in value.elements)

    def test_indexing(self):
        assert List(5, 6)[0] == Real(5)
        assert len(List(5, 6)) == 2


class TestString:
    def test_case_insensitive(self):
        assert String("DNE") == String("dne")
        assert String("NONE") != String("DNE")

    def test_alias(self, numeric):
        numeric.strings.add(N={"alias": "NONE"})
        assert String("n", context=numeric).compare(String("NONE", context=numeric))

    def test_not_equal_to_numbers(self):
        assert not String("DNE").compare(Real(1))
