"""Tests for the base-name pattern matcher."""

import pytest

from repo_secret_manager.patterns import matches, split_alternatives


class TestSingleGlob:
    """Tests for plain globs."""

    @pytest.mark.parametrize(
        "file_name,pattern,expected",
        [
            ("config.json", "*.json", True),
            ("config.yml", "*.json", False),
            ("config.json", "config.json", True),
            ("app.config.json", "*.json", True),
            ("a.js", "?.js", True),
            ("ab.js", "?.js", False),
            ("Config.JSON", "*.json", False),
        ],
    )
    def test_glob(self, file_name, pattern, expected):
        assert matches(file_name, pattern) is expected

    def test_only_base_name_is_tested(self):
        assert matches("src/settings/config.json", "*.json")
        assert not matches("json/config.yml", "json*")

    def test_regex_metacharacters_are_literal(self):
        assert matches("a+b.txt", "a+b.txt")
        assert not matches("aab.txt", "a+b.txt")
        assert not matches("config_json", "config.json")

    def test_whole_name_must_match(self):
        assert not matches("config.json.bak", "*.json")


class TestAlternation:
    """Tests for (a|b) alternation."""

    def test_split(self):
        assert split_alternatives("(*.js|*.json)") == ["*.js", "*.json"]
        assert split_alternatives("*.js") == ["*.js"]

    def test_alternation_matches_either(self):
        assert matches("a.js", "(*.js|*.json)")
        assert matches("b.json", "(*.js|*.json)")
        assert not matches("c.yml", "(*.js|*.json)")
