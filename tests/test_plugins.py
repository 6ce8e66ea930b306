import re
from unittest.mock import MagicMock

import pytest

from tailer.errors import ConfigurationError
from tailer.plugins.base import Exclude, FunctionPlugin, Plugin, PluginChain, Strip, as_plugin
from tailer.plugins.coloring import Coloring, THEMES

ANSI = re.compile(r"\x1b\[[0-9;]*m")


class Upper(Plugin):
    def apply(self, line):
        return line.upper(), True


class TestPluginChain:

    def test_plugins_run_in_registration_order(self):
        chain = PluginChain([lambda line: line + "-1", lambda line: line + "-2"])
        assert chain.run("x") == "x-1-2"

    def test_drop_stops_the_chain(self):
        later = MagicMock(return_value=("never", True))
        chain = PluginChain([Upper(), Exclude("DROP"), FunctionPlugin(later)])

        assert chain.run("drop this") is None
        later.assert_not_called()
        assert chain.run("keep") is not None
        later.assert_called_once_with("KEEP")

    def test_empty_chain_passes_lines_through(self):
        assert PluginChain().run("same") == "same"

    def test_non_callable_is_rejected(self):
        with pytest.raises(ConfigurationError):
            as_plugin(42)


class TestFunctionPlugin:

    def test_tuple_result(self):
        assert FunctionPlugin(lambda line: (line[::-1], True)).apply("abc") == ("cba", True)

    def test_string_result_keeps_line(self):
        assert FunctionPlugin(str.title).apply("abc") == ("Abc", True)

    def test_none_result_drops_line(self):
        assert FunctionPlugin(lambda line: None).apply("abc") == ("abc", False)


class TestBuiltins:

    def test_exclude(self):
        plugin = Exclude(r"healthz")
        assert plugin.apply("GET /healthz 200") == ("GET /healthz 200", False)
        assert plugin.apply("GET /api 200") == ("GET /api 200", True)

    def test_exclude_bad_pattern(self):
        with pytest.raises(ConfigurationError):
            Exclude("(")

    def test_strip(self):
        assert Strip().apply("padded   \t") == ("padded", True)


class TestColoring:

    @pytest.mark.parametrize("theme", sorted(THEMES))
    def test_levels_are_colored_and_text_preserved(self, theme):
        line = "2024-01-01 ERROR disk full, WARN retry, INFO ok"
        colored, keep = Coloring(theme).apply(line)

        assert keep
        assert "\x1b[" in colored
        assert ANSI.sub("", colored) == line

    def test_default_theme_uses_standard_colors(self):
        colored, _ = Coloring().apply("ERROR boom")
        assert colored.startswith("\x1b[31m")

    def test_only_escape_codes_are_added(self):
        line = "ERROR\tdb\x0cdown \x08\r  "
        colored, _ = Coloring().apply(line)
        assert colored == "\x1b[31mERROR\x1b[0m\tdb\x0cdown \x08\r  "

    def test_several_tokens(self):
        colored, _ = Coloring().apply("WARN a\tINFO b")
        assert colored == "\x1b[33mWARN\x1b[0m a\t\x1b[34mINFO\x1b[0m b"

    def test_lines_without_levels_are_untouched(self):
        assert Coloring().apply("plain text") == ("plain text", True)

    def test_partial_words_are_not_colored(self):
        assert Coloring().apply("INFORMATION desk") == ("INFORMATION desk", True)

    def test_markup_is_not_interpreted(self):
        line = "[bold]INFO[/bold] literal brackets"
        colored, _ = Coloring().apply(line)
        assert ANSI.sub("", colored) == line

    def test_unknown_theme(self):
        with pytest.raises(ConfigurationError):
            Coloring("neon")
