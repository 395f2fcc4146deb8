import pytest

from nrepl_mcp.evaluator.clojure import (
    apropos_form,
    clj_string,
    doc_form,
    load_file_form,
    namespaces_form,
    require_form,
    source_form,
    unquote_printed,
)


def test_clj_string_escapes_quotes_and_backslashes():
    assert clj_string("plain") == '"plain"'
    assert clj_string('say "hi"') == '"say \\"hi\\""'
    assert clj_string("C:\\src\\core.clj") == '"C:\\\\src\\\\core.clj"'


def test_user_strings_cannot_break_out_of_the_literal():
    form = apropos_form('") (System/exit 0) ("')
    assert form == '(do (require \'clojure.repl) (clojure.repl/apropos "\\") (System/exit 0) (\\""))'


def test_require_form():
    assert require_form("my.app.core") == '(require (symbol "my.app.core"))'


def test_load_file_form():
    assert load_file_form("/tmp/my file.clj") == '(load-file "/tmp/my file.clj")'


def test_source_form_resolves_through_symbol():
    assert source_form("clojure.core/map") == (
        "(do (require 'clojure.repl) (clojure.repl/source-fn (symbol \"clojure.core/map\")))"
    )


def test_doc_form_builds_the_doc_block():
    form = doc_form("map")
    assert form.startswith('(when-let [v (resolve (symbol "map"))]')
    assert '"-------------------------\\n"' in form
    assert "(pr-str (:arglists m))" in form
    assert form.count("(") == form.count(")")


def test_namespaces_form_prints_sorted_names():
    assert namespaces_form() == "(doseq [n (sort (map str (all-ns)))] (println n))"


@pytest.mark.parametrize(
    ("printed", "expected"),
    [
        ('"hello"', "hello"),
        ('"line one\\nline two"', "line one\nline two"),
        ('"a \\"quoted\\" word"', 'a "quoted" word'),
        ('"back\\\\slash"', "back\\slash"),
        ('"\\u00e9t\\u00e9"', "été"),
        ("no quotes", "no quotes"),
        ('"leading only', "leading only"),
        ('trailing only\\n"', "trailing only\\n"),
        ('"', ""),
    ],
)
def test_unquote_printed(printed: str, expected: str):
    assert unquote_printed(printed) == expected
