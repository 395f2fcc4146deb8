"""Clojure source text the bridge sends on behalf of its tools and resources.

Trust boundary: the bridge has no authentication, so whoever can reach it
can already run arbitrary code through ``eval-clojure``. The helpers here
still never splice caller-supplied names into code as raw text. Every
query, symbol name and namespace name is passed as a string literal built by
``clj_string`` and turned into a symbol on the Clojure side, so quoting
mistakes cannot change the shape of the form.
"""

from __future__ import annotations

import re

_ESCAPES = {'"': '\\"', "\\": "\\\\"}
_UNESCAPES = {'"': '"', "\\": "\\", "n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f"}
_ESCAPE_SEQUENCE = re.compile(r'\\(u[0-9a-fA-F]{4}|["\\ntrbf])')

DOC_RULE = "-------------------------"


def clj_string(text: str) -> str:
    """Render ``text`` as a Clojure string literal."""
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in text) + '"'


def require_form(namespace: str) -> str:
    return f"(require (symbol {clj_string(namespace)}))"


def load_file_form(path: str) -> str:
    return f"(load-file {clj_string(path)})"


def apropos_form(query: str) -> str:
    return f"(do (require 'clojure.repl) (clojure.repl/apropos {clj_string(query)}))"


def doc_form(symbol: str) -> str:
    """A form yielding the var's documentation block, or nil when it has none."""
    return (
        f"(when-let [v (resolve (symbol {clj_string(symbol)}))] "
        "(let [m (meta v)] "
        "(when (:doc m) "
        f'(str "{DOC_RULE}\\n" (:name m) "\\n" (pr-str (:arglists m)) "\\n  " (:doc m)))))'
    )


def source_form(symbol: str) -> str:
    return f"(do (require 'clojure.repl) (clojure.repl/source-fn (symbol {clj_string(symbol)})))"


def namespaces_form() -> str:
    """Prints one loaded namespace name per line, sorted."""
    return "(doseq [n (sort (map str (all-ns)))] (println n))"


def unquote_printed(printed: str) -> str:
    """Turn the printed form of a Clojure string back into plain text.

    A single leading and a single trailing double quote are stripped; if both
    were present the string escapes are decoded as well.
    """
    quoted = len(printed) >= 2 and printed.startswith('"') and printed.endswith('"')
    text = printed.removeprefix('"').removesuffix('"')
    if not quoted:
        return text
    return _ESCAPE_SEQUENCE.sub(_unescape, text)


def _unescape(match: re.Match[str]) -> str:
    code = match.group(1)
    if code.startswith("u"):
        return chr(int(code[1:], 16))
    return _UNESCAPES[code]
