"""Shell-like splitting of one input line."""

from __future__ import annotations

import shlex


def tokenize(line: str) -> list[str]:
    """Split `line` into arguments the way a POSIX shell would.

    Whitespace separates tokens, single and double quotes group (and are
    stripped), and backslash escapes the next character. `#` has no special
    meaning. An unterminated quote or a trailing backslash does not fail: the
    partial token collected so far is kept as the last argument.
    """
    lexer = shlex.shlex(line, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""

    tokens: list[str] = []
    try:
        for token in lexer:
            tokens.append(token)
    except ValueError:
        # shlex gives up at EOF inside a quote or escape; whatever it had
        # accumulated is still in `lexer.token`.
        if lexer.token:
            tokens.append(lexer.token)
    return tokens
