"""Shell-like splitting of rendered command lines into argv tokens."""

from enum import Enum

from amexecutor.exceptions import UnterminatedQuoteError

QUOTES = ("'", '"')


class State(Enum):
    """Scanner states of :func:`tokenize`."""

    NORMAL = "normal"
    ESCAPE = "escape"
    QUOTED = "quoted"


def tokenize(text: str) -> list[str]:
    """Split *text* around runs of whitespace, honoring quotes and escapes.

    Unlike ``str.split`` the returned tokens may contain whitespace when it
    is quoted or backslash-escaped.  A closing quote always ends the token,
    and a backslash-escaped quote outside of quotes is a literal character
    that does not open a quoted region, so this is not ``shlex.split``.

    Raises:
        UnterminatedQuoteError: If a quote is opened and never closed.
    """
    result: list[str] = []
    token: list[str] = []
    state = State.NORMAL
    quote = ""

    def chunk() -> None:
        if token:
            result.append("".join(token))
            token.clear()

    for c in text:
        if state is State.NORMAL:
            if c.isspace():
                chunk()
            elif c == "\\":
                state = State.ESCAPE
            elif c in QUOTES:
                state = State.QUOTED
                quote = c
            else:
                token.append(c)
        elif state is State.ESCAPE:
            if c.isspace() or c in QUOTES:
                token.append(c)
            else:
                token.append("\\")
                token.append(c)
            state = State.QUOTED if quote else State.NORMAL
        else:
            if c == "\\":
                state = State.ESCAPE
            elif c == quote:
                chunk()
                quote = ""
                state = State.NORMAL
            else:
                token.append(c)

    if state is State.ESCAPE:
        token.append("\\")
    elif state is State.QUOTED:
        raise UnterminatedQuoteError()

    chunk()
    return result
