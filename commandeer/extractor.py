"""
Commandeer argument extraction.

What this module provides
- value(name, arguments, signature): the positional token bound to a Value.
- option(name, arguments): the payload of --name=value / --name, or None.
- values(arguments), options(arguments): the whole positional/option view.
- extract(arguments, signature): eager binding of a signature (used to validate
  a command before it runs).
- integer(), double(), boolean(): on-demand coercers that answer None instead
  of raising, so a bad or missing string reads as “absent”.

Token grammar
- a token is an option iff it starts with '--'; everything else is positional.
- '--name=value' carries 'value' (split on the first '='); bare '--name' carries ''.
- there is no '--' separator, no short '-x' flag and no '--name value' form.

Extraction never mutates the argument sequence and is idempotent: the same
arguments always yield the same results.

Example
    >>> arguments = ["123", "--opt-1=abc", "--opt-1=xyz"]
    >>> value("arg-1", arguments, Signature(Value("arg-1")))
    '123'
    >>> option("opt-1", arguments)
    'abc'
    >>> option("opt-2", arguments) is None
    True
"""
from collections import namedtuple
from types import MappingProxyType

from .arguments import Signature
from .faults import MissingArgumentError

Extracted = namedtuple("Extracted", ("values", "options"))
Extracted.__doc__ = """
Eagerly bound arguments of a signature.

- values: read-only mapping Value name -> token
- options: read-only mapping Option name -> payload (only the present ones)
"""


def _split(token):
    # '--name=value' -> ('name', 'value'); '--name' -> ('name', '')
    name, _, payload = token[2:].partition("=")
    return name, payload


def values(arguments, /):
    """
    Return the positional (non-option) tokens, in order.
    """
    return tuple(token for token in arguments if not token.startswith("--"))


def options(arguments, /):
    """
    Return every option present in arguments as a read-only mapping.

    When a name appears several times the leftmost occurrence wins.
    """
    found = {}
    for token in arguments:
        if token.startswith("--"):
            name, payload = _split(token)
            found.setdefault(name, payload)
    return MappingProxyType(found)


def value(name, arguments, signature, /):
    """
    Return the raw token bound to the Value named name.

    Parameters
    - name: str, the Value name as declared in the signature.
    - arguments: sequence of command-local tokens.
    - signature: Signature (or an iterable of specs).

    Raises
    - MissingArgumentError: when the signature declares no Value with that
      name, or when fewer positional tokens than its slot + 1 are present.
    """
    signature = Signature.coerce(signature)
    try:
        index = signature.index(name)
    except KeyError:
        raise MissingArgumentError(
            "argument %r is not declared by the signature" % name,
            name=name,
            hint="declare Value(%r) in the command signature" % name,
        ) from None

    positionals = values(arguments)
    if len(positionals) <= index:
        raise MissingArgumentError(
            "missing argument %r at position %d" % (name, index + 1),
            name=name,
            index=index,
            hint="pass a value for %r" % name,
        )
    return positionals[index]


def option(name, arguments, /):
    """
    Return the payload of the first --name=value or --name token, else None.

    A bare --name yields the empty string, which callers read as “present”.
    Options are never mandatory, so absence is not an error.
    """
    for token in arguments:
        if token.startswith("--"):
            input, payload = _split(token)
            if input == name:
                return payload
    return None


def extract(arguments, signature, /):
    """
    Bind every spec of signature against arguments.

    Every Value must be satisfied (the first missing one raises
    MissingArgumentError); Options are bound only when present. Positional
    tokens beyond the declared Values are ignored.
    """
    signature = Signature.coerce(signature)
    bound = {spec.name: value(spec.name, arguments, signature) for spec in signature.values}
    present = options(arguments)
    named = {spec.name: present[spec.name] for spec in signature.options if spec.name in present}
    return Extracted(MappingProxyType(bound), MappingProxyType(named))


def integer(text, /):
    """
    Coerce text to int; None when text is None or not an integer literal.
    """
    if text is None:
        return None
    try:
        return int(text)
    except ValueError:
        return None


def double(text, /):
    """
    Coerce text to float; None when text is None or not a number.
    """
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        return None


_TRUTHS = frozenset({"y", "yes", "t", "true", "1", "on"})
_FALSITIES = frozenset({"n", "no", "f", "false", "0", "off"})


def boolean(text, /):
    """
    Coerce text to bool; None when text is None or not a recognized word.

    The empty string (a bare --flag) counts as True.
    """
    if text is None:
        return None
    if not text or (lowered := text.strip().lower()) in _TRUTHS:
        return True
    if lowered in _FALSITIES:
        return False
    return None


__all__ = (
    "Extracted",
    "values",
    "options",
    "value",
    "option",
    "extract",
    "integer",
    "double",
    "boolean",
)
