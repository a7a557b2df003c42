r"""
Commandeer argument specifications and signatures.

Overview
- Specs
  • Value: positional, required argument bound by its order among non-option tokens.
  • Option: named, optional argument supplied as --name=value or bare --name.

- Signature
  • Ordered collection of specs (kinds may interleave in any declaration order).
  • Knows the slot of every positional and renders the usage line of a command.

- Introspection & representation
  • ArgumentType metaclass provides stable __repr__/__rich_repr__ and exposes the
    fields listed in __introspectable__ as read-only properties.

Metadata (sanitized on construction)
- name: str, non-empty, must not start with '-' and must not contain '=' or
  whitespace (the name is what follows '--' on the command line).
- help: Unset | str (short help), non-empty when provided; Unset becomes None.

Usage rendering
- positionals are rendered bare, options as [--name], all in exact declared order:

    >>> Signature(Value("arg-1"), Option("opt-1"), Option("opt-2")).usage("/p/exe", "test-2")
    'Usage: /p/exe test-2 arg-1 [--opt-1] [--opt-2]'

Public API
- Classes: Value, Option, Signature
"""
import functools
import operator
import re
from collections.abc import Iterable

from .utils import *


class ArgumentType(type):
    """
    Metaclass that turns specs into immutable, introspectable descriptors.

    Responsibilities
    - Expose selected fields as read-only properties using mirror() for all
      names listed in __introspectable__.
    - Provide stable, readable __repr__/__rich_repr__ implementations for
      diagnostics.

    Conventions
    - __typename__ is derived from the class name (camel-case split with hyphens)
      and used in messages.
    """
    __introspectable__ = ()

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(
            cls,
            name,
            bases,
            namespace | {
                "__typename__": re.sub(r"(?<!^)(?=[A-Z])", r"-", name).lower(),
            } | {
                name: mirror(name) for name in namespace.get("__introspectable__", ())
            },
        )

        @rename("__repr__")
        def __repr__(self):
            """
            Return a concise, stable representation with key metadata.

            Example
            - option(name='verbose', help=None)
            """
            return "%s(%s)" % (
                type(self).__typename__,
                ", ".join(map(functools.partial(operator.mod, "%s=%r"), self.__rich_repr__())),
            )
        self.__repr__ = __repr__

        @rename("__rich_repr__")
        def __rich_repr__(self):
            for name in type(self).__introspectable__:
                yield name, getattr(self, name)
        self.__rich_repr__ = __rich_repr__

        return self


def _sanitize_metadata(cls, metadata, /):
    """
    Internal: normalize and validate shared argument metadata.

    - name: required non-empty string after trimming; it must not look like an
      option token itself ('-' prefix) nor carry '=' or whitespace, otherwise it
      could never be matched against --name=value.
    - help: optional short description. If omitted (Unset), it becomes None.
      If provided, it must be a non-empty string after trimming.

    Raises
    - TypeError: if 'name' or 'help' is not a string (or Unset for help).
    - ValueError: if a string is empty after trimming or the name is malformed.
    """
    if not isinstance(name := metadata["name"], str):
        raise TypeError(f"{cls.__typename__} 'name' must be a string")
    elif not (name := name.strip()):
        raise ValueError(f"{cls.__typename__} 'name' cannot be empty")
    elif not re.fullmatch(r"[^-=\s][^=\s]*", name):
        raise ValueError(f"{cls.__typename__} 'name' must not start with '-' nor contain '=' or spaces")
    metadata["name"] = name

    if not isinstance(help := metadata["help"], str | Unset):
        raise TypeError(f"{cls.__typename__} 'help' must be a string")
    elif isinstance(help, str) and not (help := help.strip()):
        raise ValueError(f"{cls.__typename__} 'help' cannot be empty")
    metadata["help"] = coalesce(help)


class Value(metaclass=ArgumentType):
    """
    Positional, required argument specification.

    A Value is bound to the n-th non-option token of the command-local
    arguments, where n is its position among the Values of its Signature.
    It carries no converter: extracted values are always strings.
    """

    __introspectable__ = (
        "name",
        "help",
    )

    def __init__(self, name, /, help=Unset):
        metadata = {"name": name, "help": help}
        _sanitize_metadata(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def render(self):
        """
        Usage fragment for this spec (the bare name).
        """
        return self.name


class Option(metaclass=ArgumentType):
    """
    Named, optional argument specification.

    Options are never mandatory at the framework level: an absent option is
    simply "not present". On the command line an option is written either as
    --name=value or as a bare --name (which yields the empty string).
    """

    __introspectable__ = (
        "name",
        "help",
    )

    def __init__(self, name, /, help=Unset):
        metadata = {"name": name, "help": help}
        _sanitize_metadata(type(self), metadata)
        for name, object in metadata.items():
            setattr(self, "_" + name, object)

    def render(self):
        """
        Usage fragment for this spec ([--name]).
        """
        return "[--%s]" % self.name


class Signature:
    """
    Declared shape of what a command accepts.

    Specs keep their declaration order; resolution treats them by kind, except
    that Values consume positional tokens in the order they were declared.

    Invariants
    - Value names are unique among Values; Option names are unique among Options.
    - The order is fixed at construction; a Signature is never mutated.

    Raises
    - TypeError: when an item is not a Value or an Option.
    - ValueError: when two specs of the same kind share a name.
    """

    def __init__(self, *specs):
        values = {}
        options = {}
        for spec in specs:
            if isinstance(spec, Value):
                kind = values
            elif isinstance(spec, Option):
                kind = options
            else:
                raise TypeError(f"signature specs must be values or options, not {type(spec).__name__!r}")
            if kind.setdefault(spec.name, spec) is not spec:
                raise ValueError(f"signature {type(spec).__typename__} name {spec.name!r} is already in use")
        self._specs = specs
        self._values = tuple(values.values())
        self._options = tuple(options.values())
        self._index = {spec.name: index for index, spec in enumerate(self._values)}

    @classmethod
    def coerce(cls, object, /):
        """
        Return object when it is already a Signature, else build one from an iterable of specs.

        None stands for "no specs" and yields an empty signature.
        """
        if isinstance(object, cls):
            return object
        if object is None:
            return cls()
        if isinstance(object, Value | Option | str) or not isinstance(object, Iterable):
            raise TypeError("signature must be a signature or an iterable of specs")
        return cls(*object)

    @property
    def values(self):
        return self._values

    @property
    def options(self):
        return self._options

    def index(self, name, /):
        """
        Positional slot of the Value named name (0-based).

        Raises
        - KeyError: when no Value with that name is declared.
        """
        return self._index[name]

    def usage(self, executable, id, /):
        """
        Render the usage line: 'Usage: <exe> <id> <specs in declared order>'.

        An empty executable (no process arguments) is left out of the line.
        """
        return " ".join(["Usage:", *filter(None, [executable]), id, *(spec.render() for spec in self._specs)])

    def describe(self):
        """
        Yield (rendered name, help) for every spec that carries help, in declared order.
        """
        for spec in self._specs:
            if spec.help:
                yield spec.render(), spec.help

    def __iter__(self):
        return iter(self._specs)

    def __len__(self):
        return len(self._specs)

    def __bool__(self):
        return bool(self._specs)

    def __contains__(self, spec):
        return spec in self._specs

    def __eq__(self, other):
        if not isinstance(other, Signature):
            return NotImplemented
        return self._specs == other._specs

    def __hash__(self):
        return hash(self._specs)

    def __repr__(self):
        return "signature(%s)" % ", ".join(map(repr, self._specs))

    def __rich_repr__(self):
        yield from self._specs


__all__ = (
    "Value",
    "Option",
    "Signature",
)
