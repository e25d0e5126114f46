"""
Template Environment - Jinja2 runtime configured for Liquid views.

Provides:
- Lookup dispatch: bound models resolve names through the adapter
- Missing data renders as an empty string (ChainableUndefined)
- Liquid tags: assign, capture, unless, comment
- Liquid filter names mapped onto plain Python callables
"""

from typing import Any, Callable, Dict, Optional
import html
import logging
import re

from jinja2 import BaseLoader, ChainableUndefined, Environment, StrictUndefined, Template, nodes
from jinja2.ext import Extension
from jinja2.lexer import Token
from jinja2.sandbox import SandboxedEnvironment

from .adapter import MISSING, Lookup, ReflectiveLookup, bind
from .config import ViewEngineConfig
from .locations import ViewLocationResult

logger = logging.getLogger("liquidview.environment")


# ============================================================================
# Lookup dispatch
# ============================================================================


class LookupDispatchMixin:
    """
    Routes attribute and item access on bound values to the adapter.

    Anything that is not a bound value keeps the environment's own rules.
    """

    def getattr(self, obj: Any, attribute: str) -> Any:
        if isinstance(obj, Lookup):
            return self.resolve_lookup(obj, attribute)
        return super().getattr(obj, attribute)

    def getitem(self, obj: Any, argument: Any) -> Any:
        if isinstance(obj, Lookup):
            return self.resolve_lookup(obj, argument)
        return super().getitem(obj, argument)

    def resolve_lookup(self, lookup: Lookup, name: Any) -> Any:
        value = lookup.lookup(name)
        if value is MISSING or not self.is_safe_lookup(lookup, name, value):
            return self.undefined(obj=lookup, name=name)
        return bind(value)

    def is_safe_lookup(self, lookup: Lookup, name: Any, value: Any) -> bool:
        return True

    def compile_view(self, location: ViewLocationResult) -> Template:
        """Read and compile a view's source. Errors propagate."""
        logger.debug(f"Compiling view '{location.full_name}.{location.extension}'")
        source = location.read()

        try:
            return self.from_string(source)
        except Exception as exc:
            logger.warning(f"Failed to compile view '{location.full_name}': {exc}")
            raise


class ViewEnvironment(LookupDispatchMixin, Environment):
    """Unsandboxed view environment."""


class SandboxedViewEnvironment(LookupDispatchMixin, SandboxedEnvironment):
    """Sandboxed view environment; reflected attributes pass the sandbox check."""

    def is_safe_lookup(self, lookup: Lookup, name: Any, value: Any) -> bool:
        if isinstance(lookup, ReflectiveLookup) and not lookup.is_mapping:
            return self.is_safe_attribute(lookup.unwrap(), name, value)
        return True


# ============================================================================
# Liquid tags
# ============================================================================


_OPENERS = frozenset(("lparen", "lbracket", "lbrace"))
_CLOSERS = frozenset(("rparen", "rbracket", "rbrace"))
_ARGS_END = frozenset(("pipe", "variable_end", "block_end"))

_FORLOOP_NAMES = {"rindex": "revindex", "rindex0": "revindex0"}


class LiquidExtension(Extension):
    """
    Liquid block tags on top of the Jinja2 grammar.

    {% assign name = 'value' | upcase %}
    {% capture greeting %}Hello {{ name }}{% endcapture %}
    {% unless user %}guest{% else %}member{% endunless %}
    {% comment %}ignored{% endcomment %}
    """

    tags = {"assign", "capture", "unless", "comment"}

    def filter_stream(self, stream):
        """
        Rewrite Liquid spellings into Jinja2 tokens.

        {% elsif x %}          -> {% elif x %}
        {{ forloop.rindex }}   -> {{ loop.revindex }}
        {{ x | append: 'a' }}  -> {{ x | append('a') }}
        """
        before = previous = None
        depth = 0
        # Bracket depth just inside each rewritten filter argument list
        open_args = []

        for token in stream:
            kind = token.type

            if open_args and (kind in _ARGS_END or (kind in _CLOSERS and depth == open_args[-1])):
                while open_args and (kind in ("variable_end", "block_end") or depth == open_args[-1]):
                    open_args.pop()
                    depth -= 1
                    yield Token(token.lineno, "rparen", ")")

            if kind == "name":
                if token.value == "elsif" and previous is not None and previous.type == "block_begin":
                    token = Token(token.lineno, "name", "elif")
                elif token.value == "forloop":
                    token = Token(token.lineno, "name", "loop")
                elif (
                    token.value in _FORLOOP_NAMES
                    and previous is not None and previous.type == "dot"
                    and before is not None and before.test("name:loop")
                ):
                    token = Token(token.lineno, "name", _FORLOOP_NAMES[token.value])
            elif (
                kind == "colon"
                and previous is not None and previous.type == "name"
                and before is not None and before.type == "pipe"
            ):
                token = Token(token.lineno, "lparen", "(")
                depth += 1
                open_args.append(depth)
            elif kind in _OPENERS:
                depth += 1
            elif kind in _CLOSERS:
                depth -= 1

            before, previous = previous, token
            yield token

    def parse(self, parser):
        token = next(parser.stream)
        handler = getattr(self, f"_parse_{token.value}")
        return handler(parser, token.lineno)

    def _parse_assign(self, parser, lineno: int):
        target = parser.parse_assign_target(with_namespace=True)
        parser.stream.expect("assign")
        expr = parser.parse_tuple()
        return nodes.Assign(target, expr, lineno=lineno)

    def _parse_capture(self, parser, lineno: int):
        target = parser.parse_assign_target()
        body = parser.parse_statements(("name:endcapture",), drop_needle=True)
        return nodes.AssignBlock(target, None, body, lineno=lineno)

    def _parse_unless(self, parser, lineno: int):
        node = nodes.If(lineno=lineno)
        node.test = nodes.Not(parser.parse_tuple(with_condexpr=False), lineno=lineno)
        node.body = parser.parse_statements(("name:else", "name:endunless"))
        node.elif_ = []
        node.else_ = []
        if next(parser.stream).test("name:else"):
            node.else_ = parser.parse_statements(("name:endunless",), drop_needle=True)
        return node

    def _parse_comment(self, parser, lineno: int):
        stream = parser.stream
        stream.expect("block_end")
        while not stream.current.test("eof"):
            if stream.current.test("block_begin") and stream.look().test("name:endcomment"):
                next(stream)
                next(stream)
                # Leave the closing block_end for the parser
                return []
            next(stream)
        parser.fail("Missing end of comment tag, expected 'endcomment'.", lineno)


# ============================================================================
# Liquid filters
# ============================================================================


_TAG_RE = re.compile(r"<script.*?</script>|<style.*?</style>|<!--.*?-->|<[^>]*>", re.S | re.I)


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _number(value: Any) -> Any:
    if isinstance(value, Lookup):
        value = value.unwrap()
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    try:
        text = str(value).strip()
        return float(text) if "." in text else int(text)
    except (TypeError, ValueError):
        return 0


def _size(value: Any) -> int:
    try:
        return len(value)
    except TypeError:
        return 0


def _divided_by(value: Any, divisor: Any) -> Any:
    left, right = _number(value), _number(divisor)
    if isinstance(left, int) and isinstance(right, int):
        return left // right
    return left / right


def _modulo(value: Any, divisor: Any) -> Any:
    return _number(value) % _number(divisor)


def _split(value: Any, separator: str = " ") -> list:
    text = _text(value)
    if separator == "":
        return list(text)
    return text.split(separator)


LIQUID_FILTERS: Dict[str, Callable] = {
    "upcase": lambda value: _text(value).upper(),
    "downcase": lambda value: _text(value).lower(),
    "size": _size,
    "strip": lambda value: _text(value).strip(),
    "lstrip": lambda value: _text(value).lstrip(),
    "rstrip": lambda value: _text(value).rstrip(),
    "append": lambda value, suffix: _text(value) + _text(suffix),
    "prepend": lambda value, prefix: _text(prefix) + _text(value),
    "remove": lambda value, text: _text(value).replace(_text(text), ""),
    "split": _split,
    "strip_html": lambda value: _TAG_RE.sub("", _text(value)),
    "escape_once": lambda value: html.escape(html.unescape(_text(value))),
    "newline_to_br": lambda value: _text(value).replace("\n", "<br />\n"),
    "plus": lambda value, other: _number(value) + _number(other),
    "minus": lambda value, other: _number(value) - _number(other),
    "times": lambda value, other: _number(value) * _number(other),
    "divided_by": _divided_by,
    "modulo": _modulo,
}


# ============================================================================
# Factory
# ============================================================================


def _finalize(value: Any) -> Any:
    # nil renders as nothing
    return "" if value is None else value


def create_environment(
    config: Optional[ViewEngineConfig] = None,
    *,
    loader: Optional[BaseLoader] = None,
    filters: Optional[Dict[str, Callable]] = None,
    globals: Optional[Dict[str, Any]] = None,
) -> Environment:
    """
    Create the Jinja2 environment views are compiled with.

    Args:
        config: Engine configuration
        loader: Loader used to resolve ``{% include %}``
        filters: Extra filters
        globals: Extra global variables/functions

    Returns:
        Configured environment
    """
    config = config or ViewEngineConfig()
    env_class = SandboxedViewEnvironment if config.sandbox else ViewEnvironment

    env = env_class(
        loader=loader,
        autoescape=config.autoescape,
        undefined=StrictUndefined if config.strict_undefined else ChainableUndefined,
        finalize=_finalize,
        trim_blocks=config.trim_blocks,
        # Compiled views are held by the view cache only
        cache_size=0,
        extensions=[LiquidExtension],
    )

    env.filters.update(LIQUID_FILTERS)
    if filters:
        env.filters.update(filters)
    if globals:
        env.globals.update(globals)

    return env
