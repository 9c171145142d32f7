"""
Human readable rendering of structured values.

Used for diagnostics: every type-mismatch message embeds a compact rendering
of the offending node. The output is not JSON: strings are shown unescaped,
multi-line strings use a triple-quoted block, and containers that would fit
on one short line are collapsed onto it.
"""

from dataclasses import dataclass

from .value import ArrayValue
from .value import BoolValue
from .value import FloatValue
from .value import IntValue
from .value import JsonValue
from .value import NullValue
from .value import ObjectValue
from .value import StringValue

ONE_LINE_WIDTH = 30
# Characters reserved for the "...(+N more chars)" marker when truncating.
TRUNCATION_MARKER_ALLOWANCE = 20


@dataclass(frozen=True)
class PrettyConfig:
    """
    Limits applied while pretty printing.

    ``max_depth`` stops expanding containers nested deeper than the given
    level, ``max_sub_value_count`` caps the entries shown per container, and
    ``max_string_length`` truncates long strings. ``None`` means unlimited.
    """

    max_depth: int | None = None
    max_sub_value_count: int | None = None
    max_string_length: int | None = None
    indentation: str = "  "

    def __post_init__(self) -> None:
        for name in ("max_depth", "max_sub_value_count", "max_string_length"):
            limit = getattr(self, name)
            if limit is None:
                continue
            if isinstance(limit, bool) or not isinstance(limit, int):
                raise TypeError(f"{name} must be an int or None")
            if limit < 0:
                raise ValueError(f"{name} must be non-negative")
        if not isinstance(self.indentation, str):
            raise TypeError("indentation must be a string")


# Compact form used inside error messages.
DIAGNOSTIC_CONFIG = PrettyConfig(
    max_depth=2, max_sub_value_count=3, max_string_length=60
)


class _PrettyPrinter:
    def __init__(self, config: PrettyConfig) -> None:
        self.config = config

    def _indent_lines(self, text: str) -> str:
        indent = self.config.indentation
        return indent + text.replace("\n", "\n" + indent)

    def render(
        self, value: JsonValue, depth: int = 0, is_object_value: bool = False
    ) -> str:
        match value:
            case NullValue():
                return "null"
            case BoolValue(flag):
                return "true" if flag else "false"
            case IntValue(number):
                return str(number)
            case FloatValue(number):
                return repr(number)
            case StringValue(text):
                return self._render_string(text, is_object_value)
            case ArrayValue(items):
                rendered = [self.render(item, depth + 1) for item in items]
                return self._wrap(rendered, "[", "]", depth)
            case ObjectValue():
                rendered = [
                    f'"{key}": ' + self.render(item, depth + 1, True)
                    for key, item in value.sorted_items()
                ]
                return self._wrap(rendered, "{", "}", depth)
        raise TypeError(f"not a JSON value: {value!r}")

    def _render_string(self, text: str, is_object_value: bool) -> str:
        limit = self.config.max_string_length
        if limit is not None and len(text) > limit:
            keep = max(limit - TRUNCATION_MARKER_ALLOWANCE, 0)
            removed = len(text) - keep
            text = text[:keep] + f"...(+{removed} more chars)"

        if "\n" not in text:
            return f'"{text}"'

        block = f'{text}\n"""'
        if is_object_value:
            block = self._indent_lines(block)
        return '"""\n' + block

    def _wrap(
        self, sub_values: list[str], opening: str, closing: str, depth: int
    ) -> str:
        if not sub_values:
            return opening + closing

        one_liner = _one_line(sub_values, opening, closing)
        if one_liner is not None:
            return one_liner

        start_count = len(sub_values)
        max_depth = self.config.max_depth
        if max_depth is not None and depth >= max_depth:
            max_count = 0
        elif self.config.max_sub_value_count is not None:
            max_count = self.config.max_sub_value_count
        else:
            max_count = start_count

        shown = sub_values[:max_count]
        hidden = start_count - len(shown)
        if hidden > 0:
            shown.append(f"...(+{hidden} more)")

        one_liner = _one_line(shown, opening, closing)
        if one_liner is not None:
            return one_liner

        body = ",\n".join(self._indent_lines(sub) for sub in shown)
        return f"{opening}\n{body}\n{closing}"


def _one_line(sub_values: list[str], opening: str, closing: str) -> str | None:
    line = f"{opening} " + ", ".join(sub_values) + f" {closing}"
    if len(line) < ONE_LINE_WIDTH and "\n" not in line:
        return line
    return None


def pretty_printed(
    value: JsonValue, config: PrettyConfig | None = None, **kwargs: object
) -> str:
    """
    Renders ``value`` as an indented, human readable multi-line string.

    Accepts either a ``PrettyConfig`` or its fields as keyword arguments.
    Truncated containers end with ``...(+N more)`` and truncated strings
    with ``...(+N more chars)``.
    """
    if config is None:
        config = PrettyConfig(**kwargs)  # type: ignore[arg-type]
    elif kwargs:
        raise TypeError("pass either a PrettyConfig or keyword options")
    return _PrettyPrinter(config).render(value)


def describe(value: JsonValue) -> str:
    """Compact rendering used inside error messages."""
    return _PrettyPrinter(DIAGNOSTIC_CONFIG).render(value)
