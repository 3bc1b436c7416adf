"""Map change paths back to lines in the schema source.

Works on a masked copy of the SDL where comments and string literals are
blanked out, so descriptions and ``#`` comments mentioning a name never
produce false matches. Masking keeps every newline and column in place.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from schemaguard.diff.models import SourceLocation
from schemaguard.schema.model import LINE_BREAK, SchemaSource, SourcePair

logger = logging.getLogger(__name__)

_TOKEN = re.compile(r"[_A-Za-z][_0-9A-Za-z]*|[{}()@:]")
_TYPE_KEYWORDS = "type|interface|union|enum|input|scalar"
_DEFINITION_KEYWORDS = frozenset(_TYPE_KEYWORDS.split("|")) | {"extend", "directive", "schema"}

FALLBACK_LOCATION = SourceLocation(line=1, column=1, origin="fallback")


def mask_source(body: str) -> str:
    """Blank out comments and strings, preserving line breaks and columns."""
    out: list[str] = []
    i = 0
    n = len(body)

    def blank(chunk: str) -> str:
        return "".join(c if c in "\r\n" else " " for c in chunk)

    while i < n:
        ch = body[i]
        if ch == "#":
            end = i
            while end < n and body[end] not in "\r\n":
                end += 1
            out.append(blank(body[i:end]))
            i = end
        elif body.startswith('"""', i):
            end = i + 3
            while end < n and not body.startswith('"""', end):
                end += 4 if body.startswith('\\"""', end) else 1
            end = min(end + 3, n)
            out.append(blank(body[i:end]))
            i = end
        elif ch == '"':
            end = i + 1
            while end < n and body[end] not in '"\r\n':
                end += 2 if body[end] == "\\" else 1
            end = min(end + 1, n)
            out.append(blank(body[i:end]))
            i = end
        else:
            out.append(ch)
            i += 1

    return "".join(out)


@dataclass(frozen=True)
class _Masked:
    text: str
    origin: str

    def position(self, offset: int) -> SourceLocation:
        line = self.text.count("\n", 0, offset) + 1
        column = offset - (self.text.rfind("\n", 0, offset) + 1) + 1
        return SourceLocation(line=line, column=column, origin=self.origin)


class LineLocator:
    """Find the source position of a change path.

    The new source is searched first; the old one is used only when the
    definition no longer exists in the new source (e.g. a removed type).

    Example:
        >>> locator = LineLocator(sources)
        >>> locator.locate("Post.createdAt").line
        4
    """

    def __init__(self, sources: SourcePair) -> None:
        self._sources = (
            self._mask(sources.new, "new"),
            self._mask(sources.old, "old"),
        )

    @staticmethod
    def _mask(source: SchemaSource, origin: str) -> _Masked | None:
        if not isinstance(source.body, str):
            return None
        return _Masked(mask_source(LINE_BREAK.sub("\n", source.body)), origin)

    def locate(self, path: str) -> SourceLocation:
        """Return the best position for ``path``; line 1 if nothing matches."""
        try:
            return self._locate(path)
        except (AttributeError, IndexError, TypeError, ValueError) as e:
            logger.debug("Could not locate '%s': %s", path, e)
            return FALLBACK_LOCATION

    def _locate(self, path: str) -> SourceLocation:
        if not path:
            return FALLBACK_LOCATION

        if path.startswith("@"):
            name, _, arg = path[1:].partition(".")
            member = None
        else:
            name, _, rest = path.partition(".")
            member, _, arg = rest.partition(".")
            member = member or None

        for masked in self._sources:
            if masked is None:
                continue
            decl = self._find_declaration(masked.text, name, path.startswith("@"))
            if decl is None:
                continue
            start, end, is_enum = decl

            offset = start
            if path.startswith("@"):
                if arg:
                    offset = _find_argument(masked.text, end, arg) or start
            elif member:
                member_offset = _find_member(masked.text, end, member, is_enum)
                if member_offset is not None:
                    offset = member_offset
                    if arg:
                        arg_start = member_offset + len(member)
                        offset = _find_argument(masked.text, arg_start, arg) or member_offset
            return masked.position(offset)

        return FALLBACK_LOCATION

    @staticmethod
    def _find_declaration(text: str, name: str, directive: bool) -> tuple[int, int, bool] | None:
        """Return (start, end, is_enum) of the declaration of ``name``."""
        if directive:
            pattern = re.compile(
                r"(?<![_0-9A-Za-z])directive\s+@" + re.escape(name) + r"(?![_0-9A-Za-z])"
            )
            match = pattern.search(text)
            return (match.start(), match.end(), False) if match else None

        pattern = re.compile(
            r"(?<![_0-9A-Za-z])(extend\s+)?(" + _TYPE_KEYWORDS + r")\s+"
            + re.escape(name)
            + r"(?![_0-9A-Za-z])"
        )
        fallback = None
        for match in pattern.finditer(text):
            if match.group(1) is None:
                return match.start(2), match.end(), match.group(2) == "enum"
            if fallback is None:
                fallback = (match.start(2), match.end(), match.group(2) == "enum")
        return fallback


def _next_char(text: str, pos: int) -> str:
    while pos < len(text) and text[pos].isspace():
        pos += 1
    return text[pos] if pos < len(text) else ""


def _find_member(text: str, pos: int, name: str, is_enum: bool) -> int | None:
    """Scan a definition body for a field, input field or enum value."""
    depth = 0
    parens = 0
    previous = ""
    for token in _TOKEN.finditer(text, pos):
        value = token.group()
        if value == "(":
            parens += 1
        elif value == ")":
            parens -= 1
        elif parens > 0:
            # Argument lists, including object-literal defaults
            pass
        elif value == "{":
            depth += 1
        elif value == "}":
            depth -= 1
            if depth <= 0:
                return None
        elif depth == 0 and value not in ("@", ":") and previous != "@":
            # Header tokens before the body: implements lists, directives.
            if value in _DEFINITION_KEYWORDS:
                return None
        elif depth == 1 and value == name and previous != "@":
            if is_enum or _next_char(text, token.end()) in (":", "("):
                return token.start()
        previous = value
    return None


def _find_argument(text: str, pos: int, name: str) -> int | None:
    """Search the argument list opening right after ``pos``."""
    start = pos
    while start < len(text) and text[start].isspace():
        start += 1
    if start >= len(text) or text[start] != "(":
        return None

    parens = 0
    braces = 0
    for token in _TOKEN.finditer(text, start):
        value = token.group()
        if value == "(":
            parens += 1
        elif value == ")":
            parens -= 1
            if parens == 0:
                return None
        elif value == "{":
            braces += 1
        elif value == "}":
            braces -= 1
        elif parens == 1 and braces == 0 and value == name:
            if _next_char(text, token.end()) == ":":
                return token.start()
    return None
