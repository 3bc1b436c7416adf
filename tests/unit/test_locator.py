"""Tests for mapping change paths to source lines."""

from __future__ import annotations

import pytest

from schemaguard.diff.locator import FALLBACK_LOCATION, LineLocator, mask_source
from schemaguard.schema.model import SchemaSource, SourcePair

OLD_SDL = """
type Post {
  id: ID
  title: String @deprecated(reason: "No more used")
  createdAt: String
  modifiedAt: String
}

type Query {
  post: Post!
  posts: [Post!]
}
"""

NEW_SDL = """
# Post has a title field
type Post {
  "The id field"
  id: ID!
  title: String!
  createdAt: String!
}

type Query {
  post(id: ID!, locale: String = "en"): Post!
}

enum Status {
  ACTIVE
  LEGACY @deprecated(reason: "ACTIVE")
}

input PostInput {
  title: String
}

directive @auth(role: String) on FIELD_DEFINITION
"""


def _locator(old: str = OLD_SDL, new: str = NEW_SDL) -> LineLocator:
    return LineLocator(SourcePair(old=SchemaSource(old, "old.graphql"), new=SchemaSource(new)))


def _line_text(sdl: str, line: int) -> str:
    return sdl.splitlines()[line - 1].strip()


class TestMaskSource:
    """Tests for comment and string masking."""

    def test_preserves_layout(self) -> None:
        """Test masking keeps length and line breaks."""
        masked = mask_source(NEW_SDL)
        assert len(masked) == len(NEW_SDL)
        assert masked.count("\n") == NEW_SDL.count("\n")

    def test_blanks_comments_and_strings(self) -> None:
        """Test comments, strings and block strings are removed."""
        sdl = '# type Fake\n"""\ntype Other\n"""\ntype Real { a: String @x(y: "type Z") }'
        masked = mask_source(sdl)
        assert "Fake" not in masked
        assert "Other" not in masked
        assert "type Z" not in masked
        assert "type Real" in masked

    def test_escaped_quote_in_string(self) -> None:
        """Test an escaped quote does not end a string."""
        masked = mask_source('"a \\" type X" type Y')
        assert "X" not in masked
        assert "type Y" in masked


class TestLineLocator:
    """Tests for LineLocator."""

    def test_field_line(self) -> None:
        """Test a field path resolves to the field line."""
        location = _locator().locate("Post.createdAt")
        assert _line_text(NEW_SDL, location.line) == "createdAt: String!"
        assert location.origin == "new"

    def test_removed_field_falls_back_to_type(self) -> None:
        """Test a member absent from the new source resolves to its type."""
        location = _locator().locate("Post.modifiedAt")
        assert _line_text(NEW_SDL, location.line) == "type Post {"

    def test_comment_mentions_ignored(self) -> None:
        """Test a name inside a comment or description is not matched."""
        location = _locator().locate("Post.title")
        assert _line_text(NEW_SDL, location.line) == "title: String!"

    def test_type_line(self) -> None:
        """Test a bare type path resolves to its declaration."""
        location = _locator().locate("Query")
        assert _line_text(NEW_SDL, location.line) == "type Query {"
        assert location.column == 1

    def test_argument_line(self) -> None:
        """Test an argument path resolves inside the field's arguments."""
        location = _locator().locate("Query.post.locale")
        line = _line_text(NEW_SDL, location.line)
        assert line.startswith("post(")
        assert NEW_SDL.splitlines()[location.line - 1][location.column - 1 :].startswith("locale")

    def test_enum_value(self) -> None:
        """Test enum values are found, ignoring directive names."""
        location = _locator().locate("Status.LEGACY")
        assert _line_text(NEW_SDL, location.line).startswith("LEGACY")

    def test_input_field(self) -> None:
        """Test input object fields are found."""
        location = _locator().locate("PostInput.title")
        assert _line_text(NEW_SDL, location.line) == "title: String"

    def test_directive_argument(self) -> None:
        """Test directive and directive argument paths."""
        locator = _locator()
        directive_line = locator.locate("@auth").line
        assert _line_text(NEW_SDL, directive_line).startswith("directive @auth")
        assert locator.locate("@auth.role").line == directive_line

    def test_removed_type_uses_old_source(self) -> None:
        """Test a type missing from the new source is located in the old one."""
        old = OLD_SDL + "\ntype Comment {\n  body: String\n}\n"
        location = _locator(old=old).locate("Comment.body")
        assert location.origin == "old"
        assert _line_text(old, location.line) == "body: String"

    def test_prefers_definition_over_extension(self) -> None:
        """Test a non-extend declaration wins over an earlier extension."""
        sdl = "extend type Post {\n  extra: Int\n}\n\ntype Post {\n  id: ID\n}\n"
        location = _locator(new=sdl).locate("Post")
        assert location.line == 5

    @pytest.mark.parametrize("newline", ["\r", "\r\n"])
    def test_carriage_return_line_breaks(self, newline: str) -> None:
        """Test CR and CRLF count as single line terminators."""
        sdl = newline.join(["type Post {", "  id: ID", "  title: String", "}"])
        location = _locator(new=sdl).locate("Post.title")

        assert (location.line, location.column) == (3, 3)
        assert SchemaSource(sdl).lines[location.line - 1] == "  title: String"

    def test_unknown_path_falls_back(self) -> None:
        """Test unknown and empty paths resolve to line 1."""
        locator = _locator()
        assert locator.locate("Nope.field") == FALLBACK_LOCATION
        assert locator.locate("") == FALLBACK_LOCATION

    def test_corrupt_source_never_raises(self) -> None:
        """Test a missing source body falls back instead of raising."""
        locator = LineLocator(
            SourcePair(
                old=SchemaSource(None, "old.graphql"),  # type: ignore[arg-type]
                new=SchemaSource(None, "new.graphql"),  # type: ignore[arg-type]
            )
        )
        assert locator.locate("Post.id") == FALLBACK_LOCATION
