"""Tests for the schema differ entry point."""

from __future__ import annotations

import json
from typing import Any

import httpx
import pytest

from schemaguard.config import DiffConfig, InterceptorConfig
from schemaguard.diff import (
    AnnotationLevel,
    Conclusion,
    CriticalityLevel,
    HttpInterceptor,
    RuleId,
    SchemaDiffer,
    annotation_level_for,
    diff,
    diff_sync,
)
from schemaguard.diff.models import DiffResult
from schemaguard.schema import SchemaSource, SourcePair, TypeSystemSnapshot, build_inputs

NEW_SCHEMA = """
  type Post {
    id: ID!
    title: String!
    createdAt: String!
  }

  type Query {
    post: Post!
  }
"""

OLD_SCHEMA = """
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

OLD_META = '''
  # This is an autogenerated file.
  # Please do not edit it directly.

  """
  Represents meta information about this service.
  """
  type Meta {
    """
    A short description of the service.
    """
    description: String!

    name: String!

    """
    Version number of the service.
    """
    version: String!
  }
'''

NEW_META = '''
  # This is an autogenerated file.
  # Please do not edit it directly.

  """
  Represents a user of the application.
  """
  type User {
    """
    The user's email.
    """
    email: String!

    """
    The user's first name.
    """
    firstName: String!
  }

  """
  Represents meta information about this service.
  """
  type Meta {
    """
    A short description of the service.
    """
    description: String!
    name: String
  }
'''

ENDPOINT = "https://api.example.com/intercept"


def _printed_line(source: SchemaSource, line: int) -> str:
    return source.lines[line - 1].strip()


async def _diff(
    old: str = OLD_SCHEMA, new: str = NEW_SCHEMA, **kwargs: Any
) -> tuple[SourcePair, DiffResult]:
    sources, snapshots = build_inputs(old, new)
    return sources, await diff(sources, snapshots, "schema.graphql", **kwargs)


def _mock_interceptor(handler) -> HttpInterceptor:  # type: ignore[no-untyped-def]
    return HttpInterceptor(ENDPOINT, transport=httpx.MockTransport(handler))


class TestSchemaDiff:
    """End-to-end tests on the Post/Query example."""

    @pytest.mark.asyncio
    async def test_seven_changes_and_failure(self) -> None:
        """Test the example yields 7 changes, 7 annotations and fails."""
        _, result = await _diff()

        assert len(result.changes) == 7
        assert len(result.annotations) == 7
        assert result.conclusion == Conclusion.FAILURE
        assert not result.intercepted

    @pytest.mark.asyncio
    async def test_change_order(self) -> None:
        """Test the example changes come out in contract order."""
        _, result = await _diff()

        assert [(c.rule_id, c.path) for c in result.changes] == [
            (RuleId.FIELD_REMOVED, "Post.modifiedAt"),
            (RuleId.FIELD_NULLABILITY_TIGHTENED, "Post.id"),
            (RuleId.FIELD_NULLABILITY_TIGHTENED, "Post.title"),
            (RuleId.FIELD_DEPRECATION_REMOVED, "Post.title"),
            (RuleId.FIELD_DEPRECATION_REASON_REMOVED, "Post.title"),
            (RuleId.FIELD_NULLABILITY_TIGHTENED, "Post.createdAt"),
            (RuleId.FIELD_REMOVED, "Query.posts"),
        ]
        assert result.changes[0].message == "Field 'modifiedAt' was removed from object type 'Post'"
        assert result.changes[5].message == (
            "Field 'Post.createdAt' changed type from 'String' to 'String!'"
        )

    @pytest.mark.asyncio
    async def test_annotation_lines(self) -> None:
        """Test annotations point at the right lines of the new source."""
        sources, result = await _diff()

        assert _printed_line(sources.new, result.annotations[0].start_line) == "type Post {"
        assert _printed_line(sources.new, result.annotations[5].start_line) == (
            "createdAt: String!"
        )
        assert _printed_line(sources.new, result.annotations[6].start_line) == "type Query {"

    @pytest.mark.asyncio
    async def test_annotation_fields(self) -> None:
        """Test annotation levels, titles, messages and path label."""
        _, result = await _diff()

        for change, annotation in zip(result.changes, result.annotations, strict=True):
            assert annotation.path == "schema.graphql"
            assert annotation.title == change.message
            assert annotation.message == (change.criticality_reason or change.message)
            assert annotation.start_line == annotation.end_line
            assert annotation.annotation_level == annotation_level_for(change.criticality_level)

        assert result.annotations[0].annotation_level == AnnotationLevel.FAILURE
        assert result.annotations[3].annotation_level == AnnotationLevel.NOTICE

    @pytest.mark.asyncio
    async def test_comments_and_descriptions(self) -> None:
        """Test locating through comments and block-string descriptions."""
        sources, result = await _diff(OLD_META, NEW_META)

        assert len(result.annotations) == 3
        assert _printed_line(sources.new, result.annotations[0].start_line) == "type User {"
        assert _printed_line(sources.new, result.annotations[1].start_line) == "type Meta {"
        assert _printed_line(sources.new, result.annotations[2].start_line) == "name: String"

    @pytest.mark.asyncio
    async def test_identical_schemas(self) -> None:
        """Test diffing a schema against itself."""
        _, result = await _diff(NEW_SCHEMA, NEW_SCHEMA)

        assert result.changes == ()
        assert result.annotations == ()
        assert result.conclusion == Conclusion.SUCCESS

    @pytest.mark.asyncio
    async def test_additive_changes_succeed(self) -> None:
        """Test description and additive edits are non-breaking only."""
        new = NEW_SCHEMA.replace(
            "type Query {", '"""Entry point"""\n  type Query {\n    latest: [Post!]!'
        ) + "\n  enum Status { DRAFT PUBLISHED }\n"
        _, result = await _diff(NEW_SCHEMA, new)

        assert result.has_changes
        assert all(c.criticality_level == CriticalityLevel.NON_BREAKING for c in result.changes)
        assert result.conclusion == Conclusion.SUCCESS

    @pytest.mark.asyncio
    async def test_deterministic(self) -> None:
        """Test two runs produce equal results."""
        _, first = await _diff()
        _, second = await _diff()
        assert first.to_dict() == second.to_dict()

    @pytest.mark.asyncio
    async def test_fail_on_dangerous(self) -> None:
        """Test the dangerous policy knob."""
        old = "type Query { posts: [String] }"
        new = "type Query { posts(first: Int!): [String] }"

        _, default = await _diff(old, new)
        _, strict = await _diff(old, new, config=DiffConfig(fail_on_dangerous=True))

        assert default.stats.dangerous == 1
        assert default.conclusion == Conclusion.SUCCESS
        assert default.annotations[0].annotation_level == AnnotationLevel.WARNING
        assert strict.conclusion == Conclusion.FAILURE

    @pytest.mark.asyncio
    async def test_input_field_turning_required_fails(self) -> None:
        """Test dropping a non-null input field default fails the diff."""
        _, result = await _diff("input I { a: Int! = 1 }", "input I { a: Int! }")

        assert result.stats.breaking == 1
        assert result.conclusion == Conclusion.FAILURE

    def test_diff_sync(self) -> None:
        """Test the blocking wrapper."""
        sources, snapshots = build_inputs(OLD_SCHEMA, NEW_SCHEMA)
        result = diff_sync(sources, snapshots, "schema.graphql")
        assert result.conclusion == Conclusion.FAILURE
        assert result.stats.breaking == 5

    @pytest.mark.asyncio
    async def test_hand_built_snapshot(self) -> None:
        """Test the engine accepts snapshots without SDL and falls back to line 1."""
        sources = SourcePair(old=SchemaSource(""), new=SchemaSource(""))
        _, built = build_inputs(OLD_SCHEMA, NEW_SCHEMA)
        snapshots = TypeSystemSnapshot(old=built.old, new=built.new)

        result = await diff(sources, snapshots, "schema.graphql")

        assert len(result.annotations) == 7
        assert all(a.start_line == 1 for a in result.annotations)


class TestInterceptedDiff:
    """Tests for interceptor integration."""

    @pytest.mark.asyncio
    async def test_downgrade_to_non_breaking(self) -> None:
        """Test downgrading every change turns failure into success."""

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            for change in body["changes"]:
                change["criticalityLevel"] = "NON_BREAKING"
            return httpx.Response(200, json={"changes": body["changes"]})

        _, result = await _diff(interceptor=_mock_interceptor(handler))

        assert len(result.changes) == 7
        assert len(result.annotations) == 7
        assert all(c.criticality_level == CriticalityLevel.NON_BREAKING for c in result.changes)
        assert all(a.annotation_level == AnnotationLevel.NOTICE for a in result.annotations)
        assert result.conclusion == Conclusion.SUCCESS
        assert result.intercepted

    @pytest.mark.asyncio
    async def test_neutral_override(self) -> None:
        """Test an explicit conclusion wins over the changes."""
        interceptor = _mock_interceptor(
            lambda request: httpx.Response(200, json={"conclusion": "neutral"})
        )
        _, result = await _diff(interceptor=interceptor)

        assert len(result.changes) == 7
        assert result.stats.breaking == 5
        assert result.conclusion == Conclusion.NEUTRAL

    @pytest.mark.asyncio
    async def test_replaced_changes_get_annotations(self) -> None:
        """Test annotations follow the replacement list one to one."""
        replacement = {
            "changes": [
                {
                    "ruleId": "CUSTOM",
                    "criticalityLevel": "SEVERE",
                    "message": "Custom policy violation",
                    "path": "Post.createdAt",
                }
            ]
        }
        interceptor = _mock_interceptor(lambda request: httpx.Response(200, json=replacement))
        sources, result = await _diff(interceptor=interceptor)

        assert len(result.changes) == 1
        assert len(result.annotations) == 1
        annotation = result.annotations[0]
        assert annotation.annotation_level == AnnotationLevel.NOTICE
        assert annotation.title == "Custom policy violation"
        assert annotation.message == "Custom policy violation"
        assert _printed_line(sources.new, annotation.start_line) == "createdAt: String!"
        assert result.conclusion == Conclusion.SUCCESS

    @pytest.mark.asyncio
    async def test_failure_matches_plain_result(self) -> None:
        """Test a failing interceptor leaves the result unchanged."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        _, plain = await _diff()
        _, intercepted = await _diff(interceptor=_mock_interceptor(handler))

        assert intercepted.changes == plain.changes
        assert intercepted.annotations == plain.annotations
        assert intercepted.conclusion == plain.conclusion
        assert not intercepted.intercepted

    @pytest.mark.asyncio
    async def test_invalid_configured_endpoint_matches_plain_result(self) -> None:
        """Test a malformed interceptor URL in config does not abort the diff."""
        config = DiffConfig(interceptor=InterceptorConfig(url="http://[::1"))

        _, plain = await _diff()
        _, intercepted = await _diff(config=config)

        assert intercepted.changes == plain.changes
        assert intercepted.conclusion == Conclusion.FAILURE
        assert not intercepted.intercepted

    def test_config_builds_http_interceptor(self) -> None:
        """Test a configured URL creates an HttpInterceptor."""
        config = DiffConfig(interceptor=InterceptorConfig(url=ENDPOINT, timeout_seconds=2.5))
        differ = SchemaDiffer(config)

        assert isinstance(differ.interceptor, HttpInterceptor)
        assert differ.interceptor.endpoint == ENDPOINT
        assert differ.interceptor.timeout == 2.5

    def test_no_interceptor_by_default(self) -> None:
        """Test no interceptor is created without a URL."""
        assert SchemaDiffer().interceptor is None


class TestAnnotationLevel:
    """Tests for criticality -> annotation level mapping."""

    @pytest.mark.parametrize(
        "level,expected",
        [
            (CriticalityLevel.BREAKING, AnnotationLevel.FAILURE),
            (CriticalityLevel.DANGEROUS, AnnotationLevel.WARNING),
            (CriticalityLevel.NON_BREAKING, AnnotationLevel.NOTICE),
            ("BREAKING", AnnotationLevel.FAILURE),
            ("SOMETHING_ELSE", AnnotationLevel.NOTICE),
        ],
    )
    def test_mapping(self, level: CriticalityLevel | str, expected: AnnotationLevel) -> None:
        """Test each level maps as expected."""
        assert annotation_level_for(level) == expected
