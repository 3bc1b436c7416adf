"""Tests for the remote interceptor client and fallback policy."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence

import httpx
import pytest

from schemaguard.diff.interceptor import (
    ChangePayload,
    HttpInterceptor,
    InterceptorResponse,
    run_interceptor,
)
from schemaguard.diff.models import Change, Conclusion, CriticalityLevel, RuleId
from schemaguard.errors import InterceptorError

ENDPOINT = "https://api.example.com/intercept"


@pytest.fixture
def changes() -> list[Change]:
    """A breaking and a non-breaking change."""
    return [
        Change(
            rule_id=RuleId.FIELD_REMOVED,
            criticality_level=CriticalityLevel.BREAKING,
            criticality_reason="Removing a field is a breaking change.",
            message="Field 'modifiedAt' was removed from object type 'Post'",
            path="Post.modifiedAt",
        ),
        Change(
            rule_id=RuleId.FIELD_ADDED,
            criticality_level=CriticalityLevel.NON_BREAKING,
            message="Field 'slug' was added to object type 'Post'",
            path="Post.slug",
        ),
    ]


def _interceptor(handler) -> HttpInterceptor:  # type: ignore[no-untyped-def]
    return HttpInterceptor(ENDPOINT, timeout=5.0, transport=httpx.MockTransport(handler))


class TestChangePayload:
    """Tests for the change wire format."""

    def test_wire_keys(self, changes: list[Change]) -> None:
        """Test changes serialize with camelCase keys."""
        payload = ChangePayload.from_change(changes[0])
        data = json.loads(payload.model_dump_json(by_alias=True))
        assert data == {
            "ruleId": "FIELD_REMOVED",
            "criticalityLevel": "BREAKING",
            "criticalityReason": "Removing a field is a breaking change.",
            "message": "Field 'modifiedAt' was removed from object type 'Post'",
            "path": "Post.modifiedAt",
        }

    def test_round_trip_restores_enums(self, changes: list[Change]) -> None:
        """Test known ids and levels come back as enums."""
        change = ChangePayload.from_change(changes[0]).to_change()
        assert change == changes[0]
        assert isinstance(change.rule_id, RuleId)

    def test_unknown_values_pass_through(self) -> None:
        """Test unknown rule ids and levels stay plain strings."""
        payload = ChangePayload.model_validate(
            {
                "ruleId": "CUSTOM_RULE",
                "criticalityLevel": "SEVERE",
                "message": "custom",
                "path": "Post",
            }
        )
        change = payload.to_change()
        assert change.rule_id == "CUSTOM_RULE"
        assert change.criticality_level == "SEVERE"
        assert change.criticality_reason is None
        assert not change.is_breaking


class TestHttpInterceptor:
    """Tests for the HTTP transport."""

    @pytest.mark.asyncio
    async def test_posts_changes(self, changes: list[Change]) -> None:
        """Test the request body carries every change."""
        seen: dict[str, object] = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        response = await _interceptor(handler).transform(changes)

        assert seen["method"] == "POST"
        assert seen["url"] == ENDPOINT
        body = seen["body"]
        assert isinstance(body, dict)
        assert [c["ruleId"] for c in body["changes"]] == ["FIELD_REMOVED", "FIELD_ADDED"]
        assert response == InterceptorResponse()

    @pytest.mark.asyncio
    async def test_error_status_raises(self, changes: list[Change]) -> None:
        """Test a non-2xx status raises InterceptorError."""
        interceptor = _interceptor(lambda request: httpx.Response(500, text="boom"))
        with pytest.raises(InterceptorError) as exc_info:
            await interceptor.transform(changes)
        assert exc_info.value.context["status_code"] == 500


class TestRunInterceptor:
    """Tests for the fallback policy."""

    @pytest.mark.asyncio
    async def test_changes_replaced(self, changes: list[Change]) -> None:
        """Test a changes-only response replaces the list."""

        def handler(request: httpx.Request) -> httpx.Response:
            body = json.loads(request.content)
            for change in body["changes"]:
                change["criticalityLevel"] = "NON_BREAKING"
            return httpx.Response(200, json={"changes": body["changes"]})

        outcome = await run_interceptor(_interceptor(handler), changes)

        assert outcome.applied
        assert outcome.conclusion is None
        assert len(outcome.changes) == 2
        assert all(c.criticality_level == CriticalityLevel.NON_BREAKING for c in outcome.changes)

    @pytest.mark.asyncio
    async def test_conclusion_only(self, changes: list[Change]) -> None:
        """Test a conclusion-only response keeps the changes."""
        interceptor = _interceptor(
            lambda request: httpx.Response(200, json={"conclusion": "neutral"})
        )
        outcome = await run_interceptor(interceptor, changes)

        assert outcome.changes == changes
        assert outcome.conclusion == Conclusion.NEUTRAL

    @pytest.mark.asyncio
    async def test_empty_change_list_is_a_replacement(self, changes: list[Change]) -> None:
        """Test an explicit empty list removes every change."""
        interceptor = _interceptor(lambda request: httpx.Response(200, json={"changes": []}))
        outcome = await run_interceptor(interceptor, changes)
        assert outcome.changes == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "handler",
        [
            pytest.param(lambda request: httpx.Response(500), id="server-error"),
            pytest.param(lambda request: httpx.Response(404, json={}), id="not-found"),
            pytest.param(lambda request: httpx.Response(200, text="not json"), id="bad-json"),
            pytest.param(lambda request: httpx.Response(200, json=[1, 2]), id="not-object"),
            pytest.param(
                lambda request: httpx.Response(200, json={"conclusion": "maybe"}),
                id="unknown-conclusion",
            ),
            pytest.param(
                lambda request: httpx.Response(200, json={"changes": [{"ruleId": "X"}]}),
                id="incomplete-change",
            ),
        ],
    )
    async def test_bad_responses_are_noop(
        self, changes: list[Change], handler
    ) -> None:  # type: ignore[no-untyped-def]
        """Test malformed or failed responses leave changes untouched."""
        outcome = await run_interceptor(_interceptor(handler), changes)

        assert not outcome.applied
        assert outcome.changes == changes
        assert outcome.conclusion is None

    @pytest.mark.asyncio
    async def test_connection_error_is_noop(
        self, changes: list[Change], caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test a refused connection is logged and ignored."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        with caplog.at_level("WARNING", logger="schemaguard.diff.interceptor"):
            outcome = await run_interceptor(_interceptor(handler), changes)

        assert not outcome.applied
        assert outcome.changes == changes
        assert "Interceptor request failed" in caplog.text

    @pytest.mark.asyncio
    async def test_httpx_timeout_is_noop(self, changes: list[Change]) -> None:
        """Test an httpx timeout is ignored."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        outcome = await run_interceptor(_interceptor(handler), changes)
        assert not outcome.applied
        assert outcome.changes == changes

    @pytest.mark.asyncio
    async def test_invalid_endpoint_is_noop(
        self, changes: list[Change], caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test an unparseable endpoint URL is logged and ignored."""
        with caplog.at_level("WARNING", logger="schemaguard.diff.interceptor"):
            outcome = await run_interceptor(HttpInterceptor("http://[::1"), changes)

        assert not outcome.applied
        assert outcome.changes == changes
        assert "Interceptor failed" in caplog.text

    @pytest.mark.asyncio
    async def test_raising_strategy_is_noop(self, changes: list[Change]) -> None:
        """Test an unexpected exception from a custom strategy is ignored."""

        class BrokenInterceptor:
            async def transform(self, changes: Sequence[Change]) -> InterceptorResponse:
                raise RuntimeError("boom")

        outcome = await run_interceptor(BrokenInterceptor(), changes)
        assert not outcome.applied
        assert outcome.changes == changes
        assert outcome.conclusion is None

    @pytest.mark.asyncio
    async def test_slow_interceptor_is_bounded(self, changes: list[Change]) -> None:
        """Test the wait_for bound applies to any strategy."""

        class SlowInterceptor:
            async def transform(self, changes: Sequence[Change]) -> InterceptorResponse:
                await asyncio.sleep(10)
                return InterceptorResponse(conclusion="failure")

        outcome = await run_interceptor(SlowInterceptor(), changes, timeout=0.01)
        assert not outcome.applied
        assert outcome.conclusion is None

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, changes: list[Change]) -> None:
        """Test cancellation is not swallowed."""

        class CancelledInterceptor:
            async def transform(self, changes: Sequence[Change]) -> InterceptorResponse:
                raise asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await run_interceptor(CancelledInterceptor(), changes)
