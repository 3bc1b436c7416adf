"""Remote interceptor - lets an external service rewrite a diff.

The interceptor receives the classified changes and may answer with a
replacement change list, a conclusion override, both, or neither. Any
failure on the way is logged and treated as "no answer".
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from schemaguard.diff.models import Change, Conclusion, CriticalityLevel, RuleId
from schemaguard.errors import InterceptorError

logger = logging.getLogger(__name__)

__all__ = [
    "ChangePayload",
    "DiffInterceptor",
    "HttpInterceptor",
    "InterceptorOutcome",
    "InterceptorResponse",
    "run_interceptor",
]

DEFAULT_TIMEOUT = 10.0


class ChangePayload(BaseModel):
    """Wire form of a change."""

    model_config = ConfigDict(populate_by_name=True)

    rule_id: str = Field(alias="ruleId")
    criticality_level: str = Field(alias="criticalityLevel")
    criticality_reason: str | None = Field(default=None, alias="criticalityReason")
    message: str
    path: str

    @classmethod
    def from_change(cls, change: Change) -> ChangePayload:
        return cls.model_validate(change.to_dict())

    def to_change(self) -> Change:
        """Convert back to a Change; unknown ids and levels stay plain strings."""
        rule_id: RuleId | str = self.rule_id
        if self.rule_id in RuleId.__members__.values():
            rule_id = RuleId(self.rule_id)
        level: CriticalityLevel | str = self.criticality_level
        if self.criticality_level in CriticalityLevel.__members__.values():
            level = CriticalityLevel(self.criticality_level)
        return Change(
            rule_id=rule_id,
            criticality_level=level,
            criticality_reason=self.criticality_reason,
            message=self.message,
            path=self.path,
        )


class InterceptorRequest(BaseModel):
    """Request body sent to the interceptor."""

    changes: list[ChangePayload]


class InterceptorResponse(BaseModel):
    """Response body accepted from the interceptor."""

    changes: list[ChangePayload] | None = None
    conclusion: Literal["success", "failure", "neutral"] | None = None


@runtime_checkable
class DiffInterceptor(Protocol):
    """Strategy that may rewrite changes or override the conclusion."""

    async def transform(self, changes: Sequence[Change]) -> InterceptorResponse:
        """Return the interceptor's answer for ``changes``."""
        ...


@dataclass
class HttpInterceptor:
    """POST the change list to an HTTP endpoint.

    Each call opens its own ``httpx.AsyncClient``; no connection state is
    shared between diffs.

    Example:
        >>> interceptor = HttpInterceptor("https://ci.example.com/intercept")
        >>> response = await interceptor.transform(changes)
    """

    endpoint: str
    timeout: float = DEFAULT_TIMEOUT
    transport: httpx.AsyncBaseTransport | None = field(default=None, repr=False)

    async def transform(self, changes: Sequence[Change]) -> InterceptorResponse:
        """Send changes and parse the response.

        Raises:
            httpx.HTTPError: On network failures and timeouts.
            InterceptorError: On a non-2xx status.
            ValidationError: On an invalid or malformed response body.
        """
        request = InterceptorRequest(changes=[ChangePayload.from_change(c) for c in changes])

        async with httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        ) as client:
            response = await client.post(
                self.endpoint,
                content=request.model_dump_json(by_alias=True),
                headers={"Content-Type": "application/json"},
            )

        if response.is_error:
            raise InterceptorError(
                f"Interceptor returned HTTP {response.status_code}",
                endpoint=self.endpoint,
                status_code=response.status_code,
            )
        return InterceptorResponse.model_validate_json(response.content)


@dataclass(frozen=True)
class InterceptorOutcome:
    """Changes and optional conclusion override after interception."""

    changes: list[Change] = field(default_factory=list)
    conclusion: Conclusion | None = None
    applied: bool = False


async def run_interceptor(
    interceptor: DiffInterceptor,
    changes: list[Change],
    timeout: float = DEFAULT_TIMEOUT,
) -> InterceptorOutcome:
    """Invoke an interceptor and apply its answer.

    Failures never propagate: the original changes come back unchanged with
    no override. Cancellation does propagate.
    """
    try:
        response = await asyncio.wait_for(interceptor.transform(changes), timeout=timeout)
    except TimeoutError:
        logger.warning("Interceptor timed out after %.1fs, keeping original changes", timeout)
        return InterceptorOutcome(changes=changes)
    except httpx.HTTPError as e:
        logger.warning("Interceptor request failed, keeping original changes: %s", e)
        return InterceptorOutcome(changes=changes)
    except InterceptorError as e:
        logger.warning("%s, keeping original changes", e.message)
        return InterceptorOutcome(changes=changes)
    except ValidationError as e:
        logger.warning(
            "Interceptor response is invalid, keeping original changes: %d error(s)",
            e.error_count(),
        )
        return InterceptorOutcome(changes=changes)
    except (ValueError, TypeError, KeyError) as e:
        logger.warning("Interceptor response could not be read, keeping original changes: %s", e)
        return InterceptorOutcome(changes=changes)
    except Exception as e:
        # Invalid endpoint URLs and custom strategies; CancelledError is not an Exception
        logger.warning("Interceptor failed, keeping original changes: %r", e)
        return InterceptorOutcome(changes=changes)

    new_changes = changes
    if response.changes is not None:
        new_changes = [payload.to_change() for payload in response.changes]
        logger.info("Interceptor replaced %d changes with %d", len(changes), len(new_changes))

    conclusion = Conclusion(response.conclusion) if response.conclusion is not None else None
    if conclusion is not None:
        logger.info("Interceptor set conclusion to %s", conclusion.value)

    return InterceptorOutcome(changes=new_changes, conclusion=conclusion, applied=True)
