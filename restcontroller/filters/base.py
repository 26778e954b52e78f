"""
restcontroller — Action Filter Base
=====================================

What:  The contract every controller behavior implements, plus the registry
       entry type used to assemble a controller's pipeline.
How:   A filter is scoped to actions by two pattern lists. `only` restricts
       the filter to matching actions; `except_` excludes matching actions and
       wins over `only`. Patterns use shell wildcards (`*`, `?`).

Lifecycle per request:
    before_action()  → may return a Response to short-circuit, or raise
    <action runs>
    after_action()   → may decorate the response, runs in reverse order
"""

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from typing import Any, Dict, Iterable, Optional, Sequence, Type

from starlette.requests import Request
from starlette.responses import Response


def match_action(action_id: str, patterns: Iterable[str]) -> bool:
    """True when `action_id` matches any of the wildcard patterns."""
    return any(fnmatchcase(action_id, pattern) for pattern in patterns)


class ActionFilter:
    """Base class for controller behaviors."""

    def __init__(
        self,
        only: Optional[Sequence[str]] = None,
        except_: Optional[Sequence[str]] = None,
    ):
        self.only = list(only or [])
        self.except_ = list(except_ or [])

    def is_active(self, action_id: str) -> bool:
        if match_action(action_id, self.except_):
            return False
        if self.only:
            return match_action(action_id, self.only)
        return True

    async def before_action(self, request: Request, action_id: str) -> Optional[Response]:
        return None

    def after_action(self, request: Request, response: Response) -> Response:
        return response


@dataclass
class BehaviorSpec:
    """
    One entry of a controller's behavior registry.

    Holds the filter class and the keyword options it is built with, so the
    registry can be inspected and edited before any filter is instantiated.
    """

    filter_class: Type[ActionFilter]
    options: Dict[str, Any] = field(default_factory=dict)

    def update(self, **options: Any) -> "BehaviorSpec":
        self.options.update(options)
        return self

    def build(self) -> ActionFilter:
        return self.filter_class(**self.options)

    def __getitem__(self, key: str) -> Any:
        return self.options[key]
