"""
restcontroller — Content Negotiation Filter
=============================================

What:  Picks the response format from the request and rejects requests the
       controller cannot answer.
How:   Order of precedence:
       1. `?_format=<name>` query parameter (name must be configured)
       2. `Accept` header, highest q-value first; `*/*` and `type/*` match
          the first configured type of that family
       3. no Accept header at all → first configured format
       Anything else raises NotAcceptableError (406).

REST controllers configure a single format, {"application/json": "json"}.
"""

from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from starlette.requests import Request
from starlette.responses import Response

from restcontroller.config import settings
from restcontroller.exceptions import NotAcceptableError
from restcontroller.filters.base import ActionFilter

FORMAT_JSON = "json"


def parse_accept(header: str) -> List[str]:
    """
    Parse an Accept header into media types ordered by preference.

    Entries with q=0 are dropped; equal q-values keep header order.
    """
    entries: List[Tuple[float, int, str]] = []
    for index, part in enumerate(header.split(",")):
        fields = [f.strip() for f in part.split(";")]
        media_type = fields[0].lower()
        if not media_type:
            continue
        quality = 1.0
        for param in fields[1:]:
            name, _, value = param.partition("=")
            if name.strip().lower() == "q":
                try:
                    quality = float(value)
                except ValueError:
                    quality = 0.0
        if quality > 0:
            entries.append((-quality, index, media_type))
    return [media_type for _, _, media_type in sorted(entries)]


class ContentNegotiator(ActionFilter):
    def __init__(
        self,
        formats: Optional[Mapping[str, str]] = None,
        format_param: Optional[str] = None,
        only: Optional[Sequence[str]] = None,
        except_: Optional[Sequence[str]] = None,
    ):
        super().__init__(only=only, except_=except_)
        self.formats: Dict[str, str] = dict(formats or {"application/json": FORMAT_JSON})
        self.format_param = format_param or settings.format_param

    def negotiate(self, request: Request) -> Tuple[str, str]:
        """Return (media_type, format_name) for the request."""
        requested = request.query_params.get(self.format_param)
        if requested is not None:
            for media_type, name in self.formats.items():
                if name == requested:
                    return media_type, name
            raise NotAcceptableError(
                context={"requested_format": requested, "supported": list(self.formats.values())}
            )

        accept = request.headers.get("accept", "").strip()
        if not accept:
            return next(iter(self.formats.items()))

        for media_type in parse_accept(accept):
            if media_type in self.formats:
                return media_type, self.formats[media_type]
            if media_type == "*/*":
                return next(iter(self.formats.items()))
            if media_type.endswith("/*"):
                family = media_type[:-1]
                for candidate, name in self.formats.items():
                    if candidate.startswith(family):
                        return candidate, name

        raise NotAcceptableError(
            context={"accept": accept, "supported": list(self.formats)}
        )

    async def before_action(self, request: Request, action_id: str) -> Optional[Response]:
        media_type, name = self.negotiate(request)
        request.state.response_format = name
        request.state.response_media_type = media_type
        return None

    def after_action(self, request: Request, response: Response) -> Response:
        if getattr(request.state, "response_format", None) != FORMAT_JSON:
            return response
        content_type = response.headers.get("content-type", "")
        if content_type.startswith("application/json"):
            response.headers["content-type"] = "application/json; charset=UTF-8"
        return response
