import asyncio
import logging
from typing import Optional

from core.exceptions import ReachabilityFailure
from . import events as ev
from .adapter import IsolineBackend
from .models import IsolineResult
from .normalizer import ResponseNormalizer
from .request_builder import RequestBuilder
from .schemas import LatLng
from .state import InteractionStateMachine

logger = logging.getLogger(__name__)


class IsolineServiceClient:
    """
    Single-flight isoline submission for one control.

    A submit while another is outstanding returns None without touching the
    backend. Backend failures propagate as ReachabilityFailure after the
    pending flag has been cleared. Completions whose request is no longer
    current (control torn down, newer request accepted) are dropped.
    """

    def __init__(
        self,
        backend: IsolineBackend,
        builder: RequestBuilder,
        normalizer: ResponseNormalizer,
        state: InteractionStateMachine,
        bus: ev.EventBus,
    ):
        self.backend = backend
        self._builder = builder
        self._normalizer = normalizer
        self._state = state
        self._bus = bus

    @property
    def is_mock(self) -> bool:
        return self.backend.is_mock

    async def submit(self, point: LatLng) -> Optional[IsolineResult]:
        token = self._state.begin_request()
        if token is None:
            logger.debug("Request already in flight, click at %s ignored", point)
            return None

        try:
            request = self._builder.build(point)
            self._bus.fire(ev.REQUEST_START, profile=request.profile, range_type=request.range_type)
            raw = await asyncio.to_thread(self.backend.fetch, request)
            if not self._state.is_current(token):
                logger.debug("Dropping stale isoline response for %s", point)
                return None
            return self._normalizer.normalize(raw, request, point)
        except ReachabilityFailure:
            if not self._state.is_current(token):
                logger.debug("Dropping stale isoline failure for %s", point)
                return None
            raise
        finally:
            self._state.end_request(token)
            self._bus.fire(ev.REQUEST_END)
