import logging

from .srv import resolve_service_type
from .transport import Transport

logger = logging.getLogger(__name__)


class Service:
    """rclpy-like Service (one callback per request).

    The callback is called as ``callback(request, response)`` and may fill in
    ``response`` or return a new one. If it raises, the caller receives the
    error instead of a response.
    """

    def __init__(self, service_type, service_name: str, callback, *, transport: Transport):
        self._service_name = service_name
        self._callback = callback

        req_cls, res_cls = resolve_service_type(service_type)
        self._request_cls = req_cls
        self._response_cls = res_cls

        self._endpoint = transport.create_service_server(service_name, self._on_request)

    @property
    def service_name(self) -> str:
        return self._service_name

    def _on_request(self, request, reply):
        response = self._response_cls()
        try:
            ret = self._callback(request, response)
            if ret is not None:
                response = ret
        except Exception as e:
            logger.exception("Error handling request on service '%s'", self._service_name)
            reply(None, error=repr(e))
            return
        reply(response)

    def destroy(self):
        if self._endpoint is not None:
            self._endpoint.destroy()
            self._endpoint = None
