import pytest

import lwparam


@pytest.fixture(autouse=True)
def context():
    lwparam.init(domain_id=0)
    yield
    lwparam.shutdown()


@pytest.fixture
def transport(context):
    return lwparam.get_transport()


class StubServer:
    """Serves one service name directly on the transport.

    ``respond(request)`` returns the response to send back; when it is None
    the replies are kept in ``held`` and never sent unless the test does so.
    """

    def __init__(self, transport, service_name: str, respond=None):
        self.requests = []
        self.held = []
        self._respond = respond
        self.endpoint = transport.create_service_server(service_name, self._handle)

    def _handle(self, request, reply):
        self.requests.append(request)
        if self._respond is None:
            self.held.append(reply)
            return
        reply(self._respond(request))


@pytest.fixture
def stub_server(transport):
    def make(service_name: str, respond=None) -> StubServer:
        return StubServer(transport, service_name, respond)

    return make
