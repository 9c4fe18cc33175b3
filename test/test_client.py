from unittest.mock import Mock

import pytest

import lwparam
from lwparam.client import Client
from lwparam.exceptions import ServiceResponseError, TransportError
from lwparam.executors import DriveResult, SingleThreadedExecutor
from lwparam.srv import GetParameters, ListParameters
from lwparam.transport import LoopbackTransport


class TestClient:
    def setup_method(self):
        self.node = lwparam.Node("client_test", start_parameter_services=False)
        self.executor = SingleThreadedExecutor()
        self.executor.add_node(self.node)
        self.client = self.node.create_client(GetParameters, "remote__get_parameters")

    def teardown_method(self):
        self.node.destroy_node()

    def test_service_name_is_resolved_against_node_namespace(self):
        assert self.client.service_name == "/remote__get_parameters"

    def test_response_is_delivered_only_when_executor_runs(self, stub_server):
        stub_server(
            "/remote__get_parameters",
            lambda request: GetParameters.Response(values=[]),
        )

        future = self.client.call_async(GetParameters.Request(["a"]))

        assert not future.done()
        assert len(self.client.pending_calls) == 1

        assert self.executor.spin_until_future_complete(future, 1.0) is DriveResult.READY
        assert future.result() == GetParameters.Response(values=[])
        assert self.client.pending_calls == []

    def test_callback_receives_done_future(self, stub_server):
        stub_server("/remote__get_parameters", lambda request: GetParameters.Response())
        seen = []

        future = self.client.call_async(GetParameters.Request(["a"]), seen.append)
        self.executor.spin_until_future_complete(future, 1.0)

        assert seen == [future]

    def test_many_outstanding_requests_are_answered_in_arrival_order(self, stub_server):
        server = stub_server("/remote__get_parameters")
        order = []
        futures = [
            self.client.call_async(GetParameters.Request([str(i)]), lambda f, i=i: order.append(i))
            for i in range(3)
        ]
        assert len(self.client.pending_calls) == 3

        for reply in reversed(server.held):
            reply(GetParameters.Response())
        self.executor.spin_some()

        assert all(f.done() for f in futures)
        assert order == [2, 1, 0]

    def test_unanswered_request_stays_pending(self, stub_server):
        stub_server("/remote__get_parameters")

        future = self.client.call_async(GetParameters.Request(["a"]))

        assert self.executor.spin_until_future_complete(future, 0.05) is DriveResult.TIMED_OUT
        assert not future.done()
        assert [c.sequence_number for c in self.client.pending_calls] == [1]

    def test_request_without_server_is_never_answered(self):
        future = self.client.call_async(GetParameters.Request(["a"]))

        assert self.executor.spin_until_future_complete(future, 0.05) is DriveResult.TIMED_OUT
        assert not self.client.service_is_ready()
        assert self.client.wait_for_service(timeout_sec=0.02) is False

    def test_error_reply_fails_future_with_ServiceResponseError(self, transport):
        transport.create_service_server(
            "/remote__get_parameters",
            lambda request, reply: reply(None, error="KeyError('a')"),
        )

        future = self.client.call_async(GetParameters.Request(["a"]))
        self.executor.spin_until_future_complete(future, 1.0)

        with pytest.raises(ServiceResponseError, match="KeyError"):
            future.result()

    def test_reply_for_unknown_request_is_dropped(self, caplog):
        self.client._on_reply(99, GetParameters.Response())
        self.executor.spin_some()

        assert "unknown request 99" in caplog.text

    def test_wrong_request_type_is_rejected(self):
        with pytest.raises(TypeError, match="expects"):
            self.client.call_async(ListParameters.Request())

        assert self.client.pending_calls == []

    def test_failed_send_does_not_leave_pending_call(self):
        transport = Mock(spec=LoopbackTransport)
        transport.create_service_client.return_value.send.side_effect = TransportError("down")
        client = Client(GetParameters, "/x__get_parameters", transport=transport)

        with pytest.raises(TransportError):
            client.call_async(GetParameters.Request(["a"]))

        assert client.pending_calls == []

    def test_destroyed_client_cannot_send(self):
        self.node.destroy_client(self.client)

        with pytest.raises(TransportError, match="destroyed"):
            self.client.call_async(GetParameters.Request(["a"]))


class TestService:
    def setup_method(self):
        self.server = lwparam.Node("remote", start_parameter_services=False)
        self.node = lwparam.Node("caller", start_parameter_services=False)
        self.client = self.node.create_client(GetParameters, "remote__get_parameters")

    def teardown_method(self):
        self.node.destroy_node()
        self.server.destroy_node()

    def test_callback_fills_response(self):
        def handle(request, response):
            response.values = [lwparam.Parameter(n, n.upper()).get_parameter_value() for n in request.names]

        self.server.create_service(GetParameters, "remote__get_parameters", handle)

        future = self.client.call_async(GetParameters.Request(["a"]))
        lwparam.spin_until_future_complete(self.node, future, 1.0)

        assert future.result().values[0].string_value == "A"

    def test_raising_callback_is_reported_to_caller(self):
        def handle(request, response):
            raise KeyError("missing")

        self.server.create_service(GetParameters, "remote__get_parameters", handle)

        future = self.client.call_async(GetParameters.Request(["a"]))
        lwparam.spin_until_future_complete(self.node, future, 1.0)

        with pytest.raises(ServiceResponseError, match="missing"):
            future.result()

    def test_second_server_for_same_name_is_rejected(self):
        self.server.create_service(GetParameters, "remote__get_parameters", lambda req, res: res)

        with pytest.raises(TransportError):
            self.server.create_service(GetParameters, "remote__get_parameters", lambda req, res: res)

    def test_destroyed_service_stops_answering(self):
        service = self.server.create_service(GetParameters, "remote__get_parameters", lambda req, res: res)
        assert self.client.service_is_ready()

        self.server.destroy_service(service)

        assert not self.client.service_is_ready()
