import pytest

import lwparam
from lwparam.context import _domain_from_env, get_domain_id, is_shutdown
from lwparam.transport import LoopbackTransport


@pytest.fixture
def clean_env(monkeypatch):
    monkeypatch.delenv("LWPARAM_DOMAIN_ID", raising=False)
    monkeypatch.delenv("ROS_DOMAIN_ID", raising=False)
    return monkeypatch


def test_domain_defaults_to_zero(clean_env):
    assert _domain_from_env() == 0


def test_lwparam_domain_takes_precedence_over_ros_domain(clean_env):
    clean_env.setenv("ROS_DOMAIN_ID", "7")
    assert _domain_from_env() == 7

    clean_env.setenv("LWPARAM_DOMAIN_ID", "3")
    assert _domain_from_env() == 3


def test_invalid_domain_falls_back_to_zero(clean_env):
    clean_env.setenv("LWPARAM_DOMAIN_ID", "abc")

    assert _domain_from_env() == 0


def test_init_is_idempotent_and_shutdown_resets():
    transport = lwparam.get_transport()
    lwparam.init(domain_id=9)

    assert lwparam.get_transport() is transport
    assert get_domain_id() == 0
    assert lwparam.ok()

    lwparam.shutdown()

    assert not lwparam.ok()
    assert is_shutdown()
    with pytest.raises(RuntimeError, match="init"):
        lwparam.get_transport()


def test_custom_transport_is_used_by_nodes():
    lwparam.shutdown()
    transport = LoopbackTransport(domain_id=4)
    lwparam.init(transport=transport, domain_id=4)

    node = lwparam.Node("custom", start_parameter_services=True)

    assert transport.service_is_ready("/custom__get_parameters")
    assert get_domain_id() == 4
    node.destroy_node()
