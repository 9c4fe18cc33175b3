#!/usr/bin/env python3
"""Read and write another node's parameters with the blocking client."""
import lwparam
from lwparam import Parameter, SyncParameterClient


def main():
    lwparam.init()
    server = lwparam.Node(
        "param_server_demo",
        parameters=[("greeting", "hello"), ("rate_hz", 2), ("limits.max_speed", 1.5), ("limits.min_speed", 0.1)],
    )
    node = lwparam.Node("param_client_demo", start_parameter_services=False)
    log = node.get_logger()
    client = SyncParameterClient(node, "param_server_demo", timeout_sec=5.0)
    try:
        for p in client.get_parameters(["greeting", "rate_hz"]):
            log.info(f"{p.name} = {p.value!r} ({p.type.name})")

        results = client.set_parameters([("greeting", "hi again"), Parameter("rate_hz", 5)])
        log.info(f"set_parameters: {[r.successful for r in results]}")

        listed = client.list_parameters(["limits"], depth=0)
        log.info(f"list_parameters: names={listed.names} prefixes={listed.prefixes}")

        result = client.set_parameters_atomically([("limits.max_speed", 2.0), ("limits.min_speed", 0.2)])
        log.info(f"set_parameters_atomically: successful={result.successful}")

        log.info(f"greeting is now {server.get_parameter('greeting').value!r}")
    finally:
        client.destroy()
        node.destroy_node()
        server.destroy_node()
        lwparam.shutdown()
        log.info("Completed remote parameter round trip; shutting down cleanly.")


if __name__ == "__main__":
    main()
