#!/usr/bin/env python3
"""Query parameters with the non-blocking client and an executor."""
import lwparam
from lwparam import AsyncParameterClient, SingleThreadedExecutor


def main():
    lwparam.init()
    server = lwparam.Node("async_param_server", parameters=[("use_sim_time", False), ("frame_id", "map")])
    node = lwparam.Node("async_param_client", start_parameter_services=False)
    log = node.get_logger()
    executor = SingleThreadedExecutor()
    executor.add_node(node)

    created = AsyncParameterClient.create(node, "async_param_server")
    if not created.ok:
        log.error(f"Could not create parameter client: {created.error}")
        lwparam.shutdown()
        return
    client = created.client

    def on_types(future):
        log.info(f"types: {[t.name for t in future.result()]}")

    types_future = client.get_parameter_types(["use_sim_time", "frame_id"], callback=on_types)
    values_future = client.get_parameters(["use_sim_time", "frame_id"])
    log.info(f"pending requests before spinning: {len(client.pending_calls())}")

    try:
        executor.spin_until_future_complete(types_future, timeout_sec=5.0)
        executor.spin_until_future_complete(values_future, timeout_sec=5.0)
        for p in values_future.result():
            log.info(f"{p.name} = {p.value!r}")
    finally:
        client.destroy()
        executor.shutdown()
        node.destroy_node()
        server.destroy_node()
        lwparam.shutdown()
        log.info("Async parameter queries finished.")


if __name__ == "__main__":
    main()
