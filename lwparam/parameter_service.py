from .parameters import Parameter
from .srv import (
    DescribeParameters,
    GetParameters,
    GetParameterTypes,
    ListParameters,
    SetParameters,
    SetParametersAtomically,
)


class ParameterService:
    """Serves a node's own parameters as ``<node name>__<operation>`` services."""

    def __init__(self, node):
        self._node = node
        name = node.get_name()
        node.create_service(GetParameters, name + GetParameters.SUFFIX, self._get_parameters)
        node.create_service(GetParameterTypes, name + GetParameterTypes.SUFFIX, self._get_parameter_types)
        node.create_service(SetParameters, name + SetParameters.SUFFIX, self._set_parameters)
        node.create_service(
            SetParametersAtomically, name + SetParametersAtomically.SUFFIX, self._set_parameters_atomically
        )
        node.create_service(ListParameters, name + ListParameters.SUFFIX, self._list_parameters)
        node.create_service(DescribeParameters, name + DescribeParameters.SUFFIX, self._describe_parameters)

    def _get_parameters(self, request, response):
        for param in self._node.get_parameters(request.names):
            response.values.append(param.get_parameter_value())
        return response

    def _get_parameter_types(self, request, response):
        for param in self._node.get_parameters(request.names):
            response.types.append(int(param.type))
        return response

    def _set_parameters(self, request, response):
        response.results = self._node.set_parameters(_from_msgs(request.parameters))
        return response

    def _set_parameters_atomically(self, request, response):
        response.result = self._node.set_parameters_atomically(_from_msgs(request.parameters))
        return response

    def _list_parameters(self, request, response):
        response.result = self._node.list_parameters(request.prefixes, request.depth)
        return response

    def _describe_parameters(self, request, response):
        response.descriptors = self._node.describe_parameters(request.names)
        return response


def _from_msgs(msgs) -> list[Parameter]:
    # Converting everything up front fails the whole request on one bad value.
    return [Parameter.from_parameter_msg(msg) for msg in msgs]
