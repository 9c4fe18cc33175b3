from __future__ import annotations
from enum import IntEnum
from typing import Any

from .exceptions import ParameterValueError


class ParameterType(IntEnum):
    NOT_SET = 0
    BOOL = 1
    INTEGER = 2
    DOUBLE = 3
    STRING = 4
    BYTE_ARRAY = 5
    BOOL_ARRAY = 6
    INTEGER_ARRAY = 7
    DOUBLE_ARRAY = 8
    STRING_ARRAY = 9


# ParameterValue slot carrying the payload for each type.
_VALUE_SLOTS = {
    ParameterType.BOOL: "bool_value",
    ParameterType.INTEGER: "integer_value",
    ParameterType.DOUBLE: "double_value",
    ParameterType.STRING: "string_value",
    ParameterType.BYTE_ARRAY: "byte_array_value",
    ParameterType.BOOL_ARRAY: "bool_array_value",
    ParameterType.INTEGER_ARRAY: "integer_array_value",
    ParameterType.DOUBLE_ARRAY: "double_array_value",
    ParameterType.STRING_ARRAY: "string_array_value",
}


def _infer_type(value: Any) -> ParameterType:
    """Infer a ParameterType from a Python value (best-effort)."""
    if value is None:
        return ParameterType.NOT_SET
    if isinstance(value, bool):
        return ParameterType.BOOL
    if isinstance(value, int) and not isinstance(value, bool):
        return ParameterType.INTEGER
    if isinstance(value, float):
        return ParameterType.DOUBLE
    if isinstance(value, str):
        return ParameterType.STRING
    if isinstance(value, (bytes, bytearray, memoryview)):
        return ParameterType.BYTE_ARRAY
    if isinstance(value, (list, tuple)):
        if not value:
            return ParameterType.NOT_SET
        if all(isinstance(v, bool) for v in value):
            return ParameterType.BOOL_ARRAY
        if all(isinstance(v, int) and not isinstance(v, bool) for v in value):
            return ParameterType.INTEGER_ARRAY
        if all(isinstance(v, float) for v in value):
            return ParameterType.DOUBLE_ARRAY
        if all(isinstance(v, str) for v in value):
            return ParameterType.STRING_ARRAY
    return ParameterType.NOT_SET


def _value_matches(type_: ParameterType, value: Any) -> bool:
    if type_ == ParameterType.NOT_SET:
        return value is None
    if type_ == ParameterType.BOOL:
        return isinstance(value, bool)
    if type_ == ParameterType.INTEGER:
        return isinstance(value, int) and not isinstance(value, bool)
    if type_ == ParameterType.DOUBLE:
        return isinstance(value, (float, int)) and not isinstance(value, bool)
    if type_ == ParameterType.STRING:
        return isinstance(value, str)
    if type_ == ParameterType.BYTE_ARRAY:
        return isinstance(value, (bytes, bytearray, memoryview))
    if not isinstance(value, (list, tuple)):
        return False
    if type_ == ParameterType.BOOL_ARRAY:
        return all(isinstance(v, bool) for v in value)
    if type_ == ParameterType.INTEGER_ARRAY:
        return all(isinstance(v, int) and not isinstance(v, bool) for v in value)
    if type_ == ParameterType.DOUBLE_ARRAY:
        return all(isinstance(v, (float, int)) and not isinstance(v, bool) for v in value)
    if type_ == ParameterType.STRING_ARRAY:
        return all(isinstance(v, str) for v in value)
    return False


def _normalize_value(type_: ParameterType, value: Any) -> Any:
    if type_ == ParameterType.DOUBLE:
        return float(value)
    if type_ == ParameterType.BYTE_ARRAY:
        return bytes(value)
    if type_ == ParameterType.DOUBLE_ARRAY:
        return [float(v) for v in value]
    if type_ in (ParameterType.BOOL_ARRAY, ParameterType.INTEGER_ARRAY, ParameterType.STRING_ARRAY):
        return list(value)
    return value


def decode_parameter_type(code: int) -> ParameterType:
    """Map a raw type code to ParameterType, raising ParameterValueError for unknown codes."""
    try:
        return ParameterType(code)
    except ValueError:
        raise ParameterValueError(f"Unknown parameter type code {code!r}") from None


class ParameterValue:
    """Transport record for a parameter value: a type code plus one slot per type."""

    __slots__ = ("type",) + tuple(_VALUE_SLOTS.values())

    def __init__(self, type: int = ParameterType.NOT_SET, **slots):
        self.type = int(type)
        self.bool_value = False
        self.integer_value = 0
        self.double_value = 0.0
        self.string_value = ""
        self.byte_array_value = b""
        self.bool_array_value = []
        self.integer_array_value = []
        self.double_array_value = []
        self.string_array_value = []
        for slot, value in slots.items():
            if slot not in _VALUE_SLOTS.values():
                raise TypeError(f"ParameterValue has no slot '{slot}'")
            setattr(self, slot, value)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ParameterValue):
            return NotImplemented
        return all(getattr(self, s) == getattr(other, s) for s in self.__slots__)

    def __repr__(self) -> str:
        try:
            type_ = ParameterType(self.type)
        except ValueError:
            return f"ParameterValue(type={self.type})"
        slot = _VALUE_SLOTS.get(type_)
        if slot is None:
            return f"ParameterValue(type={type_.name})"
        return f"ParameterValue(type={type_.name}, {slot}={getattr(self, slot)!r})"


class ParameterMsg:
    """Transport record pairing a parameter name with its ParameterValue."""

    __slots__ = ("name", "value")

    def __init__(self, name: str = "", value: ParameterValue | None = None):
        self.name = name
        self.value = value if value is not None else ParameterValue()

    def __eq__(self, other) -> bool:
        if not isinstance(other, ParameterMsg):
            return NotImplemented
        return self.name == other.name and self.value == other.value

    def __repr__(self) -> str:
        return f"ParameterMsg(name={self.name!r}, value={self.value!r})"


class Parameter:
    """Named, typed parameter value.

    The value always matches the type tag: passing an explicit ``type_`` with a
    value of a different kind raises TypeError.
    """

    def __init__(self, name: str, value: Any = None, type_: ParameterType | None = None):
        self._name = name
        if isinstance(value, ParameterType):
            # Parameter("x", ParameterType.INTEGER) declares the type without a value.
            self._type = value
            self._value = None
            return
        if type_ is None:
            type_ = _infer_type(value)
            if type_ == ParameterType.NOT_SET and value is not None:
                if isinstance(value, (list, tuple)) and not value:
                    raise TypeError(f"Cannot infer the type of empty sequence for parameter '{name}'")
                raise TypeError(f"Unsupported value for parameter '{name}': {value!r}")
        else:
            type_ = ParameterType(type_)
            if value is not None and not _value_matches(type_, value):
                raise TypeError(
                    f"Value {value!r} does not match type {type_.name} for parameter '{name}'"
                )
        self._type = type_
        self._value = _normalize_value(type_, value) if value is not None else None

    @property
    def name(self) -> str:
        return self._name

    @property
    def value(self) -> Any:
        return self._value

    @property
    def type(self) -> ParameterType:
        return self._type

    # rclpy uses type_ to avoid shadowing builtins; offer both.
    @property
    def type_(self) -> ParameterType:
        return self._type

    def get_parameter_value(self) -> ParameterValue:
        pv = ParameterValue(type=self._type)
        slot = _VALUE_SLOTS.get(self._type)
        if slot is not None and self._value is not None:
            setattr(pv, slot, self._value)
        return pv

    def to_parameter_msg(self) -> ParameterMsg:
        return ParameterMsg(self._name, self.get_parameter_value())

    @classmethod
    def from_parameter_msg(cls, msg: ParameterMsg) -> "Parameter":
        return cls(msg.name, parameter_value_to_python(msg.value), decode_parameter_type(msg.value.type))

    def __eq__(self, other) -> bool:
        if not isinstance(other, Parameter):
            return NotImplemented
        return (self._name, self._type, self._value) == (other._name, other._type, other._value)

    def __repr__(self) -> str:
        return f"Parameter(name={self._name!r}, type={self._type.name}, value={self._value!r})"


def parameter_value_to_python(pv: ParameterValue) -> Any:
    """Extract the payload of ``pv``, checking that the populated slot matches its type."""
    type_ = decode_parameter_type(pv.type)
    if type_ == ParameterType.NOT_SET:
        return None
    value = getattr(pv, _VALUE_SLOTS[type_])
    if not _value_matches(type_, value):
        raise ParameterValueError(f"Slot {_VALUE_SLOTS[type_]}={value!r} does not hold a {type_.name}")
    return value


class SetParametersResult:
    """Outcome of setting one parameter (or a batch, when applied atomically)."""

    def __init__(self, successful: bool = True, reason: str = ""):
        self.successful = bool(successful)
        self.reason = reason

    def __bool__(self) -> bool:
        return self.successful

    def __eq__(self, other) -> bool:
        if not isinstance(other, SetParametersResult):
            return NotImplemented
        return (self.successful, self.reason) == (other.successful, other.reason)

    def __repr__(self) -> str:
        return f"SetParametersResult(successful={self.successful}, reason={self.reason!r})"


class ListParametersResult:
    def __init__(self, names: list[str] | None = None, prefixes: list[str] | None = None):
        self.names = list(names or [])
        self.prefixes = list(prefixes or [])

    def __eq__(self, other) -> bool:
        if not isinstance(other, ListParametersResult):
            return NotImplemented
        return (self.names, self.prefixes) == (other.names, other.prefixes)

    def __repr__(self) -> str:
        return f"ListParametersResult(names={self.names!r}, prefixes={self.prefixes!r})"


class ParameterDescriptor:
    def __init__(
        self,
        name: str = "",
        type: int = ParameterType.NOT_SET,
        description: str = "",
        read_only: bool = False,
    ):
        self.name = name
        self.type = int(type)
        self.description = description
        self.read_only = bool(read_only)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ParameterDescriptor):
            return NotImplemented
        return (self.name, self.type, self.description, self.read_only) == (
            other.name, other.type, other.description, other.read_only
        )

    def __repr__(self) -> str:
        return (
            f"ParameterDescriptor(name={self.name!r}, type={self.type}, "
            f"description={self.description!r}, read_only={self.read_only})"
        )


def coerce_parameter(obj: Any) -> Parameter:
    """Accept a Parameter or (name, value) pair and return a Parameter."""
    if isinstance(obj, Parameter):
        return obj
    if isinstance(obj, tuple) and len(obj) == 2:
        return Parameter(obj[0], obj[1])
    raise TypeError("set_parameters expects Parameter or (name, value) tuples")
