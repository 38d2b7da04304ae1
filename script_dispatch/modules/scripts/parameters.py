"""Validation and wire encoding of script parameters."""

from __future__ import annotations

import logging
import math
import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Optional
from xml.sax.saxutils import escape

from script_dispatch.modules.common.exceptions import InvalidParameterValueError, MissingParameterError

from .models import ParameterSchema

logger = logging.getLogger(__name__)

EMPTY_PARAMETER_BLOCK = "<ScriptParameters></ScriptParameters>"

_ATTRIBUTE_ENTITIES = {'"': "&quot;", "'": "&apos;"}

_INTEGER_RANGES = {
    "system.byte": (0, 2**8 - 1),
    "system.int16": (-(2**15), 2**15 - 1),
    "system.int32": (-(2**31), 2**31 - 1),
    "system.int64": (-(2**63), 2**63 - 1),
    "system.uint16": (0, 2**16 - 1),
    "system.uint32": (0, 2**32 - 1),
    "system.uint64": (0, 2**64 - 1),
    "int": (-(2**31), 2**31 - 1),
    "long": (-(2**63), 2**63 - 1),
}
_BOOLEAN_TYPES = {"system.boolean", "system.management.automation.switchparameter", "bool", "switch"}
_DECIMAL_TYPES = {"system.double", "system.single", "system.decimal", "double", "float", "decimal"}
_TRUE_TEXT = {"true", "$true", "1", "yes"}
_FALSE_TEXT = {"false", "$false", "0", "no", ""}


class ValueKind(str, Enum):
    STRING = "string"
    INTEGER = "integer"
    BOOLEAN = "boolean"
    DECIMAL = "decimal"

    @classmethod
    def for_type(cls, data_type: str) -> "ValueKind":
        key = data_type.strip().lower()
        if key in _INTEGER_RANGES:
            return cls.INTEGER
        if key in _BOOLEAN_TYPES:
            return cls.BOOLEAN
        if key in _DECIMAL_TYPES:
            return cls.DECIMAL
        return cls.STRING


@dataclass(frozen=True, slots=True)
class ParameterValue:
    """A caller value resolved against its declared data type."""

    kind: ValueKind
    data_type: str
    text: str

    @classmethod
    def literal(cls, data_type: str, text: str) -> "ParameterValue":
        """Wrap text that is already in wire form (schema defaults, blanks)."""
        return cls(ValueKind.for_type(data_type), data_type, text)

    @classmethod
    def resolve(cls, name: str, data_type: str, value: Any) -> "ParameterValue":
        kind = ValueKind.for_type(data_type)
        if value is None:
            return cls(kind, data_type, "")
        if kind is ValueKind.BOOLEAN:
            text = _boolean_text(name, data_type, value)
        elif kind is ValueKind.INTEGER:
            text = _integer_text(name, data_type, value)
        elif kind is ValueKind.DECIMAL:
            text = _decimal_text(name, data_type, value)
        else:
            text = _string_text(name, data_type, value)
        return cls(kind, data_type, text)

    @classmethod
    def infer(cls, name: str, value: Any) -> "ParameterValue":
        """Pick a data type from the Python value when no schema is known."""
        if isinstance(value, bool):
            data_type = "System.Boolean"
        elif isinstance(value, int):
            low, high = _INTEGER_RANGES["system.int32"]
            data_type = "System.Int32" if low <= value <= high else "System.Int64"
        elif isinstance(value, float):
            data_type = "System.Double"
        else:
            data_type = "System.String"
        return cls.resolve(name, data_type, value)


@dataclass(frozen=True, slots=True)
class ParameterAssignment:
    name: str
    value: ParameterValue
    group_id: str

    @property
    def data_type(self) -> str:
        return self.value.data_type


@dataclass(frozen=True, slots=True)
class ParameterBlock:
    """All parameter assignments of one invocation, sharing one group id."""

    group_id: str
    assignments: tuple[ParameterAssignment, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.assignments

    @property
    def xml(self) -> str:
        if self.is_empty:
            return EMPTY_PARAMETER_BLOCK
        entries = "".join(_entry_xml(assignment) for assignment in self.assignments)
        return f"<ScriptParameters>{entries}</ScriptParameters>"


def escape_attribute(value: str) -> str:
    return escape(value, _ATTRIBUTE_ENTITIES)


def new_group_id() -> str:
    return str(uuid.uuid4())


def encode_parameters(
    schema: Optional[ParameterSchema],
    arguments: Optional[Mapping[str, Any]],
    *,
    group_id: Optional[str] = None,
) -> ParameterBlock:
    """Validate caller arguments against ``schema`` and build the parameter block.

    With no schema (or a schema declaring zero parameters) the caller's pairs
    are trusted and encoded in the order given.  Otherwise the schema's
    declaration order is used: hidden parameters always take their default,
    other parameters take the caller value or an empty string.  Validation
    completes before any assignment is built, so a missing required parameter
    never yields a partial block.
    """
    arguments = dict(arguments or {})
    group_id = group_id or new_group_id()

    if not schema:
        assignments = tuple(
            ParameterAssignment(name, ParameterValue.infer(name, value), group_id)
            for name, value in arguments.items()
        )
        return ParameterBlock(group_id, assignments)

    supplied = {key.casefold(): key for key in arguments}
    for spec in schema:
        if spec.required and not spec.hidden and spec.name.casefold() not in supplied:
            raise MissingParameterError(spec.name)

    declared = {spec.name.casefold() for spec in schema}
    ignored = [key for key in arguments if key.casefold() not in declared]
    if ignored:
        logger.warning("Ignoring undeclared script parameters: %s", ", ".join(ignored))

    if not arguments and not any(spec.required and not spec.hidden for spec in schema):
        return ParameterBlock(group_id)

    assignments = []
    for spec in schema:
        key = supplied.get(spec.name.casefold())
        if spec.hidden:
            if key is not None:
                logger.info("Parameter %s is hidden; caller value replaced by its default", spec.name)
            value = ParameterValue.literal(spec.data_type, spec.default_value)
        elif key is not None:
            value = ParameterValue.resolve(spec.name, spec.data_type, arguments[key])
        else:
            value = ParameterValue.literal(spec.data_type, "")
        assignments.append(ParameterAssignment(spec.name, value, group_id))
    return ParameterBlock(group_id, tuple(assignments))


def _entry_xml(assignment: ParameterAssignment) -> str:
    group = escape_attribute(assignment.group_id)
    return (
        f'<ScriptParameter ParameterGroupGuid="{group}" ParameterGroupName="PG_{group}" '
        f'ParameterName="{escape_attribute(assignment.name)}" '
        f'ParameterType="{escape_attribute(assignment.data_type)}" '
        f'ParameterValue="{escape_attribute(assignment.value.text)}"/>'
    )


def _boolean_text(name: str, data_type: str, value: Any) -> str:
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, int) and value in (0, 1):
        return "True" if value else "False"
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_TEXT:
            return "True"
        if lowered in _FALSE_TEXT:
            return "False"
    raise InvalidParameterValueError(name, data_type, value)


def _integer_text(name: str, data_type: str, value: Any) -> str:
    if isinstance(value, bool):
        raise InvalidParameterValueError(name, data_type, value)
    if isinstance(value, float):
        if not value.is_integer():
            raise InvalidParameterValueError(name, data_type, value)
        number = int(value)
    elif isinstance(value, int):
        number = value
    elif isinstance(value, str):
        if not value.strip():
            return ""
        try:
            number = int(value.strip())
        except ValueError as exc:
            raise InvalidParameterValueError(name, data_type, value) from exc
    else:
        raise InvalidParameterValueError(name, data_type, value)
    low, high = _INTEGER_RANGES[data_type.strip().lower()]
    if not low <= number <= high:
        raise InvalidParameterValueError(name, data_type, value)
    return str(number)


def _decimal_text(name: str, data_type: str, value: Any) -> str:
    if isinstance(value, bool):
        raise InvalidParameterValueError(name, data_type, value)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidParameterValueError(name, data_type, value)
        return repr(value) if isinstance(value, float) else str(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return ""
        try:
            parsed = float(text)
        except ValueError as exc:
            raise InvalidParameterValueError(name, data_type, value) from exc
        if not math.isfinite(parsed):
            raise InvalidParameterValueError(name, data_type, value)
        return text
    raise InvalidParameterValueError(name, data_type, value)


def _string_text(name: str, data_type: str, value: Any) -> str:
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, (str, int, float)):
        return str(value)
    raise InvalidParameterValueError(name, data_type, value)


__all__ = [
    "EMPTY_PARAMETER_BLOCK",
    "ParameterAssignment",
    "ParameterBlock",
    "ParameterValue",
    "ValueKind",
    "encode_parameters",
    "escape_attribute",
    "new_group_id",
]
