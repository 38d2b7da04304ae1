"""Decoding of a script's declared parameter definitions.

The backend stores the parameter definitions of a script as a base64 encoded
XML document.  Each ``ScriptParameter`` entry may carry its fields either as
attributes or as child elements, and the document itself is usually written
as UTF-16 with a byte order mark.
"""

from __future__ import annotations

import base64
import binascii
import codecs
import xml.etree.ElementTree as ET
from typing import Optional

from script_dispatch.modules.common.exceptions import FormatError

from .models import ParameterSchema, ParameterSpec

_TRUE_VALUES = {"true", "1", "yes"}


def decode_parameter_schema(encoded: Optional[str]) -> Optional[ParameterSchema]:
    """Decode a base64 parameter definition into an ordered schema.

    Returns ``None`` when no definition is present, which callers treat as
    "skip validation", and an empty tuple when the document declares no
    parameters.
    """
    if encoded is None or not encoded.strip():
        return None
    try:
        raw = base64.b64decode(encoded.strip(), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise FormatError("Parameter definition is not valid base64") from exc
    if not raw.strip():
        return None
    root = _parse_document(raw)
    specs: list[ParameterSpec] = []
    for element in root.iter():
        if _local_name(element.tag) != "ScriptParameter":
            continue
        specs.append(_to_spec(element))
    return tuple(specs)


def _parse_document(raw: bytes) -> ET.Element:
    text = _decode_text(raw)
    # ElementTree refuses str input that still carries an encoding declaration.
    if text.startswith("<?xml"):
        end = text.find("?>")
        if end != -1:
            text = text[end + 2 :]
    try:
        return ET.fromstring(text.strip())
    except ET.ParseError as exc:
        raise FormatError(f"Parameter definition is not well-formed XML: {exc}") from exc


def _decode_text(raw: bytes) -> str:
    if raw.startswith(codecs.BOM_UTF16_LE) or raw.startswith(codecs.BOM_UTF16_BE):
        encoding = "utf-16"
    elif raw.startswith(codecs.BOM_UTF8):
        encoding = "utf-8-sig"
    elif len(raw) > 1 and raw[1] == 0:
        encoding = "utf-16-le"
    else:
        encoding = "utf-8"
    try:
        return raw.decode(encoding).lstrip("\ufeff")
    except UnicodeDecodeError as exc:
        raise FormatError(f"Parameter definition is not valid {encoding} text") from exc


def _to_spec(element: ET.Element) -> ParameterSpec:
    name = _field(element, "Name")
    if not name:
        raise FormatError("Parameter definition contains an entry without a name")
    return ParameterSpec(
        name=name,
        data_type=_field(element, "Type") or "System.String",
        required=_flag(_field(element, "IsRequired")),
        hidden=_flag(_field(element, "IsHidden")),
        default_value=_field(element, "DefaultValue") or "",
        description=_field(element, "Description") or None,
    )


def _field(element: ET.Element, name: str) -> Optional[str]:
    value = element.get(name)
    if value is not None:
        return value
    for child in element:
        if _local_name(child.tag) == name:
            return (child.text or "").strip()
    return None


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in _TRUE_VALUES


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


__all__ = ["decode_parameter_schema"]
