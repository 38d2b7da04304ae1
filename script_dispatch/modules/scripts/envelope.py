"""Operation envelope construction and parameter integrity hashing."""

from __future__ import annotations

import base64
import hashlib
from dataclasses import dataclass

from .models import ScriptDefinition
from .parameters import ParameterBlock, escape_attribute

HASH_ALGORITHM = "SHA256"


def compute_parameter_hash(block_xml: str) -> str:
    """Return the upper-case hex SHA-256 of the block text encoded as UTF-16LE.

    The execution agent re-hashes the block from its own UTF-16 string, so
    any other byte encoding produces a digest the agent rejects.
    """
    return hashlib.sha256(block_xml.encode("utf-16-le")).hexdigest().upper()


@dataclass(frozen=True, slots=True)
class OperationEnvelope:
    script_guid: str
    script_version: str
    script_type: int
    script_hash: str
    parameter_block: str
    parameter_hash: str

    @property
    def document(self) -> str:
        return (
            f"<ScriptContent ScriptGuid='{escape_attribute(self.script_guid)}'>"
            f"<ScriptVersion>{escape_attribute(self.script_version)}</ScriptVersion>"
            f"<ScriptType>{self.script_type}</ScriptType>"
            f"<ScriptHash ScriptHashAlg='{HASH_ALGORITHM}'>{self.script_hash}</ScriptHash>"
            f"{self.parameter_block}"
            f"<ParameterGroupHash ParameterHashAlg='{HASH_ALGORITHM}'>{self.parameter_hash}</ParameterGroupHash>"
            "</ScriptContent>"
        )

    @property
    def payload(self) -> str:
        """The transport form: base64 of the UTF-8 encoded document."""
        return base64.b64encode(self.document.encode("utf-8")).decode("ascii")


def build_envelope(script: ScriptDefinition, block: ParameterBlock) -> OperationEnvelope:
    block_xml = block.xml
    parameter_hash = "" if block.is_empty else compute_parameter_hash(block_xml)
    return OperationEnvelope(
        script_guid=script.script_guid,
        script_version=script.script_version,
        script_type=int(script.script_type),
        script_hash=script.script_hash or "",
        parameter_block=block_xml,
        parameter_hash=parameter_hash,
    )


__all__ = ["HASH_ALGORITHM", "OperationEnvelope", "build_envelope", "compute_parameter_hash"]
