from __future__ import annotations

"""JSON-like value types used at the wire boundary.

Command payloads, result payloads and response envelopes are declared against
these aliases so everything that crosses the transport stays JSON-compatible.
"""

from typing import TypeAlias


JSONScalar: TypeAlias = str | int | float | bool | None
JSONValue: TypeAlias = JSONScalar | list["JSONValue"] | dict[str, "JSONValue"]
JSONObject: TypeAlias = dict[str, JSONValue]

# Flat string-keyed mapping carried by the transport for every command.
WireMap: TypeAlias = dict[str, str]
