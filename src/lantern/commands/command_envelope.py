from __future__ import annotations

from dataclasses import dataclass

from lantern.json_types import JSONObject, JSONValue


@dataclass(frozen=True)
class ResponseEnvelope:
    """Terminal response for one command.

    `response` holds the success payload when `is_error` is false and the
    human-readable error message otherwise.
    """

    is_error: bool
    response: JSONValue

    @classmethod
    def success(cls, payload: JSONValue) -> "ResponseEnvelope":
        return cls(is_error=False, response=payload)

    @classmethod
    def failure(cls, message: str) -> "ResponseEnvelope":
        return cls(is_error=True, response=message)

    def as_payload(self) -> JSONObject:
        return {"isError": self.is_error, "response": self.response}
