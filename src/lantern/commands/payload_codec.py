"""Value codec between the flat wire mapping and typed commands."""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import ValidationError

from lantern.commands.command_envelope import ResponseEnvelope
from lantern.exceptions import MalformedCommand, UnknownCommand
from lantern.json_types import JSONObject
from lantern.runtime.json_io import load_json_object_text
from lantern.schema import COMMAND_KEY, COMMAND_MODELS, Command, FinderCommand


def _validation_summary(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())) or "<root>"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def normalized_command_payload(raw: object) -> dict[str, object]:
    """Return the raw command as a plain dict, parsing JSON text or bytes."""
    if isinstance(raw, (str, bytes, bytearray)):
        parsed = load_json_object_text(bytes(raw) if isinstance(raw, bytearray) else raw)
        if parsed is None:
            raise MalformedCommand("command payload is not a JSON object")
        return parsed
    if not isinstance(raw, Mapping):
        raise MalformedCommand(
            f"command payload must be a mapping, got {type(raw).__name__}"
        )
    return {str(key): value for key, value in raw.items()}


def decode_command(raw: object) -> Command:
    payload = normalized_command_payload(raw)
    kind = payload.get(COMMAND_KEY)
    if kind is None or kind == "":
        raise MalformedCommand(f"command payload is missing {COMMAND_KEY!r}")
    model = COMMAND_MODELS.get(str(kind))
    if model is None:
        raise UnknownCommand(kind)
    data = dict(payload)
    if issubclass(model, FinderCommand):
        data["finder"] = payload
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise MalformedCommand(
            f"malformed {kind} command: {_validation_summary(exc)}"
        ) from exc
    except ValueError as exc:
        raise MalformedCommand(f"malformed {kind} command: {exc}") from exc


def encode_command(command: Command) -> dict[str, str]:
    return command.serialize()


def encode_response(envelope: ResponseEnvelope) -> JSONObject:
    return envelope.as_payload()
