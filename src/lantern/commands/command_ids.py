from __future__ import annotations

# Canonical command kinds shared by the codec, the registry and the transports.
GET_DIAGNOSTICS_TREE_COMMAND = "GetDiagnosticsTree"
GET_HEALTH_COMMAND = "GetHealth"
GET_OFFSET_COMMAND = "GetOffset"
GET_RENDER_TREE_COMMAND = "GetRenderTree"
GET_SEMANTICS_ID_COMMAND = "GetSemanticsId"
GET_TEXT_COMMAND = "GetText"
REQUEST_DATA_COMMAND = "RequestData"
SET_FRAME_SYNC_COMMAND = "SetFrameSync"
WAIT_FOR_ABSENT_COMMAND = "WaitForAbsent"
WAIT_FOR_COMMAND = "WaitFor"
WAIT_UNTIL_FRAME_SYNC_COMMAND = "WaitUntilFrameSync"
WAIT_UNTIL_NO_TRANSIENT_CALLBACKS_COMMAND = "WaitUntilNoTransientCallbacks"

# Deterministic canonical order is part of the command-boundary contract.
# Sort key is lexical command-kind text.
COMMAND_IDS: tuple[str, ...] = (
    GET_DIAGNOSTICS_TREE_COMMAND,
    GET_HEALTH_COMMAND,
    GET_OFFSET_COMMAND,
    GET_RENDER_TREE_COMMAND,
    GET_SEMANTICS_ID_COMMAND,
    GET_TEXT_COMMAND,
    REQUEST_DATA_COMMAND,
    SET_FRAME_SYNC_COMMAND,
    WAIT_FOR_COMMAND,
    WAIT_FOR_ABSENT_COMMAND,
    WAIT_UNTIL_FRAME_SYNC_COMMAND,
    WAIT_UNTIL_NO_TRANSIENT_CALLBACKS_COMMAND,
)

# Commands that locate an element before answering.
FINDER_COMMAND_IDS: frozenset[str] = frozenset(
    {
        GET_DIAGNOSTICS_TREE_COMMAND,
        GET_OFFSET_COMMAND,
        GET_SEMANTICS_ID_COMMAND,
        GET_TEXT_COMMAND,
        WAIT_FOR_ABSENT_COMMAND,
        WAIT_FOR_COMMAND,
    }
)
