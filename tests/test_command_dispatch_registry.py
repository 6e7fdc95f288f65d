from __future__ import annotations

from lantern.commands import command_ids, direct_dispatch
from lantern.schema import COMMAND_MODELS, FinderCommand


def test_command_ids_sorted() -> None:
    assert command_ids.COMMAND_IDS == tuple(sorted(command_ids.COMMAND_IDS))


def test_direct_dispatch_registry_sorted_and_complete() -> None:
    keys = tuple(direct_dispatch.DIRECT_EXECUTOR_REGISTRY.keys())
    assert keys == tuple(sorted(keys))
    assert direct_dispatch.missing_command_ids() == ()
    assert direct_dispatch.extra_direct_command_ids() == ()
    assert direct_dispatch.is_registry_complete() is True
    for command in command_ids.COMMAND_IDS:
        assert callable(direct_dispatch.direct_executor(command))
    assert direct_dispatch.direct_executor("Tap") is None


def test_every_command_id_has_a_model() -> None:
    assert tuple(sorted(COMMAND_MODELS)) == command_ids.COMMAND_IDS
    finder_kinds = {
        kind for kind, model in COMMAND_MODELS.items() if issubclass(model, FinderCommand)
    }
    assert finder_kinds == command_ids.FINDER_COMMAND_IDS
