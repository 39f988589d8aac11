# tests/30_independent/test_public_api.py

import rpcbuild as mod_rpcbuild


def test_every_exported_name_exists() -> None:
    missing = [n for n in mod_rpcbuild.__all__ if not hasattr(mod_rpcbuild, n)]
    assert missing == []


def test_no_duplicate_exports() -> None:
    assert len(mod_rpcbuild.__all__) == len(set(mod_rpcbuild.__all__))
