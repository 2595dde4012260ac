from __future__ import annotations

import pytest

from script_signer.crypto.keys import RsaKeyPair


@pytest.fixture(scope="session")
def key_pair() -> RsaKeyPair:
    return RsaKeyPair.generate()


@pytest.fixture(scope="session")
def other_key_pair() -> RsaKeyPair:
    return RsaKeyPair.generate()
