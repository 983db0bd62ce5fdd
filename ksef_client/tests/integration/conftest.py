import os

import pytest


def pytest_collection_modifyitems(config: pytest.Config, items: list) -> None:
    missing = not (os.getenv("KSEF_TEST_NIP") and os.getenv("KSEF_TEST_TOKEN"))
    if not missing:
        return
    mark_expr = getattr(config.option, "markexpr", "")
    if "integration" in mark_expr:
        return
    skip = pytest.mark.skip(reason="KSEF_TEST_NIP / KSEF_TEST_TOKEN not set")
    for item in items:
        if item.get_closest_marker("integration"):
            item.add_marker(skip)


@pytest.fixture(scope="session")
def ksef_credentials() -> tuple[str, str]:
    nip = os.getenv("KSEF_TEST_NIP")
    token = os.getenv("KSEF_TEST_TOKEN")
    if not nip or not token:
        pytest.fail("KSEF_TEST_NIP and KSEF_TEST_TOKEN must be set to run integration tests.")
    return nip, token
