import pytest

from fakes import FakeSlack


@pytest.fixture
def fake_slack() -> FakeSlack:
    return FakeSlack()
