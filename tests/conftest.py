import pytest

from react_lens.config import InspectorProfile
from tests.helpers import FakeChannel, login_app, login_ax_tree


@pytest.fixture
def profile() -> InspectorProfile:
	return InspectorProfile(reload_settle_seconds=0)


@pytest.fixture
def login_channel() -> FakeChannel:
	return FakeChannel(roots=[login_app()], ax_tree=login_ax_tree())
