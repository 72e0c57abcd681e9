import vedro
from vedro.core import Report
from vedro.events import CleanupEvent
from vedro.events import StartupEvent

from etherna_devstack.vedro_plugin import VedroDevStack
from etherna_devstack.vedro_plugin import VedroDevStackPlugin
from helpers.fake_session import FakeSessionFactory


class Scenario(vedro.Scenario):
    subject = 'plugin shuts the session down after the run'

    async def given_started_plugin(self):
        self.factory = FakeSessionFactory()

        class DevStack(VedroDevStack):
            enabled = True
            session_factory = self.factory

        self.plugin = VedroDevStackPlugin(DevStack)
        await self.plugin.handle_startup(StartupEvent(None))

    def when_run_cleaned_up(self):
        self.plugin.handle_cleanup(CleanupEvent(Report()))

    def then_session_should_be_shut_down(self):
        assert [session.shutdown_calls for session in self.factory.sessions] == [1]
