from argparse import ArgumentParser

import vedro
from vedro.events import ArgParseEvent
from vedro.events import ArgParsedEvent
from vedro.events import StartupEvent

from etherna_devstack.core.session import StackOptions
from etherna_devstack.vedro_plugin import VedroDevStack
from etherna_devstack.vedro_plugin import VedroDevStackPlugin
from helpers.fake_session import FakeSessionFactory


class Scenario(vedro.Scenario):
    subject = 'plugin arguments select protocol and skipped services'

    def given_plugin(self):
        self.factory = FakeSessionFactory()

        class DevStack(VedroDevStack):
            enabled = True
            session_factory = self.factory

        self.plugin = VedroDevStackPlugin(DevStack)

    def given_parsed_arguments(self):
        parser = ArgumentParser()
        self.plugin.handle_arg_parse(ArgParseEvent(parser))
        args = parser.parse_args(['--ds-https', '--ds-skip', 'elastic', '--ds-skip', 'validator'])
        self.plugin.handle_arg_parsed(ArgParsedEvent(args))

    async def when_run_started(self):
        await self.plugin.handle_startup(StartupEvent(None))

    def then_session_should_start_with_selected_services(self):
        assert [session.options for session in self.factory.sessions] == [
            StackOptions(https=True, elastic=False, validator=False),
        ]
