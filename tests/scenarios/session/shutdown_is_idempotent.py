import asyncio

import vedro

from contexts.cache_dir import cache_dir
from etherna_devstack.core.config import Config
from etherna_devstack.core.session import DevSession
from etherna_devstack.core.session import SessionState
from helpers.fake_process import FakeLauncher
from helpers.sessions import only
from helpers.waiting import wait_until


class Scenario(vedro.Scenario):
    subject = 'repeated shutdown signals terminate each process once'

    def given_session(self):
        cache_dir()
        self.launcher = FakeLauncher()
        self.session = DevSession(only(mongo=True), config=Config(), launcher=self.launcher)

    async def given_service_mid_launch(self):
        self.start = asyncio.create_task(self.session.start())
        vedro.defer(self.start.cancel)
        await wait_until(lambda: len(self.session.registry) == 1)

    async def when_shut_down_twice(self):
        self.session.shutdown()
        self.session.shutdown()
        await asyncio.wait_for(self.start, timeout=5)
        self.session.shutdown()

    def then_process_should_be_terminated_once(self):
        assert self.launcher.handles['etherna-mongodb'].terminate_calls == 1

    def and_session_should_be_stopped(self):
        assert self.session.state == SessionState.STOPPED
