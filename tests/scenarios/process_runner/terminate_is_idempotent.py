import asyncio

import vedro

from etherna_devstack.core.process_runner import spawn


class Scenario(vedro.Scenario):
    subject = 'terminating a process more than once signals it once'

    async def given_running_process(self):
        self.handle = await spawn('sleep', ['5'], name='sleeper')
        vedro.defer(self.handle.terminate)

    async def when_terminated_twice(self):
        self.handle.terminate()
        self.handle.terminate()
        self.exit_code = await asyncio.wait_for(self.handle.wait(), timeout=5)

    def then_it_should_be_killed_by_signal(self):
        assert self.exit_code is None

    def and_terminating_exited_process_should_do_nothing(self):
        self.handle.terminate()
        assert self.handle.returncode is not None
