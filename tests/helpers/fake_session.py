from etherna_devstack.core.service_types import RunningService
from etherna_devstack.core.service_types import ServiceState
from etherna_devstack.core.session import StackOptions
from helpers.specs import search_spec


class FakeSessionFactory:
    """Records the options plugin sessions are created with."""

    def __init__(self, states: dict[str, ServiceState] = None):
        self._states = states or {'fake-search': ServiceState.READY}
        self.sessions: list['FakeSession'] = []

    def __call__(self, options: StackOptions) -> 'FakeSession':
        session = FakeSession(options, self._states)
        self.sessions.append(session)
        return session


class FakeSession:
    def __init__(self, options: StackOptions, states: dict[str, ServiceState]):
        self.options = options
        self.shutdown_calls = 0
        self._services = {
            name: RunningService(spec=search_spec(name), state=state) for name, state in states.items()
        }

    async def start(self) -> dict[str, RunningService]:
        return self._services

    def shutdown(self):
        self.shutdown_calls += 1
