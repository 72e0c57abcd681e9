from typing import Type

from rich.text import Text
from vedro.core import Dispatcher
from vedro.core import Plugin
from vedro.core import PluginConfig
from vedro.events import ArgParseEvent
from vedro.events import ArgParsedEvent
from vedro.events import CleanupEvent
from vedro.events import StartupEvent

from etherna_devstack.core.service_types import ServiceState
from etherna_devstack.core.session import DevSession
from etherna_devstack.core.session import StackOptions
from etherna_devstack.output.console import CONSOLE
from etherna_devstack.output.styles import Style

SERVICE_GROUPS = [field for field in StackOptions._fields if field not in ('https', 'envs')]


class VedroDevStackPlugin(Plugin):
    def __init__(self, config: Type["VedroDevStack"]) -> None:
        super().__init__(config)
        self._enabled = config.enabled
        self._options: StackOptions = config.options or StackOptions()
        self._session_factory = config.session_factory or DevSession
        self._require_all_ready = config.require_all_ready
        self._session: DevSession | None = None

    def subscribe(self, dispatcher: Dispatcher) -> None:
        if not self._enabled:
            return

        dispatcher.listen(ArgParseEvent, self.handle_arg_parse) \
            .listen(ArgParsedEvent, self.handle_arg_parsed) \
            .listen(StartupEvent, self.handle_startup) \
            .listen(CleanupEvent, self.handle_cleanup)

    def handle_arg_parse(self, event: ArgParseEvent) -> None:
        group = event.arg_parser.add_argument_group("Etherna dev stack")
        group.add_argument("--ds-https",
                           action='store_true',
                           help="Serve backends over https")
        group.add_argument("--ds-skip",
                           action='append',
                           default=[],
                           choices=SERVICE_GROUPS,
                           help="Do not start this service group")

    def handle_arg_parsed(self, event: ArgParsedEvent) -> None:
        skipped = event.args.ds_skip or []
        self._options = self._options._replace(
            https=self._options.https or event.args.ds_https,
            **{group: getattr(self._options, group) and group not in skipped for group in SERVICE_GROUPS},
        )

    async def handle_startup(self, event: StartupEvent) -> None:
        CONSOLE.print(Text('Starting dev stack services ...', style=Style.info))
        self._session = self._session_factory(self._options)
        services = await self._session.start()

        if self._require_all_ready:
            not_ready = [name for name, service in services.items() if service.state != ServiceState.READY]
            if not_ready:
                self._session.shutdown()
            assert not not_ready, f"Can't start dev stack services: {', '.join(not_ready)}"

    def handle_cleanup(self, event: CleanupEvent) -> None:
        if self._session is not None:
            self._session.shutdown()


class VedroDevStack(PluginConfig):
    plugin = VedroDevStackPlugin

    # Enables plugin
    enabled = False

    # Services to start, all by default
    options: StackOptions = None

    # DevSession factory, receives StackOptions
    session_factory = None

    # Fail the run when any service is not ready
    require_all_ready = False
