from rich.text import Text

from etherna_devstack.output.console import CONSOLE
from etherna_devstack.output.styles import Style


def _service_prefix(marker: Text, service_name: str) -> Text:
    return Text('  ') + marker + Text('  ') + Text(service_name, style=Style.info) + Text(':   ')


def log_success(service_name: str, protocol: str, port: str | int):
    url = Text(f'{protocol}://localhost:', style=Style.mark_neutral) \
        .append(Text(str(port), style=Style.url)) \
        .append(Text('/', style=Style.mark_neutral))
    CONSOLE.print(_service_prefix(Text('➜', style=Style.good), service_name) + url)


def log_loading(service_name: str):
    CONSOLE.print(
        _service_prefix(Text('➜', style=Style.context), service_name)
        + Text('Downloading image...', style=Style.suspicious)
    )


def log_notice(service_name: str, text: str):
    CONSOLE.print(
        _service_prefix(Text('➜', style=Style.context), service_name)
        + Text(text, style=Style.regular)
    )


def log_error(service_name: str, reason: str):
    CONSOLE.print(
        _service_prefix(Text('x', style=Style.bad), service_name)
        + Text(reason.rstrip(), style=Style.bad)
    )


class ReportBlock:
    """Collects report lines and prints them to the console as one block."""

    def __init__(self, console=CONSOLE):
        self._console = console
        self._lines: list[Text] = []

    def add(self, text: Text) -> 'ReportBlock':
        self._lines.append(text)
        return self

    def print(self) -> None:
        if self._lines:
            self._console.print(Text('\n', style=Style.regular).join(self._lines))
        self._lines = []
