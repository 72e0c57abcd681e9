import shutil
import tempfile
from pathlib import Path

import vedro

FAKE_DOCKER_SCRIPT = '''#!/bin/sh
state='{state}'
echo "$*" >> "$state/calls.log"
case "$1" in
  volume|network)
    if [ -e "$state/fail-$1" ]; then
      echo "Error response from daemon: $(cat "$state/fail-$1")" >&2
      exit 1
    fi
    if [ -e "$state/$1-$3" ]; then
      echo "Error response from daemon: $1 with name $3 already exists" >&2
      exit 1
    fi
    touch "$state/$1-$3"
    echo "$3"
    ;;
  ps)
    for running in "$state"/running-*; do
      [ -e "$running" ] || continue
      container="${{running##*/running-}}"
      if echo "/$container" | grep -Eq -- "${{4#name=}}"; then echo "$container"; fi
    done
    ;;
  stop)
    rm -f "$state/running-$2"
    echo "$2"
    ;;
  exec)
    ;;
  run)
    name="$4"
    touch "$state/running-$name"
    if [ -e "$state/stdout-$name" ]; then cat "$state/stdout-$name"; fi
    if [ -e "$state/stderr-$name" ]; then cat "$state/stderr-$name" >&2; fi
    if [ -e "$state/linger-$name" ]; then
      trap 'rm -f "$state/running-$name"; exit 143' TERM
      while :; do sleep 0.1; done
    fi
    rm -f "$state/running-$name"
    exit "$(cat "$state/exit-$name" 2>/dev/null || echo 0)"
    ;;
esac
'''


class FakeDocker:
    def __init__(self, root: Path):
        self.root = root
        self.state = root / 'state'
        self.binary = root / 'docker'

    def container_output(self, name: str, stdout: list[str] = (), stderr: list[str] = (),
                         exit_code: int = 0, linger: bool = False):
        if stdout:
            (self.state / f'stdout-{name}').write_text('\n'.join(stdout) + '\n')
        if stderr:
            (self.state / f'stderr-{name}').write_text('\n'.join(stderr) + '\n')
        (self.state / f'exit-{name}').write_text(str(exit_code))
        if linger:
            (self.state / f'linger-{name}').touch()

    def container_running(self, name: str):
        (self.state / f'running-{name}').touch()

    def is_running(self, name: str) -> bool:
        return (self.state / f'running-{name}').exists()

    def fail(self, command: str, reason: str):
        (self.state / f'fail-{command}').write_text(reason)

    def calls(self) -> list[str]:
        calls_log = self.state / 'calls.log'
        if not calls_log.exists():
            return []
        return calls_log.read_text().splitlines()


def fake_docker() -> FakeDocker:
    root = Path(tempfile.mkdtemp(prefix='fake-docker-'))
    docker = FakeDocker(root)
    docker.state.mkdir()
    docker.binary.write_text(FAKE_DOCKER_SCRIPT.format(state=docker.state))
    docker.binary.chmod(0o755)
    vedro.defer(shutil.rmtree, root, ignore_errors=True)
    return docker
