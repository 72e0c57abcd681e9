import vedro

from etherna_devstack.core.readiness import Classification
from etherna_devstack.core.readiness import Readiness
from etherna_devstack.core.readiness import ReadinessMatcher
from helpers.specs import SEARCH_READINESS


class Scenario(vedro.Scenario):
    subject = 'exit before classification: {subject_case}'

    @vedro.params('last retained line', ['starting', 'msg="shard not allocated" level=error', ''],
                  'msg="shard not allocated" level=error')
    @vedro.params('overwritten line', ['first', 'second'], 'second')
    @vedro.params('no lines', [], 'process exited with code 3')
    @vedro.params('blank lines only', ['', '   '], 'process exited with code 3')
    def __init__(self, subject_case, lines, diagnostic):
        self.subject_case = subject_case
        self.lines = lines
        self.diagnostic = diagnostic

    def given_matcher_fed_with_lines(self):
        self.matcher = ReadinessMatcher(SEARCH_READINESS)
        for line in self.lines:
            self.matcher.feed(line)

    def when_process_exits(self):
        self.classification = self.matcher.process_exited(3)

    def then_it_should_be_failed_with_synthesized_diagnostic(self):
        assert self.classification == Classification(Readiness.FAILED, self.diagnostic)
