import vedro

from contexts.fake_edge_node import fake_edge_node
from etherna_devstack.core.address_discovery import poll_underlay_address
from etherna_devstack.errors import AddressDiscoveryError


class Scenario(vedro.Scenario):
    subject = 'address polling gives up after configured attempts'

    async def given_edge_node_never_publishing(self):
        self.node = await fake_edge_node([(200, {'underlay': []})])

    async def when_address_polled_with_limit(self):
        try:
            await poll_underlay_address(self.node.base_url, attempts=4, delay=0.01)
        except AddressDiscoveryError as e:
            self.error = e
        else:
            self.error = None

    def then_it_should_raise(self):
        assert isinstance(self.error, AddressDiscoveryError)

    def and_it_should_poll_exactly_limit_times(self):
        assert self.node.requests == 4
