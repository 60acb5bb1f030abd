import pytest

from caseta_codec.caseta.connection import CasetaConnection
from caseta_codec.caseta.types import TransportError

from fakes import FakeStream, FakeTransportProvider


@pytest.fixture
def make_connection():
    def factory(reads, **kwargs):
        stream = FakeStream(reads)
        provider = FakeTransportProvider(stream)
        connection = CasetaConnection("lutron", "integration", provider, **kwargs)
        return connection, stream
    return factory


@pytest.fixture
def failing_provider():
    return FakeTransportProvider(error=TransportError("Connection refused"))
