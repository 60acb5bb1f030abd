import logfire
import pytest

service_name = "pytest"

logfire.configure(
    console=False,
    send_to_logfire=False,
    service_name=service_name,
)


@pytest.hookimpl(wrapper=True)
def pytest_runtest_protocol(item: pytest.Item):
    with logfire.span(item.nodeid):
        return (yield)


def pytest_exception_interact(node: pytest.Item, call: pytest.CallInfo):
    logfire.exception(str(call.excinfo.value), _exc_info=call.excinfo.value)
