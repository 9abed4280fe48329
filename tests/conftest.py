import io

import pytest
from rich.console import Console

from alert_system import AlertSystem, CallbackAlertObserver
from inventory_manager import InventoryManager
from receipt import Receipt


class ScriptedInput:
    """Feeds prepared lines to rich prompts; running out raises EOFError"""

    def __init__(self, *lines):
        self._lines = list(lines)

    def readline(self) -> str:
        if not self._lines:
            raise EOFError("scripted input exhausted")
        return f"{self._lines.pop(0)}\n"

    @property
    def remaining(self) -> int:
        return len(self._lines)


@pytest.fixture
def alerts():
    """Alert system that records every (tier, product name, message) it emits"""
    system = AlertSystem()
    system.received = []
    system.add_observer(CallbackAlertObserver(
        lambda tier, product, message: system.received.append((tier, product.name, message))
    ))
    return system


@pytest.fixture
def inventory(alerts):
    manager = InventoryManager(alert_system=alerts)
    yield manager
    manager.close()


@pytest.fixture
def receipt():
    return Receipt()


@pytest.fixture
def console():
    return Console(file=io.StringIO(), width=120, color_system=None)


def console_output(console: Console) -> str:
    return console.file.getvalue()
