# stm_comm/events.py
# Dispatcher inputs. One queue, handled strictly in arrival order.
from typing import NamedTuple


class RawWrite(NamedTuple):
    payload: bytes


class LinearUpdate(NamedTuple):
    value: int


class AngularUpdate(NamedTuple):
    value: int


class PollTick(NamedTuple):
    pass
