# Single-threaded event loop for the bridge.
# Inputs: raw writes, linear/angular updates, poll ticks -> one FIFO queue.
# Any transport IO error is fatal: link closed, loop stops, no retry.
import logging
import time
from collections import deque
from typing import Callable, Deque, Iterable, Optional

from command_state import CommandState
from poller import Poller, Sink
from stm_comm.events import AngularUpdate, LinearUpdate, PollTick, RawWrite

logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(
        self,
        link,
        sink: Sink,
        source: Optional[Callable[[], Iterable]] = None,
        poll_period_s: float = 0.1,
        resync: bool = False,
        idle_sleep_s: float = 0.005,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.link = link
        self.source = source
        self.POLL_PERIOD = poll_period_s
        self.IDLE_SLEEP = idle_sleep_s
        self.clock = clock
        self.sleep = sleep

        self.state = CommandState(link)
        self.poller = Poller(link, sink, resync=resync)
        self.queue: Deque = deque()

        self.running = True
        self.fatal = False
        self.next_poll = self.clock() + self.POLL_PERIOD

    def submit(self, evt):
        if self.running:
            self.queue.append(evt)

    def dispatch(self, evt) -> bool:
        """Handle one event now. False once the dispatcher has stopped."""
        if not self.running:
            return False

        if isinstance(evt, RawWrite):
            logger.debug("Raw write: %d bytes", len(evt.payload))
            res = self.link.write(evt.payload)
        elif isinstance(evt, LinearUpdate):
            res = self.state.set_linear(evt.value)
        elif isinstance(evt, AngularUpdate):
            res = self.state.set_angular(evt.value)
        elif isinstance(evt, PollTick):
            res = self.poller.poll()
        else:
            raise TypeError(f"unknown event {evt!r}")

        if not res.ok:
            self.shutdown(f"IOException: {res.error}", fatal=True)
            return False
        return True

    def run_once(self):
        if self.source is not None:
            for evt in self.source():
                self.submit(evt)

        now = self.clock()
        if now >= self.next_poll:
            self.submit(PollTick())
            self.next_poll += self.POLL_PERIOD
            if self.next_poll <= now:  # fell behind, skip missed ticks
                self.next_poll = now + self.POLL_PERIOD

        while self.queue and self.running:
            self.dispatch(self.queue.popleft())

    def run(self) -> bool:
        """Loop until stopped. True on a clean stop, False after a fatal error."""
        while self.running:
            self.run_once()
            if self.running:
                wait = max(0.0, self.next_poll - self.clock())
                self.sleep(min(self.IDLE_SLEEP, wait))
        return not self.fatal

    def shutdown(self, reason: str = "shutdown requested", fatal: bool = False):
        if not self.running:
            return
        self.running = False
        self.fatal = fatal
        self.poller.stop()
        dropped = len(self.queue)
        self.queue.clear()
        self.link.close()
        if fatal:
            logger.error("%s (dropped %d pending events)", reason, dropped)
        else:
            logger.info("Bridge stopped: %s", reason)
