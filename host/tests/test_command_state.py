import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
sys.path.append(os.path.dirname(__file__))
from command_state import CommandState
from fake_link import FakeLink
from stm_comm.serial_proto import decode_command_bytes


def test_defaults_to_zero():
    assert CommandState(FakeLink()).pair == (0, 0)


def test_last_writer_wins_per_axis():
    link = FakeLink()
    st = CommandState(link)
    st.set_linear(5)
    st.set_angular(7)
    assert [decode_command_bytes(w) for w in link.writes] == [(5, 0), (5, 7)]


def test_every_update_is_sent_even_if_unchanged():
    link = FakeLink()
    st = CommandState(link)
    for _ in range(3):
        assert st.set_angular(-40).ok
    assert len(link.writes) == 3
    assert all(decode_command_bytes(w) == (0, -40) for w in link.writes)


def test_write_failure_is_returned_not_raised():
    link = FakeLink(fail_write=True)
    st = CommandState(link)
    res = st.set_linear(1)
    assert not res.ok
    assert st.pair == (1, 0)
