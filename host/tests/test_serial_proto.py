import sys, os
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
import pytest

from stm_comm.msg_types import SENSOR_FOOTER, SENSOR_FRAME_LEN, SENSOR_HEADER
from stm_comm.serial_proto import (
    SensorFrameScanner,
    SensorReading,
    decode_command_bytes,
    decode_sensor_frame,
    encode_command,
)

FRAME_123 = bytes.fromhex("08 00000001 00000002 00000003 20")


def mk_frame(right, front, left):
    body = b"".join(v.to_bytes(4, "big", signed=True) for v in (right, front, left))
    return bytes([SENSOR_HEADER]) + body + bytes([SENSOR_FOOTER])


def test_decode_literal_frame():
    assert decode_sensor_frame(FRAME_123) == SensorReading(adc_right=1, adc_front=2, adc_left=3)


def test_decode_negative_and_extreme_values():
    frame = mk_frame(-1, 2**31 - 1, -(2**31))
    assert decode_sensor_frame(frame) == (-1, 2**31 - 1, -(2**31))
    assert decode_sensor_frame(bytearray(frame)) == (-1, 2**31 - 1, -(2**31))


@pytest.mark.parametrize("buf", [
    b"",
    FRAME_123[:13],
    FRAME_123 + b"\x00",
    FRAME_123 + FRAME_123,
    b"\x09" + FRAME_123[1:],
    FRAME_123[:13] + b"\x21",
])
def test_decode_rejects_wrong_shape(buf):
    assert decode_sensor_frame(buf) is None


def test_encode_literal():
    assert encode_command(-1, 256) == bytes.fromhex("FF FF FF FF 00 00 01 00")
    assert encode_command(0, 0) == bytes(8)


@pytest.mark.parametrize("linear,angular", [
    (0, 0), (5, 7), (-1, 256), (2**31 - 1, -(2**31)), (-123456, 654321),
])
def test_command_round_trip(linear, angular):
    assert decode_command_bytes(encode_command(linear, angular)) == (linear, angular)


def test_encode_rejects_non_int32():
    with pytest.raises(ValueError):
        encode_command(2**31, 0)
    with pytest.raises(ValueError):
        encode_command(0, -(2**31) - 1)


def test_decode_command_bytes_wrong_length():
    with pytest.raises(ValueError):
        decode_command_bytes(b"\x00" * 7)


def test_pure_transforms_are_repeatable():
    assert decode_sensor_frame(FRAME_123) == decode_sensor_frame(FRAME_123)
    assert encode_command(5, 7) == encode_command(5, 7)


def test_scanner_finds_back_to_back_frames_and_skips_junk():
    sc = SensorFrameScanner()
    sc.push(b"\xff\x00" + mk_frame(1, 2, 3) + b"\x13" + mk_frame(4, 5, 6))
    assert sc.pop_frame() == (1, 2, 3)
    assert sc.pop_frame() == (4, 5, 6)
    assert sc.pop_frame() is None


def test_scanner_recovers_from_false_header():
    # a stray 0x08 just before a real frame must not swallow it
    sc = SensorFrameScanner()
    sc.push(b"\x08\x01\x02" + FRAME_123)
    assert sc.pop_frame() == (1, 2, 3)
    assert sc.pop_frame() is None


def test_scanner_handles_split_chunks():
    sc = SensorFrameScanner()
    frame = mk_frame(-7, 0, 99)
    sc.push(frame[:5])
    assert sc.pop_frame() is None
    sc.push(frame[5:])
    assert sc.pop_frame() == (-7, 0, 99)
    assert len(sc.buf) == 0


def test_scanner_reset():
    sc = SensorFrameScanner()
    sc.push(FRAME_123 + FRAME_123[:SENSOR_FRAME_LEN // 2])
    sc.reset()
    assert sc.pop_frame() is None
    assert len(sc.buf) == 0
