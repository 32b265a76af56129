import pytest

from spn16.errors import InvalidConfiguration, RandomSourceError
from spn16.keys import (expand_key, generate_keys, master_key_from_round_key,
                        rotate_left, rotate_left4, rotate_right)


def test_rotations():
    assert rotate_left4(0x1234) == 0x2341
    assert rotate_left(0x8001, 1) == 0x0003
    assert rotate_right(0x0003, 1) == 0x8001
    assert rotate_left(0xABCD, 16) == 0xABCD
    for value in (0x0000, 0x1234, 0xFFFF, 0x8421):
        for amount in range(17):
            assert rotate_right(rotate_left(value, amount), amount) == value


def test_expand_key_wraps_after_four_steps():
    assert expand_key(0x1234, 4) == [0x1234, 0x2341, 0x3412, 0x4123, 0x1234]


def test_expand_key_rotation_invariant():
    keys = expand_key(0xBEEF, 9)
    assert len(keys) == 10
    for i in range(len(keys) - 1):
        assert keys[i + 1] == rotate_left4(keys[i])


@pytest.mark.parametrize("rounds", [2, 3, 4, 5, 7])
def test_master_key_from_last_round_key(rounds):
    keys = expand_key(0x9ABC, rounds)
    assert master_key_from_round_key(keys[rounds], rounds) == 0x9ABC


def test_generate_keys_uses_source_big_endian():
    keys = generate_keys(4, source=lambda n: b'\x12\x34')
    assert keys == [0x1234, 0x2341, 0x3412, 0x4123, 0x1234]


def test_generate_keys_default_source():
    keys = generate_keys(3)
    assert len(keys) == 4
    assert all(0 <= key <= 0xFFFF for key in keys)
    assert keys == expand_key(keys[0], 3)


def test_generate_keys_surfaces_source_failure():
    calls = []

    def broken(n):
        calls.append(n)
        raise OSError("no entropy")

    with pytest.raises(RandomSourceError) as excinfo:
        generate_keys(4, source=broken)
    assert isinstance(excinfo.value.__cause__, OSError)
    assert calls == [2]


def test_generate_keys_short_read():
    with pytest.raises(RandomSourceError):
        generate_keys(4, source=lambda n: b'\x01')


def test_generate_keys_rejects_rounds_before_reading():
    def never(n):
        raise AssertionError("source must not be read")

    with pytest.raises(InvalidConfiguration):
        generate_keys(1, source=never)
