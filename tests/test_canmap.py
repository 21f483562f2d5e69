import struct

import pytest

from pcsctl.canmap import (
    BLOB_SIZE,
    CRC_ADDRESS,
    MAX_ITEMS,
    MAX_MESSAGES,
    POSMAP_ADDRESS,
    POSMAP_END,
    CanMap,
    CanMapError,
    InvalidIdError,
    InvalidLengthError,
    InvalidOffsetError,
    MaxItemsError,
    MaxMessagesError,
)


def uid_of(param):
    return param + 100


def index_of(uid):
    return uid - 100


@pytest.fixture
def canmap():
    return CanMap()


def test_add_send_counts_messages(canmap):
    assert canmap.add_send(1, 0x100, 0, 16, 1.0) == 1
    assert canmap.add_send(2, 0x100, 16, 16, 1.0) == 1
    assert canmap.add_send(3, 0x200, 0, 8, 1.0) == 2


def test_send_and_recv_counted_separately(canmap):
    canmap.add_send(1, 0x100, 0, 16, 1.0)
    assert canmap.add_recv(2, 0x300, 0, 8, 1.0) == 1
    assert canmap.recv_ids() == [0x300]


@pytest.mark.parametrize(
    "args, error",
    [
        ((1, 0x20000000, 0, 8, 1.0), InvalidIdError),
        ((1, 0x100, 64, 8, 1.0), InvalidOffsetError),
        ((1, 0x100, 0, 33, 1.0), InvalidLengthError),
    ],
)
def test_invalid_arguments(canmap, args, error):
    with pytest.raises(error):
        canmap.add_send(*args)
    assert list(canmap.iterate()) == []


def test_errors_share_base_class(canmap):
    with pytest.raises(CanMapError):
        canmap.add_recv(1, 0x100, 0, 40, 1.0)


def test_limits_are_inclusive(canmap):
    assert canmap.add_send(1, 0x1FFFFFFF, 63, 32, 1.0) == 1


def test_max_messages(canmap):
    for n in range(MAX_MESSAGES):
        assert canmap.add_send(n, 0x100 + n, 0, 8, 1.0) == n + 1
    with pytest.raises(MaxMessagesError):
        canmap.add_send(0, 0x7FF, 0, 8, 1.0)
    assert canmap.add_send(0, 0x100, 8, 8, 1.0) == MAX_MESSAGES


def test_max_items_shared(canmap):
    for n in range(MAX_ITEMS):
        if n % 2:
            canmap.add_send(n, 0x100, 0, 8, 1.0)
        else:
            canmap.add_recv(n, 0x200, 0, 8, 1.0)
    with pytest.raises(MaxItemsError):
        canmap.add_recv(1, 0x300, 0, 8, 1.0)
    assert canmap.recv_ids() == [0x200]
    assert len(list(canmap.iterate())) == MAX_ITEMS


def test_find_map_prefers_send(canmap):
    canmap.add_recv(5, 0x300, 4, 12, 2.0)
    canmap.add_send(5, 0x100, 8, 16, 0.5)
    found = canmap.find_map(5)
    assert (found.can_id, found.offset_bits, found.length, found.gain, found.rx) == (
        0x100, 8, 16, 0.5, False
    )


def test_find_map_recv_and_missing(canmap):
    canmap.add_recv(5, 0x300, 4, 12, 2.0)
    found = canmap.find_map(5)
    assert found.rx is True and found.can_id == 0x300
    assert canmap.find_map(9) is None


def test_iterate_order(canmap):
    canmap.add_recv(10, 0x300, 0, 8, 1.0)
    canmap.add_send(1, 0x100, 0, 8, 1.0)
    canmap.add_send(2, 0x200, 0, 8, 1.0)
    canmap.add_send(3, 0x100, 8, 8, 1.0)
    assert [m.param for m in canmap.iterate()] == [1, 3, 2, 10]


def test_send_messages_grouped(canmap):
    canmap.add_send(1, 0x100, 0, 8, 1.0)
    canmap.add_send(2, 0x200, 0, 8, 1.0)
    canmap.add_send(3, 0x100, 8, 8, 1.0)
    result = [(cid, [m.param for m in items]) for cid, items in canmap.send_messages()]
    assert result == [(0x100, [1, 3]), (0x200, [2])]


def test_recv_mappings(canmap):
    canmap.add_recv(1, 0x300, 0, 8, 1.0, 3)
    mappings = canmap.recv_mappings(0x300)
    assert [(m.param, m.offset) for m in mappings] == [(1, 3)]
    assert canmap.recv_mappings(0x301) == ()


def test_remove(canmap):
    canmap.add_send(1, 0x100, 0, 8, 1.0)
    canmap.add_send(2, 0x100, 8, 8, 1.0)
    canmap.add_recv(1, 0x300, 0, 8, 1.0)
    assert canmap.remove(1) == 2
    assert [m.param for m in canmap.iterate()] == [2]
    assert canmap.recv_ids() == []
    assert canmap.remove(1) == 0


def test_remove_frees_items(canmap):
    for n in range(MAX_ITEMS):
        canmap.add_send(n % 3, 0x100, 0, 8, 1.0)
    canmap.remove(0)
    assert canmap.add_send(7, 0x100, 0, 8, 1.0) == 1


def test_clear(canmap):
    canmap.add_send(1, 0x100, 0, 8, 1.0)
    canmap.add_recv(2, 0x300, 0, 8, 1.0)
    canmap.clear()
    assert list(canmap.iterate()) == []
    assert canmap.send_messages() == []


def test_gain_stored_as_float32(canmap):
    canmap.add_send(1, 0x100, 0, 8, 0.1)
    expected = struct.unpack("<f", struct.pack("<f", 0.1))[0]
    assert canmap.find_map(1).gain == expected


def test_to_bytes_layout(canmap):
    canmap.add_send(1, 0x123, 0, 16, 1.0)
    blob = canmap.to_bytes(uid_of)
    assert len(blob) == BLOB_SIZE
    assert blob[0:4] == b"\x23\x01\x00\x00"
    assert blob[POSMAP_ADDRESS:POSMAP_ADDRESS + 12] == struct.pack(
        "<fHbBBBxx", 1.0, uid_of(1), 0, 0, 16, MAX_ITEMS
    )
    assert blob[POSMAP_END:CRC_ADDRESS] == b"\xff" * (CRC_ADDRESS - POSMAP_END)


def test_round_trip(canmap):
    canmap.add_send(1, 0x100, 0, 16, 0.5, -3)
    canmap.add_send(2, 0x100, 16, 8, 2.0)
    canmap.add_send(3, 0x200, 32, 32, 1.0)
    canmap.add_recv(4, 0x300, 8, 12, 0.25, 5)
    blob = canmap.to_bytes(uid_of)

    loaded = CanMap()
    loaded.load_bytes(blob, index_of)
    assert list(loaded.iterate()) == list(canmap.iterate())
    assert loaded.to_bytes(uid_of) == blob


def test_empty_round_trip(canmap):
    loaded = CanMap()
    loaded.add_send(1, 0x100, 0, 8, 1.0)
    loaded.load_bytes(canmap.to_bytes(uid_of), index_of)
    assert list(loaded.iterate()) == []


def test_load_rejects_bad_crc(canmap):
    canmap.add_send(1, 0x100, 0, 8, 1.0)
    blob = bytearray(canmap.to_bytes(uid_of))
    blob[0] ^= 0x01
    target = CanMap()
    target.add_recv(2, 0x300, 0, 8, 1.0)
    with pytest.raises(ValueError):
        target.load_bytes(bytes(blob), index_of)
    assert target.recv_ids() == [0x300]


def test_load_rejects_short_blob(canmap):
    blob = canmap.to_bytes(uid_of)
    with pytest.raises(ValueError):
        CanMap().load_bytes(blob[:-1], index_of)


def test_to_bytes_rejects_wide_id(canmap):
    canmap.add_recv(1, 0x18FF1234, 0, 8, 1.0)
    with pytest.raises(ValueError):
        canmap.to_bytes(uid_of)