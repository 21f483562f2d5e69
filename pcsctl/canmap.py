"""Mapping of parameters onto the bits of periodic CAN messages.

Send and receive maps hold up to ``MAX_MESSAGES`` CAN ids each; all
mapped items share a pool of ``MAX_ITEMS`` entries. The map can be
serialised to the flash page layout used for persistent storage.
"""

import struct
from dataclasses import dataclass

MAX_MESSAGES = 15
MAX_ITEMS = 70
ITEM_UNSET = 0xFF

_IDMAP = struct.Struct("<HBx")
_POS = struct.Struct("<fHbBBBxx")

SENDMAP_ADDRESS = 0
RECVMAP_ADDRESS = SENDMAP_ADDRESS + MAX_MESSAGES * _IDMAP.size
POSMAP_ADDRESS = RECVMAP_ADDRESS + MAX_MESSAGES * _IDMAP.size
POSMAP_END = POSMAP_ADDRESS + MAX_ITEMS * _POS.size
CRC_ADDRESS = POSMAP_ADDRESS + (MAX_ITEMS + 1) * _POS.size
BLOB_SIZE = CRC_ADDRESS + 4

_CRC_POLY = 0x04C11DB7
_MASK32 = 0xFFFFFFFF


def _crc32_words(data):
    """CRC-32 as computed by the STM32 CRC unit over little endian words."""
    crc = _MASK32
    for (word,) in struct.iter_unpack("<I", data):
        crc ^= word
        for _ in range(32):
            if crc & 0x80000000:
                crc = ((crc << 1) ^ _CRC_POLY) & _MASK32
            else:
                crc = (crc << 1) & _MASK32
    return crc


def _float32(value):
    return struct.unpack("<f", struct.pack("<f", float(value)))[0]


def _int8(value):
    return ((int(value) + 128) & 0xFF) - 128


class CanMapError(ValueError):
    """Base class of errors raised when adding a mapping."""


class InvalidIdError(CanMapError):
    """The CAN id is larger than 0x1FFFFFFF."""


class InvalidOffsetError(CanMapError):
    """The bit offset is larger than 63."""


class InvalidLengthError(CanMapError):
    """The bit length is larger than 32."""


class MaxMessagesError(CanMapError):
    """All message slots of the map are in use."""


class MaxItemsError(CanMapError):
    """All item slots shared by the maps are in use."""


@dataclass(frozen=True)
class Mapping:
    """One parameter placed in a CAN message."""

    param: int
    can_id: int
    offset_bits: int
    length: int
    gain: float
    offset: int
    rx: bool


class CanMap:
    """Send and receive maps of parameters onto CAN message bits."""

    def __init__(self):
        self._send = []
        self._recv = []

    def _item_count(self):
        return sum(len(items) for _, items in self._send + self._recv)

    def _add(self, messages, rx, param, can_id, offset_bits, length, gain, offset):
        can_id = int(can_id)
        offset_bits = int(offset_bits)
        length = int(length)
        if not 0 <= can_id <= 0x1FFFFFFF:
            raise InvalidIdError(f"invalid CAN id {can_id:#x}")
        if not 0 <= offset_bits <= 63:
            raise InvalidOffsetError(f"invalid offset {offset_bits}")
        if not 0 <= length <= 32:
            raise InvalidLengthError(f"invalid length {length}")

        entry = next((m for m in messages if m[0] == can_id), None)
        if entry is None and len(messages) >= MAX_MESSAGES:
            raise MaxMessagesError("maximum message count reached")
        if self._item_count() >= MAX_ITEMS:
            raise MaxItemsError(f"cannot map any more items to CAN id {can_id}")

        mapping = Mapping(
            int(param), can_id, offset_bits, length, _float32(gain), _int8(offset), rx
        )
        if entry is None:
            messages.append((can_id, [mapping]))
        else:
            entry[1].append(mapping)
        return len(messages)

    def add_send(self, param, can_id, offset_bits, length, gain, offset=0):
        """Map ``param`` into a sent message; return the number of send messages."""
        return self._add(self._send, False, param, can_id, offset_bits, length, gain, offset)

    def add_recv(self, param, can_id, offset_bits, length, gain, offset=0):
        """Map a received message's bits onto ``param``; return the number of receive messages."""
        return self._add(self._recv, True, param, can_id, offset_bits, length, gain, offset)

    def remove(self, param):
        """Remove every mapping of ``param``; return how many were removed."""
        removed = 0
        for messages in (self._send, self._recv):
            kept = []
            for can_id, items in messages:
                remaining = [m for m in items if m.param != param]
                removed += len(items) - len(remaining)
                if remaining:
                    kept.append((can_id, remaining))
            messages[:] = kept
        return removed

    def find_map(self, param):
        """Return the first mapping of ``param`` (send map first) or None."""
        return next((m for m in self.iterate() if m.param == param), None)

    def iterate(self):
        """Yield all mappings, send map first, each in message and item order."""
        for messages in (self._send, self._recv):
            for _, items in messages:
                yield from items

    def send_messages(self):
        """Return ``(can_id, mappings)`` pairs of the send map in order."""
        return [(can_id, tuple(items)) for can_id, items in self._send]

    def recv_mappings(self, can_id):
        """Return the mappings of received message ``can_id``; empty if not mapped."""
        for mapped_id, items in self._recv:
            if mapped_id == can_id:
                return tuple(items)
        return ()

    def recv_ids(self):
        """Return the CAN ids of the receive map in order."""
        return [can_id for can_id, _ in self._recv]

    def clear(self):
        """Remove all send and receive mappings."""
        self._send.clear()
        self._recv.clear()

    def to_bytes(self, uid_of):
        """Serialise to the flash page layout; ``uid_of(param)`` gives the stored id.

        Raises ValueError for CAN ids that do not fit the 16-bit storage field.
        """
        blob = bytearray(BLOB_SIZE)
        pos_slots = [None] * MAX_ITEMS
        next_index = 0

        for base, messages in ((SENDMAP_ADDRESS, self._send), (RECVMAP_ADDRESS, self._recv)):
            for slot in range(MAX_MESSAGES):
                if slot >= len(messages):
                    _IDMAP.pack_into(blob, base + slot * _IDMAP.size, 0, MAX_ITEMS)
                    continue
                can_id, items = messages[slot]
                if can_id > 0xFFFF:
                    raise ValueError(f"CAN id {can_id:#x} cannot be stored")
                _IDMAP.pack_into(blob, base + slot * _IDMAP.size, can_id, next_index)
                for position, mapping in enumerate(items):
                    follow = next_index + 1 if position < len(items) - 1 else MAX_ITEMS
                    pos_slots[next_index] = (mapping, follow)
                    next_index += 1

        for index, slot in enumerate(pos_slots):
            address = POSMAP_ADDRESS + index * _POS.size
            if slot is None:
                _POS.pack_into(blob, address, 0.0, 0, 0, 0, 0, ITEM_UNSET)
            else:
                mapping, follow = slot
                _POS.pack_into(
                    blob,
                    address,
                    mapping.gain,
                    int(uid_of(mapping.param)) & 0xFFFF,
                    mapping.offset,
                    mapping.offset_bits,
                    mapping.length,
                    follow,
                )

        blob[POSMAP_END:CRC_ADDRESS] = b"\xff" * (CRC_ADDRESS - POSMAP_END)
        struct.pack_into("<I", blob, CRC_ADDRESS, _crc32_words(bytes(blob[:POSMAP_END])))
        return bytes(blob)

    def load_bytes(self, blob, index_of):
        """Replace the maps with a serialised page; ``index_of(uid)`` gives the param.

        Raises ValueError if the blob is too short, its CRC does not match or
        its item chains are malformed.
        """
        blob = bytes(blob)
        if len(blob) < BLOB_SIZE:
            raise ValueError("CAN map blob too short")
        (stored_crc,) = struct.unpack_from("<I", blob, CRC_ADDRESS)
        if stored_crc != _crc32_words(blob[:POSMAP_END]):
            raise ValueError("CAN map CRC mismatch")

        def parse(base, rx):
            messages = []
            for slot in range(MAX_MESSAGES):
                can_id, first = _IDMAP.unpack_from(blob, base + slot * _IDMAP.size)
                if first == MAX_ITEMS:
                    break
                items = []
                index = first
                while index != MAX_ITEMS:
                    if index > MAX_ITEMS or len(items) >= MAX_ITEMS:
                        raise ValueError("malformed CAN map item chain")
                    gain, uid, offset, offset_bits, length, follow = _POS.unpack_from(
                        blob, POSMAP_ADDRESS + index * _POS.size
                    )
                    items.append(
                        Mapping(index_of(uid), can_id, offset_bits, length, gain, offset, rx)
                    )
                    index = follow
                if items:
                    messages.append((can_id, items))
            return messages

        send = parse(SENDMAP_ADDRESS, False)
        recv = parse(RECVMAP_ADDRESS, True)
        self._send = send
        self._recv = recv