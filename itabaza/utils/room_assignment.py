# /itabaza/utils/room_assignment.py
"""Deterministic room assignment.

A key (patient id + appointment date, or an appointment id) is hashed with
the multiplier-31 rolling hash the web frontend uses, wrapped to a signed
32-bit integer at every step, so the same key lands in the same room no
matter which side computes it. Different keys may share a room.
"""

ROOM_POOL_SIZE = 20
ROOM_LABELS = [f"Room-{i:02d}" for i in range(1, ROOM_POOL_SIZE + 1)]


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def _utf16_code_units(key: str):
    data = key.encode('utf-16-le', 'surrogatepass')
    for i in range(0, len(data), 2):
        yield data[i] | (data[i + 1] << 8)


def rolling_hash(key: str) -> int:
    """Signed 32-bit `(h << 5) - h + c` hash over the key's UTF-16 code units."""
    h = 0
    for code in _utf16_code_units(key or ''):
        h = _to_int32((h << 5) - h + code)
    return h


def assign_room_index(key: str, pool_size: int = ROOM_POOL_SIZE) -> int:
    """Map a key to an index in [0, pool_size)."""
    if pool_size <= 0:
        raise ValueError("pool_size must be positive")
    return abs(rolling_hash(key)) % pool_size


def assign_room(key: str) -> str:
    """Map a key to a room label such as 'Room-07'."""
    return ROOM_LABELS[assign_room_index(key)]


def room_key(patient_id, appointment_date) -> str:
    """Key used for in-person rooms: the patient id followed by the appointment date."""
    return f"{patient_id if patient_id is not None else ''}{appointment_date or ''}"
