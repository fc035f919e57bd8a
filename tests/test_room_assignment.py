import pytest

from itabaza.utils.room_assignment import (
    ROOM_LABELS, ROOM_POOL_SIZE, assign_room, assign_room_index, rolling_hash, room_key,
)


def test_hash_of_short_keys():
    assert rolling_hash('') == 0
    assert rolling_hash('a') == 97
    assert rolling_hash('ab') == 97 * 31 + 98


def test_hash_wraps_to_signed_32_bit():
    assert rolling_hash('hello') == 99162322
    assert rolling_hash('Hello World') == -862545276
    assert rolling_hash('polygenelubricants') == -2 ** 31


def test_hash_reads_utf16_code_units():
    # U+1F600 is the surrogate pair D83D DE00
    assert rolling_hash('\U0001F600') == 0xD83D * 31 + 0xDE00


def test_index_uses_absolute_value():
    assert assign_room_index('hello') == 99162322 % ROOM_POOL_SIZE
    assert assign_room_index('Hello World') == 862545276 % ROOM_POOL_SIZE
    assert assign_room_index('polygenelubricants') == 2 ** 31 % ROOM_POOL_SIZE


def test_room_labels_and_pool():
    assert len(ROOM_LABELS) == 20
    assert ROOM_LABELS[0] == 'Room-01'
    assert ROOM_LABELS[-1] == 'Room-20'
    assert assign_room('hello') == ROOM_LABELS[99162322 % 20]


def test_assignment_is_deterministic_and_in_range():
    for patient_id in range(1, 200):
        key = room_key(patient_id, '2025-01-14')
        index = assign_room_index(key)
        assert 0 <= index < ROOM_POOL_SIZE
        assert assign_room_index(key) == index


def test_custom_pool_size():
    assert assign_room_index('hello', 7) == 99162322 % 7
    assert assign_room_index('anything', 1) == 0


@pytest.mark.parametrize('pool_size', [0, -3])
def test_non_positive_pool_rejected(pool_size):
    with pytest.raises(ValueError):
        assign_room_index('hello', pool_size)


def test_room_key():
    assert room_key(12, '2025-01-14') == '122025-01-14'
    assert room_key(None, None) == ''


def test_colliding_keys_share_a_room():
    assert rolling_hash('Aa') == rolling_hash('BB')
    assert assign_room('Aa') == assign_room('BB')

    rooms = [assign_room(room_key(patient_id, '2025-01-14')) for patient_id in range(1, ROOM_POOL_SIZE + 2)]
    assert len(set(rooms)) < len(rooms)
