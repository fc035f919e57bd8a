import logging
from flask import current_app

from itabaza.services.appointment_store import AppointmentStore
from itabaza.utils.room_assignment import assign_room_index, ROOM_POOL_SIZE

logger = logging.getLogger("itabaza.video_rooms")


def room_name_for(appointment_date: str, room_id: int) -> str:
    """e.g. Video-Room-20250114-007"""
    return f"Video-Room-{(appointment_date or '').replace('-', '')}-{room_id:03d}"


def meeting_url_for(room_name: str) -> str:
    base = current_app.config.get('VIDEO_MEETING_BASE_URL', 'https://meet.jit.si/')
    if not base.endswith('/'):
        base += '/'
    return f"{base}itabaza-{room_name.lower().replace('-', '')}"


def describe_rooms(appointment_date: str, room_ids):
    return [
        {'room_id': room_id, 'room_name': room_name_for(appointment_date, room_id)}
        for room_id in room_ids
    ]


def available_rooms(appointment_date: str, appointment_time: str):
    room_ids = AppointmentStore.get_available_video_rooms(appointment_date, appointment_time)
    return describe_rooms(appointment_date, room_ids)


def provision_video_room(appointment: dict):
    """Give a video-call appointment its meeting room if it has none yet.

    The preferred room comes from hashing the appointment id; when another
    call already holds it in the same slot the next free room is used. With
    the pool exhausted the preferred room is shared. Returns the updated
    appointment, or the input unchanged for in-person bookings.
    """
    if appointment.get('consultation_type') != 'video-call':
        return appointment
    if appointment.get('video_call_url'):
        return appointment

    slot = appointment.get('appointment_time') or appointment.get('slot_time')
    free = AppointmentStore.get_available_video_rooms(appointment['appointment_date'], slot)
    preferred = assign_room_index(str(appointment['id'])) + 1

    if preferred in free or not free:
        room_id = preferred
        if not free:
            logger.warning(
                "No free video room on %s %s, sharing room %s with appointment %s",
                appointment['appointment_date'], slot, room_id, appointment['id'],
            )
    else:
        # first free room after the preferred one, wrapping around the pool
        room_id = min(free, key=lambda r: (r - preferred) % ROOM_POOL_SIZE)

    room_name = room_name_for(appointment['appointment_date'], room_id)
    updated = AppointmentStore.assign_video_room(
        appointment['id'], room_id, room_name, meeting_url_for(room_name)
    )
    logger.info("Assigned %s to appointment %s", room_name, appointment['id'])
    return updated
