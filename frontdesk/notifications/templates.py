"""Guest email templates keyed by notification kind."""

TEMPLATES = {
    "booking_confirmation": {
        "subject": "Booking Confirmed: Room {room_number} at {hotel_name}",
        "body": (
            "Dear {guest_name},\n\n"
            "Your booking at {hotel_name} has been confirmed.\n\n"
            "Booking Details:\n"
            "- Room: {room_number}\n"
            "- Check-in: {check_in}\n"
            "- Check-out: {check_out}\n"
            "- Guests: {num_guests}\n"
            "- Total Price: {total_price}\n"
            "{payment_line}\n"
            "Thank you for choosing us!\n\n"
            "Best regards,\n{hotel_name}"
        ),
    },
    "check_in": {
        "subject": "Welcome to {hotel_name}!",
        "body": (
            "Dear {guest_name},\n\n"
            "Welcome! You are checked in to room {room_number}.\n\n"
            "Your stay details:\n"
            "- Check-out: {check_out}\n"
            "- Guests: {num_guests}\n\n"
            "If you need anything during your stay, please let us know.\n\n"
            "Best regards,\n{hotel_name}"
        ),
    },
    "check_out": {
        "subject": "Thank you for staying at {hotel_name}",
        "body": (
            "Dear {guest_name},\n\n"
            "You have checked out of room {room_number} ({check_in} to {check_out}).\n"
            "Your invoice total is {total_price}.\n\n"
            "We hope you enjoyed your stay!\n\n"
            "Best regards,\n{hotel_name}"
        ),
    },
}


def render(kind: str, **template_vars: str) -> tuple[str, str]:
    """Return ``(subject, body)`` for ``kind``."""
    if kind not in TEMPLATES:
        raise KeyError(f"Unknown notification template {kind!r}")
    tmpl = TEMPLATES[kind]
    return tmpl["subject"].format(**template_vars), tmpl["body"].format(**template_vars)
