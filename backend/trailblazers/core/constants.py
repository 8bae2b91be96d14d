# backend/trailblazers/core/constants.py
"""
Application-wide constants for the TrailBlazers booking backend.
"""

BRAND_NAME = "TrailBlazers"

API_TITLE = f"{BRAND_NAME} Booking API"
API_VERSION = "1.0.0"
API_DESCRIPTION = "Guided-hike availability, bookings, e-waivers and guide assignments."

ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:8080",
]

# Booking wizard
MIN_PARTICIPANTS_PER_BOOKING = 1
BIRTHDATE_PATTERN = r"^\d{2}/\d{2}/\d{4}$"
BIRTHDATE_FORMAT_MESSAGE = "Date must be in DD/MM/YYYY format"
BOOKING_DATE_FORMAT = "%Y-%m-%d"

# Signature pad (canvas size of the waiver panel)
SIGNATURE_WIDTH = 600
SIGNATURE_HEIGHT = 200
SIGNATURE_LINE_WIDTH = 2
SIGNATURE_STROKE_COLOR = (0, 0, 0, 255)

# Key-value store
GUIDE_INVITATIONS_KEY = "guideTokens"

# Notification fan-out
NOTIFICATION_CHANNEL_PREFIX = "notifications:"
HIKE_ASSIGNMENT_TITLE = "New Hike Assignment"

WAIVER_SKIP_NOTICE = "You can complete the waivers later from your dashboard"
WAIVER_SKIP_DETAIL = "All waivers must be completed before the hike begins"

WAIVER_TEXT = f"""
LIABILITY WAIVER AND ACKNOWLEDGMENT OF RISK

READ CAREFULLY BEFORE SIGNING

I hereby acknowledge that I have voluntarily chosen to participate in the hiking activities with {BRAND_NAME}.

I understand the risks and hazards involved in hiking and outdoor activities, and I voluntarily assume all risk of loss, damage, or injury that may be sustained during the activity.

I hereby release, waive, and discharge {BRAND_NAME}, its officers, employees, and agents from any and all liability, claims, demands, actions, and causes of action whatsoever arising out of or related to any loss, damage, or injury that may be sustained by me during the hiking activity.

I agree to follow all rules, regulations, and instructions given by {BRAND_NAME} guides and staff. I certify that I am physically fit and have no medical conditions that would prevent my participation in the activity.

I understand that this waiver is binding on my heirs, assigns, and personal representatives.
"""
