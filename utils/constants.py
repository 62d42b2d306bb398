"""
utils/constants.py

Purpose: Centralized static content

- API response messages
- Admin notification subjects and bodies
- Reusable constants

(Prevents hardcoding across the codebase)
"""

# ============================================================
# SERVICE
# ============================================================

SERVICE_NAME = "Olympic Platform API"
SERVICE_VERSION = "1.0.0"
SERVICE_BANNER = "Olympic Platform API is running."

# ============================================================
# RESPONSE MESSAGES
# ============================================================

MSG_PIN_VERIFIED = "PIN verified"
MSG_PIN_SET = "PIN set"
MSG_PLAN_REQUESTED = "Plan request sent. Await admin approval."
MSG_IDCARD_REQUESTED = "ID card request sent. Await admin approval."
MSG_APPROVED = "Approved {step}"

# ============================================================
# ERROR MESSAGES
# ============================================================

ERR_INVALID_CREDENTIALS = "Invalid credentials"
ERR_INVALID_ADMIN_CREDENTIALS = "Invalid admin credentials"
ERR_EMAIL_IN_USE = "Email already in use"
ERR_USER_NOT_FOUND = "User not found"
ERR_INVALID_PIN = "Invalid PIN. Contact admin."
ERR_PIN_NOT_VERIFIED = "Not authorized or PIN not verified"
ERR_PLAN_NOT_APPROVED = "Not authorized or plan not approved"
ERR_NO_TOKEN = "No token provided"
ERR_ADMIN_REQUIRED = "Access denied"
ERR_APPLICANT_REQUIRED = "Applicant token required"

# ============================================================
# ADMIN NOTIFICATIONS
# ============================================================

NOTIFY_REGISTERED_SUBJECT = "📥 New User Registration"
NOTIFY_REGISTERED_BODY = """A new user has registered:

Name: {name}
Email: {email}
Phone: {phone}
Country: {country}
Time: {time} UTC"""

NOTIFY_LOGIN_SUBJECT = "🔑 User Login"
NOTIFY_LOGIN_BODY = """User logged in:

ID: {user_id}
Email: {email}
Status: {status}
Time: {time} UTC"""

NOTIFY_PIN_VERIFIED_SUBJECT = "✅ PIN Verified"
NOTIFY_PIN_VERIFIED_BODY = """User verified PIN:

ID: {user_id}
Email: {email}
Time: {time} UTC"""

NOTIFY_PLAN_REQUESTED_SUBJECT = "📋 Plan Selection Request"
NOTIFY_PLAN_REQUESTED_BODY = """User requested plan:

ID: {user_id}
Email: {email}
Plan: {plan}
Time: {time} UTC"""

NOTIFY_IDCARD_REQUESTED_SUBJECT = "🆔 ID Card Request"
NOTIFY_IDCARD_REQUESTED_BODY = """User submitted ID card receipt:

ID: {user_id}
Email: {email}
Time: {time} UTC"""
