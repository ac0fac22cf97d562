"""Domain constants shared across otassess_core.

Several values can be overridden via environment variables so deployments
can adjust them without code changes.
"""

import os
from decimal import Decimal

# --- Billing ---
# Flat GST-style rate applied to every quote and invoice subtotal.
TAX_RATE = Decimal(os.getenv("OTASSESS_TAX_RATE", "0.10"))
QUOTE_NUMBER_PREFIX = "Q"
INVOICE_NUMBER_PREFIX = "INV"
DOCUMENT_NUMBER_WIDTH = 6

# --- Record retention ---
INCOMPLETE_RETENTION_DAYS = int(os.getenv("INCOMPLETE_RETENTION_DAYS", "30"))
RECORD_RETENTION_YEARS = int(os.getenv("RECORD_RETENTION_YEARS", "7"))
AGE_OF_MAJORITY = 18

# --- Dashboard ---
DASHBOARD_RECENT_LIMIT = 5
DOCUMENT_EXPIRY_WINDOW_DAYS = 30

# --- Appointments ---
REMINDER_LEAD_HOURS = int(os.getenv("APPOINTMENT_REMINDER_HOURS", "24"))
DEFAULT_CONSENT_METHOD = "email_reply"

# --- Reports ---
REPORT_TOP_CLIENTS = 10
REPORT_RECENT_ASSESSMENTS = 20

# --- AI enrichment ---
# How many catalog rows are sent to the model as candidate equipment.
RECOMMENDATION_CATALOG_SIZE = 20
QUOTE_CATALOG_SIZE = 30
# Frames analysed when building a house map from a walkthrough.
MAX_MAP_FRAMES = 10
MIN_ROOM_CONFIDENCE = 60
# Support chat keeps only the most recent turns of history.
CHAT_HISTORY_TURNS = 6

RESPONSE_ANALYSIS_MODEL = "gpt-4o"
SUPPORT_CHAT_MODEL = "gpt-4o-mini"
RECOMMENDATION_MODEL = "grok-4-fast-non-reasoning"
VISION_MODEL = "gemini-3-pro-image"
FRAME_MODEL = "gemini-2.0-flash"

# Reported as ``model`` when a rule-based fallback produced the result.
FRAME_FALLBACK_MODEL = "rule-based-guidance"
MAP_FALLBACK_MODEL = "rule-based-generation"
MAP_VISION_MODEL = "gemini-2.0-flash-vision"
VIDEO_MODEL = "gemini-3-pro-video"
SUMMARY_MODEL = "gpt-5-mini"
CATALOG_MODEL = "gpt-4o"
JUSTIFICATION_MODEL = "grok-4-fast-non-reasoning"
