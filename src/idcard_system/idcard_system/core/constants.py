"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

CARD_TITLE = "ID Card"
EMPTY_VALUE = "-"

# Photo bounding box on a rendered card, in PDF points.
PHOTO_FIT_BOX = (150, 150)

PDF_CHUNK_SIZE = 64 * 1024
PDF_SPOOL_MAX_BYTES = 1024 * 1024

DEFAULT_TOKEN_TTL_HOURS = 24
MIN_PASSWORD_LENGTH = 6

IMPORT_COLUMNS = (
    "fullName",
    "designation",
    "department",
    "idNumber",
    "issueDate",
    "expiryDate",
    "photoFileName",
)
