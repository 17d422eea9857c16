"""
Application Configuration and Constants
=======================================

This module contains all global configuration values, constants, and defaults used
throughout the Reunify application. It serves as a single source of truth for:

- Gemini API endpoints and model identifiers
- Style presets and their prompt modifiers
- User-facing status and error messages
- Shareable locket link format
- File format and audio capture parameters

Note:
    All constants use UPPER_SNAKE_CASE naming convention. Modify these values to
    change application-wide behavior without touching business logic.
"""

# ============================================================================
# APPLICATION SETTINGS
# ============================================================================

APP_NAME = "Reunify"
APP_TAGLINE = "Connecting memories across time and space."
GEOMETRY = "1200x820"

# ============================================================================
# GEMINI API CONFIGURATION
# ============================================================================
# The credential is never stored here. It is read from the environment at call
# time, so a missing key only surfaces when a generation is attempted.

GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# Environment variables checked for the API key, in order
API_KEY_ENV_VARS = ("GEMINI_API_KEY", "API_KEY")

IMAGE_MODEL = "gemini-2.5-flash-image"
TEXT_MODEL = "gemini-2.5-flash"

# Image generation can take a while; text is usually quick
IMAGE_TIMEOUT_SECONDS = 120
TEXT_TIMEOUT_SECONDS = 60

# ============================================================================
# STYLE PRESETS
# ============================================================================
# Each style key maps to a fixed modifier appended to the reunification
# instruction. Unknown keys fall back to DEFAULT_STYLE.

DEFAULT_STYLE = "natural"

STYLE_PROMPTS = {
    "natural": (
        "The style should be warm and photorealistic, as if the two people were actually "
        "in the same location. Use consistent lighting and a natural, professional background."
    ),
    "anime": (
        "Render the final image in a high-quality, modern anime style with expressive "
        "character designs and vibrant coloring."
    ),
    "sketch": (
        "A sophisticated, hand-drawn pencil sketch capturing the connection between the "
        "subjects. Artistic and detailed."
    ),
    "ghibli": (
        "In the style of a Studio Ghibli film. Painterly textures, soft lighting, and an "
        "emotional atmosphere."
    ),
}

# Display metadata for the style selector (order matters)
STYLE_PRESETS = [
    {"key": "natural", "name": "Natural", "description": "Photorealistic and clean."},
    {"key": "anime", "name": "Anime", "description": "Vibrant and cel-shaded."},
    {"key": "sketch", "name": "Pencil Sketch", "description": "Hand-drawn and detailed."},
    {"key": "ghibli", "name": "Ghibli Style", "description": "Painterly and whimsical."},
]

REUNIFY_PROMPT_TEMPLATE = (
    "Reunify the two people from these separate photos into one single, high-quality image. "
    "They should be posed together in a respectful and heartwarming way, showing a clear "
    "connection, like standing next to each other or sharing a friendly interaction. "
    "The person from the second photo should look like they are part of the first person's "
    "scene. {style_prompt} Ensure the final image is a 1:1 square."
)

LETTER_PROMPT_TEMPLATE = (
    'Write a thoughtful, short letter about connection and shared memories based on the '
    'following context: "{context}". The letter should be exactly two paragraphs long and '
    'have a warm, sincere tone. Plain text only.'
)

# ============================================================================
# USER-FACING MESSAGES
# ============================================================================

MSG_MISSING_PHOTOS = "Please upload both photos before generating."
MSG_MISSING_CONTEXT = "Please provide some context for the letter."
MSG_LOADING = "Bridging your photos..."
MSG_GENERATION_FALLBACK = "Failed to create a connection. Please try different images."
MSG_LETTER_FAILED = "Failed to generate the accompanying letter."
MSG_MIC_DENIED = "Microphone access denied. Please enable it in your system settings."
MSG_AUDIO_UNAVAILABLE = "Voice messages need PyAudio. Install it with: pip install reunify[audio]"
MSG_MISSING_API_KEY = "API_KEY environment variable is not set."
MSG_LOCKET_UNREADABLE = "Could not read locket data. The link may be corrupted or expired."

# ============================================================================
# SHAREABLE LOCKET LINKS
# ============================================================================
# Link format: <page-url>#locket-<urlsafe-base64(JSON(payload))>
# Existing links depend on this marker; never change it.

LOCKET_MARKER = "locket-"
DEFAULT_SHARE_URL = "https://reunify.app/"
LOCKET_MEDIA_TYPE = "image"

# ============================================================================
# FILE FORMATS
# ============================================================================

# Pillow format name -> MIME type accepted as a source photo
SUPPORTED_IMAGE_FORMATS = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "WEBP": "image/webp",
}

# File dialog filter
IMAGE_FILETYPES = [("Images", "*.png *.jpg *.jpeg *.webp")]

# Safety limit for source photos (inline request payloads are capped server-side)
MAX_IMAGE_SIZE_MB = 20

DEFAULT_DOWNLOAD_NAME = "reunify-moment.png"

# ============================================================================
# AUDIO CAPTURE
# ============================================================================

AUDIO_SAMPLE_RATE = 16000
AUDIO_CHANNELS = 1
AUDIO_FRAMES_PER_BUFFER = 1024
AUDIO_SAMPLE_WIDTH = 2  # 16-bit PCM
AUDIO_MIME_TYPE = "audio/wav"
