"""
Configuration and constants for SurveyBlend
"""

# Auto-Mapping Settings
DEFAULT_CONFIDENCE_THRESHOLD = 0.8
SUGGESTION_DISPLAY_FLOOR = 0.3
SUGGESTION_DISPLAY_LIMIT = 5
SYNONYM_MATCH_CONFIDENCE = 0.8
GROUPING_THRESHOLD = 0.8

# Similarity Scorer Settings
DIFFERENT_PREFIX_SCORE = 0.1
DIFFERENT_NUMBERS_SCORE = 0.2
DATA_TYPE_BONUS = 0.1

# Save attempts per label in bulk auto-mapping (retried without delay unless a sleep is injected)
PERSIST_RETRIES = 3

# Blending Settings
BLEND_METHODS = ("simple", "weighted", "custom")
TRACKED_METRICS = ("tcc", "wrvu", "cf")
PERCENTILES = ("p25", "p50", "p75", "p90")
SAMPLE_SIZE_TARGET = 100  # records per specialty for full sample-size confidence
WEIGHT_TOTAL = 100.0
WEIGHT_TOLERANCE = 0.01

# Vendors
KNOWN_VENDORS = ("MGMA", "SullivanCotter", "Gallagher", "ECG", "AMGA")

# Model Settings
GROQ_MODEL = "llama-3.3-70b-versatile"
DEFAULT_TEMPERATURE = 0.1
AI_MATCH_CONFIDENCE = 0.6
MAX_API_KEYS = 5

# Environment Variable Names
ENV_API_KEY_PRIMARY = "GROQ_API_KEY"
ENV_API_KEY_2 = "GROQ_API_KEY_2"
ENV_API_KEY_3 = "GROQ_API_KEY_3"
