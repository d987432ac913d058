"""Application-wide constants."""

# ---------------------------------------------------------------------------
# Summarization
# ---------------------------------------------------------------------------
MAX_TRANSCRIPT_CHARS = 32_000
MIN_SUMMARY_CHARS = 20

SUMMARY_PROMPT_TEMPLATE = (
    "Analyze this transcript:\n\n"
    '"{transcript}"\n\n'
    "Provide:\n"
    "1. SUMMARY: A 2-3 sentence summary.\n"
    "2. TOPICS: 3-5 main topics, comma-separated.\n"
    "3. INSIGHTS: 1-2 key insights.\n\n"
    "Format your response exactly like this:\n"
    "SUMMARY: [Your summary]\n"
    "TOPICS: [topic1, topic2]\n"
    "INSIGHTS: [Your insights]"
)

# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------
DEFAULT_TOPIC = "General"
