from pathlib import Path


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent.parent.parent

# Log directory
LOG_DIR = BASE_DIR / 'logs'

# Default campaign ledger (JSONL, append-only)
DEFAULT_CAMPAIGN_LEDGER = BASE_DIR / 'tmp-send-log.jsonl'

# Resend results; ok=True means the link email went out
DEFAULT_RESEND_LEDGER = BASE_DIR / 'tmp-resend-log.jsonl'
