"""
Secret patterns scrubbed from rendered search output.

Transcripts routinely echo credentials the user pasted into a prompt or that a
tool printed, so user messages and paths are redacted before they leave the
process. Patterns are Hyperscan-compatible: no backrefs, no lookaround, and
each matches the secret value only.

Sources: mazen160/secrets-patterns-db, gitleaks, Yelp/detect-secrets.
"""

# (name, pattern); the Hyperscan id of a pattern is its index in this list
PATTERNS: list[tuple[str, bytes]] = [
    ("openai-project", br"sk-proj-[a-zA-Z0-9_-]{20,}"),
    ("openai", br"sk-[a-zA-Z0-9_-]{20,}"),
    ("anthropic", br"sk-ant-[a-zA-Z0-9_-]{32,}"),
    ("aws-access-key", br"AKIA[0-9A-Z]{16}"),
    ("aws-session-key", br"ASIA[0-9A-Z]{16}"),
    ("aws-appsync", br"da2-[a-z0-9]{26}"),
    ("github-token", br"(?:ghp|gho|ghu|ghs|ghr)_[A-Za-z0-9_]{36}"),
    ("github-fine-grained", br"github_pat_[A-Za-z0-9_]{82}"),
    ("stripe-live", br"(?:sk|rk)_live_[0-9a-zA-Z]{24}"),
    ("slack-token", br"xox(?:a|b|p|o|s|r)-(?:\d+-)+[a-zA-Z0-9]+"),
    ("slack-webhook", br"https://hooks\.slack\.com/services/T[a-zA-Z0-9_]+/B[a-zA-Z0-9_]+/[a-zA-Z0-9_]+"),
    ("sendgrid", br"SG\.[a-zA-Z0-9_-]{22}\.[a-zA-Z0-9_-]{43}"),
    ("google-api-key", br"AIza[0-9A-Za-z_-]{35}"),
    ("google-oauth", br"ya29\.[0-9A-Za-z_-]+"),
    ("twilio", br"SK[0-9a-fA-F]{32}"),
    ("telegram-bot", br"[0-9]+:AA[0-9A-Za-z_-]{33}"),
    ("mailgun", br"key-[0-9a-zA-Z]{32}"),
    ("npm-token", br"npm_[A-Za-z0-9]{36}"),
    ("private-key", br"-----BEGIN (?:RSA |DSA |EC |OPENSSH |PGP )?PRIVATE KEY(?: BLOCK)?-----"),
]
