from __future__ import annotations

from prometheus_client import Counter

REGISTRATIONS = Counter(
    "campus_identity_registrations_total",
    "Total number of registration attempts",
    labelnames=("outcome",),
)

EMAIL_VERIFICATIONS = Counter(
    "campus_identity_email_verifications_total",
    "Total number of email verification attempts",
    labelnames=("outcome",),
)

ACCOUNTS_PURGED = Counter(
    "campus_identity_accounts_purged_total",
    "Unverified accounts removed after the verification window elapsed",
)

VERIFICATION_MESSAGES = Counter(
    "campus_identity_verification_messages_total",
    "Verification messages handed to the notifier",
    labelnames=("status",),
)

AUTHENTICATION_ATTEMPTS = Counter(
    "campus_identity_authentication_attempts_total",
    "Total number of authentication attempts",
    labelnames=("status", "failure_reason"),
)

TOKEN_ISSUANCE = Counter(
    "campus_identity_tokens_issued_total",
    "Total number of tokens issued",
    labelnames=("token_type",),
)
