"""
Observability for the storefront.
Logging setup, Sentry initialization and per-session user context,
all driven by environment variables.
"""

import os
import logging
import re
from typing import Any, Dict

log = logging.getLogger(__name__)

# Firebase ID/refresh tokens, Google API keys and other long opaque strings
SENSITIVE_PATTERNS = [
    re.compile(r"eyJ[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+\.[a-zA-Z0-9_\-]+"),
    re.compile(r"AIza[0-9A-Za-z_\-]{35}"),
    re.compile(r"([a-zA-Z0-9_\-]{40,})"),
]

SENSITIVE_KEYS = {"password", "id_token", "idToken", "refresh_token", "refreshToken", "api_key", "key"}


def mask_string(val: str) -> str:
    for pattern in SENSITIVE_PATTERNS:
        val = pattern.sub("[REDACTED]", val)
    return val


def scrub(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {
            k: "[REDACTED]" if k in SENSITIVE_KEYS else scrub(v)
            for k, v in obj.items()
        }
    elif isinstance(obj, list):
        return [scrub(i) for i in obj]
    elif isinstance(obj, str):
        return mask_string(obj)
    return obj


def _scrub_sensitive_data(event: Dict[str, Any], hint: Dict[str, Any]) -> Dict[str, Any]:
    """
    Sentry before_send hook. Strips tokens, API keys and passwords from
    stack frame locals and request payloads before the event leaves the server.
    """
    try:
        if "exception" in event and "values" in event["exception"]:
            for exc in event["exception"]["values"]:
                if "stacktrace" in exc and "frames" in exc["stacktrace"]:
                    for frame in exc["stacktrace"]["frames"]:
                        if "vars" in frame:
                            frame["vars"] = scrub(frame["vars"])
        if "request" in event:
            event["request"] = scrub(event["request"])
        if "extra" in event:
            event["extra"] = scrub(event["extra"])
    except (KeyError, TypeError, AttributeError) as e:
        log.debug(f"Scrubber skipped malformed event: {e}")

    return event


def setup_observability() -> None:
    """
    Configure root logging from LOG_LEVEL and, when SENTRY_DSN is set, Sentry.
    app.py calls this before anything else logs.
    """

    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    # 2026-02-27 15:00:00 | INFO    | utils.navigation | Route /account denied ...
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    sentry_dsn = os.getenv("SENTRY_DSN")
    if sentry_dsn:
        try:
            import sentry_sdk
            sentry_env = os.getenv("SENTRY_ENV", "development")

            sentry_sdk.init(
                dsn=sentry_dsn,
                environment=sentry_env,
                traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.2")),
                send_default_pii=False,
                before_send=_scrub_sensitive_data
            )
            log.info(f"Sentry enabled for {sentry_env}")
        except ImportError:
            log.warning("SENTRY_DSN is set but sentry_sdk cannot be imported; errors will only be logged")
    else:
        log.info("Sentry disabled (no SENTRY_DSN)")

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)


def set_user_context(identity, role) -> None:
    """Tag Sentry events with the signed-in uid and role. Emails are never sent."""
    try:
        import sentry_sdk
    except ImportError:
        return
    if not sentry_sdk.is_initialized():
        return

    if identity is None:
        sentry_sdk.set_user(None)
        sentry_sdk.set_tag("role", "anonymous")
        return
    sentry_sdk.set_user({"id": identity.uid})
    sentry_sdk.set_tag("role", role.value if role is not None else "unresolved")
