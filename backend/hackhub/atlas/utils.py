import secrets
import uuid

from hackhub.models import ClusterStatus

# Ambiguous characters (I, O, i, l, o, 0, 1) are left out
UPPERCASE = "ABCDEFGHJKLMNPQRSTUVWXYZ"
LOWERCASE = "abcdefghjkmnpqrstuvwxyz"
DIGITS = "23456789"
SPECIAL = "!@#$%^&*-_=+"

APP_NAME = "devrel-platform-hackathon-atlas"
PROJECT_PREFIX = "mh"
CLUSTER_NAME = "hackathon-cluster"

_STATE_MAP = {
    "CREATING": ClusterStatus.creating,
    "IDLE": ClusterStatus.active,
    "UPDATING": ClusterStatus.active,
    "REPAIRING": ClusterStatus.active,
    "DELETING": ClusterStatus.deleting,
    "DELETED": ClusterStatus.deleted,
}


def generate_password(length: int = 24) -> str:
    """Random password with at least one upper, lower, digit and special character."""
    if length < 4:
        raise ValueError("Password length must be at least 4")
    rng = secrets.SystemRandom()
    chars = [secrets.choice(charset) for charset in (UPPERCASE, LOWERCASE, DIGITS, SPECIAL)]
    pool = UPPERCASE + LOWERCASE + DIGITS + SPECIAL
    chars.extend(secrets.choice(pool) for _ in range(length - 4))
    rng.shuffle(chars)
    return "".join(chars)


def map_atlas_state(state_name: str | None) -> ClusterStatus:
    return _STATE_MAP.get((state_name or "").upper(), ClusterStatus.active)


def short_id(value: uuid.UUID) -> str:
    return value.hex[-6:]


def project_name(event_id: uuid.UUID, team_id: uuid.UUID) -> str:
    return f"{PROJECT_PREFIX}-{short_id(event_id)}-{short_id(team_id)}"


def team_username(team_id: uuid.UUID) -> str:
    return f"team-{short_id(team_id)}"


def with_app_name(connection_string: str) -> str:
    """Tag a connection string with the platform appName, once."""
    if not connection_string or f"appName={APP_NAME}" in connection_string:
        return connection_string
    separator = "&" if "?" in connection_string else "?"
    return f"{connection_string}{separator}appName={APP_NAME}"
