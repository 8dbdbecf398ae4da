"""
Record Key Derivation

Maps (record kind, owning identity, sequence number) to a stable key so
records can be located without a central index.
"""
import hashlib

CONFIG = "config"
POLICY = "policy"
MEMBER = "member"
STAKE = "stake"
CLAIM = "claim"
PREMIUM_POOL = "premium_pool"
CAPITAL_POOL = "capital_pool"
TOKEN_ACCOUNT = "token_account"


def _encode(part: str | int) -> bytes:
    if isinstance(part, bool):
        raise TypeError("Key parts must be str or int, not bool")
    if isinstance(part, int):
        # Sequence numbers are u64 counters
        return part.to_bytes(8, "little")
    if isinstance(part, str):
        return part.encode("utf-8")
    raise TypeError(f"Unsupported key part type: {type(part).__name__}")


def derive_key(kind: str, *parts: str | int) -> str:
    """
    Derive a deterministic key for a record.

    Each seed is length-prefixed before hashing so that ("ab", "c") and
    ("a", "bc") never collide.

    Args:
        kind: Record kind, also used as the key prefix
        *parts: Owning identities and/or sequence numbers

    Returns:
        Key of the form "<kind>:<sha256 hex>"
    """
    digest = hashlib.sha256()
    for seed in (kind, *parts):
        encoded = _encode(seed)
        digest.update(len(encoded).to_bytes(4, "little"))
        digest.update(encoded)
    return f"{kind}:{digest.hexdigest()}"


def config_key() -> str:
    return derive_key(CONFIG)


def policy_key(policy_id: int) -> str:
    return derive_key(POLICY, policy_id)


def member_key(owner: str) -> str:
    return derive_key(MEMBER, owner)


def stake_key(owner: str) -> str:
    return derive_key(STAKE, owner)


def claim_key(member: str, sequence: int) -> str:
    return derive_key(CLAIM, member, sequence)


def token_account_key(owner: str, denomination: str) -> str:
    return derive_key(TOKEN_ACCOUNT, owner, denomination)
