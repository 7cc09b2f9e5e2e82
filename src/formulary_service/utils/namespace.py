"""Plan namespace rules shared by settings and the key layout."""

# ':' separates key segments; the rest are glob metacharacters in SCAN/fnmatch patterns.
RESERVED_PLAN_ID_CHARS = frozenset(":*?[]\\")


def validate_plan_id(plan_id: str) -> str:
    """Reject plan ids whose namespace pattern could match another plan's keys.

    Raises:
        ValueError: If the id is empty or contains a reserved character
    """
    if not plan_id:
        raise ValueError("plan_id must not be empty")
    reserved = sorted(set(plan_id) & RESERVED_PLAN_ID_CHARS)
    if reserved:
        raise ValueError(f"plan_id {plan_id!r} contains reserved characters: {''.join(reserved)}")
    return plan_id
