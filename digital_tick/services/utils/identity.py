"""Caller identity resolution for quota and history partitioning."""

UNKNOWN_IDENTITY = "unknown"


def resolve_identity(
    user_id: str | int | None,
    forwarded_for: str | None = None,
    client_host: str | None = None,
) -> str:
    """
    Derive the identity key for a request.

    The caller-supplied user id wins when present (it is not authenticated,
    any string is accepted). Otherwise the first hop of X-Forwarded-For,
    then the direct connection address, then "unknown".
    """
    if user_id is not None:
        supplied = str(user_id)
        if supplied:
            return supplied

    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    if client_host:
        return client_host

    return UNKNOWN_IDENTITY
