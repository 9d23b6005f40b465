"""Globally-unique ids for poses from multiple senders."""

GUID_SEPARATOR: str = "-"


def pose_id_key(pose_id: object) -> str:
    """String form of a detector-local pose id, None becomes '0'.

    Integral floats compare equal to their int, so 5.0 and 5 give '5'.
    """
    if pose_id is None:
        return "0"
    if isinstance(pose_id, float) and pose_id.is_integer():
        return str(int(pose_id))
    return str(pose_id)


def make_guid(from_id: str, pose_id: str) -> str:
    """Combine sender id and detector-local pose id, e.g. 'cam1-5'."""
    return f"{from_id}{GUID_SEPARATOR}{pose_id}"


def split_guid(guid: str) -> tuple[str, str]:
    """Split a guid back into (from_id, pose_id).

    Splits on the last separator, so sender ids may contain it but pose ids may not.

    Raises:
        ValueError: If the guid has no separator.
    """
    from_id, sep, pose_id = guid.rpartition(GUID_SEPARATOR)
    if not sep:
        raise ValueError(f"Invalid guid '{guid}': missing '{GUID_SEPARATOR}' separator")
    return from_id, pose_id
