"""_UID values, in the format used by PAF and most desktop programs."""

from uuid import uuid4


def create_uid() -> str:
    """
    A random 32 hex digit identifier followed by a 4 digit checksum.
    """
    uid = uuid4().hex.upper()
    checksum_a = 0
    checksum_b = 0
    for i in range(0, len(uid), 2):
        checksum_a += int(uid[i:i + 2], 16)
        checksum_b += checksum_a
    return uid + f"{checksum_a & 0xFF:02X}" + f"{checksum_b & 0xFF:02X}"
