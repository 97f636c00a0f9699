"""
ECDSA signature encoding conversions for curve P-256.

Senders transmit signatures as ASN.1/DER ``SEQUENCE { INTEGER r, INTEGER s }``.
The verifier works on the fixed-width IEEE P1363 form: 32-byte ``r``
followed by 32-byte ``s``, both big-endian and zero-padded.

The DER decoder is a small byte cursor that checks bounds on every advance
and only accepts canonical (minimal) encodings.
"""

from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from signed_webhooks.core.errors import SignatureFormatError

SEQUENCE_TAG = 0x30
INTEGER_TAG = 0x02

P256_FIELD_SIZE = 32
P1363_SIGNATURE_SIZE = 2 * P256_FIELD_SIZE


class _DerReader:
    """Forward-only cursor over a DER byte string."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def read_byte(self) -> int:
        if self.remaining < 1:
            raise SignatureFormatError("Unexpected end of DER signature")
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_bytes(self, count: int) -> bytes:
        if count > self.remaining:
            raise SignatureFormatError(
                f"DER field needs {count} bytes, only {self.remaining} left"
            )
        chunk = self._data[self._pos:self._pos + count]
        self._pos += count
        return chunk

    def read_length(self) -> int:
        """
        Read a DER length octet sequence.

        Short form covers every P-256 signature. The one-byte long form
        (``0x81 NN``) is accepted only when ``NN`` could not have been
        written in short form.
        """
        first = self.read_byte()
        if first < 0x80:
            return first
        if first == 0x81:
            length = self.read_byte()
            if length < 0x80:
                raise SignatureFormatError("Non-minimal DER length encoding")
            return length
        raise SignatureFormatError(f"Unsupported DER length form: 0x{first:02x}")


def _read_integer(reader: _DerReader, name: str) -> bytes:
    """Read one positive INTEGER and return it left-padded to the field size."""
    tag = reader.read_byte()
    if tag != INTEGER_TAG:
        raise SignatureFormatError(f"Expected INTEGER tag for {name}, got 0x{tag:02x}")

    length = reader.read_length()
    if length == 0:
        raise SignatureFormatError(f"Empty INTEGER for {name}")

    value = reader.read_bytes(length)

    if value[0] & 0x80:
        raise SignatureFormatError(f"Negative INTEGER for {name}")

    if value[0] == 0x00:
        if length == 1:
            raise SignatureFormatError(f"Zero value for {name}")
        if not value[1] & 0x80:
            raise SignatureFormatError(f"Non-canonical zero padding in {name}")
        value = value[1:]

    if len(value) > P256_FIELD_SIZE:
        raise SignatureFormatError(
            f"{name} is {len(value)} bytes, exceeds P-256 field size"
        )

    return value.rjust(P256_FIELD_SIZE, b"\x00")


def der_to_p1363(der_signature: bytes) -> bytes:
    """
    Convert a DER-encoded ECDSA signature to 64-byte P1363 form.

    Args:
        der_signature: ``SEQUENCE { INTEGER r, INTEGER s }`` bytes.

    Returns:
        bytes: ``r || s``, each 32 bytes big-endian.

    Raises:
        SignatureFormatError: On any structural violation, including
            trailing bytes, non-canonical integers, and values wider
            than 32 bytes.
    """
    reader = _DerReader(der_signature)

    tag = reader.read_byte()
    if tag != SEQUENCE_TAG:
        raise SignatureFormatError(f"Expected SEQUENCE tag, got 0x{tag:02x}")

    sequence_length = reader.read_length()
    if sequence_length != reader.remaining:
        raise SignatureFormatError(
            f"SEQUENCE length {sequence_length} does not match "
            f"{reader.remaining} remaining bytes"
        )

    r = _read_integer(reader, "r")
    s = _read_integer(reader, "s")

    if reader.remaining:
        raise SignatureFormatError(f"{reader.remaining} trailing bytes after s")

    return r + s


def split_p1363(signature: bytes) -> tuple[int, int]:
    """Split a normalized signature into its ``(r, s)`` integers."""
    if len(signature) != P1363_SIGNATURE_SIZE:
        raise SignatureFormatError(
            f"P1363 signature must be {P1363_SIGNATURE_SIZE} bytes, got {len(signature)}"
        )

    r = int.from_bytes(signature[:P256_FIELD_SIZE], "big")
    s = int.from_bytes(signature[P256_FIELD_SIZE:], "big")
    if r == 0 or s == 0:
        raise SignatureFormatError("P1363 signature has a zero component")

    return r, s


def p1363_to_der(signature: bytes) -> bytes:
    """Encode a 64-byte P1363 signature as minimal DER."""
    r, s = split_p1363(signature)
    return encode_dss_signature(r, s)
