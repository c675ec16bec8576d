from typing import Any, Protocol


class Codec(Protocol):
    """
    Converts application keys and values into storable scalars.

    Implementations must be pure and deterministic, and `encode_key` must
    be strictly order-preserving: every range operation relies on the
    backend's native ordering of the encoded bytes matching the
    application's ordering of keys. Round trips are exact:
    `decode_key(encode_key(k)) == normalize_key(k)` and
    `decode_value(encode_value(v)) == v`.

    Encoding or decoding failures raise `CodecError`; malformed keys handed
    to `normalize_key` raise `InvalidArgument`.
    """

    def normalize_key(self, key: Any) -> Any:
        """Return the canonical form of `key`."""

    def encode_key(self, key: Any) -> bytes:
        """Encode a normalized key."""

    def decode_key(self, data: bytes) -> Any:
        """Decode a stored key back into its normalized form."""

    def encode_value(self, value: Any) -> bytes:
        """Encode an application value."""

    def decode_value(self, data: bytes) -> Any:
        """Decode a stored value."""

    def min_key(self) -> bytes:
        """Encoded bound lower than or equal to every encodable key."""

    def max_key(self) -> bytes:
        """Encoded bound greater than or equal to every encodable key."""

    def prefix_bounds(self, prefix: Any) -> tuple[bytes, bytes]:
        """
        Return the inclusive encoded bounds `(low, high)` enclosing every
        key that starts with `prefix`.
        """

    def key_after(self, key: Any) -> bytes:
        """Smallest encoded bound strictly greater than `key`."""

    def key_before(self, key: Any) -> bytes:
        """Greatest encoded bound strictly lower than `key`."""

    def subtree_end(self, key: Any) -> bytes:
        """
        Greatest encoded bound of any key having `key` as its leading
        components, `key` itself included.
        """
