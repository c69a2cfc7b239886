"""
Checksum list signature and archive hash verification.

Signature checks run gpg through python-gnupg inside a throwaway GnuPG home
directory, so the user's keyring is never read or modified. Only signatures
made by a key in the TrustedKeySet are accepted.
"""

import hashlib
import logging
import tempfile
from dataclasses import dataclass
from pathlib import Path

import gnupg

from core.errors.exceptions import (
    FileNameNotInChecksumListError,
    HashMismatchError,
    SignatureInvalidError,
    TrustedKeysError,
)
from nodejs_dist.keys import TrustedKeySet

logger = logging.getLogger(__name__)

DEFAULT_KEYSERVER = "hkps://keyserver.ubuntu.com"
HASH_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class SignatureVerification:
    """Details of an accepted checksum list signature."""

    fingerprint: str
    username: str | None
    key_id: str | None
    status: str | None


class SignatureVerifier:
    """
    Verifies OpenPGP cleartext signatures against a trusted key set.

    Usage:
        with SignatureVerifier(load_trusted_keys()) as verifier:
            verification = verifier.verify_signature(shasums_path)
    """

    def __init__(
        self,
        trusted_keys: TrustedKeySet,
        gpg_binary: str = "gpg",
        keyserver: str | None = DEFAULT_KEYSERVER,
    ):
        self.trusted_keys = trusted_keys
        self.gpg_binary = gpg_binary
        self.keyserver = keyserver
        self._home: tempfile.TemporaryDirectory | None = None
        self._gpg: gnupg.GPG | None = None
        self._accepted_fingerprints: frozenset[str] | None = None

    def __enter__(self) -> "SignatureVerifier":
        self._home = tempfile.TemporaryDirectory(prefix="nodejs-dist-gnupg-")
        self._gpg = gnupg.GPG(gnupghome=self._home.name, gpgbinary=self.gpg_binary)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        self._gpg = None
        self._accepted_fingerprints = None
        if self._home is not None:
            home, self._home = self._home, None
            # gpg-agent may leave sockets behind
            home.cleanup()

    def _get_gpg(self) -> gnupg.GPG:
        if self._gpg is None:
            raise RuntimeError("SignatureVerifier must be used as a context manager")
        return self._gpg

    def import_trusted_keys(self) -> int:
        """
        Import the trusted keys into the temporary keyring.

        Armored keys are imported directly and the fingerprints gpg reports
        for them become trusted. Listed fingerprints that no armored key
        covers are received from the keyserver, when one is configured.
        Returns the number of keys imported.

        Raises:
            TrustedKeysError: If no key could be imported
        """
        gpg = self._get_gpg()
        imported = 0
        bundled = set()

        for armored_key in self.trusted_keys.armored_keys:
            result = gpg.import_keys(armored_key)
            imported += result.count or 0
            bundled.update(fp.upper() for fp in result.fingerprints or () if fp)

        missing = sorted(self.trusted_keys.fingerprints - bundled)
        if missing and self.keyserver:
            result = gpg.recv_keys(self.keyserver, *missing)
            imported += result.count or 0
            logger.debug(
                f"Received {result.count} of {len(missing)} keys from {self.keyserver}",
                extra={"num_certificates": result.count},
            )

        if imported == 0:
            raise TrustedKeysError(
                f"No signing keys could be imported from {self.trusted_keys.source}",
                context={"key_list": self.trusted_keys.source},
            )

        self._accepted_fingerprints = frozenset(self.trusted_keys.fingerprints | bundled)
        return imported

    def is_accepted(self, fingerprint: str | None) -> bool:
        """Whether a signer fingerprint is listed or came from an imported key file."""
        return bool(fingerprint) and fingerprint.upper() in (self._accepted_fingerprints or ())

    def verify_signature(self, shasums_path: Path) -> SignatureVerification:
        """
        Verify the cleartext signature of a checksum list file.

        Raises:
            SignatureInvalidError: If the file is unsigned, the signature is
                bad, or the signer is not a trusted key
            TrustedKeysError: If the trusted keys could not be imported
        """
        gpg = self._get_gpg()
        if self._accepted_fingerprints is None:
            self.import_trusted_keys()

        shasums_path = Path(shasums_path)
        verified = gpg.verify(shasums_path.read_bytes())
        context = {
            "file_path": str(shasums_path),
            "gpg_status": verified.status,
        }

        if not verified.valid:
            raise SignatureInvalidError(
                f"Signature verification of {shasums_path.name} failed: {verified.status}",
                context=context,
            )

        signer = next(
            (
                fp
                for fp in (verified.pubkey_fingerprint, verified.fingerprint)
                if self.is_accepted(fp)
            ),
            None,
        )
        if signer is None:
            context["signer_fingerprint"] = verified.pubkey_fingerprint or verified.fingerprint
            raise SignatureInvalidError(
                f"{shasums_path.name} is signed by an untrusted key: "
                f"{verified.pubkey_fingerprint or verified.fingerprint}",
                context=context,
            )

        return SignatureVerification(
            fingerprint=signer.upper(),
            username=verified.username,
            key_id=verified.key_id,
            status=verified.status,
        )


def compute_sha256(file_path: Path, chunk_size: int = HASH_CHUNK_SIZE) -> str:
    """Return the lower-case SHA-256 hex digest of a file, read in chunks."""
    digest = hashlib.sha256()
    with open(file_path, "rb") as f:
        for chunk in iter(lambda: f.read(chunk_size), b""):
            digest.update(chunk)
    return digest.hexdigest()


def verify_hash(file_path: Path, expected_hash: str) -> bool:
    """
    Check a file's SHA-256 against an expected hex digest (case-insensitive).

    Returns:
        True when the hashes match

    Raises:
        HashMismatchError: If they differ
    """
    actual_hash = compute_sha256(file_path)
    expected = expected_hash.strip().lower()
    if actual_hash != expected:
        raise HashMismatchError(str(file_path), expected, actual_hash)
    return True


def verify_file_hash(
    file_path: Path,
    checksums: dict[str, str],
    file_name: str | None = None,
    source: str | None = None,
) -> bool:
    """
    Verify a file against its entry in a parsed checksum list.

    The entry is looked up by file_name, defaulting to the file's own name.

    Raises:
        FileNameNotInChecksumListError: If the list has no entry for the file
            (raised before the file is read)
        HashMismatchError: If the hash differs
    """
    file_path = Path(file_path)
    name = file_name or file_path.name
    expected_hash = checksums.get(name)
    if expected_hash is None:
        raise FileNameNotInChecksumListError(name, available=list(checksums), source=source)
    return verify_hash(file_path, expected_hash)


__all__ = [
    "DEFAULT_KEYSERVER",
    "SignatureVerification",
    "SignatureVerifier",
    "compute_sha256",
    "verify_hash",
    "verify_file_hash",
]
