"""
Domain parsing and normalization module.

Turns operator input such as ``"https://Example.com/, test.nl."`` into the
canonical host names the resolver and workers operate on.
"""

import re
from dataclasses import dataclass
from typing import Optional

import idna

from site_stress.enums import DomainValidationErrorCode
from site_stress.exceptions import ValidationError


# Forbidden characters in host names (control chars, spaces, special symbols).
# ':' is handled separately because an optional port is allowed.
FORBIDDEN_CHARS_PATTERN = re.compile(
    r'[\x00-\x1f\x7f'
    r'\s'
    r'!@#$%^&*()+=\[\]{}|\\;"\'<>,?/`~]'
)

PORT_PATTERN = re.compile(r"^(?P<host>[^:]+)(?::(?P<port>\d{1,5}))?$")

SCHEME_PREFIXES = ("http://", "https://")


@dataclass
class DomainValidationError:
    """Structured error information for domain validation failures."""

    code: DomainValidationErrorCode
    message: str
    details: dict


@dataclass
class DomainValidationResult:
    """Result of domain validation operation."""

    valid: bool
    canonical_domain: Optional[str]
    error: Optional[DomainValidationError]


def parse_domain_list(raw: str) -> list[str]:
    """
    Split a comma, semicolon or whitespace separated domain list.

    Entries starting with '#' are skipped and duplicates are dropped while
    keeping the first occurrence's position.
    """
    if not raw:
        return []
    parts = [p.strip() for chunk in raw.replace(";", ",").split(",") for p in chunk.split()]
    seen, out = set(), []
    for part in parts:
        if not part or part.startswith("#"):
            continue
        key = part.lower()
        if key not in seen:
            out.append(part)
            seen.add(key)
    return out


class DomainValidator:
    """
    Validates and normalizes target host names.

    Handles:
    - Stripping an http:// or https:// prefix, trailing slashes and the root dot
    - Conversion to lowercase canonical form
    - IDNA encoding for international characters
    - Rejection of forbidden characters
    - An optional numeric port
    """

    def validate(self, raw_domain: str) -> DomainValidationResult:
        """
        Validate and normalize a domain string.

        Args:
            raw_domain: The raw domain string to validate

        Returns:
            DomainValidationResult with validation status and canonical form or error
        """
        domain = self.strip_decorations(raw_domain or "")

        if not domain:
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.EMPTY_INPUT,
                    message="Domain input is empty",
                    details={"raw_input": raw_domain},
                ),
            )

        if FORBIDDEN_CHARS_PATTERN.search(domain):
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.FORBIDDEN_CHARS,
                    message="Domain contains forbidden characters",
                    details={
                        "raw_input": raw_domain,
                        "forbidden_chars": FORBIDDEN_CHARS_PATTERN.findall(domain),
                    },
                ),
            )

        match = PORT_PATTERN.match(domain)
        if match is None or (match.group("port") and int(match.group("port")) > 65535):
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.FORBIDDEN_CHARS,
                    message="Domain has a malformed port",
                    details={"raw_input": raw_domain},
                ),
            )

        try:
            host = self.normalize_to_canonical(match.group("host"))
        except ValidationError as e:
            return DomainValidationResult(
                valid=False,
                canonical_domain=None,
                error=DomainValidationError(
                    code=DomainValidationErrorCode.IDNA_ERROR,
                    message=str(e.message),
                    details=e.details,
                ),
            )

        canonical = f"{host}:{match.group('port')}" if match.group("port") else host
        return DomainValidationResult(
            valid=True,
            canonical_domain=canonical,
            error=None,
        )

    def strip_decorations(self, domain: str) -> str:
        """Remove surrounding whitespace, a URL scheme, trailing slashes and the root dot."""
        domain = domain.strip()
        for prefix in SCHEME_PREFIXES:
            if domain.lower().startswith(prefix):
                domain = domain[len(prefix):]
                break
        domain = domain.rstrip("/")
        if domain.endswith("."):
            domain = domain[:-1]
        return domain

    def normalize_to_canonical(self, domain: str) -> str:
        """
        Convert a host to canonical form (lowercase, IDNA-encoded).

        Raises:
            ValidationError: If IDNA encoding fails
        """
        domain_lower = domain.lower()

        if any(ord(c) > 127 for c in domain_lower):
            try:
                return idna.encode(domain_lower, uts46=True).decode("ascii")
            except idna.IDNAError as e:
                raise ValidationError(
                    code=DomainValidationErrorCode.IDNA_ERROR.value,
                    message=f"IDNA encoding failed: {e}",
                    details={"domain": domain, "idna_error": str(e)},
                )
        return domain_lower

    def normalize_all(self, raw_domains: list[str]) -> list[str]:
        """
        Normalize every entry, dropping duplicates that collapse to the same host.

        Raises:
            ValidationError: For the first entry that fails validation
        """
        seen, out = set(), []
        for raw in raw_domains:
            result = self.validate(raw)
            if not result.valid:
                raise ValidationError(
                    code=result.error.code.value,
                    message=f"{raw!r}: {result.error.message}",
                    details=result.error.details,
                )
            if result.canonical_domain not in seen:
                seen.add(result.canonical_domain)
                out.append(result.canonical_domain)
        return out
