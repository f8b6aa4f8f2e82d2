"""Identity Resolver: (headstone name, invoice no) <-> job directory name.

Directory names are ``<sanitized_name>_<invoiceNo>``. The invoice number is
expected to carry an ``INV-<digits>`` token, which doubles as the parse marker
when a directory name is turned back into an identity.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from engrave.store.errors import MalformedDirectoryName, ValidationError

INVOICE_MARKER = "INV"

_UNSAFE_NAME_RE: re.Pattern[str] = re.compile(r"[^A-Za-z0-9_]")
# Invoice numbers end up verbatim in a path component.
_INVOICE_RE: re.Pattern[str] = re.compile(r"^[A-Za-z0-9_-]+$")
# Must parse back from the directory name: INV-<token>, no second marker.
_INVOICE_TOKEN_RE: re.Pattern[str] = re.compile(r"^INV-[A-Za-z0-9_][A-Za-z0-9_-]*$")


@dataclass(frozen=True)
class JobKey:
    """Structured job identity, validated once and carried everywhere after.

    Attributes:
        headstone_name: Name as entered by the operator (or as parsed back).
        invoice_no: Full invoice token, e.g. ``"INV-1042"``.
    """

    headstone_name: str
    invoice_no: str

    @classmethod
    def from_input(cls, headstone_name: str | None, invoice_no: str | None) -> JobKey:
        """Validate raw form input and build a key.

        Raises:
            ValidationError: If either field is missing, the invoice number
                contains characters that are unsafe in a path component, or
                it is not a single ``INV-<token>`` (anything else would not
                parse back from the directory name).
        """
        name = (headstone_name or "").strip()
        invoice = (invoice_no or "").strip()
        if not name:
            raise ValidationError("headstoneName", "headstoneName is required")
        if not invoice:
            raise ValidationError("invoiceNo", "invoiceNo is required")
        if not _INVOICE_RE.match(invoice):
            raise ValidationError(
                "invoiceNo",
                f"invoiceNo '{invoice}' may only contain letters, digits, '_' and '-'",
            )
        if (
            not _INVOICE_TOKEN_RE.match(invoice)
            or INVOICE_MARKER in invoice[len(INVOICE_MARKER):]
        ):
            raise ValidationError(
                "invoiceNo",
                f"invoiceNo '{invoice}' must look like '{INVOICE_MARKER}-<number>'",
            )
        return cls(headstone_name=name, invoice_no=invoice)

    @property
    def dir_name(self) -> str:
        return compose_directory_name(self.headstone_name, self.invoice_no)

    @property
    def invoice_number(self) -> str:
        """Digits after ``INV-``, or the whole invoice token if it has no dash."""
        _, _, suffix = self.invoice_no.partition("-")
        return suffix or self.invoice_no

    def to_dict(self) -> dict[str, str]:
        return {"headstoneName": self.headstone_name, "invoiceNo": self.invoice_no}


def sanitize_name(headstone_name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_]`` with ``_``."""
    return _UNSAFE_NAME_RE.sub("_", headstone_name)


def compose_directory_name(headstone_name: str, invoice_no: str) -> str:
    """Return the canonical job directory name.

    >>> compose_directory_name("John Doe", "INV-1042")
    'John_Doe_INV-1042'
    """
    return f"{sanitize_name(headstone_name)}_{invoice_no}"


def parse_directory_name(dir_name: str) -> JobKey:
    """Parse a job directory name back into a JobKey.

    Splits on the last ``INV`` marker: the left part (underscores to spaces,
    trimmed) is the headstone name; the right part must be ``-<token>``.

    Raises:
        MalformedDirectoryName: If the marker or the dash-delimited suffix
            is missing.
    """
    left, marker, right = dir_name.rpartition(INVOICE_MARKER)
    if not marker:
        raise MalformedDirectoryName(dir_name, f"no '{INVOICE_MARKER}' marker")

    parts = right.split("-")
    if len(parts) < 2 or not parts[1]:
        raise MalformedDirectoryName(dir_name, "no '-' delimited invoice suffix")

    name = left.replace("_", " ").strip()
    return JobKey(headstone_name=name, invoice_no=f"{INVOICE_MARKER}{right}")
