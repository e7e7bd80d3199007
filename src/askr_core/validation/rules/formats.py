"""
Format validators: email addresses, hostnames, URLs and IP addresses.

Full checks use the standard library parsers (``ipaddress``, ``urllib.parse``);
partial checks only flag characters or segments that no continuation can repair.
"""

from __future__ import annotations

import ipaddress
import re
import string
from typing import Any
from urllib.parse import urlsplit

from ...errors import ArgumentError
from ..kinds import Check, Params, RuleHandler, ValidatorKind, fail, ok
from ..priority import Priority
from ..result import PartialResult

EMAIL_MESSAGE = "Must be a valid email address"
HOSTNAME_MESSAGE = "Must be a valid hostname"
URL_MESSAGE = "Must be a valid URL"
IPV4_MESSAGE = "Must be a valid IPv4 address"
IPV6_MESSAGE = "Must be a valid IPv6 address"

DEFAULT_URL_SCHEMES = ("http", "https", "ftp", "ftps", "ws", "wss")

_HOST_CHARS = frozenset(string.ascii_letters + string.digits + "-.")
_LOCAL_CHARS = frozenset(string.ascii_letters + string.digits + "!#$%&'*+/=?^_`{|}~.-")
_HEX_CHARS = frozenset(string.hexdigits + ":.")
_LABEL_RE = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")
_TLD_RE = re.compile(r"^[A-Za-z]{2,63}$")


MAX_HOSTNAME_LENGTH = 253
MAX_LOCAL_PART_LENGTH = 64


def is_hostname(text: str) -> bool:
    """RFC 1123 host name: dot separated labels of letters, digits and inner hyphens."""
    host = text[:-1] if text.endswith(".") else text
    if not host or len(host) > MAX_HOSTNAME_LENGTH:
        return False
    return all(_LABEL_RE.match(label) for label in host.split("."))


def _hostname_error_offset(text: str, start: int = 0) -> int | None:
    """Offset of the first character that makes ``text`` unrepairable as a host name."""
    label_start = 0
    for index, char in enumerate(text):
        if char not in _HOST_CHARS:
            return start + index
        if char == ".":
            if index == label_start:
                return start + index
            if text[index - 1] == "-":
                return start + index - 1
            label_start = index + 1
        elif char == "-" and index == label_start:
            return start + index
        elif index - label_start >= 63:
            return start + index
    if start + len(text) > MAX_HOSTNAME_LENGTH:
        return MAX_HOSTNAME_LENGTH
    return None


def _check_hostname(text: str, params: Params) -> Check:
    if is_hostname(text):
        return ok()
    return fail(HOSTNAME_MESSAGE)


def _partial_hostname(text: str, cursor: int, params: Params) -> PartialResult:
    offset = _hostname_error_offset(text)
    if offset is None:
        return PartialResult.ok()
    return PartialResult.error_at(offset)


def is_email(text: str) -> bool:
    """Pragmatic address check: dot-atom local part, host name domain with an alphabetic TLD."""
    local, sep, domain = text.rpartition("@")
    if not sep or not local or not domain:
        return False
    if len(local) > MAX_LOCAL_PART_LENGTH or any(char not in _LOCAL_CHARS for char in local):
        return False
    if local.startswith(".") or local.endswith(".") or ".." in local:
        return False
    if "." not in domain or not is_hostname(domain) or domain.endswith("."):
        return False
    return bool(_TLD_RE.match(domain.rsplit(".", 1)[1]))


def _check_email(text: str, params: Params) -> Check:
    if is_email(text):
        return ok()
    return fail(EMAIL_MESSAGE)


def _partial_email(text: str, cursor: int, params: Params) -> PartialResult:
    at = text.find("@")
    local = text if at < 0 else text[:at]
    for index, char in enumerate(local):
        if char not in _LOCAL_CHARS:
            return PartialResult.error_at(index)
        if char == "." and (index == 0 or local[index - 1] == "."):
            return PartialResult.error_at(index)
        if index >= MAX_LOCAL_PART_LENGTH:
            return PartialResult.error_at(index)
    if at < 0:
        return PartialResult.ok()
    if at == 0:
        return PartialResult.error_at(0)
    if local.endswith("."):
        return PartialResult.error_at(at - 1)
    domain = text[at + 1 :]
    second_at = domain.find("@")
    if second_at >= 0:
        return PartialResult.error_at(at + 1 + second_at)
    offset = _hostname_error_offset(domain, start=at + 1)
    if offset is not None:
        return PartialResult.error_at(offset)
    return PartialResult.ok()


def _prepare_url(params: dict[str, Any]) -> dict[str, Any]:
    schemes = params.get("schemes", DEFAULT_URL_SCHEMES)
    if isinstance(schemes, str):
        schemes = [part.strip() for part in schemes.split(",") if part.strip()]
    if not schemes or not all(isinstance(scheme, str) for scheme in schemes):
        raise ArgumentError("Validator 'url': 'schemes' must be a non-empty list of scheme names")
    return {**params, "schemes": tuple(scheme.lower() for scheme in schemes)}


def _is_url_host(host: str) -> bool:
    try:
        ipaddress.ip_address(host)
    except ValueError:
        return is_hostname(host)
    return True


def _check_url(text: str, params: Params) -> Check:
    schemes = ", ".join(params["schemes"])
    if any(char.isspace() for char in text):
        return fail(URL_MESSAGE, schemes=schemes)
    try:
        parts = urlsplit(text)
        parts.port  # raises ValueError for a malformed port
    except ValueError:
        return fail(URL_MESSAGE, schemes=schemes)
    host = parts.hostname
    if parts.scheme.lower() in params["schemes"] and host and _is_url_host(host):
        return ok(schemes=schemes)
    return fail(URL_MESSAGE, schemes=schemes)


def _partial_url(text: str, cursor: int, params: Params) -> PartialResult:
    schemes = params["schemes"]
    suggestion = f"Use one of: {', '.join(schemes)}"
    for index, char in enumerate(text):
        if char.isspace() or not char.isprintable():
            return PartialResult.error_at(index)

    scheme, sep, _ = text.partition("://")
    if sep:
        if scheme.lower() not in schemes:
            return PartialResult.error_at(0, suggestion=suggestion)
        return PartialResult.ok()

    colon = text.find(":")
    typed = text if colon < 0 else text[:colon]
    for index in range(len(typed)):
        prefix = typed[: index + 1].lower()
        if not any(allowed.startswith(prefix) for allowed in schemes):
            return PartialResult.error_at(index, suggestion=suggestion)
    if colon >= 0:
        if typed.lower() not in schemes:
            return PartialResult.error_at(colon, suggestion=suggestion)
        rest = text[colon:]
        for index, char in enumerate(rest):
            if char != "://"[index]:
                return PartialResult.error_at(colon + index)
    return PartialResult.ok()


def _check_ipv4(text: str, params: Params) -> Check:
    try:
        ipaddress.IPv4Address(text)
    except ValueError:
        return fail(IPV4_MESSAGE)
    return ok()


def _partial_ipv4(text: str, cursor: int, params: Params) -> PartialResult:
    octet_start = 0
    dots = 0
    for index, char in enumerate(text):
        if char == ".":
            dots += 1
            if dots > 3 or index == octet_start:
                return PartialResult.error_at(index)
            octet_start = index + 1
        elif not ("0" <= char <= "9"):
            return PartialResult.error_at(index)
        else:
            octet = text[octet_start : index + 1]
            if len(octet) > 3 or int(octet) > 255 or (len(octet) > 1 and octet[0] == "0"):
                return PartialResult.error_at(index)
    return PartialResult.ok()


def _check_ipv6(text: str, params: Params) -> Check:
    try:
        ipaddress.IPv6Address(text)
    except ValueError:
        return fail(IPV6_MESSAGE)
    return ok()


def _partial_ipv6(text: str, cursor: int, params: Params) -> PartialResult:
    for index, char in enumerate(text):
        if char not in _HEX_CHARS:
            return PartialResult.error_at(index)
    triple = text.find(":::")
    if triple >= 0:
        return PartialResult.error_at(triple + 2)
    first_double = text.find("::")
    if first_double >= 0:
        second_double = text.find("::", first_double + 2)
        if second_double >= 0:
            return PartialResult.error_at(second_double)
    group_start = 0
    for index, char in enumerate(text):
        if char == ":":
            group_start = index + 1
        elif char != "." and index - group_start >= 4 and "." not in text[group_start:]:
            return PartialResult.error_at(index)
    return PartialResult.ok()


def _single(message: str):
    def potential(params: Params) -> list[Check]:
        return [fail(message)]

    return potential


HANDLERS: dict[ValidatorKind, RuleHandler] = {
    ValidatorKind.EMAIL: RuleHandler(_check_email, _partial_email, _single(EMAIL_MESSAGE), Priority.HIGH),
    ValidatorKind.HOSTNAME: RuleHandler(_check_hostname, _partial_hostname, _single(HOSTNAME_MESSAGE), Priority.HIGH),
    ValidatorKind.URL: RuleHandler(
        _check_url, _partial_url, _single(URL_MESSAGE), Priority.HIGH, prepare=_prepare_url
    ),
    ValidatorKind.IPV4: RuleHandler(_check_ipv4, _partial_ipv4, _single(IPV4_MESSAGE), Priority.HIGH),
    ValidatorKind.IPV6: RuleHandler(_check_ipv6, _partial_ipv6, _single(IPV6_MESSAGE), Priority.HIGH),
}
