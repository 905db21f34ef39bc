"""Strict address-list parsing and malformed-fold recovery.

``email.utils.getaddresses`` never fails: it quietly splits a broken address
into fragments. The fold recovery below only works if a broken list is
detected, so addresses are parsed strictly here instead.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from eml_extract.exceptions import AddressParseError
from eml_extract.extraction.decoding import decode_header_text

_ATOM = r"[A-Za-z0-9!#$%&'*+/=?^_`{|}~\-\x80-\U0010ffff]+"
_QUOTED = r'"(?:[^"\\\r\n]|\\.)*"'
_LOCAL_PART = rf"(?:{_ATOM}(?:\.{_ATOM})*|{_QUOTED})"
_LABEL = r"[A-Za-z0-9\-_\x80-\U0010ffff]+"
_DOMAIN = rf"(?:{_LABEL}(?:\.{_LABEL})*|\[[^\[\]\\\s]*\])"
_ADDR_SPEC = re.compile(rf"{_LOCAL_PART}(?:@{_DOMAIN})?")
_CFWS_AROUND_DELIM = re.compile(r"\s*([@.])\s*")


@dataclass
class _Entry:
    phrase: list[str] = field(default_factory=list)
    angle: list[str] | None = None
    trailing: list[str] = field(default_factory=list)


def _split_entries(value: str) -> list[_Entry]:
    """Split an address list into entries.

    Comments are dropped, group names discarded and group members flattened
    into the list.
    """
    entries: list[_Entry] = []
    entry = _Entry()
    in_quote = False
    in_angle = False
    in_group = False
    comment_depth = 0

    def emit(c: str) -> None:
        if in_angle:
            entry.angle.append(c)  # type: ignore[union-attr]
        elif entry.angle is not None:
            entry.trailing.append(c)
        else:
            entry.phrase.append(c)

    i = 0
    while i < len(value):
        c = value[i]
        if in_quote:
            emit(c)
            if c == "\\" and i + 1 < len(value):
                emit(value[i + 1])
                i += 1
            elif c == '"':
                in_quote = False
        elif comment_depth:
            if c == "\\":
                i += 1
            elif c == "(":
                comment_depth += 1
            elif c == ")":
                comment_depth -= 1
                if comment_depth == 0:
                    emit(" ")
        elif c == '"':
            in_quote = True
            emit(c)
        elif c == "(":
            comment_depth = 1
        elif c == ")":
            raise AddressParseError(f"unbalanced ')' at position {i}")
        elif c == "<":
            if in_angle or entry.angle is not None:
                raise AddressParseError(f"unexpected '<' at position {i}")
            in_angle = True
            entry.angle = []
        elif c == ">":
            if not in_angle:
                raise AddressParseError(f"unbalanced '>' at position {i}")
            in_angle = False
        elif in_angle:
            emit(c)
        elif c == ",":
            entries.append(entry)
            entry = _Entry()
        elif c == ":":
            if in_group:
                raise AddressParseError(f"nested group at position {i}")
            in_group = True
            entry = _Entry()
        elif c == ";":
            if not in_group:
                raise AddressParseError(f"';' outside a group at position {i}")
            in_group = False
            entries.append(entry)
            entry = _Entry()
        else:
            emit(c)
        i += 1

    if in_quote:
        raise AddressParseError("unterminated quoted string")
    if comment_depth:
        raise AddressParseError("unterminated comment")
    if in_angle:
        raise AddressParseError("missing '>'")
    if in_group:
        raise AddressParseError("group not terminated by ';'")
    entries.append(entry)
    return entries


def _check_addr_spec(spec: str) -> str:
    if '"' not in spec:
        spec = _CFWS_AROUND_DELIM.sub(r"\1", spec)
    if not _ADDR_SPEC.fullmatch(spec):
        raise AddressParseError(f"illegal address '{spec}'")
    return spec


def _is_blank(entry: _Entry) -> bool:
    return entry.angle is None and not "".join(entry.phrase).strip()


def _bare_address(entry: _Entry) -> str | None:
    """Reduce an entry to its address, or None for an empty ``<>``."""
    if entry.angle is None:
        return _check_addr_spec("".join(entry.phrase).strip())

    if "".join(entry.trailing).strip():
        raise AddressParseError(f"text after '>' in '{''.join(entry.trailing).strip()}'")
    spec = "".join(entry.angle).strip()
    if ":" in spec:
        # Obsolete source route, e.g. <@relay.example:user@example.com>.
        spec = spec.rsplit(":", 1)[1].strip()
    if not spec:
        return None
    return _check_addr_spec(spec)


def parse_address_list(value: str) -> list[str | None]:
    """Strictly parse an address header into bare, decoded addresses.

    Display names and comments are discarded. An entry that is present but
    carries no address (``"Someone" <>``) keeps its slot as ``None``.

    Raises:
        AddressParseError: If the list is malformed.
    """
    addresses: list[str | None] = []
    for entry in _split_entries(value):
        if _is_blank(entry):
            continue
        addresses.append(decode_header_text(_bare_address(entry)))
    return addresses


def recover_folded_addresses(raw: str) -> str:
    """Undo the broken folding some exporters apply to long address lines.

    Once a header line grows past roughly 998 characters these tools insert
    a fold (CRLF + space) wherever they happen to be, often mid-address. The
    fold is simply removed, CRLF + tab becomes one space, and a stray quote
    inside angle brackets (``<'addr'>``) is dropped.

    This is lossy: a legitimate space that sat at the fold point is lost too.
    """
    s = raw.replace("\r\n ", "")
    s = s.replace("\r\n\t", " ")
    s = s.replace("<'", "<")
    s = s.replace("'>", ">")
    return s
