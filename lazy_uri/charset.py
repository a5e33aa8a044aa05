# Copyright (c) 2024 The lazy-uri authors
#
# This file is a part of `lazy-uri` project.
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program. If not, see <http://www.gnu.org/licenses/>.

"""Sets of characters allowed in different parts of a URI, composed from
   RFC 3986 (https://tools.ietf.org/html/rfc3986) productions.
"""

import typing as _t

from gettext import gettext

from kisstdlib.exceptions import *

__all__ = ["CharsetPart", "Charset", "charset_range",
           "ALPHA", "DIGIT", "HEXDIG", "SCHEME_NOT_FIRST", "UNRESERVED", "GEN_DELIMS", "SUB_DELIMS",
           "USER_INFO_NOT_PCT_ENCODED", "USERNAME_NOT_PCT_ENCODED", "AUTHORITY_NOT_PCT_ENCODED",
           "IPV_FUTURE_LAST_PART", "REG_NAME_NOT_PCT_ENCODED", "PCHAR_NOT_PCT_ENCODED", "PATH_NOT_PCT_ENCODED",
           "QUERY_OR_FRAGMENT_NOT_PCT_ENCODED", "QUERY_PARAM_NOT_PCT_ENCODED", "ALLOWED_CHARACTERS_IN_URI",
           "charsets", "by_name"]

CharsetPart = _t.Union[str, "Charset"]

class Charset:
    """An immutable set of characters.

       `Charset("abc", other_charset, ...)` is the union of all the characters
       of all the given parts.
    """

    __slots__ = ["_chars", "_string"]

    _chars : frozenset[str]
    _string : str

    def __init__(self, *parts : CharsetPart) -> None:
        chars : set[str] = set()
        for p in parts:
            if isinstance(p, Charset):
                chars.update(p._chars)
            else:
                chars.update(p)
        self._chars = frozenset(chars)
        self._string = "".join(sorted(chars))

    def contains(self, value : str) -> bool:
        """Check that every character of `value` is in this set.
           An empty `value` is trivially contained.
        """
        chars = self._chars
        for c in value:
            if c not in chars:
                return False
        return True

    def __contains__(self, value : str) -> bool:
        return self.contains(value)

    def union(self, *others : CharsetPart) -> "Charset":
        return Charset(self, *others)

    def __or__(self, other : CharsetPart) -> "Charset":
        return Charset(self, other)

    def __len__(self) -> int:
        return len(self._chars)

    def __iter__(self) -> _t.Iterator[str]:
        return iter(self._string)

    def __eq__(self, other : _t.Any) -> bool:
        if not isinstance(other, Charset):
            return NotImplemented
        return self._chars == other._chars

    def __hash__(self) -> int:
        return hash(self._chars)

    @property
    def string(self) -> str:
        """All the characters of this set, sorted."""
        return self._string

    def __repr__(self) -> str:
        return f"<Charset {self._string!r}>"

def charset_range(first : str, last : str) -> str:
    return "".join(map(chr, range(ord(first), ord(last) + 1)))

ALPHA = Charset(charset_range("a", "z"), charset_range("A", "Z"))
DIGIT = Charset(charset_range("0", "9"))
HEXDIG = Charset(DIGIT, charset_range("a", "f"), charset_range("A", "F"))

# second and later characters of "scheme"
SCHEME_NOT_FIRST = Charset(ALPHA, DIGIT, "+-.")

UNRESERVED = Charset(ALPHA, DIGIT, "-._~")
GEN_DELIMS = Charset(":/?#[]@")
SUB_DELIMS = Charset("!$&'()*+,;=")

# the following leave out "pct-encoded"
USER_INFO_NOT_PCT_ENCODED = Charset(UNRESERVED, SUB_DELIMS, ":")
USERNAME_NOT_PCT_ENCODED = Charset(UNRESERVED, SUB_DELIMS)
AUTHORITY_NOT_PCT_ENCODED = Charset(USER_INFO_NOT_PCT_ENCODED, "@[]")
IPV_FUTURE_LAST_PART = Charset(UNRESERVED, SUB_DELIMS, ":")
REG_NAME_NOT_PCT_ENCODED = Charset(UNRESERVED, SUB_DELIMS)
PCHAR_NOT_PCT_ENCODED = Charset(UNRESERVED, SUB_DELIMS, ":@")
PATH_NOT_PCT_ENCODED = Charset(PCHAR_NOT_PCT_ENCODED, "/")
QUERY_OR_FRAGMENT_NOT_PCT_ENCODED = Charset(PCHAR_NOT_PCT_ENCODED, "/?")

# names and values of `name=value` query parameters
QUERY_PARAM_NOT_PCT_ENCODED = Charset("".join(c for c in QUERY_OR_FRAGMENT_NOT_PCT_ENCODED if c not in "&="))

# https://developer.mozilla.org/en-US/docs/Web/JavaScript/Reference/Global_Objects/encodeURI
ALLOWED_CHARACTERS_IN_URI = Charset(ALPHA, DIGIT, ";,/?:@&=+$-_.!~*'()#")

charsets : dict[str, Charset] = {
    "alpha": ALPHA,
    "digit": DIGIT,
    "hexdig": HEXDIG,
    "scheme-not-first": SCHEME_NOT_FIRST,
    "unreserved": UNRESERVED,
    "gen-delims": GEN_DELIMS,
    "sub-delims": SUB_DELIMS,
    "userinfo": USER_INFO_NOT_PCT_ENCODED,
    "username": USERNAME_NOT_PCT_ENCODED,
    "authority": AUTHORITY_NOT_PCT_ENCODED,
    "ipvfuture": IPV_FUTURE_LAST_PART,
    "reg-name": REG_NAME_NOT_PCT_ENCODED,
    "pchar": PCHAR_NOT_PCT_ENCODED,
    "path": PATH_NOT_PCT_ENCODED,
    "query": QUERY_OR_FRAGMENT_NOT_PCT_ENCODED,
    "fragment": QUERY_OR_FRAGMENT_NOT_PCT_ENCODED,
    "query-param": QUERY_PARAM_NOT_PCT_ENCODED,
    "uri": ALLOWED_CHARACTERS_IN_URI,
}

def by_name(name : str) -> Charset:
    try:
        return charsets[name]
    except KeyError:
        raise Failure(gettext("unknown charset `%s`, expected one of: %s"), name, ", ".join(charsets.keys()))

def test_Charset() -> None:
    assert len(ALPHA) == 52
    assert len(DIGIT) == 10
    assert len(HEXDIG) == 22
    assert "a" in ALPHA and "Z" in ALPHA and "0" not in ALPHA
    assert ALPHA.contains("abcXYZ")
    assert not ALPHA.contains("abc1")
    assert ALPHA.contains("")

    assert ALPHA.union(DIGIT) == Charset(ALPHA, DIGIT)
    assert ALPHA | DIGIT == ALPHA.union(DIGIT)
    assert ALPHA | "+" == Charset(ALPHA, "+")
    assert hash(ALPHA | DIGIT) == hash(DIGIT | ALPHA)
    assert ALPHA != DIGIT

    assert DIGIT.string == "0123456789"
    assert list(Charset("cab")) == ["a", "b", "c"]

def test_rfc3986_charsets() -> None:
    assert UNRESERVED.contains("azAZ09-._~")
    assert not UNRESERVED.contains(" ")
    assert not UNRESERVED.contains("%")
    assert SUB_DELIMS.string == "!$&'()*+,;="
    assert SCHEME_NOT_FIRST.contains("svn+ssh-1.0")
    assert ":" in USER_INFO_NOT_PCT_ENCODED and "@" not in USER_INFO_NOT_PCT_ENCODED
    assert ":" not in REG_NAME_NOT_PCT_ENCODED
    assert ":" in PCHAR_NOT_PCT_ENCODED and "@" in PCHAR_NOT_PCT_ENCODED and "/" not in PCHAR_NOT_PCT_ENCODED
    assert "/" in PATH_NOT_PCT_ENCODED and "?" not in PATH_NOT_PCT_ENCODED
    assert QUERY_OR_FRAGMENT_NOT_PCT_ENCODED.contains("/?:@&=")
    assert "#" not in QUERY_OR_FRAGMENT_NOT_PCT_ENCODED
    assert "&" not in QUERY_PARAM_NOT_PCT_ENCODED and "=" not in QUERY_PARAM_NOT_PCT_ENCODED
    assert "#" in ALLOWED_CHARACTERS_IN_URI and "%" not in ALLOWED_CHARACTERS_IN_URI

    # every named set is a subset of what may appear in a URI unencoded
    everything = Charset(UNRESERVED, GEN_DELIMS, SUB_DELIMS)
    for name, cs in charsets.items():
        assert everything.contains(cs.string), name

def test_by_name() -> None:
    assert by_name("unreserved") is UNRESERVED
    try:
        by_name("nope")
    except Failure as exc:
        assert "nope" in str(exc)
    else:
        assert False
