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

"""Literal-syntax predicates for URI parts: schemes, ports, IP addresses,
   host names, percent-encoded components.
"""

import re as _re

from .charset import *

__all__ = ["is_digit", "is_scheme", "is_pct_encoded", "is_query",
           "is_ipv4", "is_ipv6", "is_ip", "is_ipvfuture", "is_ip_literal", "is_reg_name", "is_host"]

def is_digit(value : str) -> bool:
    """`1*DIGIT`"""
    return value != "" and DIGIT.contains(value)

def is_scheme(value : str) -> bool:
    """`ALPHA *( ALPHA / DIGIT / "+" / "-" / "." )`"""
    return value != "" and value[0] in ALPHA and SCHEME_NOT_FIRST.contains(value[1:])

pct_encoded_re = _re.compile(r"%[0-9A-Fa-f]{2}")

def is_pct_encoded(value : str, allowed : Charset) -> bool:
    """Check that `value` consists only of characters from `allowed` and
       well-formed `%XX` escapes.
    """
    pos = 0
    vlen = len(value)
    while pos < vlen:
        c = value[pos]
        if c == "%":
            if pct_encoded_re.match(value, pos) is None:
                return False
            pos += 3
        elif c in allowed:
            pos += 1
        else:
            return False
    return True

def is_query(value : str) -> bool:
    return is_pct_encoded(value, QUERY_OR_FRAGMENT_NOT_PCT_ENCODED)

# dec-octet
dec_octet_str = r"(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9][0-9]|[0-9])"
ipv4_str = rf"{dec_octet_str}(?:\.{dec_octet_str}){{3}}"
ipv4_re = _re.compile(ipv4_str)

h16_str = r"[0-9A-Fa-f]{1,4}"
ls32_str = rf"(?:{h16_str}:{h16_str}|{ipv4_str})"

def h16s_str(lo : int, hi : int) -> str:
    """`lo` to `hi` repetitions of `h16 ":"`."""
    return rf"(?:{h16_str}:){{{lo},{hi}}}"

def h16_before_str(n : int) -> str:
    """`[ *n( h16 ":" ) h16 ]`"""
    return rf"(?:{h16s_str(0, n)}{h16_str})?"

# IPv6address from RFC 3986, section 3.2.2
ipv6_str = "|".join([
    rf"{h16s_str(6, 6)}{ls32_str}",
    rf"::{h16s_str(5, 5)}{ls32_str}",
    rf"(?:{h16_str})?::{h16s_str(4, 4)}{ls32_str}",
    rf"{h16_before_str(1)}::{h16s_str(3, 3)}{ls32_str}",
    rf"{h16_before_str(2)}::{h16s_str(2, 2)}{ls32_str}",
    rf"{h16_before_str(3)}::{h16_str}:{ls32_str}",
    rf"{h16_before_str(4)}::{ls32_str}",
    rf"{h16_before_str(5)}::{h16_str}",
    rf"{h16_before_str(6)}::",
])
ipv6_re = _re.compile(rf"(?:{ipv6_str})")

ipvfuture_re = _re.compile(r"v[0-9A-Fa-f]+\.[" + _re.escape(IPV_FUTURE_LAST_PART.string) + r"]+")

def is_ipv4(value : str) -> bool:
    return ipv4_re.fullmatch(value) is not None

def is_ipv6(value : str) -> bool:
    return ipv6_re.fullmatch(value) is not None

def is_ip(value : str) -> bool:
    return is_ipv4(value) or is_ipv6(value)

def is_ipvfuture(value : str) -> bool:
    return ipvfuture_re.fullmatch(value) is not None

def is_ip_literal(value : str) -> bool:
    """`"[" ( IPv6address / IPvFuture ) "]"`"""
    if len(value) < 2 or value[0] != "[" or value[-1] != "]":
        return False
    inner = value[1:-1]
    return is_ipv6(inner) or is_ipvfuture(inner)

ipv4_like_re = _re.compile(r"[0-9.]+")

def is_reg_name(value : str) -> bool:
    return is_pct_encoded(value, REG_NAME_NOT_PCT_ENCODED)

def is_host(value : str) -> bool:
    """Check that `value` is a syntactically valid, non-empty host: an IP literal,
       an IPv4 address, or a registered name. Registered names that look like
       broken IPv4 addresses (e.g. "260.1.2.3") are rejected.
    """
    if value == "":
        return False
    elif is_ip_literal(value) or is_ipv4(value):
        return True
    elif ipv4_like_re.fullmatch(value) is not None:
        return False
    return is_reg_name(value)

def test_is_digit() -> None:
    for c in "0123456789":
        assert is_digit(c)
    for c in "abcxyz.-":
        assert not is_digit(c)
    assert is_digit("123")
    assert not is_digit("1.3")
    assert not is_digit("")

def test_is_scheme() -> None:
    for v in ["http", "https", "svn+ssh", "a", "z39.50r", "X-Y"]:
        assert is_scheme(v), v
    for v in ["", "1http", "+a", "ht tp", "http:", "ht/tp", "é"]:
        assert not is_scheme(v), v

def test_is_pct_encoded() -> None:
    assert is_pct_encoded("", UNRESERVED)
    assert is_pct_encoded("a%20b%2f", UNRESERVED)
    assert not is_pct_encoded("a b", UNRESERVED)
    assert not is_pct_encoded("a%2", UNRESERVED)
    assert not is_pct_encoded("a%zz", UNRESERVED)
    assert is_query("a=1&b=%20/?:@")
    assert not is_query("a#b")

def test_is_ipv4() -> None:
    for v in ["255.255.255.255", "127.0.0.1", "0.0.0.0", "192.168.0.0", "192.168.0.255"]:
        assert is_ipv4(v), v
    for v in ["256.1.1.1", "192.168.1.256", "1.2.3", "1.2.3.4.5", "01.2.3.4", "a.b.c.d", ""]:
        assert not is_ipv4(v), v

ipv6_valids = [
    "0102:0304:0506:0708:090a:0b0c:0d0e:0f00",
    "0102:0304:0506:0708:090a:0B0C:0d0E:0F00",
    "fd11::abcd:e0e0:d10e:0001",
    "ff03::0b",
    "::",
    "::1",
    "64:ff9b::100.200.15.4",
    "2001:db8::abc:def1:127.0.0.1",
]

ipv6_invalids = [
    # "::" must stand for at least one group
    "fd11:1234:5678:abcd::abcd:e0e0:d10e:1000",
    "2001:db8::a::b",
    "2001:db8::abcd:efgh",
    "1:2:3:4:5:6:7:8:9",
    "2001:db8::abc:def12:1:2",
    "64:ff9b::123.231.0.257",
    "64:ff9b::1.22.33",
    "64:ff9b::1.22.33.44.5",
    ".",
    ":.",
    "::.",
    ":f:0:0:c:0:f:f:.",
    "",
]

def test_is_ipv6() -> None:
    for v in ipv6_valids:
        assert is_ipv6(v), v
        assert is_ip(v), v
        assert is_ip_literal("[" + v + "]"), v
        assert is_host("[" + v + "]"), v

    for v in ipv6_invalids:
        assert not is_ipv6(v), v
        assert not is_host("[" + v + "]"), v

def test_is_ip_literal() -> None:
    assert is_ip_literal("[v1.fe80::a+en1]")
    assert is_ipvfuture("vF.x:y")
    assert not is_ipvfuture("v.x")
    assert not is_ipvfuture("vg.x")
    assert not is_ip_literal("::1")
    assert not is_ip_literal("[::1")
    assert not is_ip_literal("[]")

def test_is_host() -> None:
    for v in ["localhost", "one.com", "example.notcom", "192.168.0.1",
              "255.255.255.255", "[::1]", "127.0.0.1", "ex%41mple.org"]:
        assert is_host(v), v
    for v in ["", "260.1.2.3", "&^%&^%$&^%&^%$&^%$#@%$#@@!~#!@", "a b", "a:b"]:
        assert not is_host(v), v
