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

"""Percent-encoding and decoding of URI components, and dot-segment removal."""

from kisstdlib.exceptions import *

from .charset import *

__all__ = ["encode_uri_component", "decode_uri_component", "encode_uri", "decode_uri", "remove_dot_segments"]

_quoters : dict[Charset, dict[str, str]] = {}

def _quoter(allowed : Charset) -> dict[str, str]:
    try:
        return _quoters[allowed]
    except KeyError:
        pass

    # build a dictionary from ASCII characters to their quotes
    quoter = {}
    for b in range(0, 128):
        c = chr(b)
        quoter[c] = c if c in allowed else "%{:02X}".format(b)
    _quoters[allowed] = quoter
    return quoter

def encode_uri_component(element : str, allowed : Charset) -> str:
    """Percent-encode every character of `element` that is not in `allowed`.
       Non-ASCII characters are encoded as their UTF-8 bytes.

       This is almost the same as `encodeURIComponent` in JavaScript and
       `urllib.parse.quote` in Python, except the set of characters that are
       left as-is is given explicitly.
    """
    quoter = _quoter(allowed)
    res = []
    for c in element:
        q = quoter.get(c, None)
        if q is None:
            if c in allowed:
                q = c
            else:
                q = "".join(["%{:02X}".format(b) for b in c.encode("utf-8", "surrogatepass")])
        res.append(q)
    return "".join(res)

def decode_uri_component(encoded : str, allowed : Charset) -> str | None:
    """Decode `%XX` escapes in `encoded`.

       Returns `None` when `encoded` contains an unescaped character that is
       not in `allowed`, a malformed or truncated escape, or escapes that do
       not decode as UTF-8. Decoding never fails partially.
    """
    res = bytearray()
    pos = 0
    elen = len(encoded)
    while pos < elen:
        c = encoded[pos]
        if c == "%":
            hexits = encoded[pos + 1:pos + 3]
            if len(hexits) != 2 or not HEXDIG.contains(hexits):
                return None
            res.append(int(hexits, 16))
            pos += 3
        elif c in allowed:
            res += c.encode("utf-8")
            pos += 1
        else:
            return None

    try:
        return res.decode("utf-8")
    except UnicodeDecodeError:
        return None

def encode_uri(uri : str) -> str:
    """Like `encodeURI` in JavaScript."""
    return encode_uri_component(uri, ALLOWED_CHARACTERS_IN_URI)

def decode_uri(uri : str) -> str | None:
    """Like `decodeURI` in JavaScript, but returns `None` on malformed input."""
    return decode_uri_component(uri, ALLOWED_CHARACTERS_IN_URI)

def remove_dot_segments(path : str) -> str:
    """Apply the "remove_dot_segments" routine of RFC 3986, section 5.2.4, to
       `path`, i.e. interpret and remove "." and ".." segments.
    """
    out : list[str] = []
    while path != "":
        # A
        if path.startswith("../"):
            path = path[3:]
        elif path.startswith("./"):
            path = path[2:]
        # B
        elif path.startswith("/./"):
            path = path[2:]
        elif path == "/.":
            path = "/"
        # C
        elif path.startswith("/../"):
            path = path[3:]
            if len(out) > 0:
                out.pop()
        elif path == "/..":
            path = "/"
            if len(out) > 0:
                out.pop()
        # D
        elif path == "." or path == "..":
            path = ""
        # E
        else:
            end = path.find("/", 1 if path.startswith("/") else 0)
            if end == -1:
                out.append(path)
                break
            out.append(path[:end])
            path = path[end:]
    return "".join(out)

def test_encode_uri_component() -> None:
    assert encode_uri_component(" ", UNRESERVED) == "%20"
    assert encode_uri_component("", UNRESERVED) == ""
    assert encode_uri_component("a/b c", PATH_NOT_PCT_ENCODED) == "a/b%20c"
    assert encode_uri_component("100%", UNRESERVED) == "100%25"
    assert encode_uri_component("a&b=c", QUERY_PARAM_NOT_PCT_ENCODED) == "a%26b%3Dc"
    assert encode_uri_component("é", UNRESERVED) == "%C3%A9"
    assert encode_uri_component("\n", ALLOWED_CHARACTERS_IN_URI) == "%0A"
    # hex digits are uppercase
    assert encode_uri_component("\xff", Charset()) == "%C3%BF"

def test_decode_uri_component() -> None:
    assert decode_uri_component("%20", UNRESERVED) == " "
    assert decode_uri_component("", UNRESERVED) == ""
    assert decode_uri_component("a%2fb%2Fc", UNRESERVED) == "a/b/c"
    assert decode_uri_component("%C3%A9t%C3%A9", UNRESERVED) == "été"
    # decoded characters are not re-validated
    assert decode_uri_component("%23", UNRESERVED) == "#"

    # unescaped and disallowed
    assert decode_uri_component("a b", UNRESERVED) is None
    assert decode_uri_component("a/b", UNRESERVED) is None
    # bad escapes
    assert decode_uri_component("%zz", UNRESERVED) is None
    assert decode_uri_component("%2g", UNRESERVED) is None
    # truncated escapes
    assert decode_uri_component("abc%", UNRESERVED) is None
    assert decode_uri_component("abc%2", UNRESERVED) is None
    # not UTF-8
    assert decode_uri_component("%FF", UNRESERVED) is None
    assert decode_uri_component("%C3", UNRESERVED) is None

def test_encode_decode_roundtrip() -> None:
    for text in ["", "plain", "with space", "50% off", "a/b?c#d", "naïve ☃", "%41"]:
        for cs in [UNRESERVED, PATH_NOT_PCT_ENCODED, QUERY_OR_FRAGMENT_NOT_PCT_ENCODED]:
            assert decode_uri_component(encode_uri_component(text, cs), cs) == text, (text, cs)

def test_encode_decode_uri() -> None:
    assert encode_uri("http://example.org/a b?q=ü#x") == "http://example.org/a%20b?q=%C3%BC#x"
    assert decode_uri("http://example.org/a%20b") == "http://example.org/a b"
    assert decode_uri("http://example.org/a b") is None

def test_remove_dot_segments() -> None:
    def check(path : str, expected : str) -> None:
        res = remove_dot_segments(path)
        if res != expected:
            raise CatastrophicFailure("while evaluating remove_dot_segments of `%s`, expected `%s`, got `%s`", path, expected, res)

    check("", "")
    check("/", "/")
    check("/a/b/c/./../../g", "/a/g")
    check("mid/content=5/../6", "mid/6")
    check("/b/c/.", "/b/c/")
    check("/b/c/..", "/b/")
    check("/b/c/../..", "/")
    check("/../../g", "/g")
    check("../g", "g")
    check("./g", "g")
    check(".", "")
    check("..", "")
    check("/./g", "/g")
    check("/g.", "/g.")
    check("/.g", "/.g")
    check("/..g", "/..g")
    check("a//b/../c", "a//c")
