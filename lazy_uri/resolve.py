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

"""Reference resolution, as in RFC 3986 section 5.2.2."""


from kisstdlib.exceptions import *

from .uri import BasicURI, ConstURI, URI

def _as_uri(value : BasicURI | str) -> BasicURI:
    if isinstance(value, str):
        return ConstURI(value)
    return value

def merge_paths(base : BasicURI, relative : BasicURI) -> str:
    """Replace the last segment of the path of `base` with the path of `relative`."""
    segments = base.path_structured
    if len(segments) > 1:
        segments.pop()
    segments += relative.path_structured
    return "/".join(segments)

def _set_authority_and_path(target : URI, source : BasicURI, path : str) -> None:
    authority = source.authority
    if authority != "":
        target.set_authority(authority)
        target.set_path(path, raw=True)
    else:
        # an empty authority can only be seen when a path follows it
        target.set_path(path, raw=True)
        if source.has_authority():
            target.set_authority("")

def resolve(base : BasicURI | str, relative : BasicURI | str) -> URI:
    """Resolve a `relative` reference against a `base` URI.

       Components are copied raw, so this raises `InvalidURIArgument` when
       a copied component has characters that are not allowed in it.
    """
    base = _as_uri(base)
    relative = _as_uri(relative)

    if relative.has_scheme():
        return URI(relative).normalize_path()

    target = URI()
    if base.has_scheme():
        target.set_scheme(base.scheme)

    query_source : BasicURI
    if relative.has_authority():
        _set_authority_and_path(target, relative, relative.path)
        query_source = relative
        normalize = True
    else:
        if not relative.has_path():
            path = base.path
            query_source = relative if relative.has_query() else base
            normalize = False
        elif relative.is_absolute():
            path = relative.path
            query_source = relative
            normalize = True
        else:
            path = merge_paths(base, relative)
            query_source = relative
            normalize = True
        _set_authority_and_path(target, base, path)

    if query_source.has_query():
        target.set_query(query_source.query, raw=True)
    if relative.has_fragment():
        target.set_fragment(relative.fragment, raw=True)
    if normalize:
        target.normalize_path()
    return target

rfc3986_base = "http://a/b/c/d;p?q"

rfc3986_normal_examples = [
    ("g:h", "g:h"),
    ("g", "http://a/b/c/g"),
    ("./g", "http://a/b/c/g"),
    ("g/", "http://a/b/c/g/"),
    ("/g", "http://a/g"),
    ("//g", "http://g"),
    ("?y", "http://a/b/c/d;p?y"),
    ("g?y", "http://a/b/c/g?y"),
    ("#s", "http://a/b/c/d;p?q#s"),
    ("g#s", "http://a/b/c/g#s"),
    ("g?y#s", "http://a/b/c/g?y#s"),
    (";x", "http://a/b/c/;x"),
    ("g;x", "http://a/b/c/g;x"),
    ("g;x?y#s", "http://a/b/c/g;x?y#s"),
    ("", "http://a/b/c/d;p?q"),
    (".", "http://a/b/c/"),
    ("./", "http://a/b/c/"),
    ("..", "http://a/b/"),
    ("../", "http://a/b/"),
    ("../g", "http://a/b/g"),
    ("../..", "http://a/"),
    ("../../", "http://a/"),
    ("../../g", "http://a/g"),
]

rfc3986_abnormal_examples = [
    ("../../../g", "http://a/g"),
    ("../../../../g", "http://a/g"),
    ("/./g", "http://a/g"),
    ("/../g", "http://a/g"),
    ("g.", "http://a/b/c/g."),
    (".g", "http://a/b/c/.g"),
    ("g..", "http://a/b/c/g.."),
    ("..g", "http://a/b/c/..g"),
    ("./../g", "http://a/b/g"),
    ("./g/.", "http://a/b/c/g/"),
    ("g/./h", "http://a/b/c/g/h"),
    ("g/../h", "http://a/b/c/h"),
    ("g;x=1/./y", "http://a/b/c/g;x=1/y"),
    ("g;x=1/../y", "http://a/b/c/y"),
    ("g?y/./x", "http://a/b/c/g?y/./x"),
    ("g?y/../x", "http://a/b/c/g?y/../x"),
    ("g#s/./x", "http://a/b/c/g#s/./x"),
    ("g#s/../x", "http://a/b/c/g#s/../x"),
    ("http:g", "http:g"),
]

def test_rfc3986_examples() -> None:
    for relative, expected in rfc3986_normal_examples + rfc3986_abnormal_examples:
        got = resolve(rfc3986_base, relative)
        if got != expected:
            raise CatastrophicFailure("while resolving %s against %s, got %s, expected %s", repr(relative), repr(rfc3986_base), repr(got.string), repr(expected))

def test_resolve() -> None:
    base = ConstURI("http://a/b/c/d;p?q")
    assert base.resolve("g") == "http://a/b/c/g"
    assert base.resolve(ConstURI("../g")) == "http://a/b/g"
    assert resolve(URI("http://a/b/c/d;p?q"), URI("g")) == "http://a/b/c/g"

    # inputs are left alone
    relative = URI("../g")
    resolve(base, relative)
    assert relative == "../g"
    assert base == "http://a/b/c/d;p?q"

def test_resolve_authorities() -> None:
    assert resolve("http://a", "g") == "http://a/g"
    assert resolve("http://u:p@a:8080/b/c", "d?x#y") == "http://u:p@a:8080/b/d?x#y"
    assert resolve("http://a/b", "//u@c:1/d/../e") == "http://u@c:1/e"
    assert resolve("file:///etc/hosts", "passwd") == "file:///etc/passwd"
    assert resolve("file:///etc/hosts", "?x") == "file:///etc/hosts?x"
    assert resolve("https://[::1]:8443/a/b", "../c") == "https://[::1]:8443/c"

def test_resolve_relative_base() -> None:
    assert resolve("a", "b") == "a/b"
    assert resolve("a/b", "c") == "a/c"
    assert resolve("urn:example:a", "#f") == "urn:example:a#f"

def test_resolve_schemeless_base() -> None:
    assert resolve("//h/p/q", "r") == "//h/p/r"
    assert resolve("//h/p", "?x") == "//h/p?x"
    assert resolve("/a/b", "c") == "/a/c"
    assert resolve("/a/b", "//c") == "//c"
    assert resolve("../g?x", "#f").scheme == ""

def test_resolve_colon_in_first_segment() -> None:
    assert resolve("", "./g:h") == "./g:h"
    assert resolve("a/b", "./g:h") == "a/g:h"
    assert resolve("/a/b", "./g:h") == "/a/g:h"
    assert resolve("http://a/b", "./g:h") == "http://a/g:h"
    assert resolve("x", "..//g") == "/.//g"

def test_resolve_invalid() -> None:
    from .exceptions import InvalidURIArgument
    try:
        resolve("http://a/b", "c d")
    except InvalidURIArgument:
        pass
    else:
        assert False
