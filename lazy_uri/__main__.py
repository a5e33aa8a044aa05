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

import json as _json
import logging as _logging
import sys as _sys
import typing as _t

from gettext import gettext, ngettext

from kisstdlib import argparse
from kisstdlib.exceptions import *
from kisstdlib.io.stdio import *
from kisstdlib.logging import *

from .charset import charsets, by_name
from .quoting import encode_uri_component, decode_uri_component
from .uri import BasicURI, ConstURI, URI
from .resolve import resolve

__prog__ = "lazy-uri"

def issue(pattern : str, *args : _t.Any) -> None:
    message = pattern % args
    if stderr.isatty:
        stderr.write_str_ln("\033[31m" + message + "\033[0m")
    else:
        stderr.write_str_ln(message)
    stderr.flush()

def error(pattern : str, *args : _t.Any) -> None:
    issue(gettext("error") + ": " + pattern, *args)

def die(code : int, pattern : str, *args : _t.Any) -> _t.NoReturn:
    error(pattern, *args)
    _sys.exit(code)

Getter = _t.Callable[[BasicURI], _t.Any]

# `get --expr` values
getters : dict[str, Getter] = {
    "uri": lambda x: x.string,
    "scheme": lambda x: x.scheme,
    "authority": lambda x: x.authority,
    "user_info": lambda x: x.user_info,
    "user_info_decoded": lambda x: x.user_info_decoded,
    "username": lambda x: x.username,
    "username_decoded": lambda x: x.username_decoded,
    "password": lambda x: x.password,
    "password_decoded": lambda x: x.password_decoded,
    "host": lambda x: x.host,
    "host_decoded": lambda x: x.host_decoded,
    "host_idna": lambda x: x.host_idna,
    "top_level_domain": lambda x: x.top_level_domain,
    "second_level_domain": lambda x: x.second_level_domain,
    "subdomains": lambda x: x.subdomains,
    "port": lambda x: x.port,
    "port_number": lambda x: x.port_number,
    "path": lambda x: x.path,
    "path_decoded": lambda x: x.path_decoded,
    "query": lambda x: x.query,
    "query_decoded": lambda x: x.query_decoded,
    "fragment": lambda x: x.fragment,
    "fragment_decoded": lambda x: x.fragment_decoded,
    "encoded_uri": lambda x: x.encoded_uri,
    "decoded_uri": lambda x: x.decoded_uri,
}

# `parse` fields, with their presence checks
parse_fields : list[tuple[str, Getter]] = [
    ("scheme", lambda x: x.has_scheme()),
    ("authority", lambda x: x.has_authority()),
    ("user_info", lambda x: x.has_user_info()),
    ("host", lambda x: x.has_authority()),
    ("port", lambda x: x.has_port()),
    ("path", lambda x: x.has_path()),
    ("query", lambda x: x.has_query()),
    ("fragment", lambda x: x.has_fragment()),
]

def describe(x : BasicURI, decoded : bool) -> dict[str, str | None]:
    """Components of `x`, with `None` for absent ones."""
    res : dict[str, str | None] = {}
    for name, present in parse_fields:
        if not present(x):
            res[name] = None
            continue
        if decoded and name != "authority":
            value = getters[name + "_decoded"](x) if name + "_decoded" in getters else getters[name](x)
            if value is None:
                _logging.error(gettext("failed to decode %s of `%s`"), name, x.string)
                value = getters[name](x)
        else:
            value = getters[name](x)
        res[name] = value
    return res

def cmd_parse(cargs : _t.Any) -> None:
    for raw in cargs.uris:
        x = ConstURI(raw)
        components = describe(x, cargs.decoded)
        if cargs.format == "json":
            stdout.write_str_ln(_json.dumps(components, ensure_ascii=False))
        else:
            stdout.write_str_ln(raw)
            for name, value in components.items():
                if value is not None:
                    stdout.write_str_ln(f"  {name}: {value}")
        stdout.flush()

def cmd_get(cargs : _t.Any) -> None:
    x = ConstURI(cargs.uri)
    for expr in cargs.exprs:
        value = getters[expr](x)
        if value is None:
            _logging.error(gettext("failed to decode %s of `%s`"), expr, cargs.uri)
            continue
        stdout.write_str_ln(str(value))
    stdout.flush()

# `set` components, in the order they are applied
settable = ["scheme", "user_info", "host", "port", "path", "query", "fragment"]

def set_components(x : URI, cargs : _t.Any) -> URI:
    for name in settable:
        if getattr(cargs, "clear_" + name):
            getattr(x, "clear_" + name)()
        value = getattr(cargs, name)
        if value is None:
            continue
        try:
            if name in ("scheme", "port"):
                getattr(x, "set_" + name)(value)
            else:
                getattr(x, "set_" + name)(value, raw=cargs.raw)
        except CatastrophicFailure as exc:
            exc.elaborate(gettext("while setting %s of `%s`"), name, x.string)
            raise exc
    return x

def cmd_set(cargs : _t.Any) -> None:
    x = set_components(URI(cargs.uri), cargs)
    stdout.write_str_ln(x.string)
    stdout.flush()

def cmd_resolve(cargs : _t.Any) -> None:
    base = ConstURI(cargs.base)
    for relative in cargs.references:
        try:
            target = resolve(base, relative)
        except CatastrophicFailure as exc:
            _logging.error(gettext("failed to resolve `%s` against `%s`: %s"), relative, cargs.base, str(exc))
            continue
        stdout.write_str_ln(target.string)
    stdout.flush()

def cmd_normalize(cargs : _t.Any) -> None:
    for raw in cargs.uris:
        stdout.write_str_ln(URI(raw).normalize_path().string)
    stdout.flush()

def cmd_encode(cargs : _t.Any) -> None:
    allowed = by_name(cargs.charset)
    for value in cargs.values:
        stdout.write_str_ln(encode_uri_component(value, allowed))
    stdout.flush()

def cmd_decode(cargs : _t.Any) -> None:
    allowed = by_name(cargs.charset)
    for value in cargs.values:
        decoded = decode_uri_component(value, allowed)
        if decoded is None:
            _logging.error(gettext("`%s` is not a valid percent-encoding of a value over charset `%s`"), value, cargs.charset)
            continue
        stdout.write_str_ln(decoded)
    stdout.flush()

class ArgumentParser(argparse.BetterArgumentParser):
    def error(self, message : str) -> _t.NoReturn:
        self.print_usage(_sys.stderr)
        die(2, "%s", message)

def make_argparser() -> ArgumentParser:
    _ : _t.Callable[[str], str] = gettext

    parser = ArgumentParser(
        prog=__prog__,
        description=_("Parse, inspect, modify, normalize, and resolve `URI`s (RFC 3986) and percent-encode and -decode their components."),
        allow_abbrev = False,
        add_help = False)
    parser.add_argument("-h", "--help", action="store_true", help=_("show this help message and exit"))
    parser.add_argument("--markdown", action="store_true", help=_("show help messages formatted in Markdown"))
    parser.add_argument("--debug", action="store_true", help=_("log every rewrite of a `URI` to stderr"))

    subparsers = parser.add_subparsers(title="subcommands")

    def no_cmd(cargs : _t.Any) -> None:
        parser.print_help(stderr) # type: ignore
        _sys.exit(2)
    parser.set_defaults(func=no_cmd)

    charset_names = list(charsets.keys())

    # parse
    cmd = subparsers.add_parser("parse", help=_("print all components of given `URI`s"),
                                description = _("""Print all components of given `URI`s to stdout, skipping absent ones."""))
    cmd.add_argument("--format", choices=["text", "json"], default="text", help=_("""output format:
- `text`: the `URI` followed by indented `name: value` lines; default
- `json`: a `JSON` object per `URI`, with `null` values for absent components"""))
    cmd.add_argument("-d", "--decoded", action="store_true", help=_("percent-decode component values"))
    cmd.add_argument("uris", metavar="URI", nargs="+", type=str, help=_("input `URI`s"))
    cmd.set_defaults(func=cmd_parse)

    # get
    cmd = subparsers.add_parser("get", help=_("print chosen components of a given `URI`"),
                                description = _("""Print values of chosen components of a given `URI` to stdout, one per line."""))
    cmd.add_argument("-e", "--expr", dest="exprs", metavar="EXPR", action="append", choices=list(getters.keys()), default = [], help=_("a component to print; can be specified multiple times; one of: ") + ", ".join(f"`{name}`" for name in getters))
    cmd.add_argument("uri", metavar="URI", type=str, help=_("input `URI`"))
    cmd.set_defaults(func=cmd_get)

    # set
    cmd = subparsers.add_parser("set", help=_("modify components of a given `URI`"),
                                description = _("""Modify components of a given `URI` and print the result to stdout.

Components are cleared and set in the following order: """) + ", ".join(f"`{name}`" for name in settable) + ".")
    cmd.add_argument("--raw", action="store_true", help=_("treat values as already percent-encoded instead of encoding them"))
    for name in settable:
        opt = name.replace("_", "-")
        cmd.add_argument(f"--{opt}", dest=name, metavar=name.upper(), type=str, default=None, help=_(f"set `{name}` to this value"))
        cmd.add_argument(f"--clear-{opt}", dest=f"clear_{name}", action="store_true", help=_(f"remove `{name}` together with its delimiter"))
    cmd.add_argument("uri", metavar="URI", type=str, help=_("input `URI`"))
    cmd.set_defaults(func=cmd_set)

    # resolve
    cmd = subparsers.add_parser("resolve", help=_("resolve references against a base `URI`"),
                                description = _("""Resolve given relative references against a given base `URI`, as RFC 3986 section 5.2.2 describes, and print the results to stdout, one per line."""))
    cmd.add_argument("base", metavar="BASE", type=str, help=_("base `URI`"))
    cmd.add_argument("references", metavar="REF", nargs="+", type=str, help=_("references to resolve"))
    cmd.set_defaults(func=cmd_resolve)

    # normalize
    cmd = subparsers.add_parser("normalize", help=_("remove dot-segments from paths of given `URI`s"),
                                description = _("""Remove `.` and `..` segments from paths of given `URI`s and print the results to stdout, one per line."""))
    cmd.add_argument("uris", metavar="URI", nargs="+", type=str, help=_("input `URI`s"))
    cmd.set_defaults(func=cmd_normalize)

    # encode, decode
    for name, func, what in [("encode", cmd_encode, "percent-encode"), ("decode", cmd_decode, "percent-decode")]:
        cmd = subparsers.add_parser(name, help=_(f"{what} given values"),
                                    description = _(f"""{what.capitalize()} given values over a given charset and print the results to stdout, one per line."""))
        cmd.add_argument("-c", "--charset", choices=charset_names, default="unreserved", help=_("characters to leave as-is; default: `%(default)s`"))
        cmd.add_argument("values", metavar="VALUE", nargs="+", type=str, help=_("input values"))
        cmd.set_defaults(func=func)

    return parser

def main() -> None:
    _ : _t.Callable[[str], str] = gettext

    parser = make_argparser()

    try:
        cargs = parser.parse_args(_sys.argv[1:])
    except CatastrophicFailure as exc:
        error(str(exc))
        _sys.exit(1)

    if cargs.help:
        if cargs.markdown:
            parser = make_argparser()
            parser.set_formatter_class(argparse.MarkdownBetterHelpFormatter)
            print(parser.format_help(8192))
        else:
            print(parser.format_help())
        _sys.exit(0)

    _logging.basicConfig(level=_logging.DEBUG if cargs.debug else _logging.WARNING,
                         stream = stderr)
    errorcnt = CounterHandler()
    logger = _logging.getLogger()
    logger.addHandler(errorcnt)

    try:
        cargs.func(cargs)
    except KeyboardInterrupt:
        error("%s", _("Interrupted!"))
        errorcnt.errors += 1
    except CatastrophicFailure as exc:
        error("%s", str(exc))
        errorcnt.errors += 1
    except Exception as exc:
        stderr.write_str(str_Exception(exc))
        errorcnt.errors += 1

    stdout.flush()
    stderr.flush()

    if errorcnt.warnings > 0:
        stderr.write_str_ln(ngettext("There was %d warning!", "There were %d warnings!", errorcnt.warnings) % (errorcnt.warnings,))
    if errorcnt.errors > 0:
        stderr.write_str_ln(ngettext("There was %d error!", "There were %d errors!", errorcnt.errors) % (errorcnt.errors,))
        _sys.exit(1)
    _sys.exit(0)

def test_make_argparser() -> None:
    parser = make_argparser()

    cargs = parser.parse_args(["parse", "--format", "json", "http://a", "http://b"])
    assert cargs.func is cmd_parse
    assert cargs.format == "json"
    assert cargs.uris == ["http://a", "http://b"]
    assert not cargs.debug

    cargs = parser.parse_args(["--debug", "get", "-e", "host", "-e", "port_number", "http://a:1/"])
    assert cargs.func is cmd_get
    assert cargs.debug
    assert cargs.exprs == ["host", "port_number"]

    cargs = parser.parse_args(["decode", "--charset", "path", "%20"])
    assert cargs.func is cmd_decode
    assert cargs.charset == "path"

    cargs = parser.parse_args(["resolve", "http://a/b/c/d;p?q", "g", "../g"])
    assert cargs.func is cmd_resolve
    assert cargs.references == ["g", "../g"]

    cargs = parser.parse_args([])
    assert cargs.func is not None

def test_usage_errors() -> None:
    parser = make_argparser()
    for argv in [["set"], ["get", "-e", "nope", "http://a"], ["encode", "--charset", "nope", "x"]]:
        try:
            parser.parse_args(argv)
        except SystemExit as exc:
            assert exc.code == 2, argv
        else:
            assert False, argv

def test_describe() -> None:
    x = ConstURI("http://u@a%20b:8080/p%20q?x#f")
    assert describe(x, False) == {
        "scheme": "http",
        "authority": "u@a%20b:8080",
        "user_info": "u",
        "host": "a%20b",
        "port": "8080",
        "path": "/p%20q",
        "query": "x",
        "fragment": "f",
    }
    d = describe(x, True)
    assert d["host"] == "a b"
    assert d["path"] == "/p q"

    d = describe(ConstURI("urn:a:b"), False)
    assert d["authority"] is None
    assert d["host"] is None
    assert d["path"] == "a:b"

def test_set_components() -> None:
    parser = make_argparser()

    cargs = parser.parse_args(["set", "--scheme", "https", "--port", "8443", "--clear-query", "--fragment", "a b", "http://a/p?q"])
    assert set_components(URI(cargs.uri), cargs) == "https://a:8443/p#a%20b"

    cargs = parser.parse_args(["set", "--raw", "--path", "/a%20b", "--clear-user-info", "http://u@a/p"])
    assert set_components(URI(cargs.uri), cargs) == "http://a/a%20b"

    cargs = parser.parse_args(["set", "--port", "0", "http://a/"])
    try:
        set_components(URI(cargs.uri), cargs)
    except CatastrophicFailure as exc:
        assert "port" in str(exc)
    else:
        assert False

if __name__ == "__main__":
    main()
