"""A reentrant getopt-style command line option parser with long options."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

MSG_INVALID = "invalid option"
MSG_MISSING = "option requires an argument"
MSG_TOOMANY = "option takes no arguments"

# Room for the message in a fixed-size error text, including the closing quote.
_ERRMSG_LIMIT = 62


class ArgType(IntEnum):
    """Whether an option takes an argument."""

    NONE = 0
    REQUIRED = 1
    OPTIONAL = 2


@dataclass(frozen=True)
class LongOption:
    """A GNU-style long option, optionally paired with a short option."""

    longname: str | None
    shortname: str | None = None
    argtype: ArgType = ArgType.NONE


class OptionError(ValueError):
    """Raised for an unknown option or a missing or unexpected argument."""

    def __init__(self, message: str, option: str) -> None:
        super().__init__(message)
        self.option = option


def _error(message: str, data: str) -> OptionError:
    prefix = f"{message} -- '"
    room = max(0, _ERRMSG_LIMIT - len(prefix))
    return OptionError(f"{prefix}{data[:room]}'", data)


def _is_dashdash(arg: str | None) -> bool:
    return arg == "--"


def _is_shortopt(arg: str | None) -> bool:
    return arg is not None and len(arg) >= 2 and arg[0] == "-" and arg[1] != "-"


def _is_longopt(arg: str | None) -> bool:
    return arg is not None and len(arg) >= 3 and arg.startswith("--")


def _argtype(optstring: str, char: str) -> ArgType | None:
    if char == ":":
        return None
    position = optstring.find(char)
    if position < 0:
        return None
    if optstring[position + 1:position + 2] != ":":
        return ArgType.NONE
    if optstring[position + 2:position + 3] == ":":
        return ArgType.OPTIONAL
    return ArgType.REQUIRED


def _longopts_match(longname: str | None, option: str) -> bool:
    if longname is None:
        return False
    return option.split("=", 1)[0] == longname


class OptionParser:
    """Parses options from an argument vector whose first item is the program.

    By default non-option arguments are moved to the end of ``argv`` as
    parsing proceeds; set ``permute`` to False to stop at the first one.
    """

    def __init__(self, argv: Sequence[str]) -> None:
        self.argv: list[str] = list(argv)
        self.permute = True
        self.optind = 1
        self.optopt: str | None = None
        self.optarg: str | None = None
        self.subopt = 0

    def _arg(self, index: int) -> str | None:
        return self.argv[index] if 0 <= index < len(self.argv) else None

    def _move_nonoption(self, index: int) -> None:
        nonoption = self.argv.pop(index)
        self.argv.insert(self.optind - 1, nonoption)

    def parse(self, optstring: str) -> str | None:
        """Return the next option character, or None when options are done.

        A character followed by one colon takes a required argument, by two
        colons an optional one. Raises OptionError on a bad option.
        """
        option = self._arg(self.optind)
        self.optopt = None
        self.optarg = None
        if option is None:
            return None
        if _is_dashdash(option):
            self.optind += 1
            return None
        if not _is_shortopt(option):
            if not self.permute:
                return None
            index = self.optind
            self.optind += 1
            try:
                return self.parse(optstring)
            finally:
                self._move_nonoption(index)
                self.optind -= 1

        position = self.subopt + 1
        char = option[position]
        rest = option[position + 1:]
        self.optopt = char
        kind = _argtype(optstring, char)
        following = self._arg(self.optind + 1)

        if kind is None:
            self.optind += 1
            raise _error(MSG_INVALID, char)
        if kind is ArgType.NONE:
            if rest:
                self.subopt += 1
            else:
                self.subopt = 0
                self.optind += 1
            return char
        self.subopt = 0
        self.optind += 1
        if kind is ArgType.REQUIRED:
            if rest:
                self.optarg = rest
            elif following is not None:
                self.optarg = following
                self.optind += 1
            else:
                self.optarg = None
                raise _error(MSG_MISSING, char)
            return char
        self.optarg = rest or None
        return char

    def next_arg(self) -> str | None:
        """Step over and return the next non-option argument, or None."""
        option = self._arg(self.optind)
        self.subopt = 0
        if option is not None:
            self.optind += 1
        return option

    def _long_fallback(self, longopts: Sequence[LongOption]) -> tuple[str | None, int] | None:
        optstring = "".join(
            lo.shortname + ":" * int(lo.argtype) for lo in longopts if lo.shortname
        )
        result = self.parse(optstring)
        if result is None:
            return None
        index = -1
        for position, lo in enumerate(longopts):
            if lo.shortname == self.optopt:
                index = position
        return result, index

    def parse_long(self, longopts: Sequence[LongOption]) -> tuple[str | None, int] | None:
        """Parse the next short or long option.

        Returns (short name, index into longopts), or None when options are
        done. Long-only options give None as the short name.
        """
        option = self._arg(self.optind)
        if option is None:
            return None
        if _is_dashdash(option):
            self.optind += 1
            return None
        if _is_shortopt(option):
            return self._long_fallback(longopts)
        if not _is_longopt(option):
            if not self.permute:
                return None
            index = self.optind
            self.optind += 1
            try:
                return self.parse_long(longopts)
            finally:
                self._move_nonoption(index)
                self.optind -= 1

        self.optopt = None
        self.optarg = None
        body = option[2:]
        self.optind += 1
        for index, lo in enumerate(longopts):
            if not _longopts_match(lo.longname, body):
                continue
            self.optopt = lo.shortname
            _, sep, value = body.partition("=")
            arg = value if sep else None
            if lo.argtype is ArgType.NONE and arg is not None:
                raise _error(MSG_TOOMANY, lo.longname or "")
            if arg is not None:
                self.optarg = arg
            elif lo.argtype is ArgType.REQUIRED:
                self.optarg = self._arg(self.optind)
                if self.optarg is None:
                    raise _error(MSG_MISSING, lo.longname or "")
                self.optind += 1
            return lo.shortname, index
        raise _error(MSG_INVALID, body)