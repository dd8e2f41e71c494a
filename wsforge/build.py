"""Compiles the example programs with flags chosen from the environment."""

from __future__ import annotations

import os
import subprocess
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterator, Mapping, Sequence

EXAMPLE_FILES = (
    "SecureGzipFileServer", "Precompress", "EchoBody", "HelloWorldThreaded",
    "Http3Server", "Broadcast", "HelloWorld", "Crc32", "ServerName",
    "EchoServer", "BroadcastingEchoServer", "UpgradeSync", "UpgradeAsync",
    "ParameterRoutes",
)

FAILURE_STATUS = 255

_PLACEHOLDER_TARGETS = ("capi", "clean", "install", "all")


class BuildError(RuntimeError):
    """Raised when a compiler command fails."""


@dataclass(frozen=True)
class BuildFlags:
    """Compiler, linker and flag settings for building the examples."""

    cxxflags: str
    cflags: str
    ldflags: str
    cc: str
    cxx: str
    exec_suffix: str


def env_is(env: str, target: str, environ: Mapping[str, str] | None = None) -> bool:
    """True if the environment variable is set to exactly the target value."""
    source = os.environ if environ is None else environ
    return source.get(env) == target


def build_flags(environ: Mapping[str, str] | None = None) -> BuildFlags:
    """Work out the build flags from WITH_* and compiler variables."""
    env = os.environ if environ is None else environ

    cxxflags = env.get("CXXFLAGS", "")
    cflags = env.get("CFLAGS", "")
    ldflags = env.get("LDFLAGS", "")

    cxxflags += (" -march=native -O3 -Wpedantic -Wall -Wextra -Wsign-conversion"
                 " -Wconversion -std=c++2b -Isrc -IuSockets/src")
    ldflags += " uSockets/*.o"

    if env_is("WITH_LIBDEFLATE", "1", env):
        ldflags += " libdeflate/libdeflate.a"
        cxxflags += " -DUWS_USE_LIBDEFLATE -I libdeflate"

    if not env_is("WITH_LTO", "0", env):
        cxxflags += " -flto=auto"

    if not env_is("WITH_ZLIB", "0", env):
        ldflags += " -lz"
    else:
        cxxflags += " -DUWS_NO_ZLIB"

    if env_is("WITH_PROXY", "1", env):
        cxxflags += " -DUWS_WITH_PROXY"

    if env_is("WITH_QUIC", "1", env):
        cxxflags += " -DLIBUS_USE_QUIC"
        ldflags += " -pthread -lz -lm uSockets/lsquic/src/liblsquic/liblsquic.a"

    if env_is("WITH_BORINGSSL", "1", env):
        cflags += " -I uSockets/boringssl/include -pthread -DLIBUS_USE_OPENSSL"
        ldflags += (" -pthread uSockets/boringssl/build/ssl/libssl.a"
                    " uSockets/boringssl/build/crypto/libcrypto.a")
    elif env_is("WITH_OPENSSL", "1", env):
        ldflags += " -lssl -lcrypto"
    elif env_is("WITH_WOLFSSL", "1", env):
        ldflags += " -L/usr/local/lib -lwolfssl"

    if env_is("WITH_LIBUV", "1", env):
        ldflags += " -luv"

    if env_is("WITH_ASIO", "1", env):
        cxxflags += " -pthread"
        ldflags += " -lpthread"

    if env_is("WITH_ASAN", "1", env):
        cxxflags += " -fsanitize=address -g"
        ldflags += " -lasan"

    return BuildFlags(
        cxxflags=cxxflags,
        cflags=cflags,
        ldflags=ldflags,
        cc=env.get("CC") or "cc",
        cxx=env.get("CXX") or "g++",
        exec_suffix=env.get("EXEC_SUFFIX", ""),
    )


def example_commands(flags: BuildFlags) -> Iterator[str]:
    """Yield one compiler command per example program."""
    for name in EXAMPLE_FILES:
        yield (f"{flags.cxx} {flags.cxxflags} examples/{name}.cpp {flags.ldflags}"
               f" -o {name}{flags.exec_suffix}")


def run(command: str) -> int:
    """Echo a shell command, run it and return its exit status."""
    print(f"--> {command}\n")
    return subprocess.call(command, shell=True)


def _build_examples(flags: BuildFlags) -> None:
    commands = list(example_commands(flags))
    with ThreadPoolExecutor() as pool:
        statuses = list(pool.map(run, commands))
    failed = [cmd for cmd, status in zip(commands, statuses) if status]
    if failed:
        raise BuildError(f"command failed: {failed[0]}")


def main(argv: Sequence[str] | None = None) -> int:
    """Build the named target; returns the process exit status."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("usage: build <examples|capi|clean|install|all>", file=sys.stderr)
        return 2
    target = args[0]
    if target == "examples":
        try:
            _build_examples(build_flags())
        except BuildError as exc:
            print(exc, file=sys.stderr)
            return FAILURE_STATUS
    elif target in _PLACEHOLDER_TARGETS:
        print(f"{target} target does nothing yet")
    return 0


if __name__ == "__main__":
    sys.exit(main())