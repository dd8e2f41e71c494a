# wsforge

Small building blocks for WebSocket and HTTP servers. The package has no
dependencies outside the standard library.

## What is inside

- `wsforge.topic_tree` holds `TopicTree`, a publish/subscribe router.
  Subscribers are made with `create_subscriber()` and subscribe to named
  topics with `subscribe()`. `subscribe()` returns `None` if the subscriber
  already holds that topic. `unsubscribe()` returns
  `(ok, holds_no_topics, remaining_count)`. A published message is queued
  for every subscriber of the topic except the sender. It reaches your
  callback when you call `drain()`, which drains every subscriber, or
  `drain(subscriber)`, which drains one. Each subscriber sees its messages
  in publish order. The callback is called as `(subscriber, message,
  flags)`, and `IteratorFlags.FIRST` and `IteratorFlags.LAST` mark the ends
  of the drained batch. If the callback returns a true value, the rest of
  that subscriber's batch is dropped. `publish_big` skips the queue and
  hands the message straight to a callback for each receiving subscriber.
  While `iterating_subscriber` is set to a subscriber, any subscribe or
  unsubscribe by that subscriber raises `TopicTreeError`.
  `free_subscriber()` removes a subscriber from all its topics and from
  pending deliveries.
- `wsforge.proxy_parser` holds `ProxyParser`, which parses the PROXY
  protocol version 2 header. `parse(data)` returns `(done, consumed)`:
  - Input that does not start with `\r\n\r\n` is plain HTTP and gives
    `(True, 0)`.
  - Input that is too short, or a header that is invalid, gives
    `(False, 0)`.

  After a header has been parsed, `family` holds the address family and
  `source_address` holds the 4- or 16-byte source address.
- `wsforge.options` holds `OptionParser`, a getopt-style parser.
  - `parse(optstring)` reads short options. A single colon after a letter
    means the option needs an argument, and two colons mean the argument is
    optional.
  - `parse_long(longopts)` reads GNU-style long options, given as
    `LongOption` entries with an `ArgType`.
  - The option's argument is put in `optarg`.
  - Non-option arguments are moved to the end of `argv` unless `permute` is
    false. You can step over them with `next_arg()`.
  - Errors raise `OptionError`.
- `wsforge.utils`:
  - `crc32(data, crc)` is a running CRC-32 that you can feed chunk by
    chunk. Its result is not finalised: the standard checksum is
    `~crc & 0xFFFFFFFF`.
  - `has_ext(file, ext)` tests a file name for an extension.
- `wsforge.client_config` holds the settings for a WebSocket client.
  - `WebSocketBehavior` holds the settings and handlers. Its `validate()`
    raises `ValueError` in these cases:
    - the idle timeout is non-zero and below 8 seconds;
    - the idle timeout is above 960 seconds;
    - `max_lifetime` is above 240 minutes.
  - `SocketContextOptions` holds the TLS file and cipher settings.
  - `CompressOptions` lists the compression modes.
  - `parse_ws_url(url, ssl)` splits a `ws://` or `wss://` URL into a
    `ClientEndpoint` with host, port and path. The default port is 443 when
    `ssl` is true and 80 otherwise, whatever the scheme.

## Example

```python
from wsforge.topic_tree import TopicTree

received = {}

def deliver(subscriber, message, flags):
    received.setdefault(subscriber, []).append(message)
    return False  # keep draining

tree = TopicTree(deliver)
alice = tree.create_subscriber()
bob = tree.create_subscriber()
tree.subscribe(alice, "news")
tree.subscribe(bob, "news")

tree.publish(alice, "news", "hello")   # only bob receives this
tree.drain(bob)

assert received[bob] == ["hello"]
```

## Building the example programs

The `wsforge-build` command compiles a fixed list of example programs from
`examples/*.cpp` in the current directory. It echoes each compiler command
and runs them in parallel.

The compiler and flags come from these environment variables:

- `CXX` (default `g++`)
- `CXXFLAGS`
- `LDFLAGS`
- `EXEC_SUFFIX`

Features are switched on or off with these variables:

- `WITH_ZLIB=0`
- `WITH_LTO=0`
- `WITH_OPENSSL=1`
- `WITH_BORINGSSL=1`
- `WITH_WOLFSSL=1`
- `WITH_LIBUV=1`
- `WITH_ASIO=1`
- `WITH_PROXY=1`
- `WITH_QUIC=1`
- `WITH_LIBDEFLATE=1`
- `WITH_ASAN=1`

`build_flags()` and `example_commands()` give you the resulting flags and
commands without running anything.

```sh
wsforge-build examples
```

If any compile fails, the command prints the first failing command and
exits with status 255. The targets `capi`, `clean`, `install` and `all`
only print that they do nothing yet. Running the command without a target
prints a usage line and exits with status 2.

## What it does not do

wsforge contains no network code:

- There is no HTTP parser, HTTP server or WebSocket frame handling.
- `wsforge.client_config` only describes and checks client settings and
  parses URLs. It does not open connections.
- `TopicTree` delivers messages only to your callback. Sending them over a
  socket is up to you.

## Running the tests

```sh
pip install -e ".[test]"
pytest
```