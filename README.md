# chatwire

`chatwire` is a library of parts for a small chat and voice/video calling service.
It holds configuration, numbered wire replies, socket helpers, a listening TCP
endpoint, a job bus, contact-list handling, peer-to-peer call signalling, a
playback base class and a relational store for users, contacts, tokens and chats.

## What is inside

| Module | Purpose |
| --- | --- |
| `chatwire.logger` | `Logger`, `LogPriority` and `get_logger()`: levelled, coloured console lines of the form `[Level]\|\|file\|\|function\|\|line\|\|message`. |
| `chatwire.config` | `Config`: `KEY = value` settings read over built-in defaults, with a shared instance (`get_instance`, `free_instance`). |
| `chatwire.reply` | `ReplyCode` and the numbered replies (`get_message`, `append_message`, `from_string`). |
| `chatwire.request` | `Request`, the unit passed between connections and handlers, and `set_request_reply`. |
| `chatwire.connection` | `Connection` IPv4 socket setup, and the helpers `address_to_string`, `port_to_string`, `to_address`. |
| `chatwire.connection_poll` | `ConnectionPoll`: readiness polling over a listening socket and up to `max_connections` sockets in all. |
| `chatwire.passive_conn` | `PassiveConn`: a listening TCP endpoint whose reads and writes go through an `IOStrategy`. |
| `chatwire.local_ip` | `LocalIP` and `local_ipv4_addresses()`: this host's IPv4 addresses, loopback excluded. |
| `chatwire.audio_queue` | `AudioPackage` and `AudioQueue`: a FIFO of audio byte packages for one producer and one consumer. |
| `chatwire.job_bus` | `JobType`, `Job` and `JobBus`: queued jobs dispatched to handlers, with a queue of handled jobs. |
| `chatwire.contacts` | `Contacts`, `Contact` and `parse_contact`: contact commands to the server and tracking of contact state. |
| `chatwire.peer_to_peer` | `P2P`: call set-up through the server (connect, accept, reject, ping, hang up) and the UDP handshake with the peer. |
| `chatwire.playback` | `Playback`: the abstract base for audio/video players fed from a peer connection. |
| `chatwire.database` | `Database`, `User`, `UserChat`, `UserField`: storage for users, contacts, tokens and chats through SQLAlchemy. |

## Configuration

`Config` starts from built-in defaults for every known key: `ENV`, `TCP_PORT`,
`UDP_PORT`, `SERVER_ADDRESS`, `LOCAL_IP`, `REMOTE_IP`, `HEADER_LENGTH`, the `DB_*`
keys, `LOGGER_LEVEL` and `DEBUG_ENABLE`. It then reads `~/.skype.conf`, or the
path you give it. Blank lines and lines starting with `#` are skipped; unknown keys
are logged and ignored. `SERVER_ADDRESS` follows `ENV`: with `ENV = PROD` it takes
`REMOTE_IP`, otherwise `LOCAL_IP`.

```python
from chatwire.config import Config

config = Config.get_instance()
port = config.get("TCP_PORT", int)        # 5000 by default
address = config.get("SERVER_ADDRESS", str)
print(address, port)
print(config.get("NO_SUCH_KEY", str))     # "" for unknown keys
print(config.get_db())                    # postgresql://... connection URL
```

`get_int` returns `-1` when a value is not a number.

## Replies

Every server answer begins with a numeric code:

```python
from chatwire.reply import ReplyCode, append_message, from_string, get_message

print(get_message(from_string("200")))        # "200 OK"
print(append_message(ReplyCode.R_201, "x"))   # "201 x"
print(from_string("999"))                     # ReplyCode.NONE
```

`set_request_reply(request, outcome, message=None)` puts such a reply into a
`Request`: a code is used as given; `True` means 200 (or 201 followed by the
message), `False` means 500.

## Jobs

```python
from chatwire.job_bus import Job, JobBus, JobType

bus = JobBus({JobType.LIST: lambda job: setattr(job, "valid", True)})
bus.create(Job(JobType.LIST))
bus.handle_one()
print(bus.get_response())   # the handled job, valid=True
```

`handle()` runs the same loop until `set_exit()` is called, then runs the
`EXIT` handler if there is one. Listeners in `on_job_ready` are called each time a
handled job is queued.

## Storage

`Database` takes an SQLAlchemy URL; without one it uses `Config.get_db()`.
`create_schema()` creates the `users`, `tokens`, `contacts` and `chats` tables.
Lookups that find nothing return an empty `User` or `UserChat`, and writes return
whether they succeeded.

```python
from chatwire.database import Database, User

db = Database("sqlite:///:memory:")
db.create_schema()
password = "password"
db.add_user(User(username="alice", password=password))
print(db.search_user_by("alice", "username").username)   # "alice"
```

## What the package does not do

- It has no command to run and no screens: there is no client program, no server
  program and no user interface.
- It does not encode or decode the payloads sent over sockets. `PassiveConn`
  needs an `IOStrategy` implementation, and `P2P` needs an object with a `port`
  and `bind_socket`, `respond`, `receive` and `use_stream_strategy` methods; none
  is supplied.
- It does not capture or play sound or video. `Playback` is abstract: `start`,
  `stop` and `load` are left to subclasses.

## Tests

The test suite uses pytest. Install the `test` extra to get it, then run
`pytest`.