# loghorizon

A small log service library. It records log entries with a level and
free-form metadata, stores them in MongoDB, and lets you search them by time
range and level, page through results, stream them page by page, or export
them to a plain-text file.

Messages whose UTF-8 encoding is longer than 100 bytes are gzip-compressed
before they are stored, and decompressed again whenever they are read back.

Python 3.10 or later is required.

## Installation

```
pip install loghorizon
```

To run the test suite, install the `test` extra:

```
pip install "loghorizon[test]"
pytest
```

## Modules

- `loghorizon.model`: the `Level` enum, the `Log`, `TimeRange`,
  `SearchCriteria` and `SearchResult` records, `new_ulid()`, the ordering
  helpers (`OrderOptions`, `new_order_options`, `with_order_field`,
  `with_order_direction`) and the `Writer`, `Reader`, `Exporter` and `Store`
  protocols.
- `loghorizon.service`: `Business`, which validates requests and delegates to
  a store, and its error classes.
- `loghorizon.mongostore`: `MongoStore` and `StoreConfig`.
- `loghorizon.app`: `App`, the request and reply records, `StatusCode` and
  `RpcError`.
- `loghorizon.compress`: `GzipCompressor`.
- `loghorizon.logger`: the `Logger` protocol and `PrintLogger`.
- `loghorizon.errs`: `AppError` with an `ErrorType` category.

## Levels

A log entry has one of four levels: `error`, `warn`, `debug` or `info`, the
members of `loghorizon.model.Level`. Any other level is rejected with
`InvalidLevelError`.

## Usage

Connect a store, wrap it in the business layer, and put the request-facing
`App` in front of it:

```python
import time

from loghorizon.app import App, NewLog, SearchQuery
from loghorizon.logger import PrintLogger
from loghorizon.mongostore import MongoStore, StoreConfig
from loghorizon.service import Business

logger = PrintLogger()
config = StoreConfig(
    uri="mongodb://localhost:27017",
    database_name="loghorizon",
    collection_name="logs",
    export_path="./exports",
)
store = MongoStore.connect(logger, config)
app = App(logger, Business(logger, store))

response = app.register(NewLog(message="disk almost full", level="warn",
                               metadata={"host": "db-1"}))
print(response.id, response.status)

now = int(time.time())
last_hour = SearchQuery(start_time=now - 3600, end_time=now, level="warn",
                        page=0, page_size=20)
logs = app.search(last_hour)
for entry in logs.logs:
    print(entry.timestamp, entry.level, entry.message)

for chunk in app.stream_file(SearchQuery(start_time=now - 3600, end_time=now)):
    print(len(chunk.logs), chunk.has_more)

exported = app.export_to_file(SearchQuery(start_time=now - 3600, end_time=now))
print(exported.file_url, exported.file_size, exported.compression)
```

`SearchQuery` times are Unix seconds and are always used as given, so a
query left at its defaults covers only the instant 1970-01-01T00:00:00Z.
`Business` itself takes `datetime` values, and `None` for either bound
leaves that side open.

`MongoStore.connect` pings the server (raising `ConnectionError` if it
cannot be reached) and creates an index on `timestamp` and `level`. A
`MongoStore` can also be built directly from any collection object with
`insert_one`, `find` and `count_documents`.

### Searching and paging

Results come back newest first. If the page size is zero or negative, 50
entries per page are used. Each `SearchResult` reports the total number of
matches, whether more pages follow, and the number of the next page.
`App.stream_file` is a generator that yields one `Logs` page after another,
starting at page 0, with at most 100 entries per page (fewer if the query
asks for a smaller page size), pausing briefly between pages.

The ordering helpers in `loghorizon.model` build `OrderOptions` (timestamp,
descending by default); `MongoStore` always sorts by timestamp, newest first.

### Errors

The business layer raises subclasses of `loghorizon.service.MlogError`:

- `InvalidLevelError` for an unknown level,
- `InvalidTimeRangeError` when the end time comes before the start time,
- `RegisterLogError` when the store cannot save an entry.

Other store failures are raised as `MlogError` itself. `App` turns these into
`RpcError` with a `StatusCode`: invalid input gives `INVALID_ARGUMENT`, any
other failure gives `INTERNAL`.

### Exports

`export_to_file` writes one line per entry, in the form
`[<RFC 3339 timestamp>] [<level>] <message>`, with the timestamp in UTC to
the second, to a file named `logs_export_<unix time>.txt` in the configured
export directory, which must already exist. It returns the file name and the
number of bytes written. `App.export_to_file` reports the compression as
`"gzip"`; the file itself is plain text.

### Compression

`loghorizon.compress.GzipCompressor` compresses and decompresses bytes,
at level 9 unless another level from -1 to 9 is given. It can be used on its
own:

```python
from loghorizon.compress import GzipCompressor

gz = GzipCompressor()
assert gz.decompress(gz.compress(b"hello")) == b"hello"
```

## What this package does not do

This is a library only. It has no command to run and no network server:
`App` is a plain Python class whose methods you call directly, and serving
it over a network is left to the application that uses it.