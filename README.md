# shadowspotter

Building blocks for HTTP content discovery: plain HTTP/1.1 exchanges, small
value types for paths and ranges, and a model of API descriptions that can be
loaded from JSON, checked and summarised.

Only the Python standard library is needed.

## What is inside

| Module | Purpose |
| --- | --- |
| `shadowspotter.transport` | `WireRequest`, `WireResponse`, the `HTTPClient` bound to one address and the host-agnostic `BackupClient` |
| `shadowspotter.field` | `Field`, `FieldType`, `HeaderField` and `string_to_fields` |
| `shadowspotter.ranges` | `Range` and `range_from_string` |
| `shadowspotter.schema` | the API description model: `API`, `Operation`, `Parameter`, `Schema`, `SecurityDefinition`, `OperationType`, with `*_from_dict` readers and `to_dict` writers |
| `shadowspotter.parse` | `load_json_file`, `load_json_bytes`, `load_json_string`, `load_json_reader`, `slow_load_json_file`, `slow_load_json_bytes`, `get_map_string`, `unmarshal_json_value`, `ParserError`, `ParseErrors` |
| `shadowspotter.printing` | `summarize_apis` and `print_apis` |

## Small helpers

```python
from shadowspotter.ranges import Range, range_from_string
from shadowspotter.field import string_to_fields

range_from_string("5-10")          # Range(min=5, max=10)
str(range_from_string("5-10"))     # "5-10"
str(range_from_string("7"))        # "7"
str(Range())                       # ""

[f.key for f in string_to_fields("/foo/bar")]   # ["", "foo", "bar"]
```

`range_from_string` raises `ValueError` for text it cannot read, for more
than one `-`, or when the minimum is larger than the maximum.

## Sending a request

`HTTPClient(host, tls)` always connects to the address it was given
(`host:port`, or a bare host on port 80/443), whatever host the request names.
`BackupClient(timeout)` connects to the host and scheme the request itself
names. Both send the request's `Host` header as `request.host` unless a
`Host` header is set explicitly, and both skip TLS certificate checks.

```python
from shadowspotter.transport import HTTPClient, WireRequest

client = HTTPClient("127.0.0.1:8080", False)
client.read_timeout = client.write_timeout = 5.0
client.max_conns = 10

request = WireRequest(method="GET", host="example.com", path="/api", query="a=1")
request.set_header("X-Trace", "1")
print(request.url())              # http://example.com/api?a=1

response = client.do(request)
print(response.status_code, response.header("content-type"), len(response.body))
```

`HTTPClient.max_conns` limits how many requests one client has in flight at
once (512 by default).

## Loading API descriptions

```python
from shadowspotter.parse import ParseErrors, load_json_file, slow_load_json_file
from shadowspotter.printing import print_apis, summarize_apis

apis = load_json_file("routes.json")
summary = summarize_apis(apis)
print(summary.apis, summary.routes)
print_apis(apis)                  # logs the summary through the logging module
```

`load_json_*` read the whole document strictly and raise `ValueError` on the
first problem. `slow_load_json_*` walk the document piece by piece, accept a
list nested one level deep, and, when anything is wrong, raise `ParseErrors`:
its `errors` hold every `ParserError` found (each naming the API id, route,
method and the part of the document) and its `apis` every API that could
still be read.

Every model class reads from and writes to JSON-style dictionaries:
`api_from_dict(data)` and `API.to_dict()`, and likewise for the others.
`Schema.is_zero()` tells whether a schema holds nothing but defaults.

## What this package does not do

It has no notion of scan targets, routes or host headers, builds no requests
from them, and does not follow redirects: `HTTPClient.do` and
`BackupClient.do` return whatever single response comes back. There is no
command-line program; everything is used from Python.

## Running the tests

Install the `test` extra and run pytest from the project directory.