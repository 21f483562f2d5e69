# pcsctl

Building blocks for a CAN-connected charger controller, written as plain
Python with no third-party dependencies.

## Modules

- `pcsctl.fixedpoint`: 32-bit fixed-point helpers with 5 fractional bits.
  It has `from_float`, `from_int`, `to_int`, `to_float`, `fp_mul`, `fp_div`,
  `format_fixed`, which renders two decimals such as `1.50`, and
  `parse_fixed(text, frac_digits)`. It also has small integer filters:
  `median3`, `ramp_up`, `ramp_down` and `iir_filter`.
- `pcsctl.printf`: a small printf dialect. `sprintf(fmt, *args)` returns a
  string. `fprintf(out, fmt, *args)` writes to any object with `write()` and
  returns the number of characters. Supported conversions are
  `%s %d %u %x %X %c %f %%`, with `-`, `0` and width modifiers. `%f` prints a
  fixed-point value.
- `pcsctl.params`: `ParamTable`, a table built from `param_entry(...)`
  (settable parameters with min, max and default) and `value_entry(...)`
  (read-only display values).
  - `set` checks the range, raises `ValueError` when a value is out of
    range, and calls the `on_change` callback.
  - Values are read and written as fixed point, integer, float or bool.
  - `num_from_string` and `num_from_id` look up an index and raise
    `KeyError` if it is unknown.
  - `load_defaults` restores default values.
  - Flags are managed with `ParamFlag`, for example `ParamFlag.HIDDEN`.
- `pcsctl.sinetable`: `sine_table()` is the 2048-entry sine table scaled to
  ±32767. `lookup(angle)` takes a 16-bit angle.
- `pcsctl.sine_core`: `sine`, `cosine`, an integer `atan2(x, y)` that
  returns a 16-bit angle, and `svpwm_offset`. It also has `SineCore`:
  - `set_amp(amp)` sets the amplitude. `MAXAMP` is 37813.
  - `calc(angle)` returns three space-vector PWM duty cycles with
    short-pulse suppression.
- `pcsctl.picontroller`: `PiController`, a PI controller.
  - The set point goes in `ref` (fixed point) and the calling frequency in
    `frequency`.
  - Set it up with `set_gains` and `set_min_max`.
  - `run` integrates only while the output is not saturated.
  - It also has `run_proportional_only`, `reset_integrator` and
    `preload_integrator`.
- `pcsctl.canmap`: `CanMap`, which maps parameters onto bit fields of CAN
  messages.
  - Limits: up to 15 send and 15 receive message ids, and 70 items shared
    between them.
  - `add_send` and `add_recv` raise subclasses of `CanMapError`:
    `InvalidIdError`, `InvalidOffsetError`, `InvalidLengthError`,
    `MaxMessagesError` and `MaxItemsError`.
  - `remove`, `find_map`, `iterate`, `send_messages`, `recv_mappings`,
    `recv_ids` and `clear` inspect and change the map. Each mapping is
    returned as a `Mapping`.
  - `to_bytes(uid_of)` and `load_bytes(blob, index_of)` serialise the map to
    a CRC-protected page layout and read it back.
- `pcsctl.scheduler`: `Scheduler`, which runs up to four periodic tasks.
  - A clock returns 100 kHz ticks. Periods are given in milliseconds.
  - `cpu_load()` reports the load in 0.1 % units.
  - A fifth task raises `SchedulerFullError`.
- `pcsctl.terminal`: `Terminal`, a line-oriented command terminal.
  - Characters passed to `feed()` are echoed. Complete lines are sent to
    handlers registered as `name -> handler(terminal, args)`.
  - A line starting with `!` repeats the last command.
  - The built-in `enableuart <id>` and `fastuart` are supported.
  - Unknown commands get `Unknown command sequence`.
  - While the terminal is disabled by node id, nothing is written.

## Examples

```python
from pcsctl.params import ParamTable, param_entry, value_entry
from pcsctl.fixedpoint import from_float

params = ParamTable(
    [
        param_entry("Charger", "chargelim", "A", 0, 48, 16, 1),
        value_entry("uaux", "V", 2000),
    ],
    on_change=lambda index: None,
)

params.set(0, from_float(32))
print(params.get_float(0))             # 32.0
print(params.num_from_string("uaux"))  # 1
```

```python
from pcsctl.printf import sprintf

print(sprintf("%5d|%-4s|%f", 42, "ab", 48))  # "   42|ab  |1.50"
```

```python
from pcsctl.canmap import CanMap

canmap = CanMap()
canmap.add_send(0, 0x100, 0, 16, 1.0)   # -> 1 send message
blob = canmap.to_bytes(lambda param: param + 1)

restored = CanMap()
restored.load_bytes(blob, lambda uid: uid - 1)
print(restored.find_map(0).can_id)      # 256
```

```python
import io
from pcsctl.terminal import Terminal

out = io.StringIO()
term = Terminal({"hello": lambda t, args: t.write("hi " + args + "\r\n")}, out)
term.feed("hello world\n")
# out now holds the echoed line followed by "hi world\r\n"
```

## What this package does not do

- It does not talk to CAN hardware. It has no bus driver, no periodic
  sending of mapped messages, no decoding of received frames into
  parameters, no SDO handling and no acceptance-filter setup. `CanMap` only
  holds and serialises the mapping.
- It has no ready-made parameter commands for the terminal, such as
  `set`, `get`, `json`, `can`, `save` or `load`. Handlers must be supplied by
  the user.
- It does not store anything. `CanMap.to_bytes` returns bytes, and writing
  them to flash or to a file is up to the caller.
- It has no command-line program.

## Tests

```
pip install -e .[test]
pytest
```