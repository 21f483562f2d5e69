"""Line oriented command terminal with echo, node addressing and command repeat."""

import re
from collections import deque

BUF_SIZE = 128
DEFAULT_BAUDRATE = 115200
FAST_BAUDRATE = 921600

_INT = re.compile(r"\s*([-+]?\d+)")


def _atoi(text):
    match = _INT.match(text)
    return int(match.group(1)) if match else 0


class Terminal:
    """Dispatches received lines to command handlers and writes their output.

    ``commands`` maps a command name to a callable ``handler(terminal, args)``;
    ``output`` is any object with a ``write(str)`` method. While the terminal
    is disabled (another node id is addressed) nothing is written to the
    output and registered commands are not run.
    """

    def __init__(self, commands, output, node_id=1):
        self._commands = dict(commands)
        self._output = output
        self.node_id = 1
        self.enabled = True
        self.baudrate = DEFAULT_BAUDRATE
        self.stop_bits = 2
        self._line = []
        self._pending = deque()
        self._current = None
        self._args = ""
        self._busy = False
        if node_id != 1:
            self.set_node_id(node_id)

    def _send(self, text):
        if self.enabled:
            self._output.write(text)

    def write(self, text):
        """Write text to the output if the terminal is enabled."""
        self._send(text)

    def feed(self, data):
        """Receive characters; complete lines are executed as commands."""
        self._pending.extend(data)
        if self._busy:
            return
        self._busy = True
        try:
            while self._pending:
                self._receive(self._pending.popleft())
        finally:
            self._busy = False

    def _receive(self, char):
        self._line.append(char)
        self._send(char)
        if char in "\r\n":
            self._process_line()
        elif self._line[0] == "!" and self._current is not None:
            self._line.clear()
            self._current(self, self._args)
        elif len(self._line) >= BUF_SIZE:
            self._line.clear()

    def _process_line(self):
        raw = "".join(self._line)
        self._line.clear()
        name, _, args = raw[:-1].partition(" ")
        self._args = args
        self._current = None

        if name == "enableuart":
            self._enable_uart(args)
            return
        if name == "fastuart":
            self._fast_uart(args)
            return

        handler = self._commands.get(name) if self.enabled else None
        if handler is not None:
            self._current = handler
            handler(self, args)
        elif len(raw) > 1 and self.enabled:
            self._send("Unknown command sequence\r\n")

    def _enable_uart(self, arg):
        if _atoi(arg.strip()) == self.node_id:
            self.enabled = True
            self._send("OK\r\n")
        else:
            self.enabled = False

    def _fast_uart(self, arg):
        arg = arg.strip()
        baud = DEFAULT_BAUDRATE if arg.startswith("0") else FAST_BAUDRATE
        if self.enabled:
            self._send("OK\r\n")
            self._send(f"Baud rate now {FAST_BAUDRATE}\r\n")
        self.baudrate = baud
        self.stop_bits = 1

    def set_node_id(self, node_id):
        """Set this node's id; any id other than 1 disables the terminal."""
        self.node_id = int(node_id)
        if self.node_id != 1:
            self._send(
                f"Disabling terminal, type 'enableuart {self.node_id}' to re-enable\r\n"
            )
        self._enable_uart("1")

    def key_pressed(self):
        """True if received input is waiting to be processed."""
        return bool(self._pending)

    def flush_input(self):
        """Discard input that has been received but not yet processed."""
        self._pending.clear()