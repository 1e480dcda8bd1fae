from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree
from datetime import datetime

console = Console()

PREVIEW_LENGTH = 60  # characters of text shown for a byte string
HEX_PREVIEW_BYTES = 20


def _preview_bytes(value):
    """Printable text when the bytes are readable, hex otherwise."""
    try:
        text = value.decode('utf-8')
    except UnicodeDecodeError:
        text = None

    if text is not None and text.isprintable():
        if len(text) > PREVIEW_LENGTH:
            text = text[:PREVIEW_LENGTH] + "…"
        return Text(repr(text), style="green")

    hex_part = value[:HEX_PREVIEW_BYTES].hex()
    if len(value) > HEX_PREVIEW_BYTES:
        hex_part += "…"
    return Text(f"<{len(value)} bytes> {hex_part}", style="yellow")


class FluxUI:
    def __init__(self, console=console):
        self.console = console

    def _describe(self, label, value):
        """One tree node line: label, then a summary of the value."""
        line = Text(str(label), style="bold cyan")
        line.append(": ")
        if isinstance(value, dict):
            line.append(f"dict ({len(value)} keys)", style="magenta")
        elif isinstance(value, list):
            line.append(f"list ({len(value)} items)", style="magenta")
        elif isinstance(value, bytes):
            line.append_text(_preview_bytes(value))
        else:
            line.append(str(value), style="bold white")
        return line

    def _add_children(self, node, value):
        if isinstance(value, dict):
            for key, child in value.items():
                self._add_children(node.add(self._describe(key, child)), child)
        elif isinstance(value, list):
            for index, child in enumerate(value):
                self._add_children(node.add(self._describe(f"[{index}]", child)), child)

    def render_value(self, value, label="root"):
        """Builds a rich Tree mirroring a decoded value."""
        tree = Tree(self._describe(label, value))
        self._add_children(tree, value)
        return tree

    def show_value(self, value, title="Decoded Value"):
        self.console.print(Panel(self.render_value(value), title=title, border_style="blue"))

    def show_torrent(self, torrent):
        """Displays the metainfo summary in a table."""
        table = Table(title="Torrent Metainfo", box=None)
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="magenta")

        rows = [
            ("Name", torrent.name),
            ("Size", f"{torrent.total_length} bytes"),
            ("Files", str(len(torrent.files))),
            ("Pieces", f"{torrent.number_of_pieces} x {torrent.piece_length}"),
            ("Info Hash", torrent.info_hash.hex()),
            ("Private", "yes" if torrent.private else "no"),
        ]
        rows.extend(("Tracker", url) for url in torrent.announce_list)

        # Text cells: names like "[Group] Title" are not markup
        for field, value in rows:
            table.add_row(field, Text(value))

        self.console.print(Panel(table, border_style="blue"))

    def print_log(self, message, level="INFO"):
        """Prints a styled log message."""
        color = "green" if level == "INFO" else "red"
        if level == "WARNING": color = "yellow"

        time_str = f"[{datetime.now().strftime('%H:%M:%S')}]"
        line = Text(f"{time_str} ")
        line.append(level, style=f"bold {color}")
        line.append(f": {message}")
        self.console.print(line)


ui = FluxUI()
