import io
import unittest

from rich.console import Console
from rich.tree import Tree

from bencoding import decode
from torrent import Torrent
from ui import FluxUI


def make_ui():
    console = Console(file=io.StringIO(), width=120, color_system=None)
    return FluxUI(console=console), console


def output(console):
    return console.file.getvalue()


class TestRenderValue(unittest.TestCase):
    def test_tree_structure(self):
        flux_ui, console = make_ui()
        value = decode(b'd4:listl5:apple4:\xff\x00\xfe\x01e3:numi7ee')
        tree = flux_ui.render_value(value)

        self.assertIsInstance(tree, Tree)
        self.assertEqual(len(tree.children), 2)
        self.assertEqual(len(tree.children[0].children), 2)

        console.print(tree)
        text = output(console)
        self.assertIn("root: dict (2 keys)", text)
        self.assertIn("list: list (2 items)", text)
        self.assertIn("[0]: 'apple'", text)
        self.assertIn("[1]: <4 bytes> ff00fe01", text)
        self.assertIn("num: 7", text)

    def test_long_text_is_truncated(self):
        flux_ui, console = make_ui()
        console.print(flux_ui.render_value(b'x' * 100, label="blob"))
        text = output(console)
        self.assertIn("x" * 60 + "…", text)
        self.assertNotIn("x" * 61, text)

    def test_show_value_wraps_panel(self):
        flux_ui, console = make_ui()
        flux_ui.show_value(decode(b'i42e'), title="Answer")
        text = output(console)
        self.assertIn("Answer", text)
        self.assertIn("root: 42", text)


class TestShowTorrent(unittest.TestCase):
    def test_summary_table(self):
        pieces = b'p' * 20
        info = (b'd6:lengthi10e4:name4:demo12:piece lengthi10e6:pieces20:' + pieces + b'e')
        data = b'd8:announce17:http://t/announce4:info' + info + b'e'
        torrent = Torrent(data)

        flux_ui, console = make_ui()
        flux_ui.show_torrent(torrent)
        text = output(console)
        self.assertIn("demo", text)
        self.assertIn(torrent.info_hash.hex(), text)
        self.assertIn("http://t/announce", text)

    def test_bracketed_names_are_not_markup(self):
        pieces = b'p' * 20
        flux_ui, console = make_ui()
        for name in (b'a[/]b', b'[red]x', b'[Group] Title'):
            info = (b'd6:lengthi10e4:name' + str(len(name)).encode() + b':' + name
                    + b'12:piece lengthi10e6:pieces20:' + pieces + b'e')
            flux_ui.show_torrent(Torrent(b'd4:info' + info + b'e'))

        text = output(console)
        self.assertIn("a[/]b", text)
        self.assertIn("[red]x", text)
        self.assertIn("[Group] Title", text)


class TestPrintLog(unittest.TestCase):
    def test_levels(self):
        flux_ui, console = make_ui()
        flux_ui.print_log("decoded [info] dict")
        flux_ui.print_log("trailing bytes", "WARNING")
        text = output(console)
        self.assertIn("INFO: decoded [info] dict", text)
        self.assertIn("WARNING: trailing bytes", text)


if __name__ == '__main__':
    unittest.main()
