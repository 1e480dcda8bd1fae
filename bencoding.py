from collections import OrderedDict
from typing import Union

from utils import logger

# Decoder option defaults
ALLOW_NEGATIVE_INTEGERS = True
STRICT = False          # reject bytes left over after the top-level value
MAX_DEPTH = None        # no nesting limit

Value = Union[int, bytes, list, OrderedDict]


class DecodeError(ValueError):
    """Base class for everything the decoder raises on bad input."""
    def __init__(self, message, position):
        super().__init__(f"{message} at index {position}")
        self.position = position


class MalformedInputError(DecodeError):
    """The bytes at the cursor do not match any grammar production."""


class OutOfBoundsError(DecodeError):
    """A production tried to read past the end of the buffer."""


def _is_digit(char):
    # str.isdigit() also accepts latin-1 superscripts
    return '0' <= char <= '9'


class Decoder:
    """
    Decodes Bencoded data (i, s, l, d) used in torrent files.
    Uses a recursive descent parser with one byte of lookahead.

    While decoding a top-level dictionary the byte range of each value is
    recorded in `spans`, so callers can hash e.g. the raw 'info' dictionary.
    """
    def __init__(self, data: bytes, allow_negative_integers=ALLOW_NEGATIVE_INTEGERS,
                 strict=STRICT, max_depth=MAX_DEPTH):
        if isinstance(data, (bytearray, memoryview)):
            data = bytes(data)
        if not isinstance(data, bytes):
            raise TypeError(f"Cannot decode type: {type(data)}")

        self._data = data
        self._index = 0
        self._can_unread = False
        self._depth = 0

        self.allow_negative_integers = allow_negative_integers
        self.strict = strict
        self.max_depth = max_depth
        self.spans = OrderedDict()

    @property
    def position(self):
        """Current cursor offset into the buffer."""
        return self._index

    def decode(self) -> Value:
        """Main entry point for decoding."""
        logger.debug(f"Decoding {len(self._data)} bytes from index {self._index}")
        try:
            value = self._decode_value()

            remaining = len(self._data) - self._index
            if remaining:
                if self.strict:
                    raise MalformedInputError(f"trailing data ({remaining} bytes)", self._index)
                logger.warning(f"Ignoring {remaining} trailing bytes after index {self._index}")
        except DecodeError as e:
            logger.debug(f"Decoding failed: {e}")
            raise

        logger.debug(f"Decoded {type(value).__name__} ending at index {self._index}")
        return value

    def raw(self, key):
        """Returns the exact input bytes of a top-level dictionary value."""
        start, end = self.spans[key]
        return self._data[start:end]

    # Cursor

    def _next_byte(self):
        if self._index >= len(self._data):
            raise OutOfBoundsError("unexpected end of data", self._index)
        char = chr(self._data[self._index])
        self._index += 1
        self._can_unread = True
        return char

    def _unread(self):
        # Only the byte returned by the last _next_byte() can be pushed back
        if not self._can_unread:
            raise RuntimeError(f"Cannot unread at index {self._index}")
        self._index -= 1
        self._can_unread = False

    def _peek(self):
        char = self._next_byte()
        self._unread()
        return char

    def _expect(self, token):
        char = self._next_byte()
        if char != token:
            raise MalformedInputError(f"expected {token!r}, found {char!r}", self._index - 1)

    def _read_digits(self, allow_sign=False, max_digits=None):
        """
        Consumes a run of ASCII digits and returns it as an int.
        The first non-digit byte is unread so the caller's _expect() sees it.
        A run with more than `max_digits` significant digits is a length
        the buffer cannot hold and fails with OutOfBoundsError.
        """
        negative = False
        if allow_sign:
            if self._next_byte() == '-':
                negative = True
            else:
                self._unread()

        digits = []
        while True:
            char = self._next_byte()
            if not _is_digit(char):
                self._unread()
                break
            digits.append(char)

        if not digits:
            raise MalformedInputError("expected digits", self._index)

        run = ''.join(digits)
        if max_digits is not None and len(run.lstrip('0')) > max_digits:
            raise OutOfBoundsError(f"length with {len(run)} digits runs past end of data", self._index)

        try:
            number = int(run)
        except ValueError as e:
            # int() refuses very long digit runs (sys.get_int_max_str_digits)
            raise MalformedInputError(f"cannot convert {len(run)}-digit number: {e}", self._index) from None
        return -number if negative else number

    def _enter(self):
        self._depth += 1
        if self.max_depth is not None and self._depth > self.max_depth:
            raise MalformedInputError(f"nesting too deep (limit {self.max_depth})", self._index - 1)

    # Productions

    def _decode_value(self):
        char = self._peek()

        if char == 'i':
            return self._decode_int()
        elif char == 'l':
            return self._decode_list()
        elif char == 'd':
            return self._decode_dict()
        elif _is_digit(char):
            return self._decode_string()
        else:
            raise MalformedInputError(f"unknown value tag {char!r}", self._index)

    def _decode_int(self):
        self._expect('i')
        number = self._read_digits(allow_sign=self.allow_negative_integers)
        self._expect('e')
        return number

    def _decode_string(self):
        remaining = len(self._data) - self._index
        length = self._read_digits(max_digits=len(str(remaining)))
        self._expect(':')

        end = self._index + length
        if end > len(self._data):
            raise OutOfBoundsError(
                f"string of length {length} runs past end of data ({len(self._data)} bytes)",
                self._index,
            )

        s = self._data[self._index:end]
        self._index = end
        self._can_unread = False
        return s

    def _decode_list(self):
        self._expect('l')
        self._enter()

        lst = []
        while True:
            if self._next_byte() == 'e':
                break
            self._unread()
            lst.append(self._decode_value())

        self._depth -= 1
        return lst

    def _decode_dict(self):
        self._expect('d')
        self._enter()
        top_level = self._depth == 1

        d = OrderedDict()
        while True:
            if self._next_byte() == 'e':
                break
            self._unread()

            key = self._decode_key()
            start = self._index
            # Duplicate keys: last one wins
            d[key] = self._decode_value()
            if top_level:
                self.spans[key] = (start, self._index)

        self._depth -= 1
        return d

    def _decode_key(self):
        position = self._index
        raw = self._decode_string()
        try:
            return raw.decode('utf-8')
        except UnicodeDecodeError:
            raise MalformedInputError(f"dictionary key {raw!r} is not valid UTF-8", position) from None


def decode(data: bytes, allow_negative_integers=ALLOW_NEGATIVE_INTEGERS,
           strict=STRICT, max_depth=MAX_DEPTH) -> Value:
    """Decodes one Bencoded value from `data`."""
    decoder = Decoder(
        data,
        allow_negative_integers=allow_negative_integers,
        strict=strict,
        max_depth=max_depth,
    )
    return decoder.decode()
