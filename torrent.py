from bencoding import Decoder, MAX_DEPTH, STRICT
from utils import sha1_hash, logger, get_bytes, get_text, get_int, get_list, get_dict

PIECE_HASH_LENGTH = 20  # SHA-1 digest size


class Torrent:
    """
    Read-only view over a decoded .torrent metainfo dictionary.
    The caller supplies the raw bytes; nothing here touches the disk.
    """
    def __init__(self, data: bytes, strict=STRICT, max_depth=MAX_DEPTH):
        decoder = Decoder(data, strict=strict, max_depth=max_depth)
        self.meta_info = decoder.decode()
        if not isinstance(self.meta_info, dict):
            raise ValueError("Invalid torrent file: metainfo is not a dictionary")

        # 1. Tracker URLs
        self.announce = get_text(self.meta_info, 'announce')
        self.announce_list = self._get_announce_list()

        # 2. Info dictionary
        self.info = self._require(self.meta_info, 'info', get_dict, 'info')
        self.name = self._require(self.info, 'name', get_text, 'info.name')
        self.piece_length = self._require(self.info, 'piece length', get_int, 'info.piece length')
        self.private = get_int(self.info, 'private') == 1

        # 3. Info hash over the exact input bytes of the 'info' value
        self.info_hash = sha1_hash(decoder.raw('info'))

        # 4. Files (single vs multi-file)
        self.files = self._parse_files()
        self.total_length = sum(f['length'] for f in self.files)

        # 5. Piece hashes
        self.pieces_hashes = self._parse_pieces_hashes()
        self.number_of_pieces = len(self.pieces_hashes)

        # Optional descriptive fields
        self.comment = get_text(self.meta_info, 'comment')
        self.created_by = get_text(self.meta_info, 'created by')
        self.creation_date = get_int(self.meta_info, 'creation date')

        logger.info(f"Loaded Torrent: {self.name}")
        logger.info(f"Size: {self.total_length / (1024*1024):.2f} MB")
        logger.info(f"Pieces: {self.number_of_pieces} (Length: {self.piece_length})")
        logger.info(f"Info Hash: {self.info_hash.hex()}")

    @staticmethod
    def _require(d, key, getter, name):
        value = getter(d, key)
        if value is None:
            raise ValueError(f"Invalid torrent file: missing or invalid '{name}' key")
        return value

    def _get_announce_list(self):
        """Returns every tracker URL once, 'announce' first, tiers flattened."""
        trackers = []
        if self.announce:
            trackers.append(self.announce)

        for tier in get_list(self.meta_info, 'announce-list') or []:
            if not isinstance(tier, list):
                continue
            for url in tier:
                if not isinstance(url, bytes):
                    continue
                url = url.decode('utf-8', errors='replace')
                if url not in trackers:
                    trackers.append(url)
        return trackers

    def _parse_files(self):
        files = []
        if 'files' in self.info:
            # Multi-file mode
            entries = self._require(self.info, 'files', get_list, 'info.files')
            for f in entries:
                if not isinstance(f, dict):
                    raise ValueError("Invalid torrent file: 'info.files' entry is not a dictionary")
                length = self._require(f, 'length', get_int, 'info.files.length')
                parts = self._require(f, 'path', get_list, 'info.files.path')
                if not all(isinstance(p, bytes) for p in parts):
                    raise ValueError("Invalid torrent file: 'info.files.path' holds a non-string")
                path = '/'.join(p.decode('utf-8', errors='replace') for p in parts)
                files.append({'length': length, 'path': path})
        else:
            # Single-file mode
            length = self._require(self.info, 'length', get_int, 'info.length')
            files.append({'length': length, 'path': self.name})
        return files

    def _parse_pieces_hashes(self):
        """
        The 'pieces' string is a concatenation of 20-byte SHA1 hashes.
        We split it into a list.
        """
        pieces = self._require(self.info, 'pieces', get_bytes, 'info.pieces')
        if len(pieces) % PIECE_HASH_LENGTH != 0:
            raise ValueError("Invalid piece hash length")

        return [pieces[i:i + PIECE_HASH_LENGTH] for i in range(0, len(pieces), PIECE_HASH_LENGTH)]

    @property
    def is_multi_file(self):
        return 'files' in self.info

    def __repr__(self):
        return (f"Torrent(name='{self.name}', "
                f"size={self.total_length}, "
                f"pieces={self.number_of_pieces})")
