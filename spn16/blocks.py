from spn16.errors import PaddingError

"""

Hilfsfunktionen zur Umwandlung von Text und Bytes in 16-Bit Blöcke (big-endian,
zwei Bytes pro Block) und zurück, inklusive PKCS#7-Padding. Diese Funktionen
enthalten keine kryptographische Logik.

"""

BLOCK_SIZE = 2


def pkcs7_pad(data, block_size=BLOCK_SIZE):
    pad_len = block_size - len(data) % block_size
    return bytes(data) + bytes([pad_len]) * pad_len


def pkcs7_unpad(data):
    """
    Entfernt das PKCS#7-Padding. Leere Daten oder ein ungültiges
    Padding führen zu einem PaddingError.
    """
    if len(data) == 0:
        raise PaddingError("empty data")
    pad_len = data[-1]
    if pad_len == 0 or pad_len > len(data):
        raise PaddingError("invalid padding")
    if any(b != pad_len for b in data[-pad_len:]):
        raise PaddingError("invalid padding")
    return bytes(data[:-pad_len])


def bytes_to_blocks(data):
    if len(data) % BLOCK_SIZE:
        raise ValueError("data length must be a multiple of the block size")
    return [data[i] << 8 | data[i + 1] for i in range(0, len(data), BLOCK_SIZE)]


def blocks_to_bytes(blocks):
    out = bytearray()
    for block in blocks:
        out.append((block >> 8) & 0xFF)
        out.append(block & 0xFF)
    return bytes(out)


def text_to_blocks(text, pad=True):
    """
    Wandelt einen Text (UTF-8) in 16-Bit Blöcke um. Ohne Padding wird
    eine ungerade Anzahl Bytes mit einem Nullbyte aufgefüllt.
    """
    data = text.encode('utf-8')
    if pad:
        data = pkcs7_pad(data)
    elif len(data) % BLOCK_SIZE:
        data += b'\x00'
    return bytes_to_blocks(data)


def blocks_to_text(blocks, unpad=True):
    data = blocks_to_bytes(blocks)
    if unpad:
        data = pkcs7_unpad(data)
    return data.decode('utf-8', errors='replace')
