from collections import namedtuple

from spn16.errors import InvalidConfiguration

"""

Dieses Modul beinhaltet die festen Tabellen des SPN: die 4-Bit S-Box und die
P-Box über die 16 Bitstellen eines Blocks. Die inversen Tabellen werden einmalig
aus den Vorwärtstabellen berechnet und zusammen mit diesen in einem unveränderlichen
Tables-Objekt gehalten, welches jeder Komponente explizit übergeben wird.

"""

SBOX = (0xC, 0x5, 0x6, 0xB, 0x9, 0x0, 0xA, 0xD,
        0x3, 0xE, 0xF, 0x8, 0x4, 0x7, 0x1, 0x2)

PBOX = (0x0, 0x4, 0x8, 0xC, 0x1, 0x5, 0x9, 0xD,
        0x2, 0x6, 0xA, 0xE, 0x3, 0x7, 0xB, 0xF)

Tables = namedtuple('Tables', ['sbox', 'inv_sbox', 'pbox', 'inv_pbox'])


def is_permutation(table):
    return len(table) == 16 and set(table) == set(range(16))


def invert(table):
    """
    Erstellt die inverse Tabelle, sodass inverse[table[i]] = i gilt.
    """
    inverse = [0] * len(table)
    for i, val in enumerate(table):
        inverse[val] = i
    return tuple(inverse)


def make_tables(sbox, pbox):
    """
    Prüft S-Box und P-Box auf Bijektivität über {0..15} und erstellt daraus
    das Tables-Objekt inklusive der inversen Tabellen.

    Args:
        sbox: 16 Einträge, Nibble -> Nibble
        pbox: 16 Einträge, Bitstelle i -> Bitstelle pbox[i]
    """
    if not is_permutation(sbox):
        raise InvalidConfiguration("sbox is not a permutation of 0..15")
    if not is_permutation(pbox):
        raise InvalidConfiguration("pbox is not a permutation of 0..15")

    sbox = tuple(sbox)
    pbox = tuple(pbox)
    return Tables(sbox, invert(sbox), pbox, invert(pbox))


DEFAULT_TABLES = make_tables(SBOX, PBOX)
