import numpy as np

"""

Dieses Modul erstellt die lineare Approximationstabelle (LAT) einer 4-Bit S-Box.
Der Eintrag LAT[a][b] gibt an, wie oft über alle 16 Eingaben x die Parität von
a & x mit der Parität von b & S(x) übereinstimmt, zentriert um 8. Je grösser der
Betrag eines Eintrags, desto stärker ist das zu erwartende Signal beim Angriff.

"""


def parity(value):
    """
    Parität der gesetzten Bits eines 16-Bit Wertes. Funktioniert sowohl
    für int als auch elementweise für numpy Arrays.
    """
    value = value ^ (value >> 8)
    value = value ^ (value >> 4)
    value = value ^ (value >> 2)
    value = value ^ (value >> 1)
    return value & 1


def build_lat(sbox):
    """
    Erstellt die LAT als 16x16 numpy Array mit Einträgen im Bereich [-8, 8].

    Args:
        sbox: 4-Bit S-Box mit 16 Einträgen
    """
    xs = np.arange(16)
    ys = np.array(sbox)
    lat = np.zeros((16, 16), dtype=int)
    for a in range(16):
        in_parity = parity(xs & a)
        for b in range(16):
            out_parity = parity(ys & b)
            lat[a, b] = np.count_nonzero(in_parity == out_parity) - 8
    return lat


def strongest_entries(lat, limit=10):
    """
    Gibt die nicht-trivialen Einträge (a, b, bias) sortiert nach dem
    Betrag des Bias zurück. Hilft bei der Wahl geeigneter Masken.
    """
    entries = [(a, b, int(lat[a][b]))
               for a in range(1, 16) for b in range(1, 16) if lat[a][b] != 0]
    entries.sort(key=lambda entry: (-abs(entry[2]), entry[0], entry[1]))
    return entries[:limit]


def print_table(table, nonzero=False):
    nrows = len(table)
    ncols = len(table[0])
    print("    |", end=' ')
    for output_mask in range(ncols):
        print(f"{output_mask:3x}", end=' ')
    print()
    print(' ' + '-' * (4 * ncols + 4))
    for input_mask in range(nrows):
        print(f"{input_mask:3x} |", end=' ')
        for output_mask in range(ncols):
            v = int(table[input_mask][output_mask])
            if nonzero and v == 0:
                print(' ' * 3, end=' ')
            else:
                print(f"{v:3d}", end=' ')
        print()
