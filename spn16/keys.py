import os

from spn16.errors import InvalidConfiguration, RandomSourceError

"""

Schlüsselgenerierung des SPN. Aus einem zufälligen 16-Bit Hauptschlüssel werden
rounds + 1 Rundenschlüssel durch wiederholte Linksrotation um 4 Bit erzeugt.
Dieser Schlüsselplan ist absichtlich schwach: jeder Rundenschlüssel ist eine
Rotation jedes anderen um ein Vielfaches von 4 Bit, womit aus dem letzten
Rundenschlüssel direkt der Hauptschlüssel folgt.

"""


def rotate_left(value, amount):
    amount %= 16
    value &= 0xFFFF
    return ((value << amount) | (value >> (16 - amount))) & 0xFFFF


def rotate_right(value, amount):
    return rotate_left(value, 16 - amount % 16)


def rotate_left4(value):
    return rotate_left(value, 4)


def _check_rounds(rounds):
    if isinstance(rounds, bool) or not isinstance(rounds, int) or rounds < 2:
        raise InvalidConfiguration(f"rounds must be an integer >= 2, got {rounds!r}")


def expand_key(master_key, rounds):
    """
    Erstellt den Schlüsselplan: keys[0] ist der Hauptschlüssel,
    keys[i] = rotate_left4(keys[i - 1]).

    Args:
        master_key: 16-Bit Hauptschlüssel
        rounds: Anzahl Runden des SPN
    """
    _check_rounds(rounds)
    keys = []
    key = master_key & 0xFFFF
    for _ in range(rounds + 1):
        keys.append(key)
        key = rotate_left4(key)
    return keys


def master_key_from_round_key(round_key, index):
    """Dreht den Rundenschlüssel keys[index] zurück auf den Hauptschlüssel."""
    return rotate_right(round_key, 4 * index)


def generate_keys(rounds, source=os.urandom):
    """
    Zieht zwei Bytes aus der sicheren Zufallsquelle (big-endian) als
    Hauptschlüssel und gibt den daraus abgeleiteten Schlüsselplan zurück.
    Schlägt das Lesen fehl, wird RandomSourceError ausgelöst und nicht
    erneut versucht.

    Args:
        rounds: Anzahl Runden des SPN
        source: Funktion n -> n zufällige Bytes
    """
    _check_rounds(rounds)
    try:
        key_bytes = source(2)
    except (OSError, NotImplementedError) as exc:
        raise RandomSourceError(f"secure random source failed: {exc}") from exc

    if key_bytes is None or len(key_bytes) < 2:
        raise RandomSourceError("secure random source returned too few bytes")

    master_key = key_bytes[0] << 8 | key_bytes[1]
    return expand_key(master_key, rounds)
